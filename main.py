import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from calculator import price_request
from catalog import DEMO_POLICIES, USER_ROLE, AdminRegistry, PolicyCatalog, require_admin
from config import get_settings
from eligibility import filter_eligible
from errors import InvalidField, PolicyQuoteError
from inquiry import build_chat_link, format_inquiry
from logging_config import setup_logging
from presentation import render_quote
from schemas import (
    AdminAccount,
    AdminIn,
    CatalogStatus,
    InquiryRequest,
    InquiryResponse,
    Policy,
    PolicyIn,
    QuoteForm,
    QuoteResponse,
)

logger = logging.getLogger(__name__)
settings = get_settings()

catalog = PolicyCatalog()
admins = AdminRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.json_logs)
    if settings.seed_demo_data and catalog.count() == 0:
        catalog.seed(DEMO_POLICIES)
    logger.info("%s ready with %d policies", settings.app_name, catalog.count())
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_catalog() -> PolicyCatalog:
    return catalog


def get_admin_registry() -> AdminRegistry:
    return admins


def get_role(x_user_role: Optional[str] = Header(None)) -> str:
    """Caller role as resolved by the identity service in front of this API."""
    return (x_user_role or USER_ROLE).strip().lower()


@app.exception_handler(PolicyQuoteError)
async def policy_quote_error_handler(request: Request, exc: PolicyQuoteError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code,
                extra={"route": request.url.path, "method": request.method, "error": exc.code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Answer malformed bodies and parameters with the same shape as domain errors."""
    errors = exc.errors()
    # loc is (source, field, ...); a bare (source,) is a whole-body error
    loc = errors[0]["loc"] if errors else ()
    field = str(loc[1]) if len(loc) > 1 else None
    return await policy_quote_error_handler(request, InvalidField(field))


@app.get("/")
def read_root():
    return {"message": "Policy Quote API running"}


@app.get("/test", response_model=CatalogStatus)
def test_catalog(catalog: PolicyCatalog = Depends(get_catalog)):
    policies = catalog.list_policies()
    return CatalogStatus(
        backend="✅ Running",
        policies=len(policies),
        calculators=sum(1 for p in policies if p.has_calculator),
        policy_names=[p.name for p in policies][:10],
    )


# ---------------------- Seeding Helpers ----------------------
class SeedStatus(BaseModel):
    policies: int
    seeded: bool


@app.post("/seed", response_model=SeedStatus)
def seed_data(catalog: PolicyCatalog = Depends(get_catalog), role: str = Depends(get_role)):
    """Seed demo policies if the catalog is empty."""
    require_admin(role)
    if catalog.count() > 0:
        return SeedStatus(policies=catalog.count(), seeded=False)
    catalog.seed(DEMO_POLICIES)
    return SeedStatus(policies=catalog.count(), seeded=True)


# ---------------------- Catalog ----------------------

@app.get("/api/policies", response_model=List[Policy])
def list_policies(catalog: PolicyCatalog = Depends(get_catalog)):
    return catalog.list_policies()


@app.get("/api/policies/eligible", response_model=List[Policy])
def eligible_policies(age: str = Query(..., description="Applicant age, 0-100"),
                      catalog: PolicyCatalog = Depends(get_catalog)):
    """Policies whose age range contains age; an empty list is a valid answer."""
    return filter_eligible(catalog.list_policies(), age)


@app.get("/api/policies/{policy_id}", response_model=Policy)
def get_policy(policy_id: int, catalog: PolicyCatalog = Depends(get_catalog)):
    return catalog.get(policy_id)


@app.post("/api/policies", response_model=Policy, status_code=201)
def create_policy(data: PolicyIn, catalog: PolicyCatalog = Depends(get_catalog),
                  role: str = Depends(get_role)):
    return catalog.create(data, role=role)


@app.put("/api/policies/{policy_id}", response_model=Policy)
def update_policy(policy_id: int, data: PolicyIn, catalog: PolicyCatalog = Depends(get_catalog),
                  role: str = Depends(get_role)):
    return catalog.update(policy_id, data, role=role)


@app.delete("/api/policies/{policy_id}")
def delete_policy(policy_id: int, catalog: PolicyCatalog = Depends(get_catalog),
                  role: str = Depends(get_role)):
    catalog.delete(policy_id, role=role)
    return {"message": "Policy deleted successfully."}


# ---------------------- Quoting Logic ----------------------

@app.post("/api/policies/{policy_id}/quote", response_model=QuoteResponse)
def quote_policy(policy_id: int, form: QuoteForm, catalog: PolicyCatalog = Depends(get_catalog)):
    """Price a policy for the submitted calculator form."""
    policy = catalog.get(policy_id)
    request, result = price_request(policy, form)
    logger.info("Quoted policy %s for term %s (priced at %s)", policy.id, request.term, result.used_term,
                extra={"policy_id": policy.id})
    return QuoteResponse(
        policy_id=policy.id,
        policy_name=policy.name,
        request=request,
        quote=result,
        display=render_quote(policy, request, result),
    )


@app.post("/api/inquiries", response_model=InquiryResponse)
def create_inquiry(inquiry: InquiryRequest):
    """Build the chat message and hand-off link; the client opens it."""
    message = format_inquiry(inquiry.kind, inquiry.payload)
    destination = inquiry.destination or settings.agent_number
    return InquiryResponse(
        kind=inquiry.kind,
        message=message,
        link=build_chat_link(message, destination, settings.chat_base_url),
    )


# ---------------------- Admin Accounts ----------------------

@app.get("/api/admins", response_model=List[AdminAccount])
def list_admins(registry: AdminRegistry = Depends(get_admin_registry), role: str = Depends(get_role)):
    return registry.list_admins(role=role)


@app.post("/api/admins", response_model=AdminAccount, status_code=201)
@app.post("/api/add-admin", response_model=AdminAccount, status_code=201, include_in_schema=False)
def create_admin(data: AdminIn, registry: AdminRegistry = Depends(get_admin_registry),
                 role: str = Depends(get_role)):
    """Register another administrator; any password in the body is ignored."""
    return registry.create(data, role=role)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
