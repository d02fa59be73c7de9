"""
Schemas for the Policy Quote API

Each Pydantic model is either a catalog record (Policy), a calculator input or
output (QuoteForm, QuoteRequest, QuoteResult) or a payload exchanged with the
HTTP layer. Attributes are snake_case; the wire format is the camelCase used
by the site's forms.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MIN_AGE = 0
MAX_AGE = 100


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------- Catalog ----------------------

class PolicyIn(CamelModel):
    """Policy fields an administrator submits when creating or editing"""
    name: str = Field(..., min_length=1, description="Policy display name")
    min_age: int = Field(..., ge=MIN_AGE, le=MAX_AGE, description="Youngest eligible age, inclusive")
    max_age: int = Field(..., ge=MIN_AGE, le=MAX_AGE, description="Oldest eligible age, inclusive")
    description: Optional[str] = Field(None, description="Marketing description")
    rate_table: Optional[Dict[int, float]] = Field(
        None, description="Premium rate per 1000 of sum assured, keyed by policy term in years"
    )
    bonus: Optional[str] = Field(None, description="Bonus feature note")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("rate_table")
    @classmethod
    def check_rate_table(cls, v: Optional[Dict[int, float]]) -> Optional[Dict[int, float]]:
        if v is None:
            return v
        if not v:
            raise ValueError("rate table must contain at least one term")
        for term, rate in v.items():
            if term <= 0:
                raise ValueError(f"term {term} must be a positive integer")
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f"rate for term {term} must be a positive number")
        return dict(sorted(v.items()))

    @model_validator(mode="after")
    def check_age_range(self) -> "PolicyIn":
        if self.min_age > self.max_age:
            raise ValueError("minAge cannot be greater than maxAge")
        return self


class Policy(PolicyIn):
    """Policy as stored in the catalog"""
    id: int = Field(..., ge=1, description="Catalog identifier, stable across edits")

    @computed_field(alias="hasCalculator")
    @property
    def has_calculator(self) -> bool:
        return self.rate_table is not None


# ---------------------- Quoting ----------------------

Number = Union[int, float, str]


class QuoteForm(CamelModel):
    """Calculator input exactly as submitted; validated by the calculator"""
    user_name: Optional[str] = None
    age: Optional[Number] = None
    term: Optional[Number] = None
    ppt: Optional[Number] = None
    basic_sum_assured: Optional[Number] = None


class QuoteRequest(CamelModel):
    """Validated calculator input"""
    user_name: str = Field(..., min_length=1)
    age: int = Field(..., gt=0)
    term: int = Field(..., gt=0, description="Desired policy term in years")
    ppt: int = Field(..., gt=0, description="Premium paying term in years")
    basic_sum_assured: float = Field(..., description="Basic sum assured")


class PremiumSchedule(CamelModel):
    yearly: float
    half_yearly: float
    quarterly: float
    monthly: float
    daily_average: float


class QuoteResult(CamelModel):
    """Priced quote; amounts keep full precision"""
    used_term: int
    approximated: bool
    death_sum_assured: float
    base_premium: float
    first_year: PremiumSchedule
    renewal: PremiumSchedule


class ScheduleDisplay(CamelModel):
    heading: str
    yearly: str
    half_yearly: str
    quarterly: str
    monthly: str
    daily_average: str


class QuoteDisplay(CamelModel):
    """Quote rendered as display strings"""
    title: str
    user_name: str
    age: int
    selected_term: str
    ppt: str
    death_sum_assured: str
    basic_sum_assured: str
    approximation_note: Optional[str] = None
    first_year: ScheduleDisplay
    renewal: ScheduleDisplay
    disclaimer: str


class QuoteResponse(CamelModel):
    policy_id: int
    policy_name: str
    request: QuoteRequest
    quote: QuoteResult
    display: QuoteDisplay


# ---------------------- Inquiries ----------------------

class InquiryKind(str, Enum):
    GENERAL_INTEREST = "general_interest"
    PLAN_INTEREST = "plan_interest"
    QUOTE_DETAILS = "quote_details"
    APPLICATION_SUBMISSION = "application_submission"
    CONTACT_FORM = "contact_form"


class GeneralInterest(CamelModel):
    name: Optional[str] = None


class PlanInterest(CamelModel):
    plan_name: str


class QuoteDetails(CamelModel):
    plan_name: str
    user_name: str
    age: Number
    term: Number
    ppt: Number
    sum_assured: Number


class ApplicationSubmission(CamelModel):
    name: str
    age: Number
    email: str
    phone: str
    plan_name: str
    sum_assured: Number
    term: Number


class ContactForm(CamelModel):
    email: str
    message: str


class InquiryRequest(CamelModel):
    kind: InquiryKind
    payload: Dict[str, Union[str, int, float, None]] = Field(default_factory=dict)
    destination: Optional[str] = Field(None, description="Chat destination; defaults to the agent number")


class InquiryResponse(CamelModel):
    kind: InquiryKind
    message: str
    link: str


# ---------------------- Service ----------------------

class CatalogStatus(CamelModel):
    backend: str
    policies: int
    calculators: int
    policy_names: List[str] = []


# ---------------------- Admin accounts ----------------------

class AdminIn(CamelModel):
    """Admin account an existing administrator registers; credentials live with the identity service"""
    username: str = Field(..., min_length=1, description="Login name")
    email: str = Field(..., min_length=3, description="Contact email")

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("username must not be blank")
        return v.strip()

    @field_validator("email")
    @classmethod
    def email_has_domain(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("email must look like name@domain")
        return v


class AdminAccount(AdminIn):
    id: int = Field(..., ge=1)
    role: str = "admin"
    created_at: datetime
