"""
Lead messages handed off to the agent's chat number.

format_inquiry only builds text and build_chat_link only builds the URL;
opening or sending it is left to the client.
"""

from typing import Any, Callable, Dict, Mapping, Tuple, Type, Union
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from errors import InvalidField
from presentation import CURRENCY_SYMBOL, group_indian
from schemas import (
    ApplicationSubmission,
    ContactForm,
    GeneralInterest,
    InquiryKind,
    PlanInterest,
    QuoteDetails,
)

# characters encodeURIComponent leaves alone
_URI_SAFE = "-_.!~*'()"


def _sum_assured(value: Any) -> str:
    # whole rupees, truncated, as the forms submit them
    try:
        amount = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise InvalidField("sumAssured") from None
    return CURRENCY_SYMBOL + group_indian(amount)


def _general_interest(p: GeneralInterest) -> str:
    if p.name:
        return (f"Hi, I am {p.name}. I would like to know more about your insurance plans. "
                "Please contact me. Thank you.")
    return "Hi, I would like to know more about your insurance plans. Please contact me. Thank you."


def _plan_interest(p: PlanInterest) -> str:
    return (f"Hi, I am interested in learning more about the *{p.plan_name}* plan. "
            "Please provide me with details. Thank you.")


def _quote_details(p: QuoteDetails) -> str:
    message = (
        f"Hello, I am interested in the *{p.plan_name}* plan.\n"
        "My Details:\n"
        f"- Name: {p.user_name}\n"
        f"- Age: {p.age}\n"
        f"- Term: {p.term} years\n"
        f"- PPT: {p.ppt} years\n"
        f"- Sum Assured: {_sum_assured(p.sum_assured)}\n"
        "\n"
        "Please provide me with more information."
    )
    return message.strip()


def _application_submission(p: ApplicationSubmission) -> str:
    return (
        "*New Insurance Application*\n"
        "\n"
        f"*Name:* {p.name}\n"
        f"*Age:* {p.age}\n"
        f"*Email:* {p.email}\n"
        f"*Phone:* {p.phone}\n"
        f"*Plan Interested In:* {p.plan_name}\n"
        f"*Sum Assured:* {_sum_assured(p.sum_assured)}\n"
        f"*Policy Term:* {p.term} years"
    )


def _contact_form(p: ContactForm) -> str:
    return (
        "*New Contact Message*\n"
        "\n"
        f"*Email:* {p.email}\n"
        f"*Message:* {p.message}"
    )


TEMPLATES: Dict[InquiryKind, Tuple[Type[BaseModel], Callable[[Any], str]]] = {
    InquiryKind.GENERAL_INTEREST: (GeneralInterest, _general_interest),
    InquiryKind.PLAN_INTEREST: (PlanInterest, _plan_interest),
    InquiryKind.QUOTE_DETAILS: (QuoteDetails, _quote_details),
    InquiryKind.APPLICATION_SUBMISSION: (ApplicationSubmission, _application_submission),
    InquiryKind.CONTACT_FORM: (ContactForm, _contact_form),
}


def format_inquiry(kind: Union[InquiryKind, str], payload: Union[BaseModel, Mapping[str, Any], None] = None) -> str:
    """Render payload as the chat message for kind.

    payload may be the kind's schema model or a mapping with its fields
    (camelCase or snake_case). A missing or mistyped field raises InvalidField.
    """
    try:
        kind = InquiryKind(kind)
    except ValueError:
        raise InvalidField("kind") from None
    model, template = TEMPLATES[kind]
    if not isinstance(payload, model):
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        try:
            payload = model.model_validate(dict(payload or {}))
        except ValidationError as e:
            raise InvalidField(str(e.errors()[0]["loc"][0])) from None
    return template(payload)


def build_chat_link(text: str, destination: str, base_url: str = "https://wa.me") -> str:
    """Chat URL that opens a conversation with text prefilled."""
    return f"{base_url.rstrip('/')}/{destination}?text={quote(text, safe=_URI_SAFE)}"
