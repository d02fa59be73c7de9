"""
Premium calculation.

A quote is priced from the policy's rate table (premium per 1000 of sum
assured, keyed by term in years). When the requested term has no entry the
nearest listed term is used instead, and the result is flagged as
approximated. Ties between two equally distant terms go to the smaller term.

All amounts are floats at full precision; rounding for display happens in
presentation.render_quote.
"""

import logging
import math
from typing import Any, Dict, Mapping, Tuple, Union

from pydantic import BaseModel, ValidationError

from errors import InvalidField, MissingCalculator, PptExceedsTerm, SumAssuredTooLow
from schemas import Policy, PremiumSchedule, QuoteForm, QuoteRequest, QuoteResult

logger = logging.getLogger(__name__)

MIN_SUM_ASSURED = 200000
DEATH_BENEFIT_MULTIPLIER = 1.25
RATE_UNIT = 1000

HALF_YEARLY_FACTOR = 0.51
QUARTERLY_FACTOR = 0.26
MONTHLY_FACTOR = 0.088

FIRST_YEAR_TAX_RATE = 0.045
RENEWAL_TAX_RATE = 0.0225
DAYS_PER_YEAR = 365

# wire name of each request field, in validation order
_FIELDS = (
    ("user_name", "userName"),
    ("age", "age"),
    ("term", "term"),
    ("ppt", "ppt"),
    ("basic_sum_assured", "basicSumAssured"),
)
_WIRE_NAMES = dict(_FIELDS)
_WIRE_NAMES.update({wire: wire for _, wire in _FIELDS})

QuoteInput = Union[QuoteForm, QuoteRequest, Mapping[str, Any]]


def _parse_number(value: Any, field: str, integer: bool = False) -> Union[int, float]:
    if value is None or isinstance(value, bool):
        raise InvalidField(field)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidField(field) from None
    if not math.isfinite(number):
        raise InvalidField(field)
    if integer:
        if not number.is_integer() or number <= 0:
            raise InvalidField(field)
        return int(number)
    return number


def _to_form(request: QuoteInput) -> QuoteForm:
    if isinstance(request, QuoteForm):
        return request
    if isinstance(request, BaseModel):
        request = request.model_dump()
    try:
        return QuoteForm.model_validate(dict(request))
    except ValidationError as e:
        loc = e.errors()[0]["loc"]
        raise InvalidField(_WIRE_NAMES.get(str(loc[0]), str(loc[0]))) from None


def validate_request(request: QuoteInput) -> QuoteRequest:
    """Parse raw calculator input into a QuoteRequest.

    Raises InvalidField for the first bad field, then PptExceedsTerm, then
    SumAssuredTooLow.
    """
    form = _to_form(request)
    if not form.user_name or not form.user_name.strip():
        raise InvalidField("userName")
    age = _parse_number(form.age, "age", integer=True)
    term = _parse_number(form.term, "term", integer=True)
    ppt = _parse_number(form.ppt, "ppt", integer=True)
    basic_sum_assured = _parse_number(form.basic_sum_assured, "basicSumAssured")

    if ppt > term:
        raise PptExceedsTerm()
    if basic_sum_assured < MIN_SUM_ASSURED:
        raise SumAssuredTooLow()

    return QuoteRequest(
        user_name=form.user_name.strip(),
        age=age,
        term=term,
        ppt=ppt,
        basic_sum_assured=basic_sum_assured,
    )


def resolve_term(rate_table: Dict[int, float], term: int) -> Tuple[int, bool]:
    """Return (term to price, whether it was approximated)."""
    if term in rate_table:
        return term, False
    # min() keeps the first of equal candidates, so scanning ascending keys
    # makes the smaller term win a tie
    nearest = min(sorted(rate_table), key=lambda key: abs(key - term))
    return nearest, True


def build_schedule(base_premium: float, tax_rate: float) -> PremiumSchedule:
    multiplier = 1 + tax_rate
    yearly = base_premium * multiplier
    return PremiumSchedule(
        yearly=yearly,
        half_yearly=base_premium * HALF_YEARLY_FACTOR * multiplier,
        quarterly=base_premium * QUARTERLY_FACTOR * multiplier,
        monthly=base_premium * MONTHLY_FACTOR * multiplier,
        daily_average=yearly / DAYS_PER_YEAR,
    )


def price_request(policy: Policy, request: QuoteInput) -> Tuple[QuoteRequest, QuoteResult]:
    """Validate request once and price it; returns the parsed request with the quote."""
    if not policy.rate_table:
        raise MissingCalculator()
    req = validate_request(request)

    used_term, approximated = resolve_term(policy.rate_table, req.term)
    if approximated:
        logger.debug("Policy %s has no %s year rate, using %s years",
                     policy.id, req.term, used_term)
    rate_per_1000 = policy.rate_table[used_term]

    base_premium = (req.basic_sum_assured / RATE_UNIT) * rate_per_1000
    return req, QuoteResult(
        used_term=used_term,
        approximated=approximated,
        death_sum_assured=req.basic_sum_assured * DEATH_BENEFIT_MULTIPLIER,
        base_premium=base_premium,
        first_year=build_schedule(base_premium, FIRST_YEAR_TAX_RATE),
        renewal=build_schedule(base_premium, RENEWAL_TAX_RATE),
    )


def calculate_premium(policy: Policy, request: QuoteInput) -> QuoteResult:
    """Price request against policy's rate table."""
    return price_request(policy, request)[1]
