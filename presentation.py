"""
Display formatting for quotes.

Amounts are rounded half-up to whole rupees and grouped the Indian way
(12,34,567) before being shown.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from schemas import Policy, PremiumSchedule, QuoteDisplay, QuoteRequest, QuoteResult, ScheduleDisplay

CURRENCY_SYMBOL = "₹"
DISCLAIMER = "Premium Shown Above is Indicative and not Exact."
FIRST_YEAR_HEADING = "1st year Premium With TAX 4.5%"
RENEWAL_HEADING = "After 1st year Premium With TAX 2.25%"


def round_whole(amount: Union[int, float, str]) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def group_indian(number: int) -> str:
    digits = str(abs(number))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return "-" + digits if number < 0 else digits


def format_inr(amount: Union[int, float, str]) -> str:
    """format_inr(625000.4) -> '₹6,25,000'"""
    return CURRENCY_SYMBOL + group_indian(round_whole(amount))


def approximation_note(used_term: int) -> str:
    return f"Note: Premium is estimated using the closest available term ({used_term} years)."


def render_schedule(heading: str, schedule: PremiumSchedule) -> ScheduleDisplay:
    return ScheduleDisplay(
        heading=heading,
        yearly=format_inr(schedule.yearly),
        half_yearly=format_inr(schedule.half_yearly),
        quarterly=format_inr(schedule.quarterly),
        monthly=format_inr(schedule.monthly),
        daily_average=format_inr(schedule.daily_average),
    )


def render_quote(policy: Policy, request: QuoteRequest, result: QuoteResult) -> QuoteDisplay:
    note = approximation_note(result.used_term) if result.approximated else None
    return QuoteDisplay(
        title=f"Result for: {policy.name}",
        user_name=request.user_name,
        age=request.age,
        selected_term=f"{request.term} Years",
        ppt=f"{request.ppt} Years",
        death_sum_assured=format_inr(result.death_sum_assured),
        basic_sum_assured=format_inr(request.basic_sum_assured),
        approximation_note=note,
        first_year=render_schedule(FIRST_YEAR_HEADING, result.first_year),
        renewal=render_schedule(RENEWAL_HEADING, result.renewal),
        disclaimer=DISCLAIMER,
    )
