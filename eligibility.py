from typing import List, Sequence, Union

from errors import InvalidInput
from schemas import MAX_AGE, MIN_AGE, Policy


def coerce_age(age: Union[int, str]) -> int:
    """Return age as an int in [0, 100], or raise InvalidInput."""
    if isinstance(age, bool):
        raise InvalidInput()
    if isinstance(age, str):
        try:
            age = int(age.strip())
        except ValueError:
            raise InvalidInput() from None
    if not isinstance(age, int) or not MIN_AGE <= age <= MAX_AGE:
        raise InvalidInput()
    return age


def is_eligible(policy: Policy, age: int) -> bool:
    return policy.min_age <= age <= policy.max_age


def filter_eligible(policies: Sequence[Policy], age: Union[int, str]) -> List[Policy]:
    """Policies whose inclusive age range contains age, in catalog order.

    An empty list means nothing is on offer for that age; it is not an error.
    """
    age = coerce_age(age)
    return [p for p in policies if is_eligible(p, age)]
