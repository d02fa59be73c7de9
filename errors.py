"""
Domain errors for the policy quote service.

Every failure the core can report is a PolicyQuoteError subclass carrying a
stable code, a message fit to show an end user, and the HTTP status the API
layer answers with.
"""

from typing import Any, Dict, Optional


class PolicyQuoteError(Exception):
    code = "error"
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "field": self.field}


class InvalidInput(PolicyQuoteError):
    """Age given to the eligibility filter is not an integer in [0, 100]."""
    code = "invalid_input"
    status_code = 422
    default_message = "Please enter a valid age."


class InvalidField(PolicyQuoteError):
    """A quote or inquiry field is missing or does not parse."""
    code = "invalid_field"
    status_code = 422
    default_message = "Please fill all required fields correctly."

    def __init__(self, field: Optional[str], message: Optional[str] = None):
        super().__init__(message, field=field)


class PptExceedsTerm(PolicyQuoteError):
    code = "ppt_exceeds_term"
    status_code = 422
    default_message = "Premium Paying Term (PPT) cannot be greater than the Policy Term."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field="ppt")


class SumAssuredTooLow(PolicyQuoteError):
    code = "sum_assured_too_low"
    status_code = 422
    default_message = "The minimum Sum Assured for this policy is ₹2,00,000."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field="basicSumAssured")


class MissingCalculator(PolicyQuoteError):
    """Policy has no rate table, so it cannot be priced."""
    code = "missing_calculator"
    status_code = 409
    default_message = "Calculation is not available for this plan."


class PolicyNotFound(PolicyQuoteError):
    code = "policy_not_found"
    status_code = 404
    default_message = "Policy not found."

    def __init__(self, policy_id: int):
        self.policy_id = policy_id
        super().__init__()


class AdminRequired(PolicyQuoteError):
    code = "admin_required"
    status_code = 403
    default_message = "Unauthorized: Admins only."


class AdminExists(PolicyQuoteError):
    code = "admin_exists"
    status_code = 409
    default_message = "Username or email may already be in use."
