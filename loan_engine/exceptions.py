"""Custom exceptions for the loan engine.

The calculations themselves never raise on odd numbers; these are raised by
the opt-in validation layer for callers that want strict checking.
"""

from typing import Optional


class LoanEngineError(Exception):
    """Base exception for all loan engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidLoanError(LoanEngineError):
    """Raised when a loan configuration cannot be amortized."""

    def __init__(self, loan_id: str, problems: list):
        super().__init__(f"Loan '{loan_id}' is invalid", {"problems": problems})
        self.problems = problems


class InvalidBonificationError(LoanEngineError):
    """Raised when a bonification record is malformed."""

    def __init__(self, problems: list):
        super().__init__("Invalid bonifications", {"problems": problems})
        self.problems = problems


class InvalidPrepaymentError(LoanEngineError):
    """Raised when a prepayment cannot be applied to the loan."""

    def __init__(self, amount, outstanding, loan_id: Optional[str] = None):
        details = {"amount": amount, "outstanding": outstanding}
        if loan_id:
            details["loan_id"] = loan_id
        super().__init__(f"Prepayment of {amount} is not valid against an outstanding {outstanding}", details)
