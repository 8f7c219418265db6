"""Strict validation of engine inputs.

The engine accepts any configuration and falls back to zero payments or
rates on degenerate values. Callers that would rather reject such records
run them through these checks first.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, List

from .data_models import Bonification, Loan, RateType
from .exceptions import InvalidBonificationError, InvalidLoanError, InvalidPrepaymentError
from .simulator import original_end_date


def validate_loan(loan: Loan) -> List[str]:
    """Return a list of problems found in ``loan`` (empty when valid)."""
    problems: List[str] = []
    if loan.principal <= 0:
        problems.append("principal must be positive")
    if loan.outstanding_principal is not None:
        if loan.outstanding_principal < 0:
            problems.append("outstanding principal cannot be negative")
        elif loan.outstanding_principal > loan.principal:
            problems.append("outstanding principal cannot exceed the original principal")
    if loan.term_months <= 0:
        problems.append("term must be at least one month")
    if loan.interest_only_months < 0:
        problems.append("interest-only months cannot be negative")
    elif loan.term_months > 0 and loan.interest_only_months >= loan.term_months:
        problems.append("interest-only months must be shorter than the term")
    if loan.deferral_months < 0:
        problems.append("deferral months cannot be negative")
    if loan.charge_day is not None and not 1 <= loan.charge_day <= 31:
        problems.append("charge day must be between 1 and 31")
    if loan.prepayment_penalty_rate < 0 or loan.prepayment_fixed_cost < 0:
        problems.append("prepayment costs cannot be negative")

    if loan.rate_type is RateType.FIXED:
        if loan.fixed_rate < 0:
            problems.append("fixed rate cannot be negative")
    elif loan.rate_type in (RateType.VARIABLE, RateType.MIXED):
        if loan.index_value + loan.spread < 0:
            problems.append("index plus spread cannot be negative")
        if loan.rate_type is RateType.MIXED:
            if loan.fixed_segment_months <= 0:
                problems.append("mixed loans need a fixed segment of at least one month")
            if loan.fixed_segment_rate < 0:
                problems.append("fixed segment rate cannot be negative")
    else:
        problems.append(f"unknown rate type {loan.rate_type!r}")
    return problems


def validate_bonifications(bonifications: Iterable[Bonification]) -> List[str]:
    problems: List[str] = []
    seen = set()
    for bonif in bonifications:
        if bonif.id in seen:
            problems.append(f"duplicate bonification id {bonif.id}")
        seen.add(bonif.id)
        if bonif.reduction < 0:
            problems.append(f"bonification {bonif.id} has a negative reduction")
        if bonif.grace_months < 0:
            problems.append(f"bonification {bonif.id} has a negative grace period")
        window = bonif.window
        if window is not None and window.period_end < window.evaluation_date:
            problems.append(f"bonification {bonif.id} applies before it is evaluated")
    return problems


def ensure_valid(loan: Loan, bonifications: Iterable[Bonification] = ()) -> None:
    """Raise when ``loan`` or any of ``bonifications`` is invalid."""
    problems = validate_loan(loan)
    if problems:
        raise InvalidLoanError(loan.id, problems)
    problems = validate_bonifications(bonifications)
    if problems:
        raise InvalidBonificationError(problems)


def validate_prepayment(loan: Loan, amount: Decimal, prepayment_date: date) -> None:
    """Raise ``InvalidPrepaymentError`` unless the prepayment can be simulated.

    The amount must be positive and below the outstanding principal, and the
    date must fall before the contractual end of the loan.
    """
    outstanding = loan.live_principal
    if amount <= 0 or amount >= outstanding:
        raise InvalidPrepaymentError(amount, outstanding, loan.id)
    if prepayment_date < loan.signing_date or prepayment_date >= original_end_date(loan):
        raise InvalidPrepaymentError(amount, outstanding, loan.id)
