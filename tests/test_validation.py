"""Unit tests for strict input validation"""

from datetime import date
from decimal import Decimal

import pytest

from loan_engine.data_models import Bonification, BonificationStatus, EvaluationWindow, OtherRule, RateType
from loan_engine.exceptions import InvalidBonificationError, InvalidLoanError, InvalidPrepaymentError
from loan_engine.validation import ensure_valid, validate_bonifications, validate_loan, validate_prepayment

from .conftest import make_loan


def test_valid_loan_has_no_problems(fixed_loan):
    assert validate_loan(fixed_loan) == []
    ensure_valid(fixed_loan)


def test_invalid_loan_lists_every_problem():
    loan = make_loan(principal=Decimal("0"), term_months=0, charge_day=40, fixed_rate=Decimal("-0.01"))

    problems = validate_loan(loan)

    assert "principal must be positive" in problems
    assert "term must be at least one month" in problems
    assert "charge day must be between 1 and 31" in problems
    assert "fixed rate cannot be negative" in problems


def test_interest_only_must_be_shorter_than_term():
    loan = make_loan(term_months=12, interest_only_months=12)
    assert validate_loan(loan) == ["interest-only months must be shorter than the term"]


def test_mixed_loan_needs_fixed_segment():
    loan = make_loan(rate_type=RateType.MIXED, index_value=Decimal("0.03"), spread=Decimal("0.01"))
    assert "mixed loans need a fixed segment of at least one month" in validate_loan(loan)


def test_ensure_valid_raises_with_details():
    loan = make_loan(principal=Decimal("-5"))

    with pytest.raises(InvalidLoanError) as excinfo:
        ensure_valid(loan)

    assert excinfo.value.problems == ["principal must be positive"]
    assert "Loan 'test' is invalid" in str(excinfo.value)


def test_bonification_problems(fixed_loan):
    window = EvaluationWindow(period_end=date(2024, 1, 1), evaluation_date=date(2024, 2, 1))
    bonifs = [
        Bonification("a", "A", Decimal("-0.001"), BonificationStatus.MET, OtherRule()),
        Bonification("a", "A again", Decimal("0.001"), BonificationStatus.MET, OtherRule(), window),
    ]

    problems = validate_bonifications(bonifs)

    assert len(problems) == 3
    with pytest.raises(InvalidBonificationError):
        ensure_valid(fixed_loan, bonifs)


def test_prepayment_validation(fixed_loan):
    validate_prepayment(fixed_loan, Decimal("1000"), date(2025, 1, 1))

    with pytest.raises(InvalidPrepaymentError):
        validate_prepayment(fixed_loan, Decimal("0"), date(2025, 1, 1))
    with pytest.raises(InvalidPrepaymentError):
        validate_prepayment(fixed_loan, Decimal("120000"), date(2025, 1, 1))
    with pytest.raises(InvalidPrepaymentError):
        validate_prepayment(fixed_loan, Decimal("1000"), date(2026, 1, 1))


def test_negative_grace_period():
    bonif = Bonification("a", "A", Decimal("0.001"), BonificationStatus.MET, OtherRule(), grace_months=-6)

    assert validate_bonifications([bonif]) == ["bonification a has a negative grace period"]
