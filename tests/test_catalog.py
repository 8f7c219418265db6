"""Unit tests for the standard bonification catalog"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loan_engine.catalog import (
    apply_intent,
    catalog_keys,
    next_change,
    resolve_incompatibilities,
    standard_bonifications,
    template,
)
from loan_engine.config import MAX_TOTAL_REDUCTION
from loan_engine.data_models import BonificationStatus, NextChangeKind, RateType

from .conftest import make_loan


def test_standard_bonifications_start_pending():
    bonifs = standard_bonifications()

    assert len(bonifs) == len(catalog_keys()) == 8
    assert all(b.status is BonificationStatus.PENDING for b in bonifs)
    assert all(b.reduction > 0 for b in bonifs)


def test_template_with_changes():
    payroll = template("payroll", status=BonificationStatus.MET, reduction=Decimal("0.0025"))

    assert payroll.id == "payroll"
    assert payroll.status is BonificationStatus.MET
    assert payroll.reduction == Decimal("0.0025")
    assert template("payroll").status is BonificationStatus.PENDING


def test_unknown_template():
    with pytest.raises(KeyError):
        template("gym")


def test_credit_and_debit_cards_are_incompatible():
    """Only the card with the largest reduction survives"""
    bonifs = [template("payroll"), template("debit_card"), template("credit_card"), template("alarm")]

    compatible, messages = resolve_incompatibilities(bonifs)

    assert [b.id for b in compatible] == ["payroll", "credit_card", "alarm"]
    assert len(messages) == 1
    assert "Credit card" in messages[0]
    assert "Debit card" in messages[0]


def test_single_card_is_kept():
    bonifs = [template("debit_card"), template("home_insurance")]

    compatible, messages = resolve_incompatibilities(bonifs)

    assert compatible == bonifs
    assert messages == []


def test_intent_applies_selected_reductions_with_grace(fixed_loan):
    """Payroll and home insurance take 0.50 pp off; payroll starts in grace"""
    bonifs = [template("payroll", grace_months=6), template("home_insurance")]

    result = apply_intent(replace(fixed_loan, fixed_rate=Decimal("0.032")), bonifs)

    assert result.applied_reduction == Decimal("0.0050")
    assert result.rate == Decimal("0.0270")
    assert result.spread is None
    assert result.in_grace == ["payroll"]
    assert result.next_change.kind is NextChangeKind.PROMOTION_END
    assert result.next_change.effective_date == date(2025, 2, 10)
    assert result.messages == []


def test_intent_caps_total_reduction(fixed_loan):
    bonifs = standard_bonifications()

    result = apply_intent(replace(fixed_loan, fixed_rate=Decimal("0.032")), bonifs)

    assert "debit_card" not in [b.id for b in result.applied]
    assert result.requested_reduction == Decimal("0.0125")
    assert result.applied_reduction == MAX_TOTAL_REDUCTION
    assert result.rate == Decimal("0.0220")
    assert len(result.messages) == 2
    assert "capped at 1.00 pp" in result.messages[1]


def test_intent_fixed_rate_floor(fixed_loan):
    loan = replace(fixed_loan, fixed_rate=Decimal("0.015"))
    bonifs = [template("payroll"), template("home_insurance"), template("pension_plan")]

    assert apply_intent(loan, bonifs).rate == Decimal("0.0100")


def test_intent_floor_never_raises_a_low_rate(fixed_loan):
    loan = replace(fixed_loan, fixed_rate=Decimal("0.008"))

    assert apply_intent(loan, [template("payroll")]).rate == Decimal("0.0080")


def test_intent_variable_spread_floor():
    """A 0.55 % spread minus 0.30 pp stops at the 0.40 % floor"""
    loan = make_loan(
        rate_type=RateType.VARIABLE,
        index_value=Decimal("0.0365"),
        spread=Decimal("0.0055"),
    )

    result = apply_intent(loan, [template("payroll")])

    assert result.spread == Decimal("0.0040")
    assert result.rate == Decimal("0.0405")
    assert result.next_change.kind is NextChangeKind.ANNUAL_REVIEW
    assert result.next_change.effective_date == date(2025, 8, 10)


def test_intent_mixed_uses_fixed_segment_rate():
    loan = make_loan(
        rate_type=RateType.MIXED,
        fixed_rate=Decimal("0"),
        fixed_segment_months=24,
        fixed_segment_rate=Decimal("0.025"),
        index_value=Decimal("0.03"),
        spread=Decimal("0.01"),
    )

    result = apply_intent(loan, [template("payroll")])

    assert result.rate == Decimal("0.0220")
    assert result.spread is None


def test_next_change_annual_review_after_as_of():
    loan = make_loan(rate_type=RateType.VARIABLE, index_value=Decimal("0.03"), spread=Decimal("0.01"))

    change = next_change(loan, [], as_of=date(2025, 8, 10))

    assert change.effective_date == date(2026, 8, 10)


def test_next_change_longest_grace_wins():
    loan = make_loan(rate_type=RateType.VARIABLE, index_value=Decimal("0.03"), spread=Decimal("0.01"))
    bonifs = [template("payroll", grace_months=6), template("alarm", grace_months=12)]

    change = next_change(loan, bonifs)

    assert change.kind is NextChangeKind.PROMOTION_END
    assert change.effective_date == date(2025, 8, 10)
    assert "12 months" in change.description


def test_fixed_loan_without_grace_has_no_next_change(fixed_loan):
    assert next_change(fixed_loan, [template("payroll")]) is None
