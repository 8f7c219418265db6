"""Standard bonification templates offered by Spanish mortgage lenders.

Reductions are rate fractions: ``Decimal("0.0030")`` is 0.30 percentage
points. Templates start out ``PENDING``; the caller sets the status once the
condition has been verified.

``apply_intent`` works out the rate a new loan starts with from the
bonifications the borrower commits to, within the lender's cap and floors.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .config import MAX_TOTAL_REDUCTION, MIN_FIXED_RATE, MIN_VARIABLE_SPREAD, MONTHS_PER_YEAR
from .data_models import (
    AlarmServiceRule,
    Bonification,
    BonificationStatus,
    CardUsageRule,
    HomeInsuranceRule,
    IntentResult,
    LifeInsuranceRule,
    Loan,
    NextChange,
    NextChangeKind,
    OtherRule,
    PayrollDepositRule,
    PensionPlanRule,
    RateType,
)
from .utils import add_months, round_rate

logger = logging.getLogger(__name__)

_TEMPLATES: Dict[str, Bonification] = {
    "payroll": Bonification(
        id="payroll",
        name="Payroll",
        reduction=Decimal("0.0030"),
        status=BonificationStatus.PENDING,
        rule=PayrollDepositRule(minimum_monthly=Decimal("1200"), lookback_months=6),
    ),
    "direct_debits": Bonification(
        id="direct_debits",
        name="Direct debits",
        reduction=Decimal("0.0015"),
        status=BonificationStatus.PENDING,
        rule=OtherRule(description="Keep at least 3 bills paid by direct debit each month"),
    ),
    "home_insurance": Bonification(
        id="home_insurance",
        name="Home insurance",
        reduction=Decimal("0.0020"),
        status=BonificationStatus.PENDING,
        rule=HomeInsuranceRule(),
    ),
    "life_insurance": Bonification(
        id="life_insurance",
        name="Life insurance",
        reduction=Decimal("0.0015"),
        status=BonificationStatus.PENDING,
        rule=LifeInsuranceRule(),
    ),
    "credit_card": Bonification(
        id="credit_card",
        name="Credit card",
        reduction=Decimal("0.0010"),
        status=BonificationStatus.PENDING,
        rule=CardUsageRule(min_annual_spend=Decimal("3600"), card_kind="credit"),
    ),
    "debit_card": Bonification(
        id="debit_card",
        name="Debit card",
        reduction=Decimal("0.0005"),
        status=BonificationStatus.PENDING,
        rule=CardUsageRule(min_annual_spend=Decimal("1800"), card_kind="debit"),
    ),
    "pension_plan": Bonification(
        id="pension_plan",
        name="Pension plan",
        reduction=Decimal("0.0025"),
        status=BonificationStatus.PENDING,
        rule=PensionPlanRule(),
    ),
    "alarm": Bonification(
        id="alarm",
        name="Alarm",
        reduction=Decimal("0.0010"),
        status=BonificationStatus.PENDING,
        rule=AlarmServiceRule(),
    ),
}


def catalog_keys() -> List[str]:
    return list(_TEMPLATES)


def standard_bonifications() -> List[Bonification]:
    """Return every standard template, in catalog order."""
    return list(_TEMPLATES.values())


def template(key: str, **changes) -> Bonification:
    """Return the template ``key``, optionally with some fields replaced.

    Raises
    ------
    KeyError
        If ``key`` is not a catalog entry.
    """
    bonif = _TEMPLATES[key]
    return replace(bonif, **changes) if changes else bonif


def _card_kind(bonification: Bonification) -> str:
    rule = bonification.rule
    return rule.card_kind if isinstance(rule, CardUsageRule) else ""


def resolve_incompatibilities(bonifications: List[Bonification]) -> Tuple[List[Bonification], List[str]]:
    """Drop card bonifications that cannot be combined.

    A lender grants either the credit-card or the debit-card discount, not
    both. When both kinds are present the card with the largest reduction is
    kept. Returns the compatible bonifications, in their original order, and
    a message for each conflict resolved.
    """
    credit = [b for b in bonifications if _card_kind(b) == "credit"]
    debit = [b for b in bonifications if _card_kind(b) == "debit"]
    if not credit or not debit:
        return list(bonifications), []

    cards = credit + debit
    best = max(cards, key=lambda b: b.reduction)
    dropped = [b for b in cards if b.id != best.id]
    dropped_ids = {b.id for b in dropped}
    compatible = [b for b in bonifications if b.id not in dropped_ids]
    messages = [f"Applied {best.name} and dropped {', '.join(b.name for b in dropped)} as incompatible"]
    return compatible, messages


def next_change(loan: Loan, bonifications: List[Bonification], as_of: Optional[date] = None) -> Optional[NextChange]:
    """Return the next expected change of the applicable rate, if any.

    The end of the longest grace period comes first. Without grace, variable
    and mixed loans are reviewed on each signing anniversary; the first one
    after ``as_of`` (or the first one at all) is returned. Fixed loans
    without grace never change.
    """
    grace = [b.grace_months for b in bonifications if b.grace_months > 0]
    if grace:
        months = max(grace)
        return NextChange(
            effective_date=add_months(loan.signing_date, months),
            kind=NextChangeKind.PROMOTION_END,
            description=f"End of promotion ({months} months of grace)",
        )
    if loan.rate_type in (RateType.VARIABLE, RateType.MIXED):
        years = 1
        review = add_months(loan.signing_date, MONTHS_PER_YEAR)
        while as_of is not None and review <= as_of:
            years += 1
            review = add_months(loan.signing_date, MONTHS_PER_YEAR * years)
        return NextChange(
            effective_date=review,
            kind=NextChangeKind.ANNUAL_REVIEW,
            description="Annual review of the loan conditions",
        )
    return None


def _floored(base: Decimal, reduction: Decimal, floor: Decimal) -> Decimal:
    # The floor limits the discount; it never raises a rate already below it
    return max(base - reduction, min(base, floor))


def apply_intent(loan: Loan, bonifications: List[Bonification], as_of: Optional[date] = None) -> IntentResult:
    """Rate a new loan gets from the bonifications the borrower commits to.

    Every bonification passed in counts as selected: their reductions apply
    right away, whatever their status, and those with ``grace_months`` are
    reported as in grace. The steps are:

    1. drop incompatible cards (see ``resolve_incompatibilities``);
    2. sum the reductions and cap the sum at ``MAX_TOTAL_REDUCTION``;
    3. take the capped sum off the fixed rate (fixed segment rate for mixed
       loans) down to ``MIN_FIXED_RATE``, or off the spread of a variable
       loan down to ``MIN_VARIABLE_SPREAD``;
    4. work out the next expected change of the rate.
    """
    # 1. Compatible bonifications
    applied, messages = resolve_incompatibilities(bonifications)
    in_grace = [b.id for b in applied if b.grace_months > 0]

    # 2. Capped reduction
    requested = sum((b.reduction for b in applied), Decimal("0"))
    granted = min(requested, MAX_TOTAL_REDUCTION)
    if granted < requested:
        messages.append(
            f"Total reduction of {requested * 100:.2f} pp capped at {MAX_TOTAL_REDUCTION * 100:.2f} pp"
        )
        logger.info("Reduction capped for loan %s: %s requested, %s granted", loan.id, requested, granted)

    # 3. Floors per rate type
    spread = None
    if loan.rate_type is RateType.VARIABLE:
        spread = round_rate(_floored(loan.spread, granted, MIN_VARIABLE_SPREAD))
        rate = round_rate(loan.index_value + spread)
    elif loan.rate_type is RateType.MIXED:
        rate = round_rate(_floored(loan.fixed_segment_rate, granted, MIN_FIXED_RATE))
    else:
        rate = round_rate(_floored(loan.fixed_rate, granted, MIN_FIXED_RATE))

    # 4. Next change
    return IntentResult(
        applied=applied,
        in_grace=in_grace,
        requested_reduction=requested,
        applied_reduction=granted,
        rate=rate,
        spread=spread,
        next_change=next_change(loan, applied, as_of),
        messages=messages,
    )
