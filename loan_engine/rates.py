"""Rate resolution for fixed, variable and mixed loans.

The base rate is the contractual nominal annual rate at a given date; the
bonified rate subtracts the reductions of every bonification currently met.
Elapsed time is always measured in whole calendar months from the signing
date, ignoring the day of the month.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List

from .annuity import annuity_payment
from .data_models import (
    Bonification,
    BonificationSaving,
    BonificationSavings,
    BonificationStatus,
    Loan,
    RateType,
)
from .config import MONTHS_PER_YEAR
from .utils import months_between, round_currency, round_rate

logger = logging.getLogger(__name__)


def _floating_rate(loan: Loan) -> Decimal:
    return round_rate(loan.index_value + loan.spread)


def resolve_base_rate(loan: Loan, as_of: date) -> Decimal:
    """Return the nominal annual rate applicable on ``as_of``.

    Mixed loans use the fixed-segment rate while fewer than
    ``fixed_segment_months`` whole months have elapsed since signing, and
    behave as variable loans afterwards.
    """
    if loan.rate_type is RateType.FIXED:
        return loan.fixed_rate
    if loan.rate_type is RateType.VARIABLE:
        return _floating_rate(loan)
    if loan.rate_type is RateType.MIXED:
        elapsed = months_between(loan.signing_date, as_of)
        if elapsed < loan.fixed_segment_months:
            return loan.fixed_segment_rate
        return _floating_rate(loan)
    logger.warning("Unknown rate type %r on loan %s; using a zero rate", loan.rate_type, loan.id)
    return Decimal("0")


def met_bonifications(bonifications: Iterable[Bonification]) -> List[Bonification]:
    return [b for b in bonifications if b.status is BonificationStatus.MET]


def resolve_bonified_rate(loan: Loan, bonifications: Iterable[Bonification], as_of: date) -> Decimal:
    """Base rate minus the reductions of all met bonifications, floored at 0."""
    base_rate = resolve_base_rate(loan, as_of)
    total_reduction = sum((b.reduction for b in met_bonifications(bonifications)), Decimal("0"))
    return round_rate(max(Decimal("0"), base_rate - total_reduction))


def remaining_term(loan: Loan, as_of: date) -> int:
    """Months left on the loan at ``as_of``; never less than one."""
    elapsed = months_between(loan.signing_date, as_of)
    return max(1, loan.term_months - elapsed)


def compute_bonification_savings(
    loan: Loan, bonifications: List[Bonification], as_of: date
) -> BonificationSavings:
    """Compare the payment with and without the bonifications currently met.

    Both payments are computed on the outstanding principal over the
    remaining term. The per-bonification breakdown unwinds the met
    bonifications in list order, each one measured against the rate left by
    the previous ones, so the split depends on the order of ``bonifications``
    while the total does not.
    """
    base_rate = resolve_base_rate(loan, as_of)
    bonified_rate = resolve_bonified_rate(loan, bonifications, as_of)
    months = remaining_term(loan, as_of)
    principal = loan.live_principal

    base_payment = annuity_payment(principal, base_rate, months)
    bonified_payment = annuity_payment(principal, bonified_rate, months)
    monthly_savings = base_payment - bonified_payment

    breakdown: List[BonificationSaving] = []
    cumulative_rate = base_rate
    for bonif in met_bonifications(bonifications):
        rate_after = max(Decimal("0"), cumulative_rate - bonif.reduction)
        saving = annuity_payment(principal, cumulative_rate, months) - annuity_payment(principal, rate_after, months)
        breakdown.append(
            BonificationSaving(
                bonification_id=bonif.id,
                name=bonif.name,
                reduction=bonif.reduction,
                monthly_savings=round_currency(saving),
                annual_savings=round_currency(saving * MONTHS_PER_YEAR),
            )
        )
        cumulative_rate = rate_after

    logger.debug(
        "Bonification savings for loan %s: base %s, bonified %s over %d months",
        loan.id,
        base_rate,
        bonified_rate,
        months,
    )
    return BonificationSavings(
        base_rate=round_rate(base_rate),
        bonified_rate=bonified_rate,
        base_payment=base_payment,
        bonified_payment=bonified_payment,
        monthly_savings=round_currency(monthly_savings),
        annual_savings=round_currency(monthly_savings * MONTHS_PER_YEAR),
        breakdown=breakdown,
    )
