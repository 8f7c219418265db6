"""Core schedule engine for the loan engine.

This module builds the full payment plan of a loan under the French
(constant annuity) amortization method. It supports a deferred first charge,
a prorated first accrual period, interest-only months at the start of the
loan and a fixed charge day. Results are returned as a ``PaymentPlan`` with
one ``PaymentPeriod`` per month of the term plus a summary.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from .annuity import annuity_payment
from .config import DAY_COUNT_BASIS, MONTHS_PER_YEAR
from .data_models import Loan, PaymentPeriod, PaymentPlan, ScheduleSummary
from .rates import resolve_base_rate
from .utils import add_months, days_between, round_currency, with_day

logger = logging.getLogger(__name__)


def first_charge_date(loan: Loan) -> date:
    """Return the date of the first installment.

    The first charge falls ``deferral_months`` after signing when a deferral
    is configured and one month after signing otherwise. The day of month is
    then moved to the configured charge day.
    """
    return _charge_date(loan, 1)


def _charge_date(loan: Loan, period: int) -> date:
    # Offsets count from signing so a clamped month end does not carry over
    offset = loan.deferral_months if loan.deferral_months > 0 else 1
    charge = add_months(loan.signing_date, offset + period - 1)
    if loan.charge_day:
        charge = with_day(charge, loan.charge_day)
    return charge


def accrual_window(loan: Loan, period: int, charge_date: date) -> Tuple[date, date]:
    """Return the (start, end) dates over which interest of ``period`` accrues.

    Each installment pays for the month preceding its charge date, ending the
    day before the charge. The first period starts on the signing date
    instead. Loans billed in arrears and in advance share this window; the
    flag only changes how the plan is presented.
    """
    end = charge_date - timedelta(days=1)
    if period == 1:
        return loan.signing_date, end
    return add_months(charge_date, -1), end


def generate_schedule(loan: Loan, generated_at: Optional[datetime] = None) -> PaymentPlan:
    """Compute the full payment plan of a loan.

    Parameters
    ----------
    loan: Loan
        The loan configuration. The plan always starts from the original
        ``principal`` and uses the base rate in force at signing.
    generated_at: Optional[datetime]
        Timestamp recorded on the plan. The engine never reads the clock, so
        callers that want one pass it in.

    Returns
    -------
    PaymentPlan
        One period per month of ``term_months``. The last period absorbs any
        rounding drift so that the ending principal is exactly zero; it is never
        interest-only, even when ``interest_only_months`` covers the whole term.
    """
    principal = round_currency(loan.principal)
    rate = resolve_base_rate(loan, loan.signing_date)

    # 1. Standard installment over the amortizing part of the term
    interest_only_months = max(0, loan.interest_only_months)
    amortizing_term = loan.term_months - interest_only_months
    standard_payment = annuity_payment(principal, rate, amortizing_term)

    periods: List[PaymentPeriod] = []
    live_principal = principal
    total_interest = Decimal("0.00")

    # 2. Walk the term month by month
    for period in range(1, loan.term_months + 1):
        charge_date = _charge_date(loan, period)
        accrual_start, accrual_end = accrual_window(loan, period, charge_date)
        is_prorated = period == 1 and loan.prorate_first_period
        is_interest_only = period <= interest_only_months and period < loan.term_months

        accrual_days = None
        if is_prorated:
            accrual_days = days_between(accrual_start, accrual_end) + 1
            interest = live_principal * rate / DAY_COUNT_BASIS * accrual_days
        else:
            interest = live_principal * rate / MONTHS_PER_YEAR
        interest = round_currency(interest)

        if is_interest_only:
            principal_portion = Decimal("0.00")
            payment = interest
        elif period == loan.term_months:
            # Last payment: remaining principal plus interest
            principal_portion = live_principal
            payment = principal_portion + interest
        else:
            payment = standard_payment
            principal_portion = payment - interest
            # A long prorated first period can accrue more than the standard
            # installment; the balance never grows, so charge interest only.
            if principal_portion < 0:
                principal_portion = Decimal("0.00")
                payment = interest
            # Never amortize more than what is still owed
            if principal_portion > live_principal:
                principal_portion = live_principal
                payment = principal_portion + interest

        live_principal = round_currency(max(Decimal("0"), live_principal - principal_portion))
        total_interest += interest

        periods.append(
            PaymentPeriod(
                period=period,
                accrual_start=accrual_start,
                accrual_end=accrual_end,
                charge_date=charge_date,
                payment=round_currency(payment),
                interest=interest,
                principal_portion=round_currency(principal_portion),
                ending_principal=live_principal,
                is_prorated=is_prorated,
                is_interest_only=is_interest_only,
                accrual_days=accrual_days if accrual_days and accrual_days > 0 else None,
            )
        )

    # 3. Summary
    summary = ScheduleSummary(
        total_interest=round_currency(total_interest),
        period_count=len(periods),
        final_charge_date=periods[-1].charge_date if periods else None,
    )
    logger.debug(
        "Generated %d periods for loan %s at %s (standard payment %s)",
        len(periods),
        loan.id,
        rate,
        standard_payment,
    )
    return PaymentPlan(loan_id=loan.id, generated_at=generated_at, periods=periods, summary=summary)
