"""Bonification compliance evaluation.

For every bonification attached to a loan this module reports its status,
the extra monthly and annual cost the borrower would face if the discount
stopped applying, and, when the bonification has an evaluation window, the
alerts due on the evaluation date countdown (45, 21, 7 and 2 days before).

Statuses are facts supplied by the caller; the engine reads them to decide
which reductions currently apply and never changes them.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from .annuity import annuity_payment
from .config import ALERT_THRESHOLDS_DAYS, DATE_FORMAT_DISPLAY, DEFAULT_MISSING_REQUIREMENT, MONTHS_PER_YEAR
from .data_models import (
    AlarmServiceRule,
    AlertDates,
    Bonification,
    BonificationAlert,
    BonificationReport,
    BonificationStatusEntry,
    CardUsageRule,
    HomeInsuranceRule,
    LifeInsuranceRule,
    Loan,
    LossImpact,
    OtherRule,
    PayrollDepositRule,
    PensionPlanRule,
)
from .rates import remaining_term, resolve_bonified_rate
from .utils import days_between, round_currency

logger = logging.getLogger(__name__)


def _amount(value: Decimal) -> str:
    return f"{value:.2f}"


def _impact(
    principal: Decimal, months: int, current_rate: Decimal, current_payment: Decimal, reduction: Decimal
) -> LossImpact:
    payment_without = annuity_payment(principal, current_rate + reduction, months)
    monthly = payment_without - current_payment
    return LossImpact(monthly=round_currency(monthly), annual=round_currency(monthly * MONTHS_PER_YEAR))


def loss_impact(loan: Loan, bonifications: List[Bonification], bonification: Bonification, as_of: date) -> LossImpact:
    """Cost increase if ``bonification``'s reduction were added back to the rate.

    Both payments use the outstanding principal over the remaining term, the
    current one at today's bonified rate.
    """
    months = remaining_term(loan, as_of)
    current_rate = resolve_bonified_rate(loan, bonifications, as_of)
    current_payment = annuity_payment(loan.live_principal, current_rate, months)
    return _impact(loan.live_principal, months, current_rate, current_payment, bonification.reduction)


def action_required(bonification: Bonification) -> str:
    """Describe what the borrower must do to keep ``bonification``."""
    rule = bonification.rule
    if isinstance(rule, PayrollDepositRule):
        return f"Keep a payroll deposit of at least {_amount(rule.minimum_monthly)} for {rule.lookback_months} months"
    if isinstance(rule, PensionPlanRule):
        return "Keep the pension plan active"
    if isinstance(rule, HomeInsuranceRule):
        return "Keep the home insurance active"
    if isinstance(rule, LifeInsuranceRule):
        return "Keep the life insurance active"
    if isinstance(rule, CardUsageRule):
        requirements = []
        if rule.min_transactions_per_month:
            requirements.append(f"{rule.min_transactions_per_month} transactions/month")
        if rule.min_annual_spend:
            requirements.append(f"spend at least {_amount(rule.min_annual_spend)}/year")
        return "Card usage: " + " or ".join(requirements)
    if isinstance(rule, AlarmServiceRule):
        return "Keep the alarm service active"
    if isinstance(rule, OtherRule):
        return rule.description or "Meet the specific requirements"
    raise TypeError(f"Unknown bonification rule: {rule!r}")


def alert_label(days_until_evaluation: int) -> Optional[str]:
    """Return ``"T-<days>"`` when an alert is due, ``None`` otherwise."""
    if days_until_evaluation in ALERT_THRESHOLDS_DAYS:
        return f"T-{days_until_evaluation}"
    return None


def _alert_message(bonification: Bonification, impact: LossImpact) -> str:
    window = bonification.window
    missing = window.missing or DEFAULT_MISSING_REQUIREMENT
    return (
        f'Bonification "{bonification.name}" at risk. Still missing: {missing}. '
        f"If it is not met before {window.evaluation_date.strftime(DATE_FORMAT_DISPLAY)}, "
        f"your payment will rise by {_amount(impact.monthly)}/month "
        f"({_amount(impact.annual)}/year) from {window.period_end.strftime(DATE_FORMAT_DISPLAY)}."
    )


def evaluate_bonifications(loan: Loan, bonifications: List[Bonification], as_of: date) -> BonificationReport:
    """Report the status and loss impact of each bonification and due alerts.

    Parameters
    ----------
    loan: Loan
        The loan the bonifications discount.
    bonifications: List[Bonification]
        All bonifications of the loan, whatever their status.
    as_of: date
        Evaluation date. Alerts fire when it is exactly 45, 21, 7 or 2 days
        before a bonification's evaluation date.
    """
    report = BonificationReport()

    # Rate and payment in force today are shared by every impact
    principal = loan.live_principal
    months = remaining_term(loan, as_of)
    current_rate = resolve_bonified_rate(loan, bonifications, as_of)
    current_payment = annuity_payment(principal, current_rate, months)

    for bonif in bonifications:
        impact = _impact(principal, months, current_rate, current_payment, bonif.reduction)
        window = bonif.window

        alert_dates = None
        if window is not None:
            days_left = days_between(as_of, window.evaluation_date)
            alert_dates = AlertDates(
                evaluation_date=window.evaluation_date,
                application_date=window.period_end,
                days_until_evaluation=days_left,
            )
            label = alert_label(days_left)
            if label:
                report.alerts.append(
                    BonificationAlert(
                        bonification_id=bonif.id,
                        label=label,
                        days_until_evaluation=days_left,
                        message=_alert_message(bonif, impact),
                        impact=impact,
                        action_required=action_required(bonif),
                    )
                )
                logger.info("Alert %s raised for bonification %s on loan %s", label, bonif.id, loan.id)

        report.statuses.append(
            BonificationStatusEntry(
                bonification_id=bonif.id,
                name=bonif.name,
                status=bonif.status,
                impact=impact,
                alert_dates=alert_dates,
                progress=window.progress if window else None,
                missing=window.missing if window else None,
            )
        )

    return report
