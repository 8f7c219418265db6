"""Output helpers for the loan engine.

This module provides simple functions to render payment plans, bonification
reports and prepayment simulations in a tabular text format. We rely only on
built-in printing and string formatting; the column layout of any export is
left to the consumer.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .data_models import (
    AmortizationSimulation,
    BonificationReport,
    BonificationSavings,
    IntentResult,
    PaymentPeriod,
    PaymentPlan,
    SimulationMode,
)


def _pct(rate) -> str:
    return f"{rate * 100:.2f}%"


def print_summary(plan: PaymentPlan) -> None:
    """Print the summary of a payment plan in a human-readable format."""
    summary = plan.summary
    print("Summary")
    print("-" * 72)
    print(f"Loan               : {plan.loan_id}")
    print(f"Total interest     : {summary.total_interest:.2f}")
    print(f"Payments           : {summary.period_count}")
    if summary.final_charge_date:
        print(f"Final charge date  : {summary.final_charge_date.isoformat()}")
    if plan.periods:
        # The highest installment shows the peak monthly cash outflow
        print(f"Highest payment    : {max(p.payment for p in plan.periods):.2f}")
    print("-" * 72)


def print_schedule(periods: Iterable[PaymentPeriod], max_rows: Optional[int] = None) -> None:
    """Print the payment plan as a simple table.

    Parameters
    ----------
    periods: Iterable[PaymentPeriod]
        The periods to print.
    max_rows: Optional[int]
        Print at most this many rows, followed by a note with the total.
    """
    rows = list(periods)
    headers = [
        "Period",
        "Charge",
        "Accrual",
        "Payment",
        "Interest",
        "Principal",
        "EndBal",
        "Flags",
    ]
    print("\t".join(headers))
    shown = rows if max_rows is None else rows[:max_rows]
    for entry in shown:
        flags = []
        if entry.is_interest_only:
            flags.append("IO")
        if entry.is_prorated:
            flags.append(f"PR{entry.accrual_days}d")
        row = [
            str(entry.period),
            entry.charge_date.isoformat(),
            f"{entry.accrual_start.isoformat()}..{entry.accrual_end.isoformat()}",
            f"{entry.payment:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.principal_portion:.2f}",
            f"{entry.ending_principal:.2f}",
            ",".join(flags),
        ]
        print("\t".join(row))
    if len(shown) < len(rows):
        print(f"... {len(rows) - len(shown)} more rows")


def print_savings(savings: BonificationSavings) -> None:
    print("Bonification savings")
    print("-" * 72)
    print(f"Base rate          : {_pct(savings.base_rate)}")
    print(f"Bonified rate      : {_pct(savings.bonified_rate)}")
    print(f"Base payment       : {savings.base_payment:.2f}")
    print(f"Bonified payment   : {savings.bonified_payment:.2f}")
    print(f"Monthly savings    : {savings.monthly_savings:.2f}")
    print(f"Annual savings     : {savings.annual_savings:.2f}")
    for item in savings.breakdown:
        print(f"  {item.name:20s} -{item.reduction * 100:.2f} pp {item.monthly_savings:10.2f}/month {item.annual_savings:10.2f}/year")
    print("-" * 72)


def print_bonification_report(report: BonificationReport) -> None:
    """Print each bonification's status and the alerts due today."""
    print(f"{'Bonification':20s} {'Status':10s} {'Loss/month':>12s} {'Loss/year':>12s} {'Days left':>10s}")
    for entry in report.statuses:
        days = str(entry.alert_dates.days_until_evaluation) if entry.alert_dates else "-"
        print(
            f"{entry.name:20s} {entry.status.value:10s} "
            f"{entry.impact.monthly:12.2f} {entry.impact.annual:12.2f} {days:>10s}"
        )
    if report.alerts:
        print()
        print("Alerts")
        print("=" * 72)
        for alert in report.alerts:
            print(f"[{alert.label}] {alert.message}")
            print(f"       Action: {alert.action_required}")
        print("=" * 72)


def print_simulation(simulation: AmortizationSimulation) -> None:
    """Print the outcome of a partial prepayment simulation."""
    print("Partial prepayment")
    print("-" * 72)
    print(f"Mode               : {simulation.mode.value}")
    print(f"Amount             : {simulation.prepayment_amount:.2f} on {simulation.prepayment_date.isoformat()}")
    print(f"Rate used          : {_pct(simulation.rate)}")
    print(f"Penalty            : {simulation.penalty:.2f}")
    print(f"Principal          : {simulation.previous_principal:.2f} -> {simulation.new_principal:.2f}")
    print(f"Payment            : {simulation.previous_payment:.2f} -> {simulation.new_payment:.2f}")
    print(f"Term (months)      : {simulation.remaining_months} -> {simulation.new_term_months}")
    print(f"New end date       : {simulation.new_end_date.isoformat()}")
    print(f"Interest saved     : {simulation.interest_saved:.2f}")
    if simulation.mode is SimulationMode.REDUCE_PAYMENT:
        if simulation.break_even_months is not None:
            print(f"Break-even         : {simulation.break_even_months} months")
        else:
            print("Break-even         : n/a")
    print("-" * 72)


def print_intent(result: IntentResult) -> None:
    """Print the starting rate of a loan and the bonifications behind it."""
    print("Starting conditions")
    print("-" * 72)
    for bonif in result.applied:
        grace = f" ({bonif.grace_months} months grace)" if bonif.id in result.in_grace else ""
        print(f"  {bonif.name:20s} -{bonif.reduction * 100:.2f} pp{grace}")
    print(f"Reduction applied  : {result.applied_reduction * 100:.2f} pp")
    if result.spread is not None:
        print(f"Spread             : {_pct(result.spread)}")
    print(f"Rate               : {_pct(result.rate)}")
    if result.next_change:
        change = result.next_change
        print(f"Next change        : {change.effective_date.isoformat()} {change.description}")
    for message in result.messages:
        print(f"Note: {message}")
    print("-" * 72)
