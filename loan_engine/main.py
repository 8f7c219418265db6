"""Command-line interface for the loan engine.

This module uses the ``click`` library to implement a multi-command
interface. Users can print the full payment plan of a loan, review the
savings and compliance alerts of its bonifications, or simulate a partial
prepayment. The command line is the only place that reads the clock: the
evaluation date defaults to today and is passed explicitly to the engine.
"""

from __future__ import annotations

import functools
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import click

from .bonifications import evaluate_bonifications
from .catalog import apply_intent, catalog_keys, resolve_incompatibilities, template
from .config import get_settings
from .data_models import Bonification, BonificationStatus, EvaluationWindow, Loan, RateType, SimulationMode
from .engine import generate_schedule
from .exceptions import LoanEngineError
from .formatter import (
    print_bonification_report,
    print_intent,
    print_savings,
    print_schedule,
    print_simulation,
    print_summary,
)
from .observability import setup_logging
from .rates import compute_bonification_savings
from .simulator import simulate
from .utils import decimal_from_str, parse_date, percent_to_fraction
from .validation import ensure_valid, validate_prepayment


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("150000") and shorthand with ``k``/``m`` suffixes
    (e.g., "150k" meaning 150_000).
    """
    value = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string (e.g. "3.2" or "3.2%") into a rate fraction."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return percent_to_fraction(decimal_from_str(value))
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def _parse_date_param(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_bonification_strings(values: Tuple[str, ...]) -> List[Bonification]:
    """Parse ``KEY:POINTS:STATUS[:EVALUATION_DATE:PERIOD_END]`` entries.

    ``KEY`` names a standard bonification, ``POINTS`` is the reduction in
    percentage points (``0.30``) and ``STATUS`` one of met, at_risk, lost or
    pending.
    """
    bonifications: List[Bonification] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (3, 5):
            raise click.BadParameter(
                f"Bonification must be in KEY:POINTS:STATUS[:EVALUATION_DATE:PERIOD_END] format; got {item}"
            )
        key, points, status = parts[:3]
        if key not in catalog_keys():
            raise click.BadParameter(f"Unknown bonification '{key}'; choose from {', '.join(catalog_keys())}")
        try:
            status_value = BonificationStatus(status.lower())
        except ValueError:
            raise click.BadParameter(f"Invalid bonification status: {status}")
        window = None
        if len(parts) == 5:
            window = EvaluationWindow(
                evaluation_date=_parse_date_param(parts[3]),
                period_end=_parse_date_param(parts[4]),
            )
        bonifications.append(
            template(key, reduction=parse_percent(points), status=status_value, window=window)
        )
    return bonifications


def parse_grace_strings(values: Tuple[str, ...]) -> Dict[str, int]:
    """Parse ``KEY:MONTHS`` entries into grace months per bonification."""
    grace: Dict[str, int] = {}
    for item in values:
        key, _, months = item.partition(":")
        if not months.isdigit():
            raise click.BadParameter(f"Grace must be in KEY:MONTHS format; got {item}")
        grace[key] = int(months)
    return grace


def build_loan_from_options(
    principal: str,
    rate: Optional[str],
    term: int,
    rate_type: str,
    signing_date: str,
    index: Optional[str] = None,
    spread: Optional[str] = None,
    fixed_months: int = 0,
    outstanding: Optional[str] = None,
    interest_only: int = 0,
    defer: int = 0,
    charge_day: Optional[int] = None,
    prorate: bool = False,
    arrears: bool = False,
    penalty_rate: Optional[str] = None,
    fixed_cost: Optional[str] = None,
) -> Loan:
    kind = RateType(rate_type.lower())
    if kind in (RateType.FIXED, RateType.MIXED) and rate is None:
        raise click.BadParameter("--rate is required for fixed and mixed loans")
    if kind in (RateType.VARIABLE, RateType.MIXED) and (index is None or spread is None):
        raise click.BadParameter("--index and --spread are required for variable and mixed loans")
    fixed = parse_percent(rate) if rate is not None else Decimal("0")
    return Loan(
        id="cli",
        signing_date=_parse_date_param(signing_date),
        term_months=term,
        principal=parse_amount(principal),
        outstanding_principal=parse_amount(outstanding) if outstanding else None,
        rate_type=kind,
        fixed_rate=fixed if kind is RateType.FIXED else Decimal("0"),
        index_value=parse_percent(index) if index is not None else Decimal("0"),
        spread=parse_percent(spread) if spread is not None else Decimal("0"),
        fixed_segment_months=fixed_months if kind is RateType.MIXED else 0,
        fixed_segment_rate=fixed if kind is RateType.MIXED else Decimal("0"),
        interest_only_months=interest_only,
        deferral_months=defer,
        charge_day=charge_day,
        prorate_first_period=prorate,
        billed_in_arrears=arrears,
        prepayment_penalty_rate=parse_percent(penalty_rate) if penalty_rate else Decimal("0"),
        prepayment_fixed_cost=parse_amount(fixed_cost) if fixed_cost else Decimal("0"),
    )


def loan_options(func):
    """Attach the loan configuration options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Financed principal"),
        click.option("--rate", "-r", "rate", help="Fixed rate, or fixed-segment rate for mixed loans (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option(
            "--rate-type",
            "rate_type",
            type=click.Choice([t.value for t in RateType]),
            default=RateType.FIXED.value,
            help="Rate type",
        ),
        click.option("--signing-date", "-s", "signing_date", required=True, help="Signing date (YYYY-MM-DD)"),
        click.option("--index", "index", help="Current index value (percent)"),
        click.option("--spread", "spread", help="Spread over the index (percent)"),
        click.option("--fixed-months", "fixed_months", type=int, default=0, help="Fixed segment of a mixed loan (months)"),
        click.option("--outstanding", "outstanding", help="Outstanding principal, when part is already repaid"),
        click.option("--interest-only", "interest_only", type=int, default=0, help="Interest-only months at the start"),
        click.option("--defer", "defer", type=int, default=0, help="Months until the first charge"),
        click.option("--charge-day", "charge_day", type=click.IntRange(1, 31), help="Day of month payments are charged"),
        click.option("--prorate", "prorate", is_flag=True, help="Prorate the first period on a day count"),
        click.option("--arrears", "arrears", is_flag=True, help="Loan is billed in arrears"),
        click.option("--penalty-rate", "penalty_rate", help="Prepayment commission (percent of the amount)"),
        click.option("--fixed-cost", "fixed_cost", help="Fixed cost per prepayment"),
        click.option(
            "--bonification",
            "bonification",
            multiple=True,
            help="Bonification in KEY:POINTS:STATUS[:EVALUATION_DATE:PERIOD_END] format",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _loan_and_bonifications(kwargs) -> Tuple[Loan, List[Bonification]]:
    bonification_values = kwargs.pop("bonification")
    loan = build_loan_from_options(**kwargs)
    bonifications = parse_bonification_strings(bonification_values)
    bonifications, messages = resolve_incompatibilities(bonifications)
    for message in messages:
        click.echo(message, err=True)
    ensure_valid(loan, bonifications)
    return loan, bonifications


def engine_errors(func):
    """Report engine validation errors as click errors."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LoanEngineError as exc:
            raise click.ClickException(str(exc))

    return wrapper


@click.group()
@click.option("--log-level", "log_level", help="Logging level (defaults to LOAN_ENGINE_LOG_LEVEL)")
@click.option("--json-logs", "json_logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], json_logs: bool) -> None:
    """Loan amortization and bonification engine."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level, json_logs or settings.log_json)
    ctx.obj = settings


@cli.command()
@loan_options
@click.option("--all-rows", "all_rows", is_flag=True, help="Print every period")
@click.pass_obj
@engine_errors
def schedule(settings, all_rows: bool, **kwargs) -> None:
    """Compute and print the full payment plan."""
    loan, _ = _loan_and_bonifications(kwargs)
    plan = generate_schedule(loan, generated_at=datetime.now(timezone.utc))
    print_summary(plan)
    print_schedule(plan.periods, None if all_rows else settings.max_rows)


@cli.command()
@loan_options
@click.option("--as-of", "as_of", help="Evaluation date (YYYY-MM-DD); defaults to today")
@engine_errors
def bonifications(as_of: Optional[str], **kwargs) -> None:
    """Show bonification savings, status and due alerts."""
    loan, bonifs = _loan_and_bonifications(kwargs)
    as_of_date = _parse_date_param(as_of) if as_of else date.today()
    print_savings(compute_bonification_savings(loan, bonifs, as_of_date))
    print_bonification_report(evaluate_bonifications(loan, bonifs, as_of_date))


@cli.command(name="simulate")
@loan_options
@click.option("--amount", "-a", "amount", required=True, help="Prepayment amount")
@click.option("--date", "-d", "prepayment_date", required=True, help="Prepayment date (YYYY-MM-DD)")
@click.option(
    "--mode",
    "mode",
    type=click.Choice([m.value for m in SimulationMode]),
    default=SimulationMode.REDUCE_TERM.value,
    help="Shorten the loan or lower the payment",
)
@engine_errors
def simulate_command(amount: str, prepayment_date: str, mode: str, **kwargs) -> None:
    """Simulate a partial prepayment."""
    loan, _ = _loan_and_bonifications(kwargs)
    prepayment_amount = parse_amount(amount)
    when = _parse_date_param(prepayment_date)
    validate_prepayment(loan, prepayment_amount, when)
    print_simulation(simulate(loan, prepayment_amount, when, SimulationMode(mode)))


@cli.command()
@loan_options
@click.option("--grace", "grace", multiple=True, help="Grace period of a bonification in KEY:MONTHS format")
@click.option("--as-of", "as_of", help="Date the next annual review is counted from (YYYY-MM-DD)")
@engine_errors
def intent(grace: Tuple[str, ...], as_of: Optional[str], **kwargs) -> None:
    """Show the starting rate once the given bonifications apply."""
    loan, bonifs = _loan_and_bonifications(kwargs)
    grace_months = parse_grace_strings(grace)
    unknown = set(grace_months) - {b.id for b in bonifs}
    if unknown:
        raise click.BadParameter(f"Grace given for bonifications not applied: {', '.join(sorted(unknown))}")
    bonifs = [replace(b, grace_months=grace_months.get(b.id, b.grace_months)) for b in bonifs]
    as_of_date = _parse_date_param(as_of) if as_of else None
    print_intent(apply_intent(loan, bonifs, as_of_date))


if __name__ == "__main__":
    cli()
