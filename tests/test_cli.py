"""Tests for the command-line interface"""

from decimal import Decimal

import click
import pytest
from click.testing import CliRunner

from loan_engine.data_models import BonificationStatus, RateType
from loan_engine.main import (
    build_loan_from_options,
    cli,
    parse_amount,
    parse_bonification_strings,
    parse_grace_strings,
    parse_percent,
)

LOAN_ARGS = ["-p", "120k", "-r", "3.6", "-t", "12", "-s", "2024-08-10", "--charge-day", "10"]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_parse_amount_suffixes():
    assert parse_amount("150k") == Decimal("150000")
    assert parse_amount("1.2m") == Decimal("1200000")
    assert parse_amount("1,500") == Decimal("1500")
    with pytest.raises(click.BadParameter):
        parse_amount("lots")


def test_parse_percent():
    assert parse_percent("3.2") == Decimal("0.032")
    assert parse_percent("0.30%") == Decimal("0.003")


def test_parse_bonification_strings():
    bonifs = parse_bonification_strings(("payroll:0.30:met", "alarm:0.10:at_risk:2024-03-01:2024-04-01"))

    assert bonifs[0].id == "payroll"
    assert bonifs[0].reduction == Decimal("0.003")
    assert bonifs[0].status is BonificationStatus.MET
    assert bonifs[0].window is None
    assert bonifs[1].window.evaluation_date.isoformat() == "2024-03-01"
    with pytest.raises(click.BadParameter):
        parse_bonification_strings(("gym:0.1:met",))
    with pytest.raises(click.BadParameter):
        parse_bonification_strings(("payroll:0.1:maybe",))


def test_build_mixed_loan():
    loan = build_loan_from_options(
        "100k", "2.5", 300, "mixed", "2024-01-01", index="3", spread="1", fixed_months=24
    )

    assert loan.rate_type is RateType.MIXED
    assert loan.fixed_segment_rate == Decimal("0.025")
    assert loan.fixed_rate == 0
    assert loan.index_value == Decimal("0.03")


def test_variable_loan_requires_index(runner):
    result = runner.invoke(cli, ["schedule", "-p", "100k", "-t", "12", "-s", "2024-01-01", "--rate-type", "variable"])

    assert result.exit_code != 0
    assert "--index and --spread" in result.output


def test_schedule_command(runner):
    result = runner.invoke(cli, ["schedule", *LOAN_ARGS])

    assert result.exit_code == 0, result.output
    assert "Total interest" in result.output
    assert "2024-09-10" in result.output
    assert "10196.07" in result.output


def test_schedule_command_truncates_rows(runner):
    result = runner.invoke(cli, ["schedule", "-p", "120k", "-r", "3.2", "-t", "240", "-s", "2024-01-01"])

    assert result.exit_code == 0, result.output
    assert "... 120 more rows" in result.output


def test_schedule_command_rejects_invalid_loan(runner):
    result = runner.invoke(cli, ["schedule", "-p", "120k", "-r", "3.6", "-t", "12", "-s", "2024-08-10", "--interest-only", "12"])

    assert result.exit_code != 0
    assert "interest-only months must be shorter than the term" in result.output


def test_bonifications_command(runner):
    result = runner.invoke(
        cli,
        [
            "bonifications",
            *LOAN_ARGS,
            "--bonification",
            "payroll:0.30:met:2024-09-22:2024-10-01",
            "--bonification",
            "credit_card:0.10:met",
            "--bonification",
            "debit_card:0.05:met",
            "--as-of",
            "2024-09-01",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Bonified rate      : 3.20%" in result.output
    assert "[T-21]" in result.output
    assert "dropped Debit card" in result.output


def test_simulate_command(runner):
    result = runner.invoke(
        cli,
        [
            "simulate",
            "-p",
            "100k",
            "-r",
            "3.6",
            "-t",
            "240",
            "-s",
            "2023-01-01",
            "--outstanding",
            "80000",
            "--penalty-rate",
            "1",
            "--fixed-cost",
            "50",
            "--amount",
            "10000",
            "--date",
            "2024-06-01",
            "--mode",
            "reduce_payment",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Penalty            : 150.00" in result.output
    assert "492.54 -> 430.98" in result.output
    assert "Break-even         : 3 months" in result.output


def test_simulate_command_rejects_oversized_prepayment(runner):
    result = runner.invoke(
        cli,
        ["simulate", *LOAN_ARGS, "--amount", "200k", "--date", "2025-01-01"],
    )

    assert result.exit_code != 0
    assert "Prepayment" in result.output


def test_parse_grace_strings():
    assert parse_grace_strings(("payroll:6", "alarm:12")) == {"payroll": 6, "alarm": 12}
    with pytest.raises(click.BadParameter):
        parse_grace_strings(("payroll",))


def test_intent_command(runner):
    result = runner.invoke(
        cli,
        [
            "intent",
            *LOAN_ARGS,
            "--bonification",
            "payroll:0.30:met",
            "--bonification",
            "home_insurance:0.20:pending",
            "--grace",
            "payroll:6",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Reduction applied  : 0.50 pp" in result.output
    assert "Rate               : 3.10%" in result.output
    assert "(6 months grace)" in result.output
    assert "Next change        : 2025-02-10" in result.output


def test_intent_command_rejects_grace_for_missing_bonification(runner):
    result = runner.invoke(cli, ["intent", *LOAN_ARGS, "--grace", "alarm:6"])

    assert result.exit_code != 0
    assert "alarm" in result.output
