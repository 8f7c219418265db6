"""Pytest fixtures for testing"""

from datetime import date
from decimal import Decimal

import pytest

from loan_engine.data_models import (
    AlarmServiceRule,
    Bonification,
    BonificationStatus,
    HomeInsuranceRule,
    Loan,
    PayrollDepositRule,
    RateType,
)


def make_loan(**overrides) -> Loan:
    """Fixed-rate loan with sensible defaults; any field can be overridden."""
    fields = dict(
        id="test",
        signing_date=date(2024, 8, 10),
        term_months=12,
        principal=Decimal("120000"),
        rate_type=RateType.FIXED,
        fixed_rate=Decimal("0.036"),
        charge_day=10,
    )
    fields.update(overrides)
    return Loan(**fields)


@pytest.fixture
def fixed_loan() -> Loan:
    return make_loan()


@pytest.fixture
def mortgage() -> Loan:
    """100k at 3.5 % over 25 years, evaluated on its signing date"""
    return make_loan(
        id="mortgage",
        signing_date=date(2024, 1, 1),
        term_months=300,
        principal=Decimal("100000"),
        fixed_rate=Decimal("0.035"),
    )


@pytest.fixture
def bonification_set() -> list:
    """Payroll and home insurance met, alarm lost: bonified rate 3.0 %"""
    return [
        Bonification(
            id="payroll",
            name="Payroll",
            reduction=Decimal("0.003"),
            status=BonificationStatus.MET,
            rule=PayrollDepositRule(minimum_monthly=Decimal("1200"), lookback_months=6),
        ),
        Bonification(
            id="home",
            name="Home insurance",
            reduction=Decimal("0.002"),
            status=BonificationStatus.MET,
            rule=HomeInsuranceRule(),
        ),
        Bonification(
            id="alarm",
            name="Alarm",
            reduction=Decimal("0.001"),
            status=BonificationStatus.LOST,
            rule=AlarmServiceRule(),
        ),
    ]
