"""French (constant installment) annuity formulas.

The payment is::

    payment = P * i / (1 - (1 + i)^-n)

where ``P`` is the principal, ``i`` the monthly rate (annual rate / 12) and
``n`` the number of payments. The functions here are total: degenerate inputs
give a zero payment instead of raising.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional

from .config import MONTHS_PER_YEAR
from .utils import round_currency


def annuity_payment(principal: Decimal, annual_rate: Decimal, months: int, rounded: bool = True) -> Decimal:
    """Return the monthly installment, rounded to cents unless ``rounded`` is false.

    When the rate is zero the payment simplifies to ``P / n``. A non-positive
    principal or term yields a zero payment.
    """
    if principal <= 0 or months <= 0:
        return Decimal("0.00")
    if annual_rate == 0:
        payment = principal / Decimal(months)
    else:
        rate_per_month = annual_rate / MONTHS_PER_YEAR
        payment = principal * rate_per_month / (1 - (1 + rate_per_month) ** -months)
    return round_currency(payment) if rounded else payment


def total_interest(principal: Decimal, annual_rate: Decimal, months: int) -> Decimal:
    """Interest paid over ``months`` installments: ``payment * n - P``.

    The unrounded installment is used so that cent rounding is not multiplied
    by the number of payments.
    """
    payment = annuity_payment(principal, annual_rate, months, rounded=False)
    return round_currency(payment * months - principal) if payment else Decimal("0.00")


def term_for_payment(principal: Decimal, annual_rate: Decimal, payment: Decimal) -> Optional[int]:
    """Number of whole months needed to repay ``principal`` with ``payment``.

    Inverts the annuity formula for ``n`` and rounds up::

        n = -ln(1 - P * i / payment) / ln(1 + i)

    Returns 0 when there is nothing to repay or no payment, and ``None`` when
    the payment does not even cover one month of interest.
    """
    if principal <= 0 or payment <= 0:
        return 0
    if annual_rate == 0:
        return math.ceil(principal / payment)
    rate_per_month = annual_rate / MONTHS_PER_YEAR
    ratio = 1 - principal * rate_per_month / payment
    if ratio <= 0:
        return None
    months = -ratio.ln() / (1 + rate_per_month).ln()
    return math.ceil(months)
