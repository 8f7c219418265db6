"""Partial prepayment simulation.

A one-off prepayment lowers the outstanding principal and can be absorbed in
two ways: keep the installment and shorten the loan (``REDUCE_TERM``) or keep
the end date and lower the installment (``REDUCE_PAYMENT``). The projection
uses the base rate at the prepayment date, not the bonified rate, so that it
never relies on discounts the borrower could lose.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from .annuity import annuity_payment, term_for_payment, total_interest
from .data_models import AmortizationSimulation, Loan, SimulationMode
from .rates import resolve_base_rate
from .utils import add_months, months_between, round_currency

logger = logging.getLogger(__name__)


def prepayment_penalty(loan: Loan, amount: Decimal) -> Decimal:
    """Commission on the prepaid amount plus the fixed operation cost."""
    return round_currency(loan.prepayment_penalty_rate * amount + loan.prepayment_fixed_cost)


def original_end_date(loan: Loan) -> date:
    return add_months(loan.signing_date, loan.term_months)


def apply_prepayment(loan: Loan, amount: Decimal) -> Loan:
    """Return a copy of ``loan`` with ``amount`` taken off its live balance.

    The balance never goes below zero. Costs are not deducted; see
    ``prepayment_penalty``.
    """
    outstanding = round_currency(max(Decimal("0"), loan.live_principal - amount))
    logger.info("Applied prepayment of %s to loan %s, outstanding %s", amount, loan.id, outstanding)
    return replace(loan, outstanding_principal=outstanding)


def break_even_months(penalty: Decimal, monthly_saving: Decimal) -> Optional[int]:
    """Months of savings needed to recover the penalty, if there are savings."""
    if monthly_saving <= 0:
        return None
    return math.ceil(penalty / monthly_saving)


def simulate(
    loan: Loan,
    prepayment_amount: Decimal,
    prepayment_date: date,
    mode: SimulationMode,
) -> AmortizationSimulation:
    """Model a partial prepayment of ``prepayment_amount`` on ``prepayment_date``.

    The remaining term runs from the prepayment date to the contractual end
    date (signing date plus the full term).
    """
    penalty = prepayment_penalty(loan, prepayment_amount)
    previous_principal = loan.live_principal
    new_principal = previous_principal - prepayment_amount
    rate = resolve_base_rate(loan, prepayment_date)

    end_date = original_end_date(loan)
    remaining_months = months_between(prepayment_date, end_date)
    previous_payment = annuity_payment(previous_principal, rate, remaining_months)

    if mode is SimulationMode.REDUCE_PAYMENT:
        new_payment = annuity_payment(new_principal, rate, remaining_months)
        new_term = remaining_months
        new_end_date = end_date
    elif mode is SimulationMode.REDUCE_TERM:
        new_payment = previous_payment
        solved = term_for_payment(new_principal, rate, previous_payment)
        new_term = remaining_months if solved is None else solved
        new_end_date = add_months(prepayment_date, new_term)
    else:
        raise ValueError(f"Unknown simulation mode: {mode!r}")

    interest_before = total_interest(previous_principal, rate, remaining_months)
    interest_after = total_interest(new_principal, rate, new_term or remaining_months)
    interest_saved = round_currency(interest_before - interest_after)

    break_even = None
    if mode is SimulationMode.REDUCE_PAYMENT:
        break_even = break_even_months(penalty, previous_payment - new_payment)

    logger.debug(
        "Simulated %s prepayment of %s on loan %s: term %d -> %d, payment %s -> %s",
        mode.value,
        prepayment_amount,
        loan.id,
        remaining_months,
        new_term,
        previous_payment,
        new_payment,
    )
    return AmortizationSimulation(
        mode=mode,
        prepayment_amount=prepayment_amount,
        prepayment_date=prepayment_date,
        penalty=penalty,
        rate=rate,
        previous_principal=previous_principal,
        new_principal=new_principal,
        remaining_months=remaining_months,
        previous_payment=previous_payment,
        new_payment=new_payment,
        new_term_months=new_term,
        new_end_date=new_end_date,
        interest_saved=interest_saved,
        break_even_months=break_even,
    )
