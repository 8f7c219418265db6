"""Data models for the loan engine.

This module defines the dataclasses representing the entities used by the
engine: the loan configuration, the bonifications (conditional rate
discounts) attached to it, and the derived structures the engine returns
(payment plans, bonification reports and prepayment simulations). Inputs are
frozen so that no computation can change them; outputs are plain dataclasses
that are easy to inspect and serialize.

All amounts and rates are ``Decimal``. Rates are annual nominal fractions
(``Decimal("0.032")`` is 3.2 %) and bonification reductions use the same
unit (``Decimal("0.003")`` is 0.30 percentage points).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union


class RateType(Enum):
    FIXED = "fixed"
    VARIABLE = "variable"
    MIXED = "mixed"


class BonificationStatus(Enum):
    MET = "met"
    AT_RISK = "at_risk"
    LOST = "lost"
    PENDING = "pending"


class SimulationMode(Enum):
    """How a partial prepayment is absorbed.

    ``REDUCE_TERM`` keeps the monthly payment and shortens the loan;
    ``REDUCE_PAYMENT`` keeps the end date and lowers the monthly payment.
    """

    REDUCE_TERM = "reduce_term"
    REDUCE_PAYMENT = "reduce_payment"


class NextChangeKind(Enum):
    PROMOTION_END = "promotion_end"
    ANNUAL_REVIEW = "annual_review"


@dataclass(frozen=True)
class Loan:
    """Configuration of a loan.

    Attributes
    ----------
    principal: Decimal
        The original financed principal. Payment plans always start from it.
    outstanding_principal: Optional[Decimal]
        The live balance at the evaluation date. Savings, compliance and
        prepayment projections use it; ``None`` means nothing has been repaid
        yet and the original principal is used.
    deferral_months: int
        When positive, the first charge falls this many months after signing
        instead of one month after.
    charge_day: Optional[int]
        Day of month on which payments are charged. ``None`` keeps the
        signing day.
    """

    id: str
    signing_date: date
    term_months: int
    principal: Decimal
    rate_type: RateType
    outstanding_principal: Optional[Decimal] = None
    interest_only_months: int = 0

    # FIXED
    fixed_rate: Decimal = Decimal("0")
    # VARIABLE, and MIXED once the fixed segment is over
    index_value: Decimal = Decimal("0")
    spread: Decimal = Decimal("0")
    # MIXED
    fixed_segment_months: int = 0
    fixed_segment_rate: Decimal = Decimal("0")

    deferral_months: int = 0
    charge_day: Optional[int] = None
    prorate_first_period: bool = False
    billed_in_arrears: bool = False

    # fraction of the prepaid amount, plus a flat cost per prepayment
    prepayment_penalty_rate: Decimal = Decimal("0")
    prepayment_fixed_cost: Decimal = Decimal("0")

    name: str = ""

    @property
    def live_principal(self) -> Decimal:
        if self.outstanding_principal is None:
            return self.principal
        return self.outstanding_principal


@dataclass(frozen=True)
class PayrollDepositRule:
    minimum_monthly: Decimal
    lookback_months: int


@dataclass(frozen=True)
class PensionPlanRule:
    pass


@dataclass(frozen=True)
class HomeInsuranceRule:
    pass


@dataclass(frozen=True)
class LifeInsuranceRule:
    pass


@dataclass(frozen=True)
class CardUsageRule:
    """Card usage requirement; either threshold satisfies it."""

    min_transactions_per_month: Optional[int] = None
    min_annual_spend: Optional[Decimal] = None
    card_kind: str = "credit"  # "credit" or "debit"


@dataclass(frozen=True)
class AlarmServiceRule:
    pass


@dataclass(frozen=True)
class OtherRule:
    description: str = ""


BonificationRule = Union[
    PayrollDepositRule,
    PensionPlanRule,
    HomeInsuranceRule,
    LifeInsuranceRule,
    CardUsageRule,
    AlarmServiceRule,
    OtherRule,
]


@dataclass(frozen=True)
class EvaluationWindow:
    """The compliance window of a bonification.

    ``evaluation_date`` is when the bank checks the condition and
    ``period_end`` is when a lost bonification starts to affect the rate.
    """

    period_end: date
    evaluation_date: date
    progress: Optional[str] = None
    missing: Optional[str] = None


@dataclass(frozen=True)
class Bonification:
    id: str
    name: str
    reduction: Decimal
    status: BonificationStatus
    rule: BonificationRule
    window: Optional[EvaluationWindow] = None
    # Months after signing during which the discount applies unverified
    grace_months: int = 0


@dataclass
class PaymentPeriod:
    """An entry in the payment plan.

    ``accrual_days`` is only filled in for the prorated first period, where
    interest is computed on a day count instead of a full month.
    """

    period: int
    accrual_start: date
    accrual_end: date
    charge_date: date
    payment: Decimal
    interest: Decimal
    principal_portion: Decimal
    ending_principal: Decimal
    is_prorated: bool = False
    is_interest_only: bool = False
    accrual_days: Optional[int] = None


@dataclass
class ScheduleSummary:
    total_interest: Decimal
    period_count: int
    final_charge_date: Optional[date]


@dataclass
class PaymentPlan:
    loan_id: str
    generated_at: Optional[datetime]
    periods: List[PaymentPeriod]
    summary: ScheduleSummary


@dataclass
class BonificationSaving:
    bonification_id: str
    name: str
    reduction: Decimal
    monthly_savings: Decimal
    annual_savings: Decimal


@dataclass
class BonificationSavings:
    base_rate: Decimal
    bonified_rate: Decimal
    base_payment: Decimal
    bonified_payment: Decimal
    monthly_savings: Decimal
    annual_savings: Decimal
    breakdown: List[BonificationSaving] = field(default_factory=list)


@dataclass
class LossImpact:
    """Extra cost the borrower faces if a bonification stops applying."""

    monthly: Decimal
    annual: Decimal


@dataclass
class AlertDates:
    evaluation_date: date
    application_date: date
    days_until_evaluation: int


@dataclass
class BonificationStatusEntry:
    bonification_id: str
    name: str
    status: BonificationStatus
    impact: LossImpact
    alert_dates: Optional[AlertDates] = None
    progress: Optional[str] = None
    missing: Optional[str] = None


@dataclass
class BonificationAlert:
    bonification_id: str
    label: str  # "T-45", "T-21", "T-7" or "T-2"
    days_until_evaluation: int
    message: str
    impact: LossImpact
    action_required: str


@dataclass
class BonificationReport:
    statuses: List[BonificationStatusEntry] = field(default_factory=list)
    alerts: List[BonificationAlert] = field(default_factory=list)


@dataclass
class AmortizationSimulation:
    """Outcome of a one-off partial prepayment.

    ``new_payment`` equals ``previous_payment`` in ``REDUCE_TERM`` mode and
    ``new_term_months`` equals the remaining months in ``REDUCE_PAYMENT``
    mode. ``break_even_months`` is only set for ``REDUCE_PAYMENT`` when the
    prepayment lowers the payment.
    """

    mode: SimulationMode
    prepayment_amount: Decimal
    prepayment_date: date
    penalty: Decimal
    rate: Decimal
    previous_principal: Decimal
    new_principal: Decimal
    remaining_months: int
    previous_payment: Decimal
    new_payment: Decimal
    new_term_months: int
    new_end_date: date
    interest_saved: Decimal
    break_even_months: Optional[int] = None


@dataclass
class NextChange:
    """The next date on which the applicable rate is expected to change."""

    effective_date: date
    kind: NextChangeKind
    description: str


@dataclass
class IntentResult:
    """Rate a new loan starts with once its selected bonifications apply.

    Attributes
    ----------
    applied: List[Bonification]
        Selected bonifications left after resolving incompatibilities.
    in_grace: List[str]
        Ids of the applied bonifications that start in a grace period.
    requested_reduction: Decimal
        Sum of the applied reductions before the cap.
    applied_reduction: Decimal
        Reduction actually granted, capped at ``MAX_TOTAL_REDUCTION``.
    rate: Decimal
        Resulting annual rate, never below the floor of its rate type.
    spread: Optional[Decimal]
        Resulting spread over the index, for variable loans only.
    next_change: Optional[NextChange]
        End of the longest grace period or, without grace, the next annual
        review of a variable or mixed loan.
    messages: List[str]
        Human-readable notes on dropped cards and capped reductions.
    """

    applied: List[Bonification]
    in_grace: List[str]
    requested_reduction: Decimal
    applied_reduction: Decimal
    rate: Decimal
    spread: Optional[Decimal] = None
    next_change: Optional[NextChange] = None
    messages: List[str] = field(default_factory=list)
