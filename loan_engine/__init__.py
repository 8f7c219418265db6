"""Loan amortization and bonification engine."""

from .bonifications import evaluate_bonifications
from .catalog import apply_intent
from .engine import generate_schedule
from .rates import compute_bonification_savings, resolve_base_rate, resolve_bonified_rate
from .simulator import apply_prepayment, simulate

__all__ = [
    "apply_intent",
    "apply_prepayment",
    "compute_bonification_savings",
    "evaluate_bonifications",
    "generate_schedule",
    "resolve_base_rate",
    "resolve_bonified_rate",
    "simulate",
]
