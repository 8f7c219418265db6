"""Centralized configuration for the loan engine.

Business rule constants live here as module-level names so the calculation
modules never carry magic numbers. Runtime options for the command line
front end are read from the environment through ``Settings``.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# ROUNDING
# =============================================================================

# Currency amounts are kept in cents
CURRENCY_QUANTUM = Decimal("0.01")

# Annual rate fractions keep 4 decimals (0.0325 == 3.25 %)
RATE_QUANTUM = Decimal("0.0001")

# =============================================================================
# DAY COUNT
# =============================================================================

MONTHS_PER_YEAR = 12

# Prorated periods accrue on an actual/365 basis, leap years included
DAY_COUNT_BASIS = 365

# =============================================================================
# BONIFICATION ALERTS
# =============================================================================

# Days before the evaluation date on which an alert is raised
ALERT_THRESHOLDS_DAYS = (45, 21, 7, 2)

DEFAULT_MISSING_REQUIREMENT = "meet the requirements"

# Ceiling on the summed reductions granted when a loan is created (1.00 pp)
MAX_TOTAL_REDUCTION = Decimal("0.0100")

# Bonifications never take a fixed rate below 1.00 % nor a spread below 0.40 %
MIN_FIXED_RATE = Decimal("0.0100")
MIN_VARIABLE_SPREAD = Decimal("0.0040")

# =============================================================================
# DISPLAY
# =============================================================================

DATE_FORMAT_DISPLAY = "%Y-%m-%d"


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="LOAN_ENGINE_", env_file=".env", extra="ignore")

    log_level: str = "WARNING"
    log_json: bool = False

    # Limit schedule length printed to avoid flooding the terminal
    max_rows: int = 120


def get_settings() -> Settings:
    return Settings()
