# generator.py
# ------------------------------------------------------------------
# Synthetic JPK_KR ingestion.
#
# No ledger file is actually parsed: a plausible FinancialReport is drawn
# from the industry's profile in constants.INDUSTRY_PROFILES. The
# module-level numpy Generator is the process-wide random source; tests
# and callers that need reproducible output pass their own seeded one.
# ------------------------------------------------------------------

import logging
from datetime import date
from typing import Optional

import numpy as np

from health_engine.constants import (
    DAYS_IN_YEAR,
    INVENTORY_COST_FACTOR,
    INVENTORY_DAYS_SHARE,
    PAYABLE_COST_FACTOR,
    PAYABLE_DAYS_SHARE,
    RECEIVABLE_DAYS_SHARE,
    get_industry_profile,
)
from health_engine.metrics import round_half_up
from health_engine.models import FinancialReport

_logger = logging.getLogger(__name__)

_RNG = np.random.default_rng()


def _random_in_range(rng: np.random.Generator, bounds) -> float:
    lo, hi = bounds
    return rng.random() * (hi - lo) + lo


def _random_variance(rng: np.random.Generator, base: float, variance: float) -> float:
    return base + (rng.random() - 0.5) * 2 * variance


def current_period(as_of: Optional[date] = None) -> str:
    """Year-month string with a zero-padded month, e.g. '2024-03'."""
    as_of = as_of or date.today()
    return f"{as_of.year}-{as_of.month:02d}"


def simulate_jpk_parsing(
    industry: str,
    rng: Optional[np.random.Generator] = None,
    as_of: Optional[date] = None,
) -> FinancialReport:
    """
    Produce a FinancialReport with figures typical for an industry.

    Args:
        industry: One of constants.INDUSTRIES.
        rng:      Optional numpy Generator (defaults to the module source).
        as_of:    Date used for the reporting period (defaults to today).

    Raises:
        UnknownIndustryError: If the industry is not supported.
    """
    profile = get_industry_profile(industry)
    rng = rng if rng is not None else _RNG

    revenue = round_half_up(_random_variance(rng, profile["revenue_base"], profile["revenue_variance"]))

    margin_pct = _random_in_range(rng, profile["margin_range"])
    gross_profit = round_half_up(revenue * (margin_pct / 100))

    admin_pct = _random_in_range(rng, profile["admin_range"])
    admin_costs = round_half_up(revenue * (admin_pct / 100))

    efficiency = _random_in_range(rng, profile["efficiency_range"])
    payroll_costs = round_half_up(revenue / efficiency)

    cash_cycle = round_half_up(_random_in_range(rng, profile["cash_cycle_range"]))
    daily_revenue = revenue / DAYS_IN_YEAR

    inventory_days = cash_cycle * INVENTORY_DAYS_SHARE
    inventory_value = round_half_up(daily_revenue * inventory_days * INVENTORY_COST_FACTOR)

    receivable_days = cash_cycle * RECEIVABLE_DAYS_SHARE
    accounts_receivable = round_half_up(daily_revenue * receivable_days)

    payable_days = cash_cycle * PAYABLE_DAYS_SHARE
    accounts_payable = round_half_up(daily_revenue * payable_days * PAYABLE_COST_FACTOR)

    report = FinancialReport(
        period=current_period(as_of),
        revenue=revenue,
        gross_profit=gross_profit,
        admin_costs=admin_costs,
        payroll_costs=payroll_costs,
        inventory_value=inventory_value,
        accounts_receivable=accounts_receivable,
        accounts_payable=accounts_payable,
    )
    _logger.debug("Simulated %s report for %s: revenue=%s", industry, report.period, revenue)
    return report
