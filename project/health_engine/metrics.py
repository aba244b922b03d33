# metrics.py
# ---------------------------------------------
# Core financial metric calculations.
# All functions are pure. Zero denominators raise UndefinedMetricError
# instead of leaking NaN/Infinity into comparisons and exports.

import logging
import math

from health_engine.constants import DAYS_IN_YEAR
from health_engine.errors import InvalidReportError, UndefinedMetricError
from health_engine.models import REPORT_FIELDS, FinancialReport, ParsedMetrics

_logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# Rounding
# ---------------------------------------------------------
def round_half_up(value: float, places: int = 0):
    """
    Round with ties going up (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding; reports and metrics use the
    half-up convention so stored figures match what users see elsewhere.
    Returns an int when places == 0.
    """
    scale = 10 ** places
    rounded = math.floor(value * scale + 0.5)
    if places == 0:
        return int(rounded)
    return rounded / scale


# ---------------------------------------------------------
# Division guard
# ---------------------------------------------------------
def strict_divide(numerator: float, denominator: float, metric: str, denominator_name: str) -> float:
    if denominator == 0:
        raise UndefinedMetricError(metric, denominator_name)
    return numerator / denominator


# ---------------------------------------------------------
# Validation
# ---------------------------------------------------------
def validate_report(report: FinancialReport) -> None:
    """
    Reject reports that would produce misleading ratios.

    Raises:
        InvalidReportError: On a non-finite or negative amount, or when
            gross profit exceeds revenue.
    """
    for name in REPORT_FIELDS:
        value = getattr(report, name)
        if value is None or not math.isfinite(value):
            raise InvalidReportError(name, f"expected a finite number, got {value!r}")
        if value < 0:
            raise InvalidReportError(name, f"must be non-negative, got {value}")
    if report.gross_profit > report.revenue:
        raise InvalidReportError(
            "gross_profit",
            f"gross profit {report.gross_profit} exceeds revenue {report.revenue}",
        )


# ---------------------------------------------------------
# Margins
# ---------------------------------------------------------
def gross_margin(revenue, gross_profit):
    """Gross profit as % of revenue"""
    return strict_divide(gross_profit, revenue, "gross_margin", "revenue") * 100

def admin_burden(revenue, admin_costs):
    """Administrative costs as % of revenue"""
    return strict_divide(admin_costs, revenue, "admin_burden", "revenue") * 100

# ---------------------------------------------------------
# Labor efficiency
# ---------------------------------------------------------
def labor_efficiency(revenue, payroll_costs):
    """Revenue / Payroll costs"""
    return strict_divide(revenue, payroll_costs, "efficiency", "payroll_costs")

# ---------------------------------------------------------
# Working capital days
# ---------------------------------------------------------
def days_inventory_outstanding(inventory, daily_cogs):
    """Inventory / daily COGS"""
    return strict_divide(inventory, daily_cogs, "cash_cycle", "daily COGS")

def days_sales_outstanding(accounts_receivable, daily_revenue):
    """Accounts receivable / daily revenue"""
    return strict_divide(accounts_receivable, daily_revenue, "cash_cycle", "revenue")

def days_payable_outstanding(accounts_payable, daily_cogs):
    """Accounts payable / daily COGS"""
    return strict_divide(accounts_payable, daily_cogs, "cash_cycle", "daily COGS")

def cash_conversion_cycle(report: FinancialReport) -> int:
    """DIO + DSO - DPO in whole days, floored at 0."""
    daily_revenue = report.revenue / DAYS_IN_YEAR
    daily_cogs = (report.revenue - report.gross_profit) / DAYS_IN_YEAR

    dio = days_inventory_outstanding(report.inventory_value, daily_cogs)
    dso = days_sales_outstanding(report.accounts_receivable, daily_revenue)
    dpo = days_payable_outstanding(report.accounts_payable, daily_cogs)

    return max(0, round_half_up(dio + dso - dpo))


# ---------------------------------------------------------
# Full metric set
# ---------------------------------------------------------
def calculate_metrics(report: FinancialReport) -> ParsedMetrics:
    """
    Derive the four dashboard metrics from a raw report.

    Percentages and the efficiency ratio are rounded to 2 decimals; the
    cash cycle is a whole number of days, never below 0.

    Raises:
        InvalidReportError: If the report breaks an invariant.
        UndefinedMetricError: If revenue, payroll costs or COGS is zero.
    """
    validate_report(report)

    metrics = ParsedMetrics(
        gross_margin=round_half_up(gross_margin(report.revenue, report.gross_profit), 2),
        admin_burden=round_half_up(admin_burden(report.revenue, report.admin_costs), 2),
        efficiency=round_half_up(labor_efficiency(report.revenue, report.payroll_costs), 2),
        cash_cycle=cash_conversion_cycle(report),
    )
    _logger.debug("Metrics for period %s: %s", report.period, metrics)
    return metrics
