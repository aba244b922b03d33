# health_engine/formatting.py
"""
Display formatters shared by the dashboard and the PDF export.
"""

import math
from typing import Optional

from health_engine.constants import REPORTING_CURRENCY

NBSP = "\u00a0"


def _is_missing(value) -> bool:
    try:
        return value is None or math.isnan(float(value)) or math.isinf(float(value))
    except (TypeError, ValueError):
        return True


def format_currency(value: Optional[float], currency: str = REPORTING_CURRENCY) -> str:
    """
    Whole-unit Polish currency formatting, e.g. 5 000 000 zł.

    Thousands are grouped with non-breaking spaces; as in the pl-PL locale,
    four-digit amounts are not grouped.
    """
    if _is_missing(value):
        return "N/A"
    amount = int(math.floor(abs(float(value)) + 0.5))
    digits = str(amount)
    if len(digits) > 4:
        groups = []
        while digits:
            groups.insert(0, digits[-3:])
            digits = digits[:-3]
        digits = NBSP.join(groups)
    sign = "-" if float(value) < 0 and amount else ""
    symbol = "zł" if currency == REPORTING_CURRENCY else currency
    return f"{sign}{digits}{NBSP}{symbol}"


def format_percent(value: Optional[float], decimal_places: int = 1) -> str:
    """Format a percentage value, e.g. 20.0%"""
    if _is_missing(value):
        return "N/A"
    return f"{float(value):.{decimal_places}f}%"


def format_multiple(value: Optional[float], decimal_places: int = 2) -> str:
    """Format a ratio as a multiple, e.g. 4.00x"""
    if _is_missing(value):
        return "N/A"
    return f"{float(value):.{decimal_places}f}x"


def format_days(value: Optional[float]) -> str:
    if _is_missing(value):
        return "N/A"
    return f"{float(value):.0f} days"


def format_difference(value: Optional[float], decimal_places: int = 1, suffix: str = " vs avg") -> str:
    """Signed deviation from the benchmark, e.g. +5.0 vs avg"""
    if _is_missing(value):
        return "N/A"
    sign = "+" if float(value) > 0 else ""
    return f"{sign}{float(value):.{decimal_places}f}{suffix}"


METRIC_FORMATTERS = {
    "gross_margin": format_percent,
    "admin_burden": format_percent,
    "efficiency":   format_multiple,
    "cash_cycle":   format_days,
}


def format_metric(metric: str, value: Optional[float]) -> str:
    return METRIC_FORMATTERS[metric](value)
