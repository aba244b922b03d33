# history.py
# ---------------------------------------------
# Metrics across a tenant's stored reports.
#
# Reports whose metrics are undefined (zero revenue, zero payroll, zero
# COGS) or invalid are skipped with a warning rather than shown as NaN.

import logging
from typing import Iterable, List

import pandas as pd

from health_engine.errors import InvalidReportError, UndefinedMetricError
from health_engine.metrics import calculate_metrics
from health_engine.models import FinancialReport

_logger = logging.getLogger(__name__)

HISTORY_COLUMNS: List[str] = [
    "period",
    "revenue",
    "gross_margin",
    "admin_burden",
    "efficiency",
    "cash_cycle",
]


def build_metrics_history(reports: Iterable[FinancialReport]) -> pd.DataFrame:
    """
    One row per report, in the order given (newest first from the store).

    Returns:
        DataFrame with HISTORY_COLUMNS; empty when no report is usable.
    """
    rows = []
    for report in reports:
        try:
            metrics = calculate_metrics(report)
        except (InvalidReportError, UndefinedMetricError) as exc:
            _logger.warning("Skipping report %s in history: %s", report.period, exc)
            continue
        rows.append({"period": report.period, "revenue": report.revenue, **metrics.to_dict()})
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def period_over_period_change(history: pd.DataFrame) -> pd.DataFrame:
    """
    Change of each metric versus the previous (older) report.

    The history is newest first, so each row is compared with the row below
    it; the oldest row has NaN changes.
    """
    if history.empty:
        return history.copy()
    numeric = history.set_index("period")[HISTORY_COLUMNS[1:]]
    return (numeric - numeric.shift(-1)).reset_index()
