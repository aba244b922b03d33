# tests/test_history.py
# -----------------------------------------------------------------------
# Unit tests for health_engine/history.py
# -----------------------------------------------------------------------

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from health_engine.history import HISTORY_COLUMNS, build_metrics_history, period_over_period_change
from health_engine.models import FinancialReport


def _report(period, gross_profit=1_000_000, payroll_costs=1_250_000):
    return FinancialReport(
        period=period,
        revenue=5_000_000,
        gross_profit=gross_profit,
        admin_costs=600_000,
        payroll_costs=payroll_costs,
        inventory_value=191_780,
        accounts_receivable=410_959,
        accounts_payable=147_945,
    )


class TestBuildMetricsHistory:

    def test_columns_and_order(self):
        df = build_metrics_history([_report("2024-03"), _report("2024-02", gross_profit=1_250_000)])
        assert list(df.columns) == HISTORY_COLUMNS
        assert df["period"].tolist() == ["2024-03", "2024-02"]
        assert df["gross_margin"].tolist() == pytest.approx([20.0, 25.0])

    def test_undefined_rows_are_skipped(self):
        df = build_metrics_history([_report("2024-03"), _report("2024-02", payroll_costs=0)])
        assert df["period"].tolist() == ["2024-03"]

    def test_invalid_rows_are_skipped(self):
        df = build_metrics_history([_report("2024-03", gross_profit=9_000_000)])
        assert df.empty
        assert list(df.columns) == HISTORY_COLUMNS

    def test_empty(self):
        assert build_metrics_history([]).empty


class TestPeriodOverPeriodChange:

    def test_change_vs_previous_report(self):
        df = build_metrics_history([_report("2024-03", gross_profit=1_250_000), _report("2024-02")])
        change = period_over_period_change(df)
        assert change.loc[0, "period"] == "2024-03"
        assert change.loc[0, "gross_margin"] == pytest.approx(5.0)
        assert math.isnan(change.loc[1, "gross_margin"])

    def test_empty_history(self):
        assert period_over_period_change(build_metrics_history([])).empty
