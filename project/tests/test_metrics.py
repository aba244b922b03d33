# tests/test_metrics.py
# -----------------------------------------------------------------------
# Unit tests for health_engine/metrics.py
#
# Design principles:
#   - Every metric is tested against a happy path and its zero-denominator
#     path, which must raise UndefinedMetricError rather than return
#     NaN/Infinity.
#   - Floating-point comparisons use pytest.approx().
#   - No mocking: these are pure-function tests.
# -----------------------------------------------------------------------

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from health_engine.errors import HealthCheckError, InvalidReportError, UndefinedMetricError
from health_engine.metrics import (
    admin_burden,
    calculate_metrics,
    cash_conversion_cycle,
    days_inventory_outstanding,
    days_payable_outstanding,
    days_sales_outstanding,
    gross_margin,
    labor_efficiency,
    round_half_up,
    validate_report,
)
from health_engine.models import FinancialReport, ParsedMetrics


def _report(**overrides) -> FinancialReport:
    values = dict(
        period="2024-03",
        revenue=5_000_000,
        gross_profit=1_000_000,
        admin_costs=600_000,
        payroll_costs=1_250_000,
        inventory_value=191_780,
        accounts_receivable=410_959,
        accounts_payable=147_945,
    )
    values.update(overrides)
    return FinancialReport(**values)


# ═══════════════════════════════════════════════════════════════════════
# round_half_up
# ═══════════════════════════════════════════════════════════════════════

class TestRoundHalfUp:

    def test_ties_go_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_negative_ties_go_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_returns_int_for_zero_places(self):
        assert isinstance(round_half_up(33.99995), int)
        assert round_half_up(33.99995) == 34

    def test_two_places(self):
        assert round_half_up(12.3456, 2) == pytest.approx(12.35)
        assert round_half_up(4.0, 2) == pytest.approx(4.0)


# ═══════════════════════════════════════════════════════════════════════
# Individual ratios
# ═══════════════════════════════════════════════════════════════════════

class TestRatios:

    def test_gross_margin(self):
        assert gross_margin(5_000_000, 1_000_000) == pytest.approx(20.0)

    def test_gross_margin_zero_revenue(self):
        with pytest.raises(UndefinedMetricError) as exc_info:
            gross_margin(0, 0)
        assert exc_info.value.metric == "gross_margin"

    def test_admin_burden(self):
        assert admin_burden(5_000_000, 600_000) == pytest.approx(12.0)

    def test_admin_burden_zero_revenue(self):
        with pytest.raises(UndefinedMetricError):
            admin_burden(0, 100)

    def test_labor_efficiency(self):
        assert labor_efficiency(5_000_000, 1_250_000) == pytest.approx(4.0)

    def test_labor_efficiency_zero_payroll(self):
        with pytest.raises(UndefinedMetricError) as exc_info:
            labor_efficiency(5_000_000, 0)
        assert exc_info.value.denominator == "payroll_costs"

    def test_undefined_metric_is_zero_division_error(self):
        with pytest.raises(ZeroDivisionError):
            labor_efficiency(1, 0)

    def test_days_components(self):
        daily_rev = 5_000_000 / 365
        daily_cogs = 4_000_000 / 365
        assert days_inventory_outstanding(191_780, daily_cogs) == pytest.approx(17.499925, rel=1e-6)
        assert days_sales_outstanding(410_959, daily_rev) == pytest.approx(30.000007, rel=1e-6)
        assert days_payable_outstanding(147_945, daily_cogs) == pytest.approx(13.49998125, rel=1e-6)


# ═══════════════════════════════════════════════════════════════════════
# cash_conversion_cycle
# ═══════════════════════════════════════════════════════════════════════

class TestCashConversionCycle:

    def test_worked_example(self):
        assert cash_conversion_cycle(_report()) == 34

    def test_floored_at_zero(self):
        r = _report(inventory_value=0, accounts_receivable=0, accounts_payable=2_000_000)
        assert cash_conversion_cycle(r) == 0

    def test_zero_cogs_is_undefined(self):
        r = _report(gross_profit=5_000_000)
        with pytest.raises(UndefinedMetricError) as exc_info:
            cash_conversion_cycle(r)
        assert exc_info.value.metric == "cash_cycle"


# ═══════════════════════════════════════════════════════════════════════
# validate_report
# ═══════════════════════════════════════════════════════════════════════

class TestValidateReport:

    def test_valid_report_passes(self):
        validate_report(_report())

    def test_negative_amount(self):
        with pytest.raises(InvalidReportError) as exc_info:
            validate_report(_report(admin_costs=-1))
        assert exc_info.value.field == "admin_costs"

    def test_nan_amount(self):
        with pytest.raises(InvalidReportError) as exc_info:
            validate_report(_report(inventory_value=math.nan))
        assert exc_info.value.field == "inventory_value"

    def test_infinite_amount(self):
        with pytest.raises(InvalidReportError):
            validate_report(_report(accounts_payable=math.inf))

    def test_gross_profit_above_revenue(self):
        with pytest.raises(InvalidReportError) as exc_info:
            validate_report(_report(gross_profit=6_000_000))
        assert exc_info.value.field == "gross_profit"

    def test_invalid_report_is_value_error(self):
        with pytest.raises(ValueError):
            validate_report(_report(revenue=-5))


# ═══════════════════════════════════════════════════════════════════════
# calculate_metrics
# ═══════════════════════════════════════════════════════════════════════

class TestCalculateMetrics:

    def test_worked_example(self):
        m = calculate_metrics(_report())
        assert m == ParsedMetrics(gross_margin=20.0, admin_burden=12.0, efficiency=4.0, cash_cycle=34)

    def test_rounded_to_two_decimals(self):
        m = calculate_metrics(_report(gross_profit=1_234_567, admin_costs=333_333, payroll_costs=1_234_567))
        assert m.gross_margin == pytest.approx(24.69)
        assert m.admin_burden == pytest.approx(6.67)
        assert m.efficiency == pytest.approx(4.05)

    def test_cash_cycle_is_int(self):
        assert isinstance(calculate_metrics(_report()).cash_cycle, int)

    def test_deterministic(self):
        assert calculate_metrics(_report()) == calculate_metrics(_report())

    def test_zero_revenue_raises(self):
        with pytest.raises(UndefinedMetricError):
            calculate_metrics(_report(revenue=0, gross_profit=0))

    def test_zero_payroll_raises(self):
        with pytest.raises(UndefinedMetricError):
            calculate_metrics(_report(payroll_costs=0))

    def test_errors_share_base_class(self):
        with pytest.raises(HealthCheckError):
            calculate_metrics(_report(payroll_costs=0))
        with pytest.raises(HealthCheckError):
            calculate_metrics(_report(revenue=-1))
