# tests/test_benchmark.py
# -----------------------------------------------------------------------
# Unit tests for health_engine/benchmark.py
# -----------------------------------------------------------------------

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from health_engine.benchmark import compare_metric, compare_to_benchmark, metric_status
from health_engine.constants import STATUS_NEGATIVE, STATUS_NEUTRAL, STATUS_POSITIVE
from health_engine.errors import HealthCheckError, InvalidBenchmarkError, MissingBenchmarkError
from health_engine.models import Benchmark, ParsedMetrics

BENCH = Benchmark(
    industry_type="manufacturing",
    industry_name="Manufacturing",
    avg_margin=25.0,
    avg_admin_burden=10.0,
    avg_efficiency=4.5,
    avg_cash_cycle=60.0,
)
METRICS = ParsedMetrics(gross_margin=20.0, admin_burden=12.0, efficiency=4.0, cash_cycle=34)


# ═══════════════════════════════════════════════════════════════════════
# metric_status
# ═══════════════════════════════════════════════════════════════════════

class TestMetricStatus:

    def test_equal_value_is_neutral(self):
        assert metric_status(25.0, 25.0) == STATUS_NEUTRAL
        assert metric_status(60, 60, inverted=True) == STATUS_NEUTRAL

    def test_zero_benchmark_equal_value_is_neutral(self):
        assert metric_status(0, 0) == STATUS_NEUTRAL

    def test_zero_benchmark_nonzero_value(self):
        assert metric_status(1, 0) == STATUS_POSITIVE
        assert metric_status(1, 0, inverted=True) == STATUS_NEGATIVE

    def test_within_band_is_neutral(self):
        # 10% of 25 is 2.5
        assert metric_status(27.4, 25.0) == STATUS_NEUTRAL
        assert metric_status(22.6, 25.0) == STATUS_NEUTRAL

    def test_band_edge_is_not_neutral(self):
        assert metric_status(27.5, 25.0) == STATUS_POSITIVE

    def test_higher_is_better(self):
        assert metric_status(30.0, 25.0) == STATUS_POSITIVE
        assert metric_status(20.0, 25.0) == STATUS_NEGATIVE

    def test_inverted_polarity(self):
        assert metric_status(34, 60, inverted=True) == STATUS_POSITIVE
        assert metric_status(80, 60, inverted=True) == STATUS_NEGATIVE

    def test_negative_benchmark_uses_magnitude(self):
        assert metric_status(-10.5, -10.0) == STATUS_NEUTRAL


# ═══════════════════════════════════════════════════════════════════════
# compare_metric / compare_to_benchmark
# ═══════════════════════════════════════════════════════════════════════

class TestCompareToBenchmark:

    def test_order(self):
        comps = compare_to_benchmark(METRICS, BENCH)
        assert [c.metric for c in comps] == ["gross_margin", "efficiency", "admin_burden", "cash_cycle"]

    def test_worked_example_statuses(self):
        statuses = {c.metric: c.status for c in compare_to_benchmark(METRICS, BENCH)}
        assert statuses == {
            "gross_margin": STATUS_NEGATIVE,
            "efficiency": STATUS_NEGATIVE,
            "admin_burden": STATUS_NEGATIVE,
            "cash_cycle": STATUS_POSITIVE,
        }

    def test_difference_and_trend(self):
        c = compare_metric("cash_cycle", METRICS, BENCH)
        assert c.difference == pytest.approx(-26.0)
        assert c.trend == "up"
        assert c.inverted is True

        m = compare_metric("gross_margin", METRICS, BENCH)
        assert m.difference == pytest.approx(-5.0)
        assert m.trend == "down"

    def test_best_in_class_and_gauge(self):
        c = compare_metric("gross_margin", METRICS, BENCH)
        assert c.best_in_class == pytest.approx(31.25)
        assert c.gauge_max == 50
        assert compare_metric("cash_cycle", METRICS, BENCH).best_in_class == pytest.approx(42.0)

    def test_labels(self):
        assert compare_metric("efficiency", METRICS, BENCH).label == "Employee Efficiency"

    def test_missing_benchmark(self):
        with pytest.raises(MissingBenchmarkError):
            compare_to_benchmark(METRICS, None)


# ═══════════════════════════════════════════════════════════════════════
# Benchmark.from_row
# ═══════════════════════════════════════════════════════════════════════

class TestBenchmarkFromRow:

    ROW = {"industry_type": "it_services", "industry_name": "IT Services",
           "avg_margin": "45.00", "avg_admin_burden": "8.00",
           "avg_efficiency": "2.80", "avg_cash_cycle": 30}

    def test_numeric_strings(self):
        b = Benchmark.from_row(self.ROW)
        assert b.avg_margin == pytest.approx(45.0)
        assert b.avg_cash_cycle == pytest.approx(30.0)

    def test_non_numeric_column(self):
        with pytest.raises(InvalidBenchmarkError) as exc_info:
            Benchmark.from_row({**self.ROW, "avg_efficiency": "n/a"})
        assert exc_info.value.column == "avg_efficiency"
        assert isinstance(exc_info.value, HealthCheckError)
        assert isinstance(exc_info.value, ValueError)

    def test_missing_column(self):
        row = {k: v for k, v in self.ROW.items() if k != "avg_cash_cycle"}
        with pytest.raises(InvalidBenchmarkError) as exc_info:
            Benchmark.from_row(row)
        assert exc_info.value.column == "avg_cash_cycle"

    def test_infinite_value(self):
        with pytest.raises(InvalidBenchmarkError, match="not finite"):
            Benchmark.from_row({**self.ROW, "avg_margin": "inf"})
