# tests/test_recommendations.py
# -----------------------------------------------------------------------
# Unit tests for health_engine/recommendations.py
#
# Thresholds are strict: a difference sitting exactly on a cutoff
# produces no item.
# -----------------------------------------------------------------------

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from health_engine.errors import MissingBenchmarkError
from health_engine.models import Benchmark, ParsedMetrics
from health_engine.recommendations import GENERAL_RECOMMENDATION, generate_recommendations

BENCH = Benchmark(
    industry_type="manufacturing",
    industry_name="Manufacturing",
    avg_margin=25.0,
    avg_admin_burden=10.0,
    avg_efficiency=4.5,
    avg_cash_cycle=60.0,
)


def _metrics(gross_margin=25.0, admin_burden=10.0, efficiency=4.5, cash_cycle=60):
    return ParsedMetrics(gross_margin=gross_margin, admin_burden=admin_burden,
                         efficiency=efficiency, cash_cycle=cash_cycle)


def _summary(recs):
    return [(r.type, r.metric) for r in recs]


# ═══════════════════════════════════════════════════════════════════════
# Ordering and content
# ═══════════════════════════════════════════════════════════════════════

class TestGenerateRecommendations:

    def test_worked_example(self):
        recs = generate_recommendations(_metrics(20.0, 12.0, 4.0, 34), BENCH)
        assert _summary(recs) == [("warning", "gross_margin"), ("success", "cash_cycle")]
        assert recs[0].difference == pytest.approx(-5.0)
        assert recs[1].difference == pytest.approx(-26.0)

    def test_fixed_evaluation_order(self):
        # margin -4, admin -5, efficiency +0.2, cash +15
        recs = generate_recommendations(_metrics(21.0, 5.0, 4.7, 75), BENCH)
        assert _summary(recs) == [
            ("warning", "gross_margin"),
            ("success", "admin_burden"),
            ("warning", "cash_cycle"),
        ]
        assert [r.difference for r in recs] == pytest.approx([-4.0, -5.0, 15.0])

    def test_titles(self):
        recs = generate_recommendations(_metrics(20.0, 6.0, 4.5, 75), BENCH)
        assert recs[0].title == "Margin below market average"
        assert recs[1].title == "Efficient administration"
        assert recs[2].title == "Extended cash conversion cycle"

    def test_all_strengths_adds_info(self):
        recs = generate_recommendations(_metrics(31.0, 6.0, 6.0, 50), BENCH)
        assert _summary(recs) == [
            ("success", "gross_margin"),
            ("success", "admin_burden"),
            ("success", "efficiency"),
            ("success", "cash_cycle"),
            ("info", "general"),
        ]

    def test_at_benchmark_gives_only_info(self):
        recs = generate_recommendations(_metrics(), BENCH)
        assert len(recs) == 1
        assert recs[0].type == "info"
        assert recs[0].title == GENERAL_RECOMMENDATION[0]
        assert recs[0].difference == 0

    def test_all_warnings_no_info(self):
        recs = generate_recommendations(_metrics(20.0, 13.0, 3.5, 75), BENCH)
        assert [r.type for r in recs] == ["warning"] * 4

    def test_missing_benchmark(self):
        with pytest.raises(MissingBenchmarkError):
            generate_recommendations(_metrics(), None)


# ═══════════════════════════════════════════════════════════════════════
# Strict boundaries
# ═══════════════════════════════════════════════════════════════════════

class TestBoundaries:

    @pytest.mark.parametrize("metrics", [
        _metrics(gross_margin=22.0),     # diff -3
        _metrics(gross_margin=30.0),     # diff +5
        _metrics(admin_burden=12.0),     # diff +2
        _metrics(admin_burden=7.0),      # diff -3
        _metrics(efficiency=4.0),        # diff -0.5
        _metrics(efficiency=5.5),        # diff +1
        _metrics(cash_cycle=70),         # diff +10
        _metrics(cash_cycle=55),         # diff -5
    ])
    def test_exact_cutoff_produces_nothing(self, metrics):
        recs = generate_recommendations(metrics, BENCH)
        assert _summary(recs) == [("info", "general")]

    def test_just_past_cutoff(self):
        recs = generate_recommendations(_metrics(efficiency=3.99), BENCH)
        assert _summary(recs) == [("warning", "efficiency")]
        recs = generate_recommendations(_metrics(admin_burden=12.01), BENCH)
        assert _summary(recs) == [("warning", "admin_burden")]
