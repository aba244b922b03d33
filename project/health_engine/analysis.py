# health_engine/analysis.py
# ──────────────────────────────────────────────────────────────────────────────
# Health-check pipeline
# ──────────────────────────────────────────────────────────────────────────────
#
#  upload (simulated JPK)  →  benchmark lookup  →  metrics  →  persist
#                          →  recommendations  →  HealthCheckResult
#
# The only I/O here is through the RecordStore passed in by the caller, and
# the identity comes from an explicit SessionContext. build_health_check()
# is the pure part and is what the PDF export and the dashboard consume.
# ──────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import numpy as np

from health_engine.benchmark import require_benchmark
from health_engine.constants import normalize_industry
from health_engine.generator import simulate_jpk_parsing
from health_engine.metrics import calculate_metrics
from health_engine.models import Benchmark, FinancialReport, HealthCheckResult
from health_engine.recommendations import generate_recommendations
from health_engine.session import SessionContext
from health_engine.store import RecordStore

_logger = logging.getLogger(__name__)


def build_health_check(
    report: FinancialReport,
    benchmark: Optional[Benchmark],
    company_name: Optional[str] = None,
) -> HealthCheckResult:
    """
    Run metrics and recommendations for one report.

    Raises:
        InvalidReportError, UndefinedMetricError: From calculate_metrics().
        MissingBenchmarkError: If benchmark is None.
    """
    benchmark = require_benchmark(benchmark)
    metrics = calculate_metrics(report)
    return HealthCheckResult(
        report=report,
        metrics=metrics,
        benchmark=benchmark,
        recommendations=generate_recommendations(metrics, benchmark),
        company_name=company_name,
    )


def run_health_check(
    store: RecordStore,
    session: SessionContext,
    industry: str,
    company_name: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
    as_of: Optional[date] = None,
) -> HealthCheckResult:
    """
    Simulate a JPK upload for the signed-in user and analyse it.

    The benchmark is looked up and the metrics computed before anything is
    written, so a missing benchmark or an unusable report leaves the store
    untouched. The industry tag is normalized once and the same key drives
    both generation and the benchmark lookup.
    """
    industry = normalize_industry(industry)
    report = simulate_jpk_parsing(industry, rng=rng, as_of=as_of)
    benchmark = require_benchmark(store.get_benchmark(industry), industry)
    result = build_health_check(report, benchmark, company_name)

    store.insert_report(session.user_id, report)
    _logger.info(
        "Health check for user %s (%s, %s): %d warning(s), %d strength(s)",
        session.user_id, industry, report.period,
        len(result.warnings), len(result.strengths),
    )
    return result


def load_latest_health_check(
    store: RecordStore,
    session: SessionContext,
    industry: str,
    company_name: Optional[str] = None,
) -> Optional[HealthCheckResult]:
    """Rebuild the analysis of the user's newest stored report, or None if there is none."""
    industry = normalize_industry(industry)
    reports = store.list_reports(session.user_id, limit=1)
    if not reports:
        return None
    benchmark = require_benchmark(store.get_benchmark(industry), industry)
    return build_health_check(reports[0], benchmark, company_name)
