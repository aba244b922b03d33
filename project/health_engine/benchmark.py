# benchmark.py
"""
Benchmark comparison.

metric_status() is the only place a metric is classified against its
industry average. Dashboard cards, gauges, the benchmark chart and the
PDF table all go through it (directly or via compare_to_benchmark()).
"""

import logging
from typing import List, Optional

from health_engine.constants import (
    BEST_IN_CLASS_MULTIPLIERS,
    GAUGE_MAX,
    METRIC_DEFINITIONS,
    NEUTRAL_BAND,
    STATUS_NEGATIVE,
    STATUS_NEUTRAL,
    STATUS_POSITIVE,
)
from health_engine.errors import MissingBenchmarkError
from health_engine.models import Benchmark, MetricComparison, ParsedMetrics

_logger = logging.getLogger(__name__)


def metric_status(value: float, benchmark_value: float, inverted: bool = False) -> str:
    """
    Classify a metric as 'positive', 'negative' or 'neutral'.

    A value within 10% of the benchmark magnitude is neutral; a value equal
    to the benchmark is always neutral, including a zero benchmark. Outside
    the band, higher is better unless ``inverted`` (lower is better).
    """
    diff = value - benchmark_value
    threshold = abs(benchmark_value) * NEUTRAL_BAND

    if diff == 0 or abs(diff) < threshold:
        return STATUS_NEUTRAL
    if inverted:
        return STATUS_POSITIVE if diff < 0 else STATUS_NEGATIVE
    return STATUS_POSITIVE if diff > 0 else STATUS_NEGATIVE


def require_benchmark(benchmark: Optional[Benchmark], industry: Optional[str] = None) -> Benchmark:
    """Return the benchmark or raise MissingBenchmarkError when it is absent."""
    if benchmark is None:
        raise MissingBenchmarkError(industry)
    return benchmark


def compare_metric(metric: str, metrics: ParsedMetrics, benchmark: Benchmark) -> MetricComparison:
    benchmark_attr, inverted, label = METRIC_DEFINITIONS[metric]
    value = getattr(metrics, metric)
    benchmark_value = getattr(benchmark, benchmark_attr)
    diff = value - benchmark_value

    if inverted:
        trend = "up" if value < benchmark_value else "down"
    else:
        trend = "up" if value > benchmark_value else "down"

    return MetricComparison(
        metric=metric,
        label=label,
        value=value,
        benchmark_value=benchmark_value,
        difference=diff,
        inverted=inverted,
        status=metric_status(value, benchmark_value, inverted),
        best_in_class=benchmark_value * BEST_IN_CLASS_MULTIPLIERS[metric],
        trend=trend,
        gauge_max=GAUGE_MAX[metric],
    )


def compare_to_benchmark(metrics: ParsedMetrics, benchmark: Optional[Benchmark]) -> List[MetricComparison]:
    """
    Pair every metric with its industry average.

    Order is gross margin, efficiency, admin burden, cash cycle, the order
    used by the dashboard cards and the PDF comparison table.

    Raises:
        MissingBenchmarkError: If benchmark is None.
    """
    benchmark = require_benchmark(benchmark)
    comparisons = [compare_metric(m, metrics, benchmark) for m in METRIC_DEFINITIONS]
    _logger.debug(
        "Benchmark comparison for %s: %s",
        benchmark.industry_type,
        {c.metric: c.status for c in comparisons},
    )
    return comparisons
