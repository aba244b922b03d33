# recommendations.py
# ------------------------------------------------------------------
# Rule-based "AI" recommendations.
#
# Four comparisons run in a fixed order (gross margin, admin burden,
# efficiency, cash cycle). Each can add at most one item. If none of the
# items is a warning, a single general "info" item is appended. The
# cutoffs come from constants.RECOMMENDATION_THRESHOLDS and are strict.
# ------------------------------------------------------------------

import logging
from typing import List, Optional

from health_engine.benchmark import require_benchmark
from health_engine.constants import RECOMMENDATION_THRESHOLDS
from health_engine.models import AIRecommendation, Benchmark, ParsedMetrics

_logger = logging.getLogger(__name__)

# metric -> ((warning title, description), (success title, description))
_MESSAGES = {
    "gross_margin": (
        ("Margin below market average",
         "Your margin is below the market average. Review direct costs and "
         "the purchase prices of materials."),
        ("Excellent margin!",
         "Your margin is above the industry average. Keep your current "
         "pricing strategy."),
    ),
    "admin_burden": (
        ("High administrative costs",
         "Administrative costs exceed industry standards. Consider automating "
         "back-office processes or adopting a TDABC model."),
        ("Efficient administration",
         "Your administrative costs are below the industry average, a good "
         "sign of operational efficiency."),
    ),
    "efficiency": (
        ("Low labor efficiency",
         "Revenue per unit of payroll is below the average. Consider process "
         "optimization or a review of the staffing structure."),
        ("High team productivity",
         "Your team generates more revenue per unit of payroll than the "
         "competition."),
    ),
    "cash_cycle": (
        ("Extended cash conversion cycle",
         "Your cash conversion cycle is longer than the average. Consider "
         "renegotiating supplier terms or tightening receivables collection."),
        ("Optimized cash flow",
         "Your cash conversion cycle is shorter than the industry average, "
         "which supports liquidity."),
    ),
}

GENERAL_RECOMMENDATION = (
    "General financial health",
    "Your financial ratios are in line with industry norms. Keep monitoring "
    "and look for further optimization opportunities.",
)


def _recommend(metric: str, diff: float, warn: bool, succeed: bool) -> Optional[AIRecommendation]:
    warning_msg, success_msg = _MESSAGES[metric]
    if warn:
        return AIRecommendation("warning", warning_msg[0], warning_msg[1], metric, diff)
    if succeed:
        return AIRecommendation("success", success_msg[0], success_msg[1], metric, diff)
    return None


def generate_recommendations(metrics: ParsedMetrics, benchmark: Optional[Benchmark]) -> List[AIRecommendation]:
    """
    Turn a metrics/benchmark pair into an ordered list of insights.

    Raises:
        MissingBenchmarkError: If benchmark is None.
    """
    benchmark = require_benchmark(benchmark)

    margin_warn, margin_ok = RECOMMENDATION_THRESHOLDS["gross_margin"]
    admin_warn, admin_ok = RECOMMENDATION_THRESHOLDS["admin_burden"]
    eff_warn, eff_ok = RECOMMENDATION_THRESHOLDS["efficiency"]
    cycle_warn, cycle_ok = RECOMMENDATION_THRESHOLDS["cash_cycle"]

    margin_diff = metrics.gross_margin - benchmark.avg_margin
    admin_diff = metrics.admin_burden - benchmark.avg_admin_burden
    eff_diff = metrics.efficiency - benchmark.avg_efficiency
    cycle_diff = metrics.cash_cycle - benchmark.avg_cash_cycle

    candidates = [
        _recommend("gross_margin", margin_diff, margin_diff < margin_warn, margin_diff > margin_ok),
        _recommend("admin_burden", admin_diff, admin_diff > admin_warn, admin_diff < admin_ok),
        _recommend("efficiency", eff_diff, eff_diff < eff_warn, eff_diff > eff_ok),
        _recommend("cash_cycle", cycle_diff, cycle_diff > cycle_warn, cycle_diff < cycle_ok),
    ]
    recommendations = [rec for rec in candidates if rec is not None]

    if not any(rec.type == "warning" for rec in recommendations):
        title, description = GENERAL_RECOMMENDATION
        recommendations.append(AIRecommendation("info", title, description, "general", 0))

    _logger.debug(
        "Generated %d recommendation(s) for %s: %s",
        len(recommendations),
        benchmark.industry_type,
        [(r.type, r.metric) for r in recommendations],
    )
    return recommendations
