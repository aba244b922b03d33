# health_engine/models.py
# ──────────────────────────────────────────────────────────────────────────────
# Domain data structures
# ──────────────────────────────────────────────────────────────────────────────
#
# Plain dataclasses only, no UI or network imports. Record-store rows use
# the snake_case column names of the financial_reports and
# industry_benchmarks tables; from_row()/to_row() translate between the two.
# ──────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from health_engine.errors import InvalidBenchmarkError, InvalidReportError

REPORT_FIELDS = (
    "revenue",
    "gross_profit",
    "admin_costs",
    "payroll_costs",
    "inventory_value",
    "accounts_receivable",
    "accounts_payable",
)


def _coerce_number(row: dict, column: str) -> float:
    """Read a numeric column that may arrive as str, int, float or Decimal."""
    value = row.get(column)
    if value is None:
        raise InvalidReportError(column, "missing value")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidReportError(column, f"not a number: {value!r}")


@dataclass(frozen=True)
class FinancialReport:
    """One posted period's raw figures for a tenant (single currency)."""
    period: str
    revenue: float
    gross_profit: float
    admin_costs: float
    payroll_costs: float
    inventory_value: float
    accounts_receivable: float
    accounts_payable: float

    @classmethod
    def from_row(cls, row: dict) -> "FinancialReport":
        values = {name: _coerce_number(row, name) for name in REPORT_FIELDS}
        return cls(period=str(row.get("period", "")), **values)

    def to_row(self) -> dict:
        return asdict(self)

    def amounts(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in REPORT_FIELDS}


@dataclass(frozen=True)
class ParsedMetrics:
    """Normalized ratios derived from one FinancialReport."""
    gross_margin: float   # %
    admin_burden: float   # %
    efficiency: float     # revenue / payroll
    cash_cycle: int       # days, floored at 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Benchmark:
    """Industry reference point. One row per industry category."""
    industry_type: str
    industry_name: str
    avg_margin: float
    avg_admin_burden: float
    avg_efficiency: float
    avg_cash_cycle: float

    @classmethod
    def from_row(cls, row: dict) -> "Benchmark":
        numbers = {}
        for column in ("avg_margin", "avg_admin_burden", "avg_efficiency", "avg_cash_cycle"):
            try:
                number = float(row[column])
            except (KeyError, TypeError, ValueError):
                raise InvalidBenchmarkError(column, f"not a usable number: {row.get(column)!r}")
            if not math.isfinite(number):
                raise InvalidBenchmarkError(column, f"not finite: {number}")
            numbers[column] = number
        return cls(
            industry_type=str(row.get("industry_type", "")),
            industry_name=str(row.get("industry_name") or row.get("industry_type", "")),
            **numbers,
        )

    def to_row(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AIRecommendation:
    """One generated insight. type is 'warning', 'success' or 'info'."""
    type: str
    title: str
    description: str
    metric: str
    difference: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MetricComparison:
    """A metric paired with its benchmark, as shown on cards, charts and the PDF."""
    metric: str
    label: str
    value: float
    benchmark_value: float
    difference: float
    inverted: bool
    status: str
    best_in_class: float
    trend: str            # "up" when the gap favours the client, else "down"
    gauge_max: float


@dataclass
class HealthCheckResult:
    """Everything the dashboard and the PDF export need for one analysis."""
    report: FinancialReport
    metrics: ParsedMetrics
    benchmark: Benchmark
    recommendations: List[AIRecommendation] = field(default_factory=list)
    company_name: Optional[str] = None

    @property
    def warnings(self) -> List[AIRecommendation]:
        return [r for r in self.recommendations if r.type == "warning"]

    @property
    def strengths(self) -> List[AIRecommendation]:
        return [r for r in self.recommendations if r.type == "success"]
