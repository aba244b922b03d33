# constants.py
# ------------------------------------------------------------------
# Policy tables shared across health_engine modules.
#
# Generator profiles, recommendation thresholds and the comparator
# tolerance live here so the dashboard, the recommendation engine and
# the PDF export all read the same numbers.
# ------------------------------------------------------------------

from typing import Dict, Tuple

from health_engine.errors import UnknownIndustryError

PRODUCT_NAME: str = "SmartController AI"
PRODUCT_SUBTITLE: str = "Financial Health Check"
REPORTING_CURRENCY: str = "PLN"

DAYS_IN_YEAR: int = 365

INDUSTRIES: Tuple[str, ...] = ("manufacturing", "it_services", "ecommerce")


# ------------------------------------------------------------------
# Synthetic JPK profiles
# ------------------------------------------------------------------
# Ranges used by generator.simulate_jpk_parsing(). Each range is a
# (min, max) pair sampled uniformly. Revenue is base ± variance.
INDUSTRY_PROFILES: Dict[str, dict] = {
    "manufacturing": {
        "revenue_base":     5_000_000,
        "revenue_variance": 2_000_000,
        "margin_range":     (18.0, 28.0),
        "admin_range":      (8.0, 14.0),
        "efficiency_range": (3.5, 6.0),
        "cash_cycle_range": (50, 90),
    },
    "it_services": {
        "revenue_base":     3_000_000,
        "revenue_variance": 1_500_000,
        "margin_range":     (30.0, 48.0),
        "admin_range":      (14.0, 24.0),
        "efficiency_range": (1.8, 3.2),
        "cash_cycle_range": (25, 50),
    },
    "ecommerce": {
        "revenue_base":     8_000_000,
        "revenue_variance": 4_000_000,
        "margin_range":     (12.0, 25.0),
        "admin_range":      (9.0, 17.0),
        "efficiency_range": (7.0, 12.0),
        "cash_cycle_range": (15, 35),
    },
}

# Share of the sampled cash cycle attributed to each working-capital
# component. Payables offset the other two, so the shares need not sum
# to 1. The scaling factors convert revenue-based days to balances.
INVENTORY_DAYS_SHARE: float = 0.4
RECEIVABLE_DAYS_SHARE: float = 0.5
PAYABLE_DAYS_SHARE: float = 0.3
INVENTORY_COST_FACTOR: float = 0.7
PAYABLE_COST_FACTOR: float = 0.6


# ------------------------------------------------------------------
# Benchmark comparator
# ------------------------------------------------------------------
# A metric within 10% of the benchmark magnitude is "neutral".
NEUTRAL_BAND: float = 0.10

STATUS_POSITIVE: str = "positive"
STATUS_NEGATIVE: str = "negative"
STATUS_NEUTRAL: str = "neutral"

# metric -> (benchmark attribute, lower is better, display label)
METRIC_DEFINITIONS: Dict[str, Tuple[str, bool, str]] = {
    "gross_margin": ("avg_margin",       False, "Gross Margin"),
    "efficiency":   ("avg_efficiency",   False, "Employee Efficiency"),
    "admin_burden": ("avg_admin_burden", True,  "Administrative Burden"),
    "cash_cycle":   ("avg_cash_cycle",   True,  "Cash Conversion Cycle"),
}

# Multipliers applied to the industry average to draw the
# "best in class" reference on charts.
BEST_IN_CLASS_MULTIPLIERS: Dict[str, float] = {
    "gross_margin": 1.25,
    "admin_burden": 0.75,
    "efficiency":   1.3,
    "cash_cycle":   0.7,
}

# Upper bound of each dashboard gauge.
GAUGE_MAX: Dict[str, float] = {
    "gross_margin": 50,
    "efficiency":   15,
    "admin_burden": 30,
    "cash_cycle":   100,
}


# ------------------------------------------------------------------
# Recommendation thresholds
# ------------------------------------------------------------------
# metric -> (warning cutoff, success cutoff), both applied to
# diff = metric - benchmark with strict comparisons. For gross margin
# and efficiency a warning fires below the cutoff; for admin burden and
# cash cycle it fires above it. These are policy values and are
# independent of NEUTRAL_BAND.
RECOMMENDATION_THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "gross_margin": (-3.0, 5.0),
    "admin_burden": (2.0, -3.0),
    "efficiency":   (-0.5, 1.0),
    "cash_cycle":   (10.0, -5.0),
}


# ------------------------------------------------------------------
# Reference benchmarks
# ------------------------------------------------------------------
# Seed rows for the in-memory record store, in the same column layout
# as the industry_benchmarks table.
DEFAULT_BENCHMARKS: Dict[str, dict] = {
    "manufacturing": {
        "industry_type":    "manufacturing",
        "industry_name":    "Manufacturing",
        "avg_margin":       23.0,
        "avg_admin_burden": 11.0,
        "avg_efficiency":   4.5,
        "avg_cash_cycle":   65,
    },
    "it_services": {
        "industry_type":    "it_services",
        "industry_name":    "IT Services",
        "avg_margin":       38.0,
        "avg_admin_burden": 18.0,
        "avg_efficiency":   2.5,
        "avg_cash_cycle":   38,
    },
    "ecommerce": {
        "industry_type":    "ecommerce",
        "industry_name":    "E-commerce",
        "avg_margin":       18.0,
        "avg_admin_burden": 13.0,
        "avg_efficiency":   9.0,
        "avg_cash_cycle":   25,
    },
}


def normalize_industry(industry: str) -> str:
    """
    Canonical industry key ('  Manufacturing ' -> 'manufacturing').

    Raises:
        UnknownIndustryError: If the industry is not in INDUSTRIES.
    """
    key = (industry or "").strip().lower()
    if key not in INDUSTRIES:
        raise UnknownIndustryError(industry)
    return key


def get_industry_profile(industry: str) -> dict:
    """
    Return the generator profile for an industry.

    Raises:
        UnknownIndustryError: If the industry is not in INDUSTRIES.
    """
    return INDUSTRY_PROFILES[normalize_industry(industry)]
