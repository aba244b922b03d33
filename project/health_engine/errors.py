# errors.py
# ------------------------------------------------------------------
# Exception hierarchy for the health-check engine.
#
# Every error raised by health_engine derives from HealthCheckError so
# the UI can catch one type and show a message. Each subclass also
# derives from the closest builtin (ValueError, ZeroDivisionError,
# LookupError) so generic callers keep working.
# ------------------------------------------------------------------

from typing import Optional


class HealthCheckError(Exception):
    """Base class for all health-check failures."""


class UnknownIndustryError(HealthCheckError, ValueError):
    """Raised when an industry tag is not one of the supported categories."""
    def __init__(self, industry: str):
        self.industry = industry
        super().__init__(f"Unknown industry '{industry}'")


class InvalidReportError(HealthCheckError, ValueError):
    """Raised when a FinancialReport violates an invariant."""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid financial report [{field}]: {message}")


class UndefinedMetricError(HealthCheckError, ZeroDivisionError):
    """Raised when a metric's denominator is zero."""
    def __init__(self, metric: str, denominator: str):
        self.metric = metric
        self.denominator = denominator
        super().__init__(f"Metric '{metric}' is undefined: {denominator} is zero")


class MissingBenchmarkError(HealthCheckError, LookupError):
    """Raised when no benchmark row exists for an industry."""
    def __init__(self, industry: Optional[str]):
        self.industry = industry
        super().__init__(f"No benchmark available for industry '{industry}'")


class RecordStoreError(HealthCheckError):
    """Raised when the record store cannot complete a request."""
    def __init__(self, resource: str, status_code: Optional[int], message: str):
        self.resource = resource
        self.status_code = status_code
        super().__init__(f"Record store request failed [{status_code}] {resource}: {message}")


class ReportRenderError(HealthCheckError):
    """Raised when the PDF report cannot be laid out or written."""


class InvalidBenchmarkError(HealthCheckError, ValueError):
    """Raised when an industry_benchmarks row has a missing or non-numeric average."""
    def __init__(self, column: str, message: str):
        self.column = column
        super().__init__(f"Invalid benchmark row [{column}]: {message}")
