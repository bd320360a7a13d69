"""
Domain errors raised by the reporting engine.

Only genuinely invalid input is raised as a ReportError. Missing optional
data (payment totals, conversion rates, donor details) falls back to safe
defaults instead.
"""
from typing import Optional


class ReportError(Exception):
    """Base class for report errors surfaced to the caller."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> dict:
        """Error body in the API's {field: {message}} shape."""
        return {self.field or "filters": {"message": self.message}}


class InvalidReportFilter(ReportError, ValueError):
    """A filter value that cannot be applied (bad range, unknown sort key...)."""


class InvalidYearLabel(InvalidReportFilter):
    """A year label that the calendar service cannot parse."""

    def __init__(self, label: str):
        super().__init__(f"Could not parse year label: {label!r}", field="selected_year")
        self.label = label
