"""
Pydantic schemas for API request/response validation.
"""
from donor_reports.schemas.common import MessageResponse, HealthResponse
from donor_reports.schemas.auth import UserLogin, UserResponse, TokenResponse
from donor_reports.schemas.report import (
    LAST_YEARS,
    GroupBy,
    DonorTypeFilter,
    TriStateFilter,
    SortDirection,
    PaymentStatus,
    GlobalFilters,
    SortSpec,
    ReportFilters,
    ReportLocalFilters,
    ReportRequest,
    DonorDetails,
    DonationDetailRow,
    GroupedReportRow,
    CurrencySummaryRow,
    GroupedReportResponse,
    PaymentReportRow,
    YearlySummaryRow,
)

__all__ = [
    "MessageResponse",
    "HealthResponse",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "LAST_YEARS",
    "GroupBy",
    "DonorTypeFilter",
    "TriStateFilter",
    "SortDirection",
    "PaymentStatus",
    "GlobalFilters",
    "SortSpec",
    "ReportFilters",
    "ReportLocalFilters",
    "ReportRequest",
    "DonorDetails",
    "DonationDetailRow",
    "GroupedReportRow",
    "CurrencySummaryRow",
    "GroupedReportResponse",
    "PaymentReportRow",
    "YearlySummaryRow",
]
