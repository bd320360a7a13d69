"""
Donation report endpoints.

Endpoints:
- POST /api/v1/reports/grouped-donations - Grouped donations report page
- POST /api/v1/reports/payments - Promised vs. paid per donor
- POST /api/v1/reports/yearly-summary - Totals per custom year
- GET /api/v1/reports/years - Years that have donations
- GET /api/v1/reports/global-filters - Current user's global filters
- PUT /api/v1/reports/global-filters - Replace the current user's global filters
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from donor_reports.db.base import get_db
from donor_reports.core.deps import get_current_user
from donor_reports.core.exceptions import ReportError
from donor_reports.models.user import User
from donor_reports.schemas.report import (
    GlobalFilters,
    GroupedReportResponse,
    PaymentReportRow,
    ReportFilters,
    ReportRequest,
    YearlySummaryRow,
)
from donor_reports.services.calendar import CalendarService, get_calendar_service
from donor_reports.services.global_filters import (
    load_user_global_filters,
    save_user_global_filters,
)
from donor_reports.services.reports import ReportService

logger = logging.getLogger(__name__)

router = APIRouter()


def report_error_to_http(error: ReportError) -> HTTPException:
    """Translate a report error into a 400 with a {field: {message}} body."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error.to_detail()
    )


def get_report_service(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    calendar: CalendarService = Depends(get_calendar_service)
) -> ReportService:
    return ReportService(db, user_id=current_user.id, calendar=calendar)


@router.post("/grouped-donations", response_model=GroupedReportResponse)
async def grouped_donations_report(
    filters: ReportFilters,
    service: ReportService = Depends(get_report_service)
):
    """Donations grouped by donor/campaign/method/fundraiser per custom year."""
    try:
        return await service.get_grouped_donations_report(filters)
    except ReportError as e:
        logger.info(f"Rejected grouped report request: {e.message}")
        raise report_error_to_http(e)


@router.post("/payments", response_model=list[PaymentReportRow])
async def payments_report(
    request: ReportRequest,
    service: ReportService = Depends(get_report_service)
):
    """Commitments and standing orders: promised, paid and remaining per donor."""
    try:
        return await service.get_payments_report(request.conversion_rates, request.local_filters)
    except ReportError as e:
        raise report_error_to_http(e)


@router.post("/yearly-summary", response_model=list[YearlySummaryRow])
async def yearly_summary_report(
    request: ReportRequest,
    service: ReportService = Depends(get_report_service)
):
    """Effective totals per custom year."""
    try:
        return await service.get_yearly_summary_report(request.conversion_rates, request.local_filters)
    except ReportError as e:
        raise report_error_to_http(e)


@router.get("/years", response_model=list[str])
async def available_years(
    service: ReportService = Depends(get_report_service)
):
    """Labels of the custom years that have donations, newest first."""
    return await service.get_available_years()


@router.get("/global-filters", response_model=GlobalFilters)
async def get_global_filters(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the current user's global report filters."""
    try:
        filters = await load_user_global_filters(db, current_user.id)
    except ReportError as e:
        raise report_error_to_http(e)
    return filters or GlobalFilters()


@router.put("/global-filters", response_model=GlobalFilters)
async def update_global_filters(
    filters: GlobalFilters,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace the current user's global report filters."""
    await save_user_global_filters(db, current_user, filters)
    return filters
