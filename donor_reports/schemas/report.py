"""
Pydantic schemas for the donation reports.
"""
from typing import Optional, Union
from datetime import date
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field, model_validator

from donor_reports.core.config import settings

# Year selection meaning "the last REPORT_YEARS_WINDOW custom years"
LAST_YEARS = "last4"


class GroupBy(str, Enum):
    """Dimension rows of the grouped report are keyed by."""
    DONOR = "donor"
    CAMPAIGN = "campaign"
    PAYMENT_METHOD = "payment_method"
    FUNDRAISER = "fundraiser"


class DonorTypeFilter(str, Enum):
    ANASH = "anash"
    ALUMNI = "alumni"
    OTHER_CONNECTION = "other_connection"


class TriStateFilter(str, Enum):
    ALL = "all"
    YES = "yes"
    NO = "no"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class PaymentStatus(str, Enum):
    """Commitment status in the payments report."""
    FULLY_PAID = "fully_paid"
    PARTIALLY_PAID = "partially_paid"
    NOT_PAID = "not_paid"


# ============================================================================
# FILTERS
# ============================================================================

class GlobalFilters(BaseModel):
    """
    User-scoped cross-cutting filters, persisted in the user's settings.

    Every field is optional. A missing (or empty) field never means
    "match nothing", it means "no constraint on this dimension".
    """
    country_ids: Optional[list[str]] = None
    city_ids: Optional[list[str]] = None
    neighborhood_ids: Optional[list[str]] = None
    target_audience_ids: Optional[list[str]] = None
    campaign_ids: Optional[list[str]] = None
    amount_min: Optional[Decimal] = None
    amount_max: Optional[Decimal] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    is_anash: Optional[TriStateFilter] = None
    is_alumni: Optional[TriStateFilter] = None

    @model_validator(mode="after")
    def check_ranges(self) -> "GlobalFilters":
        if self.amount_min is not None and self.amount_max is not None and self.amount_min > self.amount_max:
            raise ValueError("amount_min must not be greater than amount_max")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


class SortSpec(BaseModel):
    """One sort column: a row field, a year label or 'total'."""
    key: str
    direction: SortDirection = SortDirection.ASC


class ReportFilters(BaseModel):
    """Per-request parameters of the grouped donations report."""
    group_by: GroupBy = GroupBy.DONOR

    # Output toggles
    show_donor_details: bool = False
    show_actual_payments: bool = False
    show_currency_summary: bool = True
    show_donation_details: bool = False

    # Local narrowing
    selected_donor_ids: Optional[list[str]] = None
    selected_campaign: Optional[str] = None
    selected_donor_type: Optional[DonorTypeFilter] = None

    # "last4", a year number (5785) or a year label
    selected_year: Union[int, str, None] = LAST_YEARS

    # currency code -> rate to the reporting currency
    conversion_rates: dict[str, Decimal] = Field(default_factory=dict)

    # Sorting & pagination
    sort_by: str = "name"
    sort_direction: SortDirection = SortDirection.ASC
    sort_columns: Optional[list[SortSpec]] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)

    # Reference date for elapsed standing-order periods (defaults to today)
    as_of_date: Optional[date] = None

    def sort_specs(self) -> list[SortSpec]:
        if self.sort_columns:
            return list(self.sort_columns)
        return [SortSpec(key=self.sort_by, direction=self.sort_direction)]


class ReportLocalFilters(BaseModel):
    """Narrowing accepted by the payments and yearly summary reports."""
    selected_donor_ids: Optional[list[str]] = None
    selected_year: Union[int, str, None] = None
    as_of_date: Optional[date] = None


class ReportRequest(BaseModel):
    """Body of the payments / yearly summary endpoints."""
    conversion_rates: dict[str, Decimal] = Field(default_factory=dict)
    local_filters: Optional[ReportLocalFilters] = None


# ============================================================================
# GROUPED REPORT
# ============================================================================

class DonorDetails(BaseModel):
    """First-contact details shown beside a donor row."""
    address: str = ""
    phones: list[str] = Field(default_factory=list)
    emails: list[str] = Field(default_factory=list)


class DonationDetailRow(BaseModel):
    """Drill-down line for one donation inside a grouped row."""
    donation_id: str
    donation_date: date
    year_label: str
    donor_id: Optional[str] = None
    donor_name: str = ""
    campaign_name: Optional[str] = None
    method_name: Optional[str] = None
    currency: str
    donation_type: str
    is_standing_order: bool = False
    expected_amount: Decimal
    effective_amount: Decimal
    is_partner_credit: bool = False


class GroupedReportRow(BaseModel):
    """One group of the grouped donations report."""
    group_key: str
    group_name: str
    donor_id: Optional[str] = None
    donor_details: Optional[DonorDetails] = None
    # year label -> currency code -> amount
    yearly_totals: dict[str, dict[str, Decimal]] = Field(default_factory=dict)
    # year label -> amount in the reporting currency
    actual_payments: Optional[dict[str, Decimal]] = None
    donations: Optional[list[DonationDetailRow]] = None


class CurrencySummaryRow(BaseModel):
    """Totals of one currency across the visible years."""
    currency: str
    yearly_totals: dict[str, Decimal] = Field(default_factory=dict)
    yearly_totals_in_shekel: dict[str, Decimal] = Field(default_factory=dict)
    total_amount: Decimal = Decimal(0)
    total_in_shekel: Decimal = Decimal(0)


class GroupedReportResponse(BaseModel):
    """Grouped donations report page."""
    year_labels: list[str]
    rows: list[GroupedReportRow]
    currency_summary: list[CurrencySummaryRow]
    grand_total_in_reporting_currency: Decimal
    reporting_currency: str = settings.REPORTING_CURRENCY
    total_records: int
    total_pages: int
    current_page: int
    page_size: int


# ============================================================================
# PAYMENTS & YEARLY REPORTS
# ============================================================================

class PaymentReportRow(BaseModel):
    """Promised vs. actually paid, per donor, in the reporting currency."""
    donor_id: str
    donor_name: str
    commitments_count: int
    promised_amount: Decimal
    actual_amount: Decimal
    remaining_debt: Decimal
    status: PaymentStatus


class YearlySummaryRow(BaseModel):
    """Effective totals of one custom year."""
    year_label: str
    year: int
    donation_count: int
    donor_count: int
    currencies: dict[str, Decimal] = Field(default_factory=dict)
    total_in_shekel: Decimal = Decimal(0)
