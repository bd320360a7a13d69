"""
Report service: the operations exposed by the reports API.

Each call builds its own ``CalendarBucketer`` and runs the pipeline
resolve global filters -> load donations -> filter -> aggregate ledger ->
group -> summarize -> sort -> paginate -> load donor details.
"""
import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from donor_reports.core.config import settings
from donor_reports.core.exceptions import ReportError
from donor_reports.models.donation import Donation
from donor_reports.models.donor import Donor
from donor_reports.schemas.report import (
    LAST_YEARS,
    DonorTypeFilter,
    GlobalFilters,
    GroupBy,
    GroupedReportResponse,
    PaymentReportRow,
    PaymentStatus,
    ReportFilters,
    ReportLocalFilters,
    YearlySummaryRow,
)
from donor_reports.services.calendar import CalendarBucketer, CalendarService, get_calendar_service
from donor_reports.services.currency import (
    normalize_currency_code,
    normalize_rates,
    to_reporting_currency,
)
from donor_reports.services.currency_summary import grand_total, summarize_currencies
from donor_reports.services.donation_amounts import (
    effective_amount,
    expected_amount,
    is_payment_based,
    payment_totals,
)
from donor_reports.services.global_filters import (
    GlobalFilterResolver,
    ResolvedDonors,
    allows,
    load_user_global_filters,
)
from donor_reports.services.report_grouping import ReportGrouper
from donor_reports.services.report_queries import (
    load_donor_details,
    load_donors,
    query_donation_dates,
    query_donations,
    query_payments,
)
from donor_reports.services.report_sorting import (
    DETAIL_SORT_KEYS,
    collation_key,
    paginate,
    sort_rows_multi,
)

logger = logging.getLogger(__name__)


def matches_donor_type(donor: Optional[Donor], donor_type: DonorTypeFilter) -> bool:
    if donor is None:
        return False
    if donor_type == DonorTypeFilter.ANASH:
        return bool(donor.is_anash)
    if donor_type == DonorTypeFilter.ALUMNI:
        return bool(donor.is_alumni)
    return bool(donor.is_other_connection)


def filter_donations(
    donations: Iterable[Donation],
    resolved: ResolvedDonors,
    global_filters: Optional[GlobalFilters] = None,
    selected_donor_ids: Optional[list[str]] = None,
    selected_campaign: Optional[str] = None,
    selected_donor_type: Optional[DonorTypeFilter] = None
) -> list[Donation]:
    """Keep the donations passing the resolved donor set and the direct filters."""
    selected = set(selected_donor_ids or [])
    kept = []

    for donation in donations:
        if not allows(resolved, donation.donor_id):
            continue
        if selected and donation.donor_id not in selected:
            continue
        if selected_campaign and donation.campaign_id != selected_campaign:
            continue
        if selected_donor_type and not matches_donor_type(donation.donor, selected_donor_type):
            continue

        if global_filters is not None:
            if global_filters.date_from and donation.donation_date < global_filters.date_from:
                continue
            if global_filters.date_to and donation.donation_date > global_filters.date_to:
                continue
            if global_filters.amount_min is not None and donation.amount < global_filters.amount_min:
                continue
            if global_filters.amount_max is not None and donation.amount > global_filters.amount_max:
                continue

        kept.append(donation)

    return kept


def payment_status(promised: Decimal, actual: Decimal) -> PaymentStatus:
    if promised > 0 and actual >= promised:
        return PaymentStatus.FULLY_PAID
    if actual > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.NOT_PAID


class ReportService:
    """
    Donation reports for one user.

    Args:
        db: Database session
        user_id: Calling user, whose persisted global filters apply
        calendar: Calendar conversion service (Hebrew calendar by default)
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: Optional[str] = None,
        calendar: Optional[CalendarService] = None
    ):
        self.db = db
        self.user_id = user_id
        self.calendar = calendar or get_calendar_service()

    @contextmanager
    def _stage(self, stage: str, context: object = None):
        """Log collaborator failures with the pipeline stage, then re-raise."""
        try:
            yield
        except ReportError:
            raise
        except Exception:
            logger.exception(
                f"Report stage '{stage}' failed for user {self.user_id} (filters: {context!r})"
            )
            raise

    # ========================================================================
    # Year window
    # ========================================================================

    def _window_years(
        self,
        bucketer: CalendarBucketer,
        selected_year: Union[int, str, None]
    ) -> list[int]:
        """Custom years of the report, oldest first."""
        if selected_year is None or selected_year == LAST_YEARS:
            current = bucketer.current_year()
            window = settings.REPORT_YEARS_WINDOW
            return [current - offset for offset in range(window - 1, -1, -1)]

        if isinstance(selected_year, int):
            return [selected_year]
        return [bucketer.parse_year(selected_year)]

    def _window_range(self, bucketer: CalendarBucketer, years: list[int]) -> tuple[date, date]:
        start, _ = bucketer.date_range_for_year(years[0])
        _, end = bucketer.date_range_for_year(years[-1])
        return start, end

    async def _resolve_global_filters(self) -> tuple[Optional[GlobalFilters], ResolvedDonors]:
        with self._stage("global_filters"):
            global_filters = await load_user_global_filters(self.db, self.user_id)
            resolved = await GlobalFilterResolver(self.db).resolve(global_filters)
        return global_filters, resolved

    # ========================================================================
    # Grouped donations report
    # ========================================================================

    async def get_grouped_donations_report(self, filters: ReportFilters) -> GroupedReportResponse:
        bucketer = CalendarBucketer(self.calendar)
        context = filters.model_dump(mode="json", exclude={"conversion_rates"})

        with self._stage("calendar", context):
            years = self._window_years(bucketer, filters.selected_year)
            year_labels = [bucketer.label_for_year(year) for year in years]
            start, end = self._window_range(bucketer, years)

        global_filters, resolved = await self._resolve_global_filters()

        with self._stage("load_donations", context):
            donations = await query_donations(self.db, start, end)

        donations = filter_donations(
            donations,
            resolved,
            global_filters,
            selected_donor_ids=filters.selected_donor_ids,
            selected_campaign=filters.selected_campaign,
            selected_donor_type=filters.selected_donor_type,
        )
        logger.info(
            f"Grouped report for years {year_labels}: {len(donations)} donations after filters"
        )

        with self._stage("load_payments", context):
            payments = await query_payments(self.db, [d.id for d in donations])
        totals = payment_totals(donations, payments)

        partner_donors = None
        if filters.group_by == GroupBy.DONOR and filters.show_donation_details:
            with self._stage("load_partners", context):
                partner_donors = await self._load_partner_donors(donations, resolved, filters)

        grouper = ReportGrouper(
            bucketer,
            filters,
            as_of=filters.as_of_date,
            partner_donors=partner_donors,
        )
        rows = grouper.group(donations, payments, totals)

        summary = summarize_currencies(
            donations, filters.conversion_rates, year_labels, bucketer, totals
        )
        total_in_reporting_currency = grand_total(summary)

        sort_specs = filters.sort_specs()
        with_donor_rows = filters.group_by == GroupBy.DONOR
        details_for_sorting = with_donor_rows and any(s.key in DETAIL_SORT_KEYS for s in sort_specs)

        if details_for_sorting:
            with self._stage("load_donor_details", context):
                await self._attach_donor_details(rows)

        rows = sort_rows_multi(rows, sort_specs, year_labels, filters.conversion_rates)
        page = paginate(rows, filters.page, filters.page_size)

        if with_donor_rows and filters.show_donor_details and not details_for_sorting:
            with self._stage("load_donor_details", context):
                await self._attach_donor_details(page.items)
        elif not filters.show_donor_details:
            for row in page.items:
                row.donor_details = None

        return GroupedReportResponse(
            year_labels=year_labels,
            rows=page.items,
            currency_summary=summary if filters.show_currency_summary else [],
            grand_total_in_reporting_currency=total_in_reporting_currency,
            reporting_currency=settings.REPORTING_CURRENCY,
            total_records=page.total_records,
            total_pages=page.total_pages,
            current_page=page.current_page,
            page_size=page.page_size,
        )

    async def _load_partner_donors(
        self,
        donations: list[Donation],
        resolved: ResolvedDonors,
        filters: ReportFilters
    ) -> dict[str, Donor]:
        partner_ids = {
            partner_id
            for donation in donations
            for partner_id in (donation.partner_ids or [])
            if partner_id and partner_id != donation.donor_id
        }
        if filters.selected_donor_ids:
            partner_ids &= set(filters.selected_donor_ids)
        partner_ids = {partner_id for partner_id in partner_ids if allows(resolved, partner_id)}

        donors = await load_donors(self.db, partner_ids)
        if filters.selected_donor_type:
            donors = {
                donor_id: donor for donor_id, donor in donors.items()
                if matches_donor_type(donor, filters.selected_donor_type)
            }
        return donors

    async def _attach_donor_details(self, rows) -> None:
        donor_ids = [row.donor_id for row in rows if row.donor_id]
        details = await load_donor_details(self.db, donor_ids)
        for row in rows:
            if row.donor_id:
                row.donor_details = details.get(row.donor_id)

    # ========================================================================
    # Payments report
    # ========================================================================

    async def get_payments_report(
        self,
        conversion_rates: Optional[Mapping[str, Decimal]] = None,
        local_filters: Optional[ReportLocalFilters] = None
    ) -> list[PaymentReportRow]:
        """
        Promised vs. paid per donor for commitments and standing orders,
        in the reporting currency.
        """
        local_filters = local_filters or ReportLocalFilters()
        rates = normalize_rates(conversion_rates)
        bucketer = CalendarBucketer(self.calendar)
        as_of = local_filters.as_of_date or date.today()
        context = local_filters.model_dump(mode="json")

        start = end = None
        if local_filters.selected_year is not None:
            with self._stage("calendar", context):
                years = self._window_years(bucketer, local_filters.selected_year)
                start, end = self._window_range(bucketer, years)

        global_filters, resolved = await self._resolve_global_filters()

        with self._stage("load_donations", context):
            donations = await query_donations(self.db, start, end)
        donations = [
            d for d in filter_donations(
                donations,
                resolved,
                global_filters,
                selected_donor_ids=local_filters.selected_donor_ids,
            )
            if is_payment_based(d)
        ]

        with self._stage("load_payments", context):
            payments = await query_payments(self.db, [d.id for d in donations])
        totals = payment_totals(donations, payments)

        by_donor: dict[str, dict] = {}
        for donation in donations:
            entry = by_donor.setdefault(donation.donor_id, {
                "donor": donation.donor,
                "count": 0,
                "promised": Decimal(0),
                "actual": Decimal(0),
            })
            entry["count"] += 1
            entry["promised"] += to_reporting_currency(
                expected_amount(donation, as_of), donation.currency, rates
            )
            entry["actual"] += to_reporting_currency(
                totals.get(donation.id, Decimal(0)), donation.currency, rates
            )

        rows = []
        for donor_id, entry in by_donor.items():
            donor = entry["donor"]
            promised = entry["promised"]
            actual = entry["actual"]
            rows.append(PaymentReportRow(
                donor_id=donor_id,
                donor_name=donor.display_name if donor is not None else "",
                commitments_count=entry["count"],
                promised_amount=promised,
                actual_amount=actual,
                remaining_debt=max(promised - actual, Decimal(0)),
                status=payment_status(promised, actual),
            ))

        rows.sort(key=lambda row: (collation_key(row.donor_name), row.donor_id))
        logger.info(f"Payments report: {len(rows)} donors, {len(donations)} commitments")
        return rows

    # ========================================================================
    # Yearly summary
    # ========================================================================

    async def get_yearly_summary_report(
        self,
        conversion_rates: Optional[Mapping[str, Decimal]] = None,
        local_filters: Optional[ReportLocalFilters] = None
    ) -> list[YearlySummaryRow]:
        """Effective totals per custom year of the window, newest first."""
        local_filters = local_filters or ReportLocalFilters()
        rates = normalize_rates(conversion_rates)
        bucketer = CalendarBucketer(self.calendar)
        context = local_filters.model_dump(mode="json")

        with self._stage("calendar", context):
            years = self._window_years(bucketer, local_filters.selected_year)
            start, end = self._window_range(bucketer, years)

        global_filters, resolved = await self._resolve_global_filters()

        with self._stage("load_donations", context):
            donations = await query_donations(self.db, start, end)
        donations = filter_donations(
            donations,
            resolved,
            global_filters,
            selected_donor_ids=local_filters.selected_donor_ids,
        )

        with self._stage("load_payments", context):
            payments = await query_payments(self.db, [d.id for d in donations])
        totals = payment_totals(donations, payments)

        rows = {
            year: YearlySummaryRow(
                year_label=bucketer.label_for_year(year),
                year=year,
                donation_count=0,
                donor_count=0,
            )
            for year in years
        }
        donors_by_year: dict[int, set[str]] = {year: set() for year in years}

        for donation in donations:
            year = bucketer.year_for(donation.donation_date)
            row = rows.get(year)
            if row is None:
                continue
            currency = normalize_currency_code(donation.currency)
            amount = effective_amount(donation, totals.get(donation.id))

            row.donation_count += 1
            donors_by_year[year].add(donation.donor_id)
            row.currencies[currency] = row.currencies.get(currency, Decimal(0)) + amount
            row.total_in_shekel += to_reporting_currency(amount, currency, rates)

        for year, row in rows.items():
            row.donor_count = len(donors_by_year[year])

        return [rows[year] for year in sorted(rows, reverse=True)]

    # ========================================================================
    # Available years
    # ========================================================================

    async def get_available_years(self) -> list[str]:
        """Labels of the custom years that have donations, newest first."""
        bucketer = CalendarBucketer(self.calendar)

        with self._stage("load_donation_dates"):
            dates = await query_donation_dates(self.db)
            years = {bucketer.year_for(day) for day in dates if day is not None}

        return [bucketer.label_for_year(year) for year in sorted(years, reverse=True)]
