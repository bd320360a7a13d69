"""
Grouping of donations into report rows.

Rows are keyed by the report's ``group_by`` dimension and carry
``yearly_totals[year label][currency]`` sums of effective amounts. Optional
parts (drill-down donation rows, actual ledger payments) are only built
when the corresponding toggle is on.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from donor_reports.models.donation import Donation
from donor_reports.models.donor import Donor
from donor_reports.models.payment import Payment
from donor_reports.schemas.report import (
    DonationDetailRow,
    GroupBy,
    GroupedReportRow,
    ReportFilters,
)
from donor_reports.services.calendar import CalendarBucketer
from donor_reports.services.currency import (
    normalize_currency_code,
    normalize_rates,
    to_reporting_currency,
)
from donor_reports.services.donation_amounts import (
    effective_amount,
    expected_amount,
    is_standing_order,
)

logger = logging.getLogger(__name__)

UNKNOWN_GROUP_KEY = "unknown"

UNKNOWN_GROUP_NAMES = {
    GroupBy.DONOR: "Anonymous donor",
    GroupBy.CAMPAIGN: "No campaign",
    GroupBy.PAYMENT_METHOD: "Not specified",
    GroupBy.FUNDRAISER: "Unassigned",
}


def group_key_for(donation: Donation, group_by: GroupBy) -> tuple[str, str]:
    """(key, display name) of the group ``donation`` belongs to."""
    unknown = (UNKNOWN_GROUP_KEY, UNKNOWN_GROUP_NAMES[group_by])

    if group_by == GroupBy.DONOR:
        if not donation.donor_id:
            return unknown
        donor = donation.donor
        name = donor.display_name if donor is not None else ""
        return donation.donor_id, name or UNKNOWN_GROUP_NAMES[group_by]

    if group_by == GroupBy.CAMPAIGN:
        if not donation.campaign_id:
            return unknown
        campaign = donation.campaign
        return donation.campaign_id, campaign.name if campaign is not None else donation.campaign_id

    if group_by == GroupBy.PAYMENT_METHOD:
        if not donation.donation_method_id:
            return unknown
        method = donation.donation_method
        return donation.donation_method_id, method.name if method is not None else donation.donation_method_id

    donor = donation.donor
    if donor is None or not donor.fundraiser_id:
        return unknown
    fundraiser = donor.fundraiser
    return donor.fundraiser_id, fundraiser.name if fundraiser is not None else donor.fundraiser_id


def _enum_value(value, default: str) -> str:
    if value is None:
        return default
    return getattr(value, "value", value)


class ReportGrouper:
    """
    Builds the grouped report rows for one request.

    Args:
        bucketer: Per-request calendar cache
        filters: The report filters (toggles, group_by, conversion rates)
        as_of: Reference date for standing-order expected amounts
        partner_donors: Donors that may receive partner credit, by id.
            None credits every partner.
    """

    def __init__(
        self,
        bucketer: CalendarBucketer,
        filters: ReportFilters,
        as_of: Optional[date] = None,
        partner_donors: Optional[Mapping[str, Donor]] = None,
        conversion_rates: Optional[Mapping[str, Decimal]] = None
    ):
        self.bucketer = bucketer
        self.filters = filters
        self.as_of = as_of or filters.as_of_date or date.today()
        self.partner_donors = partner_donors
        self.rates = normalize_rates(
            conversion_rates if conversion_rates is not None else filters.conversion_rates
        )

    def group(
        self,
        donations: Iterable[Donation],
        payments: Iterable[Payment] = (),
        payment_totals: Optional[Mapping[str, Decimal]] = None
    ) -> list[GroupedReportRow]:
        payment_totals = payment_totals or {}
        group_by = self.filters.group_by
        with_details = self.filters.show_donation_details

        rows: dict[str, GroupedReportRow] = {}
        donations_by_id: dict[str, Donation] = {}
        group_of_donation: dict[str, str] = {}
        # Rows opened by a partner credit before the partner's own donations
        credit_only: set[str] = set()

        for donation in donations:
            key, name = group_key_for(donation, group_by)
            row = rows.get(key)
            if row is None:
                row = self._new_row(key, name)
                rows[key] = row
            elif key in credit_only:
                row.group_name = name
                credit_only.discard(key)

            year_label = self.bucketer.year_label_for(donation.donation_date)
            currency = normalize_currency_code(donation.currency)
            amount = effective_amount(donation, payment_totals.get(donation.id))

            year_totals = row.yearly_totals.setdefault(year_label, {})
            year_totals[currency] = year_totals.get(currency, Decimal(0)) + amount

            donations_by_id[donation.id] = donation
            group_of_donation[donation.id] = key

            if with_details:
                detail = self._detail_row(donation, year_label, currency, amount)
                row.donations.append(detail)
                if group_by == GroupBy.DONOR:
                    self._credit_partners(rows, donation, detail, credit_only)

        if self.filters.show_actual_payments:
            self._add_actual_payments(rows, payments, donations_by_id, group_of_donation)

        if with_details:
            for row in rows.values():
                row.donations.sort(key=lambda d: (d.donation_date, d.donation_id))

        logger.debug(f"Grouped {len(donations_by_id)} donations into {len(rows)} rows by {group_by.value}")
        return [rows[key] for key in sorted(rows)]

    def _new_row(self, key: str, name: str) -> GroupedReportRow:
        return GroupedReportRow(
            group_key=key,
            group_name=name,
            donor_id=key if self.filters.group_by == GroupBy.DONOR and key != UNKNOWN_GROUP_KEY else None,
            actual_payments={} if self.filters.show_actual_payments else None,
            donations=[] if self.filters.show_donation_details else None,
        )

    def _detail_row(
        self,
        donation: Donation,
        year_label: str,
        currency: str,
        amount: Decimal
    ) -> DonationDetailRow:
        donor = donation.donor
        campaign = donation.campaign
        method = donation.donation_method
        return DonationDetailRow(
            donation_id=donation.id,
            donation_date=donation.donation_date,
            year_label=year_label,
            donor_id=donation.donor_id,
            donor_name=donor.display_name if donor is not None else "",
            campaign_name=campaign.name if campaign is not None else None,
            method_name=method.name if method is not None else None,
            currency=currency,
            donation_type=_enum_value(donation.donation_type, "one_time"),
            is_standing_order=is_standing_order(donation),
            expected_amount=expected_amount(donation, self.as_of),
            effective_amount=amount,
        )

    def _credit_partners(
        self,
        rows: dict[str, GroupedReportRow],
        donation: Donation,
        detail: DonationDetailRow,
        credit_only: set[str]
    ) -> None:
        """Show the donation in each partner's drill-down. Totals are untouched."""
        for partner_id in dict.fromkeys(donation.partner_ids or []):
            if not partner_id or partner_id == donation.donor_id:
                continue
            if self.partner_donors is not None and partner_id not in self.partner_donors:
                continue

            row = rows.get(partner_id)
            if row is None:
                partner = (self.partner_donors or {}).get(partner_id)
                name = partner.display_name if partner is not None else ""
                row = self._new_row(partner_id, name or UNKNOWN_GROUP_NAMES[GroupBy.DONOR])
                rows[partner_id] = row
                credit_only.add(partner_id)
            row.donations.append(detail.model_copy(update={"is_partner_credit": True}))

    def _add_actual_payments(
        self,
        rows: dict[str, GroupedReportRow],
        payments: Iterable[Payment],
        donations_by_id: Mapping[str, Donation],
        group_of_donation: Mapping[str, str]
    ) -> None:
        for payment in payments:
            if payment.is_active is False:
                continue
            key = group_of_donation.get(payment.donation_id)
            if key is None:
                continue

            donation = donations_by_id[payment.donation_id]
            currency = payment.currency or donation.currency
            amount = to_reporting_currency(payment.amount, currency, self.rates)
            year_label = self.bucketer.year_label_for(payment.payment_date)

            actual = rows[key].actual_payments
            actual[year_label] = actual.get(year_label, Decimal(0)) + amount
