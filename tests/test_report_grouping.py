"""
Tests for grouping donations into report rows and the currency summary.
"""
import random
from datetime import date
from decimal import Decimal

from donor_reports.models import (
    Campaign,
    Donation,
    DonationMethod,
    DonationMethodType,
    DonationType,
    Donor,
    Payment,
    User,
)
from donor_reports.schemas.report import GroupBy, ReportFilters
from donor_reports.services.calendar import CalendarBucketer, HebrewCalendarService
from donor_reports.services.currency_summary import grand_total, summarize_currencies
from donor_reports.services.donation_amounts import payment_totals
from donor_reports.services.report_grouping import ReportGrouper

YEAR_5785 = 'תשפ"ה'
YEAR_5784 = 'תשפ"ד'
IN_5785 = date(2025, 1, 15)
IN_5784 = date(2024, 1, 15)

CASH = DonationMethod(id="cash", name="Cash", type=DonationMethodType.CASH)
STANDING_ORDER = DonationMethod(id="so", name="Standing order", type=DonationMethodType.STANDING_ORDER)


def donor(donor_id: str, last_name: str, fundraiser: User = None) -> Donor:
    return Donor(
        id=donor_id,
        last_name=last_name,
        fundraiser=fundraiser,
        fundraiser_id=fundraiser.id if fundraiser else None,
    )


def donation(
    donation_id: str,
    owner: Donor,
    amount: str,
    day: date = IN_5785,
    currency: str = "ILS",
    donation_type: DonationType = DonationType.ONE_TIME,
    method: DonationMethod = CASH,
    campaign: Campaign = None,
    **kwargs
) -> Donation:
    return Donation(
        id=donation_id,
        donor=owner,
        donor_id=owner.id if owner else None,
        amount=Decimal(amount),
        currency=currency,
        donation_date=day,
        donation_type=donation_type,
        donation_method=method,
        donation_method_id=method.id if method else None,
        campaign=campaign,
        campaign_id=campaign.id if campaign else None,
        **kwargs
    )


def payment(
    donation_id: str,
    amount: str,
    label: str = "commitment",
    day: date = IN_5785,
    is_active: bool = True,
    **kwargs
) -> Payment:
    return Payment(
        donation_id=donation_id,
        amount=Decimal(amount),
        payment_date=day,
        type=label,
        is_active=is_active,
        **kwargs
    )


def group(donations, payments=(), **filter_values):
    filters = ReportFilters(**filter_values)
    bucketer = CalendarBucketer(HebrewCalendarService())
    totals = payment_totals(donations, payments)
    grouper = ReportGrouper(bucketer, filters, as_of=date(2025, 6, 1))
    return grouper.group(donations, payments, totals)


# ============================================================================
# GROUPING
# ============================================================================

class TestGroupByDonor:
    """Yearly totals per donor and currency."""

    def test_one_time_plus_partly_paid_commitment(self):
        cohen = donor("d1", "Cohen")
        donations = [
            donation("one", cohen, "500"),
            donation("pledge", cohen, "1000", donation_type=DonationType.COMMITMENT),
        ]
        payments = [payment("pledge", "300")]

        rows = group(donations, payments, show_donation_details=True)

        assert len(rows) == 1
        assert rows[0].group_name == "Cohen"
        assert rows[0].donor_id == "d1"
        assert rows[0].yearly_totals == {YEAR_5785: {"ILS": Decimal("800")}}

        details = {d.donation_id: d for d in rows[0].donations}
        assert details["pledge"].expected_amount == Decimal("1000")
        assert details["pledge"].effective_amount == Decimal("300")
        assert details["pledge"].donation_type == "commitment"
        assert details["one"].effective_amount == Decimal("500")

    def test_buckets_by_year_and_normalized_currency(self):
        cohen = donor("d1", "Cohen")
        donations = [
            donation("a", cohen, "100", currency="dollar"),
            donation("b", cohen, "50", currency="USD"),
            donation("c", cohen, "70", day=IN_5784),
        ]

        rows = group(donations)

        assert rows[0].yearly_totals == {
            YEAR_5785: {"USD": Decimal("150")},
            YEAR_5784: {"ILS": Decimal("70")},
        }

    def test_unpaid_standing_order_adds_zero(self):
        cohen = donor("d1", "Cohen")
        donations = [donation("so1", cohen, "50", method=STANDING_ORDER)]

        rows = group(donations, [payment("so1", "50", label="commitment")])

        assert rows[0].yearly_totals == {YEAR_5785: {"ILS": Decimal(0)}}

    def test_details_are_off_by_default(self):
        rows = group([donation("a", donor("d1", "Cohen"), "10")])
        assert rows[0].donations is None
        assert rows[0].actual_payments is None

    def test_missing_donor_goes_to_unknown_bucket(self):
        rows = group([donation("a", None, "10")])
        assert rows[0].group_key == "unknown"
        assert rows[0].group_name == "Anonymous donor"
        assert rows[0].donor_id is None

    def test_grouping_ignores_input_order(self):
        cohen, levi = donor("d1", "Cohen"), donor("d2", "Levi")
        donations = [
            donation("a", cohen, "100"),
            donation("b", levi, "200", currency="USD"),
            donation("c", cohen, "300", day=IN_5784),
            donation("d", levi, "1000", donation_type=DonationType.COMMITMENT),
        ]
        payments = [payment("d", "250")]

        expected = group(donations, payments, show_donation_details=True)
        shuffled = list(donations)
        random.Random(7).shuffle(shuffled)
        actual = group(shuffled, list(reversed(payments)), show_donation_details=True)

        assert [r.model_dump() for r in actual] == [r.model_dump() for r in expected]


class TestOtherGroupings:
    """Campaign, payment method and fundraiser rows."""

    def test_group_by_campaign(self):
        dinner = Campaign(id="c1", name="Dinner")
        cohen = donor("d1", "Cohen")
        rows = group(
            [donation("a", cohen, "10", campaign=dinner), donation("b", cohen, "5")],
            group_by=GroupBy.CAMPAIGN,
        )
        names = {r.group_key: r.group_name for r in rows}
        assert names == {"c1": "Dinner", "unknown": "No campaign"}
        assert all(r.donor_id is None for r in rows)

    def test_group_by_payment_method(self):
        cohen = donor("d1", "Cohen")
        rows = group(
            [donation("a", cohen, "10"), donation("b", cohen, "5", method=None)],
            group_by=GroupBy.PAYMENT_METHOD,
        )
        names = {r.group_key: r.group_name for r in rows}
        assert names == {"cash": "Cash", "unknown": "Not specified"}

    def test_group_by_fundraiser(self):
        rachel = User(id="u1", email="rachel@example.com", name="Rachel", password_hash="x")
        rows = group(
            [
                donation("a", donor("d1", "Cohen", rachel), "10"),
                donation("b", donor("d2", "Levi", rachel), "15"),
                donation("c", donor("d3", "Amar"), "5"),
            ],
            group_by=GroupBy.FUNDRAISER,
        )
        by_key = {r.group_key: r for r in rows}
        assert by_key["u1"].group_name == "Rachel"
        assert by_key["u1"].yearly_totals == {YEAR_5785: {"ILS": Decimal("25")}}
        assert by_key["unknown"].group_name == "Unassigned"


class TestPartnerCredit:
    """Partners see the donation in their details, never in their totals."""

    def test_partner_gets_detail_row_only(self):
        cohen, levi = donor("d1", "Cohen"), donor("d2", "Levi")
        donations = [donation("a", cohen, "100", partner_ids=["d2", "d1"])]
        filters = ReportFilters(show_donation_details=True)
        grouper = ReportGrouper(
            CalendarBucketer(HebrewCalendarService()),
            filters,
            partner_donors={"d2": levi},
        )

        rows = {r.group_key: r for r in grouper.group(donations)}

        assert rows["d1"].yearly_totals == {YEAR_5785: {"ILS": Decimal("100")}}
        assert [d.is_partner_credit for d in rows["d1"].donations] == [False]
        assert rows["d2"].group_name == "Levi"
        assert rows["d2"].yearly_totals == {}
        assert [d.is_partner_credit for d in rows["d2"].donations] == [True]

    def test_partner_row_named_after_own_donation(self):
        cohen, levi = donor("d1", "Cohen"), donor("d2", "Levi")
        credited = donation("a", cohen, "100", partner_ids=["d2"])
        own = donation("b", levi, "40")
        filters = ReportFilters(show_donation_details=True)

        for ordering in ([credited, own], [own, credited]):
            grouper = ReportGrouper(CalendarBucketer(HebrewCalendarService()), filters)
            rows = {r.group_key: r for r in grouper.group(ordering)}

            assert rows["d2"].group_name == "Levi"
            assert rows["d2"].yearly_totals == {YEAR_5785: {"ILS": Decimal("40")}}
            assert [d.is_partner_credit for d in rows["d2"].donations] == [True, False]

    def test_partners_outside_allowed_donors_are_skipped(self):
        cohen = donor("d1", "Cohen")
        donations = [donation("a", cohen, "100", partner_ids=["d9"])]
        grouper = ReportGrouper(
            CalendarBucketer(HebrewCalendarService()),
            ReportFilters(show_donation_details=True),
            partner_donors={},
        )
        assert [r.group_key for r in grouper.group(donations)] == ["d1"]

    def test_no_partner_rows_when_grouping_by_campaign(self):
        cohen = donor("d1", "Cohen")
        rows = group(
            [donation("a", cohen, "100", partner_ids=["d2"])],
            group_by=GroupBy.CAMPAIGN,
            show_donation_details=True,
        )
        assert len(rows) == 1


class TestActualPayments:
    """Ledger payments converted to the reporting currency."""

    def test_payments_bucketed_by_payment_year(self):
        cohen = donor("d1", "Cohen")
        pledge = donation("p", cohen, "1000", currency="USD", donation_type=DonationType.COMMITMENT)
        payments = [
            payment("p", "100", day=IN_5784),
            payment("p", "100", currency="ILS"),
            payment("p", "100", is_active=False),
        ]
        rows = group(
            [pledge],
            payments,
            show_actual_payments=True,
            conversion_rates={"USD": Decimal("3.5")},
        )

        assert rows[0].actual_payments == {
            YEAR_5784: Decimal("350.0"),
            YEAR_5785: Decimal("100"),
        }


# ============================================================================
# CURRENCY SUMMARY
# ============================================================================

class TestCurrencySummary:
    """Per-currency totals and their shekel equivalents."""

    def test_hundred_dollars_at_three_and_a_half(self):
        cohen = donor("d1", "Cohen")
        donations = [donation("a", cohen, "100", currency="USD")]
        bucketer = CalendarBucketer(HebrewCalendarService())

        summary = summarize_currencies(
            donations, {"USD": Decimal("3.5")}, [YEAR_5784, YEAR_5785], bucketer
        )

        assert len(summary) == 1
        usd = summary[0]
        assert usd.currency == "USD"
        assert usd.yearly_totals == {YEAR_5784: Decimal(0), YEAR_5785: Decimal("100")}
        assert usd.yearly_totals_in_shekel[YEAR_5785] == Decimal("350.0")
        assert usd.total_in_shekel == Decimal("350.0")
        assert grand_total(summary) == Decimal("350.0")

    def test_uses_effective_amounts_and_orders_by_code(self):
        cohen = donor("d1", "Cohen")
        donations = [
            donation("a", cohen, "500"),
            donation("b", cohen, "1000", donation_type=DonationType.COMMITMENT),
            donation("c", cohen, "10", currency="euro"),
        ]
        totals = payment_totals(donations, [payment("b", "300")])
        bucketer = CalendarBucketer(HebrewCalendarService())

        summary = summarize_currencies(donations, {}, [YEAR_5785], bucketer, totals)

        assert [row.currency for row in summary] == ["EUR", "ILS"]
        assert summary[1].total_amount == Decimal("800")
        # No rate given: 1:1
        assert summary[0].total_in_shekel == Decimal("10")
        assert grand_total(summary) == Decimal("810")
