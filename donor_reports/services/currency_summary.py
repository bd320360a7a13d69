"""
Per-currency totals of the grouped report.
"""
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from donor_reports.models.donation import Donation
from donor_reports.schemas.report import CurrencySummaryRow
from donor_reports.services.calendar import CalendarBucketer
from donor_reports.services.currency import normalize_currency_code, normalize_rates, rate_for
from donor_reports.services.donation_amounts import effective_amount


def summarize_currencies(
    donations: Iterable[Donation],
    conversion_rates: Optional[Mapping[str, Decimal]],
    year_labels: list[str],
    bucketer: CalendarBucketer,
    payment_totals: Optional[Mapping[str, Decimal]] = None
) -> list[CurrencySummaryRow]:
    """
    Sum effective amounts per (currency, year) and their shekel value.

    Every visible year is present (zero when empty) in each row and the
    totals cover the visible years only. Rows are ordered by currency code.
    """
    rates = normalize_rates(conversion_rates)
    payment_totals = payment_totals or {}

    amounts: dict[str, dict[str, Decimal]] = {}
    for donation in donations:
        currency = normalize_currency_code(donation.currency)
        year_label = bucketer.year_label_for(donation.donation_date)
        amount = effective_amount(donation, payment_totals.get(donation.id))

        by_year = amounts.setdefault(currency, {label: Decimal(0) for label in year_labels})
        by_year[year_label] = by_year.get(year_label, Decimal(0)) + amount

    summary = []
    for currency in sorted(amounts):
        by_year = amounts[currency]
        rate = rate_for(currency, rates)
        visible = {label: by_year.get(label, Decimal(0)) for label in year_labels}
        total = sum(visible.values(), Decimal(0))
        summary.append(CurrencySummaryRow(
            currency=currency,
            yearly_totals=visible,
            yearly_totals_in_shekel={label: amount * rate for label, amount in visible.items()},
            total_amount=total,
            total_in_shekel=total * rate,
        ))

    return summary


def grand_total(summary: Iterable[CurrencySummaryRow]) -> Decimal:
    """Sum of every currency row in the reporting currency."""
    return sum((row.total_in_shekel for row in summary), Decimal(0))
