"""
Sorting and pagination of grouped report rows.
"""
import math
import unicodedata
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Mapping, Optional, Sequence

from donor_reports.core.exceptions import InvalidReportFilter
from donor_reports.schemas.report import GroupedReportRow, SortDirection, SortSpec
from donor_reports.services.currency import normalize_rates, rate_for

TOTAL_SORT_KEY = "total"

# Sort keys that need donor details loaded for every row, not just the page
DETAIL_SORT_KEYS = frozenset({"address", "phone", "email"})


def collation_key(value: Optional[str]) -> str:
    """Case and accent insensitive key (Hebrew points are dropped too)."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def row_year_total(
    row: GroupedReportRow,
    year_label: str,
    rates: Mapping[str, Decimal]
) -> Decimal:
    """Total of one year of ``row`` in the reporting currency."""
    by_currency = row.yearly_totals.get(year_label) or {}
    return sum(
        (amount * rate_for(currency, rates) for currency, amount in by_currency.items()),
        Decimal(0)
    )


def row_grand_total(
    row: GroupedReportRow,
    year_labels: Sequence[str],
    rates: Mapping[str, Decimal]
) -> Decimal:
    """Total of ``row`` across the visible years in the reporting currency."""
    return sum((row_year_total(row, label, rates) for label in year_labels), Decimal(0))


def _first(values: Optional[list[str]]) -> str:
    return values[0] if values else ""


def _sort_key_function(
    sort_by: str,
    year_labels: Sequence[str],
    rates: Mapping[str, Decimal]
) -> Callable[[GroupedReportRow], object]:
    if sort_by == "name":
        return lambda row: collation_key(row.group_name)
    if sort_by == "address":
        return lambda row: collation_key(row.donor_details.address if row.donor_details else "")
    if sort_by == "phone":
        return lambda row: collation_key(_first(row.donor_details.phones) if row.donor_details else "")
    if sort_by == "email":
        return lambda row: collation_key(_first(row.donor_details.emails) if row.donor_details else "")
    if sort_by == TOTAL_SORT_KEY:
        return lambda row: row_grand_total(row, year_labels, rates)
    if sort_by in year_labels:
        return lambda row: row_year_total(row, sort_by, rates)

    raise InvalidReportFilter(f"Unknown sort key: {sort_by!r}", field="sort_by")


def sort_rows_multi(
    rows: Sequence[GroupedReportRow],
    columns: Sequence[SortSpec],
    year_labels: Sequence[str],
    conversion_rates: Optional[Mapping[str, Decimal]] = None
) -> list[GroupedReportRow]:
    """
    Sort by several columns, the first one being the most significant.

    Ties fall back to the group key so the order is deterministic.
    """
    rates = normalize_rates(conversion_rates)
    key_functions = [
        (_sort_key_function(column.key, year_labels, rates), column.direction == SortDirection.DESC)
        for column in columns
    ]

    result = sorted(rows, key=lambda row: row.group_key)
    # Stable sorts, least significant column first
    for key_function, descending in reversed(key_functions):
        result.sort(key=key_function, reverse=descending)
    return result


def sort_rows(
    rows: Sequence[GroupedReportRow],
    sort_by: str,
    direction: SortDirection,
    year_labels: Sequence[str],
    conversion_rates: Optional[Mapping[str, Decimal]] = None
) -> list[GroupedReportRow]:
    return sort_rows_multi(
        rows,
        [SortSpec(key=sort_by, direction=direction)],
        year_labels,
        conversion_rates
    )


@dataclass
class Page:
    items: list
    total_records: int
    total_pages: int
    current_page: int
    page_size: int


def paginate(rows: Sequence, page: int, page_size: int) -> Page:
    """
    Slice ``rows`` for ``page`` (1-based).

    Counts describe every row passed in. A page past the end is empty.
    """
    if page < 1:
        raise InvalidReportFilter("page must be at least 1", field="page")
    if page_size < 1:
        raise InvalidReportFilter("page_size must be at least 1", field="page_size")

    total = len(rows)
    total_pages = math.ceil(total / page_size) if total else 1
    start = (page - 1) * page_size

    return Page(
        items=list(rows[start:start + page_size]),
        total_records=total,
        total_pages=total_pages,
        current_page=page,
        page_size=page_size,
    )
