"""
Custom (Hebrew) calendar years for report bucketing.

Reports are bucketed by Hebrew year (1 Tishrei .. 29 Elul) rather than by
Gregorian year. The conversion primitives sit behind ``CalendarService`` so
the report engine never does calendar math itself; ``HebrewCalendarService``
is the production implementation on top of ``convertdate``.

``CalendarBucketer`` memoizes conversions by calendar day. Create one per
report call and drop it afterwards; it is never shared between requests.
"""
from datetime import date, datetime, timedelta
from typing import Protocol

from convertdate import hebrew

from donor_reports.core.exceptions import InvalidYearLabel

TISHREI = 7

_GEMATRIA_LETTERS = (
    (400, "ת"), (300, "ש"), (200, "ר"), (100, "ק"),
    (90, "צ"), (80, "פ"), (70, "ע"), (60, "ס"), (50, "נ"),
    (40, "מ"), (30, "ל"), (20, "כ"), (10, "י"),
    (9, "ט"), (8, "ח"), (7, "ז"), (6, "ו"), (5, "ה"),
    (4, "ד"), (3, "ג"), (2, "ב"), (1, "א"),
)

_LETTER_VALUES = {letter: value for value, letter in _GEMATRIA_LETTERS}
# Final forms
_LETTER_VALUES.update({"ך": 20, "ם": 40, "ן": 50, "ף": 80, "ץ": 90})
_FINAL_TO_REGULAR = str.maketrans({"ך": "כ", "ם": "מ", "ן": "נ", "ף": "פ", "ץ": "צ"})

# Quote marks accepted in labels: ASCII and Hebrew geresh/gershayim
_PUNCTUATION = "\"'׳״ "


class CalendarService(Protocol):
    """Calendar conversion primitives used by the reports."""

    def date_to_year(self, day: date) -> int: ...

    def year_to_date_range(self, year: int) -> tuple[date, date]: ...

    def format_year(self, year: int) -> str: ...

    def parse_year(self, label: str) -> int: ...

    def current_year(self) -> int: ...


def _to_gematria(number: int) -> str:
    """Render 1..999 as Hebrew letters with gershayim ("תשפ"ה")."""
    remainder = number % 1000
    letters: list[str] = []

    for value, letter in _GEMATRIA_LETTERS:
        if value < 100:
            break
        while remainder >= value:
            letters.append(letter)
            remainder -= value

    # 15 and 16 are written 9+6 and 9+7
    if remainder in (15, 16):
        letters.extend(["ט", "ו" if remainder == 15 else "ז"])
        remainder = 0

    for value, letter in _GEMATRIA_LETTERS:
        while remainder >= value:
            letters.append(letter)
            remainder -= value

    if not letters:
        return ""
    if len(letters) == 1:
        return letters[0] + "'"
    return "".join(letters[:-1]) + '"' + letters[-1]


def _strip_punctuation(label: str) -> str:
    return "".join(ch for ch in label if ch not in _PUNCTUATION)


class HebrewCalendarService:
    """Hebrew calendar backed by convertdate."""

    def date_to_year(self, day: date) -> int:
        if isinstance(day, datetime):
            day = day.date()
        year, _month, _day = hebrew.from_gregorian(day.year, day.month, day.day)
        return year

    def year_to_date_range(self, year: int) -> tuple[date, date]:
        try:
            start = date(*hebrew.to_gregorian(year, TISHREI, 1))
            next_start = date(*hebrew.to_gregorian(year + 1, TISHREI, 1))
        except (ValueError, OverflowError) as e:
            # Year outside the Gregorian range that datetime can represent
            raise InvalidYearLabel(str(year)) from e
        # Last day is 29 Elul, the day before next Rosh Hashana
        return start, next_start - timedelta(days=1)

    def format_year(self, year: int) -> str:
        return _to_gematria(year)

    def parse_year(self, label: str) -> int:
        """
        Parse a year label back to its number.

        Accepts gematria labels with or without quote marks and plain
        numeric strings ("5785"). Raises InvalidYearLabel otherwise.
        """
        if label is None:
            raise InvalidYearLabel(str(label))

        text = str(label).strip()
        if text.isdigit():
            return int(text)

        letters = _strip_punctuation(text)
        if not letters or any(ch not in _LETTER_VALUES for ch in letters):
            raise InvalidYearLabel(text)

        value = sum(_LETTER_VALUES[ch] for ch in letters)
        year = value + 5000 if value < 1000 else value

        # Reject letter salads that only happen to add up
        if _strip_punctuation(self.format_year(year)) != letters.translate(_FINAL_TO_REGULAR):
            raise InvalidYearLabel(text)
        return year

    def current_year(self) -> int:
        return self.date_to_year(date.today())


_default_calendar = HebrewCalendarService()


def get_calendar_service() -> CalendarService:
    """Dependency returning the process calendar service (stateless)."""
    return _default_calendar


class CalendarBucketer:
    """
    Per-request memo over a CalendarService.

    Conversions are cached by calendar day (and by year for labels and
    ranges) for the lifetime of this object only.
    """

    def __init__(self, calendar: CalendarService):
        self.calendar = calendar
        self._years: dict[date, int] = {}
        self._labels: dict[int, str] = {}
        self._ranges: dict[int, tuple[date, date]] = {}

    def year_for(self, day: date | datetime) -> int:
        if isinstance(day, datetime):
            day = day.date()
        year = self._years.get(day)
        if year is None:
            year = self.calendar.date_to_year(day)
            self._years[day] = year
        return year

    def label_for_year(self, year: int) -> str:
        label = self._labels.get(year)
        if label is None:
            label = self.calendar.format_year(year)
            self._labels[year] = label
        return label

    def year_label_for(self, day: date | datetime) -> str:
        return self.label_for_year(self.year_for(day))

    def date_range_for_year(self, year: int) -> tuple[date, date]:
        date_range = self._ranges.get(year)
        if date_range is None:
            date_range = self.calendar.year_to_date_range(year)
            self._ranges[year] = date_range
        return date_range

    def parse_year(self, label: str) -> int:
        return self.calendar.parse_year(label)

    def current_year(self) -> int:
        return self.calendar.current_year()
