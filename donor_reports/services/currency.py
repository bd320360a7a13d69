"""
Currency label normalization and conversion to the reporting currency.

Donations entered over the years carry free-text currency labels
("dollar", "שקל", "$"...). Reports bucket by canonical ISO codes, so every
label goes through ``normalize_currency_code`` first. New synonyms are added
to ``CURRENCY_SYNONYMS``; no code change is needed.
"""
from decimal import Decimal
from typing import Mapping, Optional

DEFAULT_CURRENCY = "ILS"

# casefolded label -> ISO code
CURRENCY_SYNONYMS: dict[str, str] = {
    # Israeli shekel
    "ils": "ILS",
    "nis": "ILS",
    "₪": "ILS",
    "shekel": "ILS",
    "shekels": "ILS",
    "שקל": "ILS",
    "שקלים": "ILS",
    'ש"ח': "ILS",
    "ש״ח": "ILS",
    # US dollar
    "usd": "USD",
    "$": "USD",
    "dollar": "USD",
    "dollars": "USD",
    "דולר": "USD",
    "דולרים": "USD",
    # Euro
    "eur": "EUR",
    "€": "EUR",
    "euro": "EUR",
    "euros": "EUR",
    "אירו": "EUR",
    "יורו": "EUR",
    # Pound sterling
    "gbp": "GBP",
    "£": "GBP",
    "pound": "GBP",
    "pounds": "GBP",
    "sterling": "GBP",
    "לירה": "GBP",
    "לירה שטרלינג": "GBP",
    'ליש"ט': "GBP",
    "ליש״ט": "GBP",
    "פאונד": "GBP",
}


def as_decimal(value: object) -> Decimal:
    """Coerce a numeric value (Decimal, int, float, str, None) to Decimal."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def normalize_currency_code(label: Optional[str]) -> str:
    """
    Map a free-text currency label to its canonical code.

    Known synonyms map through the table, anything else is upper-cased and
    kept as-is so an unknown code still gets its own bucket (and a 1:1 rate).
    Blank labels default to the shekel.
    """
    if label is None:
        return DEFAULT_CURRENCY
    stripped = label.strip()
    if not stripped:
        return DEFAULT_CURRENCY
    return CURRENCY_SYNONYMS.get(stripped.casefold(), stripped.upper())


def normalize_rates(rates: Optional[Mapping[str, object]]) -> dict[str, Decimal]:
    """Re-key a conversion-rate table by canonical code, values as Decimal."""
    normalized: dict[str, Decimal] = {}
    for label, rate in (rates or {}).items():
        if rate is None:
            continue
        normalized[normalize_currency_code(label)] = as_decimal(rate)
    return normalized


def rate_for(currency: Optional[str], rates: Mapping[str, Decimal]) -> Decimal:
    """Rate of ``currency`` in ``rates`` (already normalized); unknown -> 1."""
    rate = rates.get(normalize_currency_code(currency))
    return rate if rate is not None else Decimal(1)


def to_reporting_currency(
    amount: Decimal,
    currency: Optional[str],
    rates: Mapping[str, Decimal]
) -> Decimal:
    """Convert ``amount`` to the reporting currency."""
    return as_decimal(amount) * rate_for(currency, rates)
