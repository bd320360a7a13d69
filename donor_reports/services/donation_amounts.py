"""
Donation amount rules shared by every report.

Three donation models live side by side:
- one-time gifts count their full amount immediately;
- commitments (pledges) count only what the payments ledger shows received;
- standing orders (donation method of type standing_order) likewise count
  only ledger payments, and may be open-ended.

``payment_totals`` reduces the ledger to one received total per
payment-based donation; ``effective_amount`` picks the figure that goes
into report totals; ``expected_amount`` is the promised figure shown next
to it in drill-down rows.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from donor_reports.models.donation import Donation, DonationType, PaymentFrequency
from donor_reports.models.donation_method import DonationMethodType
from donor_reports.models.payment import Payment
from donor_reports.services.currency import as_decimal

# Ledger labels. Standing-order rows may be suffixed with the order kind
# (standing_order_bank, standing_order_credit_card...), hence prefix matching.
COMMITMENT_LEDGER_LABEL = "commitment"
STANDING_ORDER_LEDGER_LABEL = "standing_order"


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_commitment(donation: Donation) -> bool:
    return donation.donation_type == DonationType.COMMITMENT


def is_standing_order(donation: Donation) -> bool:
    """True when the donation's payment method is a standing order."""
    method = donation.donation_method
    return method is not None and method.type == DonationMethodType.STANDING_ORDER


def is_payment_based(donation: Donation) -> bool:
    """Commitments and standing orders are recognized through the ledger."""
    return is_commitment(donation) or is_standing_order(donation)


def expected_ledger_label(donation: Donation) -> Optional[str]:
    """Label prefix ledger rows must carry to count toward ``donation``."""
    if is_commitment(donation):
        return COMMITMENT_LEDGER_LABEL
    if is_standing_order(donation):
        return STANDING_ORDER_LEDGER_LABEL
    return None


def effective_amount(donation: Donation, payments_total: Optional[Decimal] = None) -> Decimal:
    """
    Amount of ``donation`` that counts toward report totals.

    Args:
        donation: The donation
        payments_total: Sum of matching ledger payments for it, if any

    Returns:
        The ledger total for commitments and standing orders (0 when there
        is none), the donation amount for one-time gifts.
    """
    if is_commitment(donation):
        return as_decimal(payments_total)
    if is_standing_order(donation):
        return as_decimal(payments_total)
    return as_decimal(donation.amount)


def payment_totals(
    donations: Iterable[Donation],
    payments: Iterable[Payment]
) -> dict[str, Decimal]:
    """
    Sum active, label-compatible ledger payments per payment-based donation.

    Payments whose donation is not payment-based (or not in ``donations``),
    inactive payments and payments whose label does not start with the
    donation's expected label are skipped.
    """
    expected_labels: dict[str, str] = {}
    for donation in donations:
        label = expected_ledger_label(donation)
        if label is not None and donation.id:
            expected_labels[donation.id] = label

    totals: dict[str, Decimal] = {}
    if not expected_labels:
        return totals

    for payment in payments:
        label = expected_labels.get(payment.donation_id)
        if label is None:
            continue
        # is_active is None on rows built in memory before a flush
        if payment.is_active is False:
            continue
        if not (payment.type or "").startswith(label):
            continue
        totals[payment.donation_id] = totals.get(payment.donation_id, Decimal(0)) + as_decimal(payment.amount)

    return totals


def periods_elapsed(donation: Donation, as_of: Optional[date] = None) -> int:
    """
    Number of full charge periods between the donation date and ``as_of``.

    A started order counts at least one period; an order starting after
    ``as_of`` counts none. Limited orders are capped at number_of_payments.
    """
    start = _as_date(donation.donation_date)
    end = _as_date(as_of or date.today())

    if end < start:
        return 0

    delta = relativedelta(end, start)
    months = delta.years * 12 + delta.months

    frequency = donation.frequency
    if frequency == PaymentFrequency.WEEKLY:
        periods = (end - start).days // 7
    elif frequency == PaymentFrequency.MONTHLY:
        periods = months
    elif frequency == PaymentFrequency.QUARTERLY:
        periods = months // 3
    elif frequency == PaymentFrequency.YEARLY:
        periods = delta.years
    else:
        return 1

    if not donation.unlimited_payments and donation.number_of_payments:
        periods = min(periods, donation.number_of_payments)

    return max(1, periods)


def expected_amount(donation: Donation, as_of: Optional[date] = None) -> Decimal:
    """
    Promised figure for ``donation``.

    Open-ended standing orders promise one period amount per elapsed
    period; everything else promises its recorded amount.
    """
    amount = as_decimal(donation.amount)
    if is_standing_order(donation) and donation.unlimited_payments:
        return amount * periods_elapsed(donation, as_of)
    return amount
