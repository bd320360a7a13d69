"""
Payment ledger model.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from sqlalchemy import String, Text, ForeignKey, Numeric, Date
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel, ActiveMixin


class Payment(BaseModel, ActiveMixin):
    """
    One ledger entry of money received against a donation.

    ``type`` is the ledger label written by the payment screens. It starts
    with the label expected for the parent donation ("commitment" or
    "standing_order", the latter optionally suffixed with the order kind).
    """
    __tablename__ = "payments"

    donation_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("donations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    currency: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)

    type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="completed", nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Payment {self.amount} for {self.donation_id} ({self.type})>"
