"""
Donation model: one-time gifts, commitments and standing orders.
"""
from typing import Optional, TYPE_CHECKING
from datetime import date
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Numeric, Date, Integer, Boolean, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from donor_reports.models.base import BaseModel

if TYPE_CHECKING:
    from donor_reports.models.donor import Donor
    from donor_reports.models.campaign import Campaign
    from donor_reports.models.donation_method import DonationMethod


class DonationType(str, Enum):
    """How the donation amount is recognized."""
    ONE_TIME = "one_time"
    COMMITMENT = "commitment"


class PaymentFrequency(str, Enum):
    """Charge frequency for recurring donations."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Donation(BaseModel):
    """
    Donation model.

    For commitments and standing orders ``amount`` is what was promised
    (the per-period amount for unlimited standing orders). What was
    actually received is only known from the payments ledger.
    """
    __tablename__ = "donations"

    donor_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("donors.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    campaign_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("campaigns.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    donation_method_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("donation_methods.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Amount
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    # Free text on legacy rows ("dollar", "shekel"...); normalized when reporting
    currency: Mapped[str] = mapped_column(String(30), default="ILS", nullable=False)

    donation_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    donation_type: Mapped[DonationType] = mapped_column(
        SQLEnum(
            DonationType,
            name="donationtype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=DonationType.ONE_TIME,
        nullable=False,
        index=True
    )

    # Recurring schedule
    frequency: Mapped[Optional[PaymentFrequency]] = mapped_column(
        SQLEnum(
            PaymentFrequency,
            name="paymentfrequency",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=True
    )
    number_of_payments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unlimited_payments: Mapped[bool] = mapped_column(Boolean, default=False)

    # Co-donors credited on the donation without owning it
    partner_ids: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    donor: Mapped["Donor"] = relationship("Donor", foreign_keys=[donor_id])
    campaign: Mapped[Optional["Campaign"]] = relationship("Campaign", foreign_keys=[campaign_id])
    donation_method: Mapped[Optional["DonationMethod"]] = relationship(
        "DonationMethod",
        foreign_keys=[donation_method_id]
    )

    def __repr__(self) -> str:
        return f"<Donation {self.amount} {self.currency} ({self.donation_type})>"
