"""
Donation method (payment channel) model.
"""
from typing import Optional
from enum import Enum
from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel, ActiveMixin


class DonationMethodType(str, Enum):
    """Kind of payment channel."""
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    STANDING_ORDER = "standing_order"
    OTHER = "other"


class StandingOrderKind(str, Enum):
    """Who executes a standing order."""
    BANK = "bank"
    CREDIT_CARD = "credit_card"
    ORGANIZATION = "organization"


class DonationMethod(BaseModel, ActiveMixin):
    """
    Payment channel a donation is made through.

    A donation whose method has type ``standing_order`` is a recurring
    order: only ledger payments count toward its totals.
    """
    __tablename__ = "donation_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[DonationMethodType] = mapped_column(
        SQLEnum(
            DonationMethodType,
            name="donationmethodtype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=DonationMethodType.CASH,
        nullable=False
    )
    standing_order_kind: Mapped[Optional[StandingOrderKind]] = mapped_column(
        SQLEnum(
            StandingOrderKind,
            name="standingorderkind",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<DonationMethod {self.name} ({self.type.value if self.type else None})>"
