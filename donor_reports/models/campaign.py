"""
Campaign model.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, JSON, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel, ActiveMixin


class Campaign(BaseModel, ActiveMixin):
    """
    Fundraising campaign.

    ``invited_donor_ids`` is the pre-computed list of donors invited to the
    campaign; the campaign global filter treats them like donors who gave.
    """
    __tablename__ = "campaigns"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    target_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=True
    )
    currency: Mapped[str] = mapped_column(String(10), default="ILS", nullable=False)
    invited_donor_ids: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Campaign {self.name}>"
