"""
Donor contact (phone / email) model.
"""
from typing import Optional
from enum import Enum
from sqlalchemy import String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel, ActiveMixin


class ContactType(str, Enum):
    PHONE = "phone"
    EMAIL = "email"


class DonorContact(BaseModel, ActiveMixin):
    __tablename__ = "donor_contacts"

    donor_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("donors.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[ContactType] = mapped_column(
        SQLEnum(
            ContactType,
            name="contacttype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
