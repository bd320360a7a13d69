"""
Donor model.
"""
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from donor_reports.models.base import BaseModel, ActiveMixin

if TYPE_CHECKING:
    from donor_reports.models.user import User


class Donor(BaseModel, ActiveMixin):
    """A person or household that gives donations."""
    __tablename__ = "donors"

    title: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Affiliation flags used by the donor-type and global filters
    is_anash: Mapped[bool] = mapped_column(Boolean, default=False)
    is_alumni: Mapped[bool] = mapped_column(Boolean, default=False)
    is_other_connection: Mapped[bool] = mapped_column(Boolean, default=False)

    # Fundraiser responsible for this donor
    fundraiser_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    fundraiser: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[fundraiser_id]
    )

    @property
    def display_name(self) -> str:
        parts = [self.title, self.first_name, self.last_name]
        return " ".join(p.strip() for p in parts if p and p.strip())

    def __repr__(self) -> str:
        return f"<Donor {self.display_name or self.id}>"
