"""
Geography models: countries, places and donor-place links.
"""
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from donor_reports.models.base import BaseModel, ActiveMixin

if TYPE_CHECKING:
    from donor_reports.models.donor import Donor


class Country(BaseModel):
    __tablename__ = "countries"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)


class Place(BaseModel):
    """A postal address."""
    __tablename__ = "places"

    country_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("countries.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    neighborhood: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    street: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    house_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    @property
    def short_address(self) -> str:
        street = " ".join(p for p in (self.street, self.house_number) if p)
        return " ".join(p for p in (street, self.city) if p).strip()


class DonorPlace(BaseModel, ActiveMixin):
    """Link between a donor and one of their addresses."""
    __tablename__ = "donor_places"

    donor_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("donors.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    place_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("places.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    address_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    donor: Mapped["Donor"] = relationship("Donor", foreign_keys=[donor_id])
    place: Mapped["Place"] = relationship("Place", foreign_keys=[place_id])
