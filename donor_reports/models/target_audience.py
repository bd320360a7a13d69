"""
Target audience (saved donor segment) model.
"""
from typing import Optional
from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel


class TargetAudience(BaseModel):
    """A named, saved list of donor ids."""
    __tablename__ = "target_audiences"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    donor_ids: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<TargetAudience {self.name} ({len(self.donor_ids or [])} donors)>"
