"""
Base model and shared column mixins.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.db.base import Base


def generate_id() -> str:
    """Generate a 15-character string id."""
    return uuid.uuid4().hex[:15]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """created/updated timestamps (UTC)."""
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )


class ActiveMixin:
    """
    Soft-delete flag.

    Donor data is never deleted, only deactivated; reports skip inactive
    payments, places and contacts.
    """
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)


class BaseModel(Base, TimestampMixin):
    """Abstract base model with id and timestamps."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(15), primary_key=True, default=generate_id)
