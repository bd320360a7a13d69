"""
User model.
"""
from typing import Optional
from sqlalchemy import String, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from donor_reports.models.base import BaseModel


class User(BaseModel):
    """
    Application user.

    Users authenticate against the API and can also act as fundraisers
    that donors are assigned to. Per-user preferences, including the
    persisted global report filters, live in the ``settings`` JSON column.
    """
    __tablename__ = "users"

    # Core auth fields
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    # {"global_filters": {...}, "reports": {...}}
    settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
