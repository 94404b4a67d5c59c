"""SQLAlchemy ORM models backing the persistent client state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Account(Base):
    """Stored login of a stream-server user and their chosen profile."""

    __tablename__ = "accounts"

    user_id: Mapped[str] = mapped_column(String(120), primary_key=True)
    password: Mapped[str] = mapped_column(Text)
    token: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_profile_id: Mapped[str | None] = mapped_column(
        String(120), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
