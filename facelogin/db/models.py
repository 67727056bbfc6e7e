"""SQLAlchemy models describing the face login tables."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for ORM models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class Profile(Base):
    """Auth state of a console account as seen by face login."""

    __tablename__ = "profiles"

    account_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255))
    face_login_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    face_registered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class FaceData(Base):
    """Enrolled textual face descriptor."""

    __tablename__ = "face_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.account_id"), nullable=False, index=True
    )
    descriptor_text: Mapped[str] = mapped_column(Text, nullable=False)
    source_image_ref: Mapped[str | None] = mapped_column(String(256))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)


class FaceLoginAttempt(Base):
    """One face login attempt, used for throttling and auditing."""

    __tablename__ = "face_login_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip_address: Mapped[str] = mapped_column(String(64), index=True)
    user_agent: Mapped[str | None] = mapped_column(String(512))
    was_successful: Mapped[bool] = mapped_column(Boolean, default=False)
    outcome: Mapped[str] = mapped_column(String(64))
    matched_account_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
