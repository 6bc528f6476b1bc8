from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from .config import get_settings


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class SmsSettings(Base):
    __tablename__ = "sms_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    sms_provider: Mapped[str | None] = mapped_column(String, nullable=True)  # "twilio" / "nexmo"
    api_key: Mapped[str | None] = mapped_column(String, nullable=True)
    api_token: Mapped[str | None] = mapped_column(String, nullable=True)
    sms_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class User(Base):
    """Platform user; only the address book part of the profile is read here."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # e.g. {"addressBook": {"phone": "5551234", "country": "US"}}
    profile: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


# --- Engine & Session factory ---

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
