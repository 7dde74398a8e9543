from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from billing_hooks.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Addon(Base):
    __tablename__ = "hosting_addon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Active", server_default="Active")
    payment_method: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default="")
    subscription_id: Mapped[str] = mapped_column(String(128), nullable=False, default="", server_default="")
    recurring_amount: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    next_due_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_hosting_addon_user", "user_id"),
    )


class CustomField(Base):
    __tablename__ = "custom_field"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    rel_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    field_name: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(String(32), nullable=False, default="text", server_default="text")
    admin_only: Mapped[bool] = mapped_column(nullable=False, default=True, server_default="1")

    __table_args__ = (
        Index("ix_custom_field_lookup", "type", "rel_id", "field_name"),
    )


class CustomFieldValue(Base):
    __tablename__ = "custom_field_value"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    field_id: Mapped[int] = mapped_column(Integer, ForeignKey("custom_field.id", ondelete="CASCADE"), nullable=False)
    rel_id: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")

    __table_args__ = (
        UniqueConstraint("field_id", "rel_id", name="uq_custom_field_value_field_rel"),
    )
