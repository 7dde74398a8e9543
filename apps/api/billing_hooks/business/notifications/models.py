from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from billing_hooks.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmailNotificationIntent(Base):
    __tablename__ = "email_notification_intent"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_name: Mapped[str] = mapped_column(String(128), nullable=False)
    rel_id: Mapped[int] = mapped_column(Integer, nullable=False)
    requested_by: Mapped[str] = mapped_column(String(128), nullable=False)
    payload_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Queued", server_default="Queued")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_email_notification_intent_rel", "message_name", "rel_id"),
    )
