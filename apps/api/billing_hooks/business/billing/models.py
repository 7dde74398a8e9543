from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_hooks.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BillingInvoice(Base):
    __tablename__ = "billing_invoice"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Derived from the primary key once the row exists.
    invoice_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Unpaid", server_default="Unpaid")
    issue_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    date_paid: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    date_cancelled: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_method: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default="")
    taxrate: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, default=Decimal("0"), server_default="0")
    taxrate2: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, default=Decimal("0"), server_default="0")
    credit: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    subtotal: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    tax: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    tax2: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    total: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items: Mapped[list[BillingInvoiceItem]] = relationship(
        "billing_hooks.business.billing.models.BillingInvoiceItem",
        back_populates="invoice",
        order_by="billing_hooks.business.billing.models.BillingInvoiceItem.id",
    )

    __table_args__ = (
        Index("ix_billing_invoice_user_status", "user_id", "status"),
        UniqueConstraint("invoice_number", name="uq_billing_invoice_number"),
    )


class BillingInvoiceItem(Base):
    __tablename__ = "billing_invoice_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("billing_invoice.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="", server_default="")
    rel_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"), server_default="0")
    taxed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")

    invoice: Mapped[BillingInvoice] = relationship("billing_hooks.business.billing.models.BillingInvoice", back_populates="items")

    __table_args__ = (
        Index("ix_billing_invoice_item_invoice", "invoice_id"),
        Index("ix_billing_invoice_item_rel", "type", "rel_id"),
    )
