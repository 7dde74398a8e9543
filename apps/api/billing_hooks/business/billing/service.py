from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import Select, select
from sqlalchemy.orm import Session, selectinload

from billing_hooks import events
from billing_hooks.business.billing.models import BillingInvoice, BillingInvoiceItem
from billing_hooks.business.billing.schemas import InvoiceCreate, InvoiceRead
from billing_hooks.business.billing.totals import InvoiceTotals, compute_invoice_totals
from billing_hooks.business.notifications.service import NotificationService
from billing_hooks.core.config import get_settings


logger = logging.getLogger("billing_hooks.billing")


@dataclass(slots=True)
class BillingService:
    notification_service: NotificationService = field(default_factory=NotificationService)

    def create_invoice(self, session: Session, actor: str, payload: InvoiceCreate) -> InvoiceRead:
        settings = get_settings()
        issue_date = payload.issue_date or date.today()
        invoice = self.stage_invoice(
            session,
            user_id=payload.user_id,
            invoice_status=payload.status,
            payment_method=payload.payment_method,
            taxrate=payload.taxrate,
            taxrate2=payload.taxrate2,
            issue_date=issue_date,
            due_date=payload.due_date or (issue_date + timedelta(days=settings.invoice_due_days)),
            notes=payload.notes,
        )

        items: list[BillingInvoiceItem] = []
        for row in payload.items:
            item = BillingInvoiceItem(
                invoice_id=invoice.id,
                user_id=invoice.user_id,
                type=row.type,
                rel_id=row.rel_id,
                description=row.description,
                amount=self._q(row.amount),
                taxed=row.taxed,
            )
            session.add(item)
            items.append(item)
        session.flush()
        self.recalculate_totals(session, invoice, items)

        intent = None
        if payload.send_invoice:
            intent = self.notification_service.queue_email(
                session, actor, settings.invoice_created_email_template, invoice.id
            )
        session.commit()

        self.announce_created(invoice, actor)
        if intent is not None:
            self.notification_service.announce(intent)
        return self.get_invoice(session, invoice.id)

    def stage_invoice(
        self,
        session: Session,
        *,
        user_id: int,
        payment_method: str,
        taxrate: Decimal,
        taxrate2: Decimal,
        due_date: date | None,
        issue_date: date | None = None,
        invoice_status: str = "Unpaid",
        notes: str = "",
    ) -> BillingInvoice:
        """Insert an empty invoice in the caller's transaction and return it flushed."""
        invoice = BillingInvoice(
            user_id=user_id,
            status=invoice_status,
            issue_date=issue_date or date.today(),
            due_date=due_date,
            payment_method=payment_method,
            taxrate=Decimal(taxrate),
            taxrate2=Decimal(taxrate2),
            credit=Decimal("0"),
            notes=notes,
        )
        session.add(invoice)
        session.flush()
        invoice.invoice_number = self.format_number(invoice.id)
        session.flush()
        return invoice

    def announce_created(self, invoice: BillingInvoice, actor: str) -> None:
        events.publish(
            {
                "event_type": "invoice.created",
                "invoice_id": invoice.id,
                "user_id": invoice.user_id,
                "status": invoice.status,
                "total": str(invoice.total),
                "actor": actor,
            }
        )

    @staticmethod
    def mark_cancelled(invoice: BillingInvoice, when: datetime | None = None) -> None:
        invoice.status = "Cancelled"
        invoice.date_cancelled = when or datetime.now(timezone.utc)

    def recalculate_totals(
        self,
        session: Session,
        invoice: BillingInvoice,
        items: Sequence[BillingInvoiceItem],
    ) -> InvoiceTotals:
        """Recompute and stage the totals of ``invoice`` from exactly ``items``.

        ``items`` is the set now attributed to the invoice; the relationship
        collection is not consulted, since it may still reflect ownership from
        before a reassignment in the same unit of work.
        """
        totals = compute_invoice_totals(
            (item.amount for item in items),
            invoice.taxrate,
            invoice.taxrate2,
            invoice.credit,
        )
        invoice.subtotal = totals.subtotal
        invoice.tax = self._q(totals.tax)
        invoice.tax2 = self._q(totals.tax2)
        invoice.total = self._q(totals.total)
        session.add(invoice)
        return totals

    def refresh_totals(self, session: Session, invoice_id: int) -> InvoiceRead:
        invoice = self._get_invoice(session, invoice_id)
        items = self.list_items(session, invoice.id)
        self.recalculate_totals(session, invoice, items)
        session.commit()
        return self.get_invoice(session, invoice.id)

    def list_items(self, session: Session, invoice_id: int) -> list[BillingInvoiceItem]:
        stmt = select(BillingInvoiceItem).where(BillingInvoiceItem.invoice_id == invoice_id).order_by(BillingInvoiceItem.id)
        return list(session.scalars(stmt).all())

    def list_unpaid_invoices(self, session: Session, user_id: int) -> list[BillingInvoice]:
        stmt = (
            select(BillingInvoice)
            .where(BillingInvoice.user_id == user_id, BillingInvoice.status == "Unpaid")
            .order_by(BillingInvoice.id)
        )
        return list(session.scalars(stmt).all())

    def list_invoices(self, session: Session, *, user_id: int | None = None, status_filter: str | None = None) -> list[InvoiceRead]:
        stmt: Select[tuple[BillingInvoice]] = select(BillingInvoice).options(selectinload(BillingInvoice.items))
        if user_id is not None:
            stmt = stmt.where(BillingInvoice.user_id == user_id)
        if status_filter is not None:
            stmt = stmt.where(BillingInvoice.status == status_filter)
        rows = session.scalars(stmt.order_by(BillingInvoice.id)).all()
        return [InvoiceRead.model_validate(row) for row in rows]

    def get_invoice(self, session: Session, invoice_id: int) -> InvoiceRead:
        invoice = self._get_invoice(session, invoice_id)
        session.refresh(invoice, attribute_names=["items"])
        return InvoiceRead.model_validate(invoice)

    def _get_invoice(self, session: Session, invoice_id: int) -> BillingInvoice:
        invoice = session.scalar(
            select(BillingInvoice).where(BillingInvoice.id == invoice_id).options(selectinload(BillingInvoice.items))
        )
        if invoice is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="invoice not found")
        return invoice

    @staticmethod
    def _q(value: Decimal) -> Decimal:
        return Decimal(value).quantize(Decimal("0.000001"))

    @staticmethod
    def format_number(invoice_id: int) -> str:
        return f"INV-{invoice_id:05d}"


billing_service = BillingService()
