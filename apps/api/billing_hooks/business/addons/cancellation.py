from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_hooks import events
from billing_hooks.business.addons.models import Addon, CustomField, CustomFieldValue
from billing_hooks.business.addons.schemas import CancellationOutcome, InvoiceSplitRead
from billing_hooks.business.billing.models import BillingInvoice, BillingInvoiceItem
from billing_hooks.business.billing.service import BillingService
from billing_hooks.business.notifications.service import NotificationService
from billing_hooks.business.payments.gateways import Cancellable, GatewayError, GatewayRegistry, gateway_registry
from billing_hooks.core.config import get_settings
from billing_hooks.metrics import observe_addon_cancellation, observe_hook_step_failure, observe_invoice_split
from billing_hooks.services.activity import log_activity


logger = logging.getLogger("billing_hooks.addons.cancellation")

ADDON_ITEM_TYPE = "Addon"


def build_cancellation_note(username: str, on: date, ticket_id: str | None, date_format: str = "%d/%m/%Y") -> str:
    note = f"Addon cancelled by {username} on {on.strftime(date_format)}"
    if ticket_id:
        note += f" through ticket {ticket_id}"
    return note


def partition_items(
    items: Iterable[BillingInvoiceItem],
    addon_id: int,
) -> tuple[list[BillingInvoiceItem], list[BillingInvoiceItem]]:
    """Split invoice items into those billed for ``addon_id`` and everything else."""
    related: list[BillingInvoiceItem] = []
    unrelated: list[BillingInvoiceItem] = []
    for item in items:
        if item.type == ADDON_ITEM_TYPE and item.rel_id == addon_id:
            related.append(item)
        else:
            unrelated.append(item)
    return related, unrelated


@dataclass(slots=True)
class AddonCancellationService:
    """Clean-up that follows an addon cancellation.

    Each step persists on its own: the note, the subscription reference and
    every invoice split commit separately, and a database failure in one of
    them is rolled back, written to the activity log and skipped. A split is
    a single unit, so an invoice is either fully split or left as it was.
    """

    billing_service: BillingService = field(default_factory=BillingService)
    notification_service: NotificationService = field(default_factory=NotificationService)
    gateways: GatewayRegistry = field(default_factory=lambda: gateway_registry)

    def handle_addon_cancelled(self, session: Session, actor: str, addon_id: int) -> CancellationOutcome:
        addon = session.get(Addon, addon_id)
        if addon is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="addon not found")

        user_id = addon.user_id
        outcome = CancellationOutcome(addon_id=addon_id, actor=actor)
        logger.info("addon_cancellation.started", extra={"addon_id": addon_id, "user_id": user_id})

        outcome.notes = self.append_cancellation_note(session, addon, actor, outcome)
        self.cancel_subscription(session, addon, outcome)

        invoice_ids = [invoice.id for invoice in self.billing_service.list_unpaid_invoices(session, user_id)]
        for invoice_id in invoice_ids:
            split = self.split_invoice(session, invoice_id, addon_id, actor, outcome)
            if split is not None:
                outcome.splits.append(split)

        observe_addon_cancellation("partial" if outcome.failures else "completed")
        logger.info(
            "addon_cancellation.finished",
            extra={"addon_id": addon_id, "user_id": user_id, "status": "partial" if outcome.failures else "completed"},
        )
        events.publish(
            {
                "event_type": "addon.cancellation_processed",
                "addon_id": addon_id,
                "user_id": user_id,
                "actor": actor,
                "cancelled_invoice_ids": [split.invoice_id for split in outcome.splits],
                "created_invoice_ids": [split.new_invoice_id for split in outcome.splits if split.new_invoice_id is not None],
                "failures": len(outcome.failures),
            }
        )
        return outcome

    def lookup_ticket_id(self, session: Session, addon_id: int) -> str | None:
        field_name = get_settings().cancellation_ticket_field_name
        field_id = session.scalar(
            select(CustomField.id).where(
                CustomField.field_name == field_name,
                CustomField.type == "addon",
                CustomField.rel_id == addon_id,
            )
        )
        if field_id is None:
            return None
        value = session.scalar(
            select(CustomFieldValue.value).where(
                CustomFieldValue.field_id == field_id,
                CustomFieldValue.rel_id == addon_id,
            )
        )
        return value or None

    def append_cancellation_note(
        self,
        session: Session,
        addon: Addon,
        actor: str,
        outcome: CancellationOutcome,
        *,
        today: date | None = None,
    ) -> str | None:
        addon_id = addon.id
        line = build_cancellation_note(
            actor,
            today or date.today(),
            self.lookup_ticket_id(session, addon_id),
            get_settings().note_date_format,
        )
        notes = f"{addon.notes or ''}\n{line}"
        try:
            addon.notes = notes
            session.add(addon)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            self._record_failure(
                session,
                outcome,
                "note",
                f"Unable to update notes on addon #{addon_id}. Reason: {exc}",
                addon_id=addon_id,
            )
            return None
        return notes

    def cancel_subscription(self, session: Session, addon: Addon, outcome: CancellationOutcome) -> None:
        subscription_id = addon.subscription_id
        if not subscription_id:
            return

        addon_id = addon.id
        payment_method = addon.payment_method
        gateway = self.gateways.get(payment_method)
        if isinstance(gateway, Cancellable):
            try:
                gateway.cancel_subscription(subscription_id)
            except GatewayError as exc:
                # Keep the reference so it still points at the live remote subscription.
                self._record_failure(
                    session,
                    outcome,
                    "subscription",
                    f"Unable to cancel subscription {subscription_id} for addon #{addon_id}. Reason: {exc}",
                    addon_id=addon_id,
                    gateway=payment_method,
                )
                return
            outcome.gateway_cancelled = True
        elif not get_settings().clear_subscription_without_gateway_cancel:
            logger.info(
                "addon_cancellation.subscription_kept",
                extra={"addon_id": addon_id, "gateway": payment_method},
            )
            return

        try:
            addon.subscription_id = ""
            session.add(addon)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            self._record_failure(
                session,
                outcome,
                "subscription",
                f"Unable to clear subscription reference on addon #{addon_id}. Reason: {exc}",
                addon_id=addon_id,
            )
            return

        outcome.subscription_cleared = True
        events.publish(
            {
                "event_type": "addon.subscription_cancelled",
                "addon_id": addon_id,
                "subscription_id": subscription_id,
                "gateway": payment_method,
                "remote_cancelled": outcome.gateway_cancelled,
            }
        )

    def split_invoice(
        self,
        session: Session,
        invoice_id: int,
        addon_id: int,
        actor: str,
        outcome: CancellationOutcome,
    ) -> InvoiceSplitRead | None:
        invoice = session.get(BillingInvoice, invoice_id)
        if invoice is None:
            return None
        related, unrelated = partition_items(self.billing_service.list_items(session, invoice_id), addon_id)
        if not related:
            return None

        split = InvoiceSplitRead(
            invoice_id=invoice_id,
            related_item_ids=[item.id for item in related],
            moved_item_ids=[item.id for item in unrelated],
        )
        new_invoice: BillingInvoice | None = None
        intent = None
        try:
            self.billing_service.mark_cancelled(invoice)
            if unrelated:
                new_invoice = self.billing_service.stage_invoice(
                    session,
                    user_id=invoice.user_id,
                    payment_method=invoice.payment_method,
                    taxrate=invoice.taxrate,
                    taxrate2=invoice.taxrate2,
                    due_date=invoice.due_date,
                    issue_date=date.today(),
                )
                for item in unrelated:
                    item.invoice_id = new_invoice.id
                    session.add(item)
                self.billing_service.recalculate_totals(session, new_invoice, unrelated)
                intent = self.notification_service.queue_email(
                    session,
                    actor,
                    get_settings().invoice_created_email_template,
                    new_invoice.id,
                )
                split.new_invoice_id = new_invoice.id
            self.billing_service.recalculate_totals(session, invoice, related)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            self._record_failure(
                session,
                outcome,
                "split",
                f"Unable to split invoice #{invoice_id} for addon #{addon_id}. Reason: {exc}",
                addon_id=addon_id,
                invoice_id=invoice_id,
            )
            return None

        observe_invoice_split("split" if new_invoice is not None else "cancel_only")
        logger.info(
            "invoice.split" if new_invoice is not None else "invoice.cancelled",
            extra={"addon_id": addon_id, "invoice_id": invoice_id, "new_invoice_id": split.new_invoice_id},
        )
        events.publish(
            {
                "event_type": "invoice.cancelled",
                "invoice_id": invoice_id,
                "addon_id": addon_id,
                "actor": actor,
            }
        )
        if new_invoice is not None:
            self.billing_service.announce_created(new_invoice, actor)
            events.publish(
                {
                    "event_type": "invoice.split",
                    "invoice_id": invoice_id,
                    "new_invoice_id": split.new_invoice_id,
                    "moved_item_ids": split.moved_item_ids,
                    "addon_id": addon_id,
                }
            )
        if intent is not None:
            self.notification_service.announce(intent)
        return split

    def _record_failure(
        self,
        session: Session,
        outcome: CancellationOutcome,
        step: str,
        message: str,
        **fields: Any,
    ) -> None:
        observe_hook_step_failure(step)
        logger.warning("addon_cancellation.step_failed", extra={"step": step, "error": message, **fields})
        outcome.failures.append(message)
        log_activity(session, message, user_id=0)


addon_cancellation_service = AddonCancellationService()
