from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from billing_hooks import events
from billing_hooks.business.notifications.models import EmailNotificationIntent


logger = logging.getLogger("billing_hooks.notifications")


@dataclass(slots=True)
class NotificationService:
    def queue_email(
        self,
        session: Session,
        actor: str,
        message_name: str,
        rel_id: int,
        custom_vars: dict[str, Any] | None = None,
    ) -> EmailNotificationIntent:
        """Stage a templated email in the caller's transaction.

        Nothing is published until :meth:`announce` runs, so callers that roll
        back never leak a notification.
        """
        intent = EmailNotificationIntent(
            message_name=message_name,
            rel_id=rel_id,
            requested_by=actor,
            payload_json=json.dumps(custom_vars) if custom_vars else None,
            status="Queued",
        )
        session.add(intent)
        session.flush()
        return intent

    def announce(self, intent: EmailNotificationIntent) -> None:
        logger.info("email.queued", extra={"invoice_id": intent.rel_id})
        events.publish(
            {
                "event_type": "email.send_requested",
                "intent_id": intent.id,
                "message_name": intent.message_name,
                "rel_id": intent.rel_id,
                "requested_by": intent.requested_by,
            }
        )

    def send_email(
        self,
        session: Session,
        actor: str,
        message_name: str,
        rel_id: int,
        custom_vars: dict[str, Any] | None = None,
    ) -> EmailNotificationIntent:
        intent = self.queue_email(session, actor, message_name, rel_id, custom_vars)
        session.commit()
        session.refresh(intent)
        self.announce(intent)
        return intent


notification_service = NotificationService()
