from __future__ import annotations

import logging
from typing import Any

from billing_hooks.context import get_correlation_id
from billing_hooks.core.events import event_bus


logger = logging.getLogger("billing_hooks.events")

published_events: list[dict[str, Any]] = []


def publish(envelope: dict[str, Any]) -> None:
    if envelope.get("correlation_id") is None:
        envelope["correlation_id"] = get_correlation_id()

    published_events.append(envelope)
    event_type = envelope.get("event_type")
    if isinstance(event_type, str) and event_type:
        delivered = event_bus.publish(event_type, envelope)
        logger.debug("event.published", extra={"event_name": event_type, "handlers": delivered})
