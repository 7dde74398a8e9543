from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class InternalEvent:
    name: str
    payload: dict[str, Any]


EventHandler = Callable[[InternalEvent], None]


@dataclass
class InProcessEventBus:
    """Synchronous fan-out of named events to their subscribers.

    Handlers run in subscription order on the publishing thread; an exception
    from a handler propagates to the publisher.
    """

    _handlers: dict[str, list[EventHandler]] = field(default_factory=dict)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event_name: str, payload: dict[str, Any]) -> int:
        handlers = tuple(self._handlers.get(event_name, ()))
        event = InternalEvent(name=event_name, payload=payload)
        for handler in handlers:
            handler(event)
        return len(handlers)


event_bus = InProcessEventBus()
