"""Payment gateway registry.

Gateways are looked up by the payment method name stored on addons and
invoices. Recurring-billing gateways that can stop a subscription remotely
implement :class:`Cancellable`; callers check for it with ``isinstance``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class GatewayError(Exception):
    """Raised by a gateway when the remote call fails."""

    def __init__(self, gateway: str, message: str) -> None:
        self.gateway = gateway
        super().__init__(f"{gateway}: {message}")


class PaymentGateway(Protocol):
    name: str
    display_name: str


@runtime_checkable
class Cancellable(Protocol):
    def cancel_subscription(self, subscription_id: str) -> dict[str, Any]: ...


@dataclass(slots=True)
class OfflineGateway:
    """Gateway with no remote side, e.g. bank transfer or mail-in payment."""

    name: str
    display_name: str


@dataclass(slots=True)
class GatewayRegistry:
    _gateways: dict[str, PaymentGateway] = field(default_factory=dict)

    def register(self, gateway: PaymentGateway) -> None:
        self._gateways[gateway.name.lower()] = gateway

    def get(self, name: str | None) -> PaymentGateway | None:
        if not name:
            return None
        return self._gateways.get(name.lower())

    def names(self) -> list[str]:
        return sorted(self._gateways)


gateway_registry = GatewayRegistry()
gateway_registry.register(OfflineGateway(name="banktransfer", display_name="Bank Transfer"))
gateway_registry.register(OfflineGateway(name="mailin", display_name="Mail In Payment"))


def register_gateway(gateway: PaymentGateway) -> None:
    gateway_registry.register(gateway)


def get_gateway(name: str | None) -> PaymentGateway | None:
    return gateway_registry.get(name)
