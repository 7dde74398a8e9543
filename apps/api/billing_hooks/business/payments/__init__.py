from billing_hooks.business.payments.gateways import (
    Cancellable,
    GatewayError,
    GatewayRegistry,
    OfflineGateway,
    PaymentGateway,
    gateway_registry,
    get_gateway,
    register_gateway,
)

__all__ = [
    "Cancellable",
    "GatewayError",
    "GatewayRegistry",
    "OfflineGateway",
    "PaymentGateway",
    "gateway_registry",
    "get_gateway",
    "register_gateway",
]
