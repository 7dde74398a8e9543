from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from billing_hooks import events
from billing_hooks.business.addons.cancellation import AddonCancellationService
from billing_hooks.business.addons.models import Addon
from billing_hooks.business.addons.schemas import CancellationOutcome
from billing_hooks.business.payments.gateways import (
    Cancellable,
    GatewayError,
    GatewayRegistry,
    OfflineGateway,
    gateway_registry,
    get_gateway,
    register_gateway,
)
from billing_hooks.core.config import get_settings
from billing_hooks.core.database import Base
from billing_hooks.models.activity import ActivityLog


@dataclass
class RecordingGateway:
    name: str = "stripe"
    display_name: str = "Stripe"
    fail_with: str | None = None
    calls: list[str] = field(default_factory=list)

    def cancel_subscription(self, subscription_id: str) -> dict[str, Any]:
        self.calls.append(subscription_id)
        if self.fail_with is not None:
            raise GatewayError(self.name, self.fail_with)
        return {"status": "success", "subscription_id": subscription_id}


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    events.published_events.clear()
    get_settings.cache_clear()
    yield
    events.published_events.clear()
    get_settings.cache_clear()


def _seed_addon(session: Session, payment_method: str, subscription_id: str = "sub_123") -> Addon:
    addon = Addon(
        id=42,
        user_id=7,
        name="Nightly backups",
        status="Cancelled",
        payment_method=payment_method,
        subscription_id=subscription_id,
    )
    session.add(addon)
    session.commit()
    return addon


def _registry(*gateways: Any) -> GatewayRegistry:
    registry = GatewayRegistry()
    for gateway in gateways:
        registry.register(gateway)
    return registry


def test_default_registry_knows_offline_methods() -> None:
    assert gateway_registry.names() == ["banktransfer", "mailin"]
    assert not isinstance(gateway_registry.get("BankTransfer"), Cancellable)
    assert gateway_registry.get("") is None
    assert isinstance(RecordingGateway(), Cancellable)


def test_cancellable_gateway_is_called_and_reference_cleared(db_session: Session) -> None:
    addon = _seed_addon(db_session, "Stripe")
    gateway = RecordingGateway()
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(gateways=_registry(gateway)).cancel_subscription(db_session, addon, outcome)

    assert gateway.calls == ["sub_123"]
    assert outcome.gateway_cancelled is True
    assert outcome.subscription_cleared is True
    db_session.expire_all()
    assert db_session.get(Addon, 42).subscription_id == ""
    published = [event for event in events.published_events if event["event_type"] == "addon.subscription_cancelled"]
    assert published[-1]["subscription_id"] == "sub_123"
    assert published[-1]["remote_cancelled"] is True


def test_offline_gateway_reference_is_cleared_without_remote_call(db_session: Session) -> None:
    addon = _seed_addon(db_session, "banktransfer")
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(
        gateways=_registry(OfflineGateway(name="banktransfer", display_name="Bank Transfer"))
    ).cancel_subscription(db_session, addon, outcome)

    assert outcome.gateway_cancelled is False
    assert outcome.subscription_cleared is True
    db_session.expire_all()
    assert db_session.get(Addon, 42).subscription_id == ""


def test_unknown_gateway_reference_is_cleared(db_session: Session) -> None:
    addon = _seed_addon(db_session, "retired-gateway")
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(gateways=_registry()).cancel_subscription(db_session, addon, outcome)

    assert outcome.subscription_cleared is True
    db_session.expire_all()
    assert db_session.get(Addon, 42).subscription_id == ""


def test_reference_kept_when_clearing_requires_remote_cancel(
    db_session: Session, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CLEAR_SUBSCRIPTION_WITHOUT_GATEWAY_CANCEL", "false")
    get_settings.cache_clear()
    addon = _seed_addon(db_session, "banktransfer")
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(gateways=_registry()).cancel_subscription(db_session, addon, outcome)

    assert outcome.subscription_cleared is False
    db_session.expire_all()
    assert db_session.get(Addon, 42).subscription_id == "sub_123"
    assert events.published_events == []


def test_gateway_error_keeps_reference_and_logs_activity(db_session: Session) -> None:
    addon = _seed_addon(db_session, "stripe")
    gateway = RecordingGateway(fail_with="subscription not found")
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(gateways=_registry(gateway)).cancel_subscription(db_session, addon, outcome)

    assert gateway.calls == ["sub_123"]
    assert outcome.subscription_cleared is False
    assert outcome.failures == [
        "Unable to cancel subscription sub_123 for addon #42. Reason: stripe: subscription not found"
    ]
    db_session.expire_all()
    assert db_session.get(Addon, 42).subscription_id == "sub_123"
    logged = db_session.scalars(select(ActivityLog)).all()
    assert [entry.description for entry in logged] == outcome.failures


def test_addon_without_subscription_is_skipped(db_session: Session) -> None:
    addon = _seed_addon(db_session, "stripe", subscription_id="")
    gateway = RecordingGateway()
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    AddonCancellationService(gateways=_registry(gateway)).cancel_subscription(db_session, addon, outcome)

    assert gateway.calls == []
    assert outcome.subscription_cleared is False
    assert events.published_events == []


def test_registered_gateway_is_used_by_default_service(db_session: Session, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gateway_registry, "_gateways", dict(gateway_registry._gateways))
    gateway = RecordingGateway(name="Stripe")
    register_gateway(gateway)
    addon = _seed_addon(db_session, "stripe")
    outcome = CancellationOutcome(addon_id=42, actor="admin")

    assert get_gateway("STRIPE") is gateway
    assert get_gateway(None) is None
    assert "stripe" in gateway_registry.names()

    AddonCancellationService().cancel_subscription(db_session, addon, outcome)

    assert gateway.calls == ["sub_123"]
    assert outcome.gateway_cancelled is True
