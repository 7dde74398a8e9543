from __future__ import annotations

from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from billing_hooks import events
from billing_hooks.business.billing.models import BillingInvoiceItem
from billing_hooks.core.auth import AuthUser, get_current_user
from billing_hooks.core.config import get_settings
from billing_hooks.core.database import Base, get_db
from billing_hooks.main import app


ALL_PERMISSIONS = {
    "billing.addons.read",
    "billing.addons.cancel",
    "billing.invoices.read",
    "billing.invoices.write",
    "billing.activity.read",
}


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
def clear_stubs() -> Generator[None, None, None]:
    events.published_events.clear()
    get_settings.cache_clear()
    yield
    events.published_events.clear()
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_user() -> AuthUser:
        return AuthUser(sub="billing-admin", roles=list(ALL_PERMISSIONS))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_invoice(client: TestClient, **overrides: object) -> dict:
    payload: dict[str, object] = {
        "user_id": 7,
        "payment_method": "banktransfer",
        "taxrate": "20",
        "issue_date": "2026-10-01",
        "items": [
            {"type": "Addon", "rel_id": 42, "description": "Nightly backups", "amount": "10.00"},
            {"type": "Hosting", "rel_id": 3, "description": "Shared hosting", "amount": "25.00"},
        ],
    }
    payload.update(overrides)
    response = client.post("/billing/invoices", json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_and_read_invoice(client: TestClient) -> None:
    created = _create_invoice(client, send_invoice=True)

    assert created["status"] == "Unpaid"
    assert created["due_date"] == "2026-10-08"
    assert Decimal(created["subtotal"]) == Decimal("35")
    assert Decimal(created["tax"]) == Decimal("7")
    assert Decimal(created["total"]) == Decimal("42")
    assert len(created["items"]) == 2

    fetched = client.get(f"/billing/invoices/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["invoice_number"] == created["invoice_number"]

    items = client.get(f"/billing/invoices/{created['id']}/items")
    assert [item["type"] for item in items.json()] == ["Addon", "Hosting"]

    event_types = [event["event_type"] for event in events.published_events]
    assert event_types == ["invoice.created", "email.send_requested"]
    assert events.published_events[1]["requested_by"] == "billing-admin"


def test_invoice_validation_errors(client: TestClient) -> None:
    assert client.post("/billing/invoices", json={"user_id": 0}).status_code == 422
    assert client.post("/billing/invoices", json={"user_id": 7, "status": "Paid"}).status_code == 422
    assert client.post("/billing/invoices", json={"user_id": 7, "taxrate": "-1"}).status_code == 422


def test_list_invoices_filters(client: TestClient) -> None:
    first = _create_invoice(client)
    _create_invoice(client, user_id=8)
    draft = _create_invoice(client, status="Draft")

    by_user = client.get("/billing/invoices", params={"user_id": 7}).json()
    assert [invoice["id"] for invoice in by_user] == [first["id"], draft["id"]]

    drafts = client.get("/billing/invoices", params={"status": "Draft"}).json()
    assert [invoice["id"] for invoice in drafts] == [draft["id"]]


def test_recalculate_picks_up_changed_items(client: TestClient, db_session: Session) -> None:
    created = _create_invoice(client)
    db_session.add(
        BillingInvoiceItem(invoice_id=created["id"], user_id=7, type="Setup", rel_id=0, description="Setup fee", amount=Decimal("5.00"))
    )
    db_session.commit()

    response = client.post(f"/billing/invoices/{created['id']}/recalculate")

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["subtotal"]) == Decimal("40")
    assert Decimal(body["total"]) == Decimal("48")
    assert len(body["items"]) == 3


def test_unknown_invoice_returns_404(client: TestClient) -> None:
    assert client.get("/billing/invoices/999").status_code == 404
    assert client.get("/billing/invoices/999/items").status_code == 404
    assert client.post("/billing/invoices/999/recalculate").status_code == 404
