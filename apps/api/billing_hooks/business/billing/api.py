from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from billing_hooks.business.billing.schemas import InvoiceCreate, InvoiceItemRead, InvoiceRead
from billing_hooks.business.billing.service import billing_service
from billing_hooks.core.auth import AuthUser
from billing_hooks.core.database import get_db
from billing_hooks.core.rbac import INVOICES_READ, INVOICES_WRITE, require_permissions


router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/invoices", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions(INVOICES_WRITE)),
) -> InvoiceRead:
    return billing_service.create_invoice(db, user.sub, payload)


@router.get("/invoices", response_model=list[InvoiceRead], dependencies=[Depends(require_permissions(INVOICES_READ))])
def list_invoices(
    user_id: int | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[InvoiceRead]:
    return billing_service.list_invoices(db, user_id=user_id, status_filter=status_filter)


@router.get("/invoices/{invoice_id}", response_model=InvoiceRead, dependencies=[Depends(require_permissions(INVOICES_READ))])
def get_invoice(invoice_id: int, db: Session = Depends(get_db)) -> InvoiceRead:
    return billing_service.get_invoice(db, invoice_id)


@router.get(
    "/invoices/{invoice_id}/items",
    response_model=list[InvoiceItemRead],
    dependencies=[Depends(require_permissions(INVOICES_READ))],
)
def list_invoice_items(invoice_id: int, db: Session = Depends(get_db)) -> list[InvoiceItemRead]:
    billing_service.get_invoice(db, invoice_id)
    return [InvoiceItemRead.model_validate(item) for item in billing_service.list_items(db, invoice_id)]


@router.post(
    "/invoices/{invoice_id}/recalculate",
    response_model=InvoiceRead,
    dependencies=[Depends(require_permissions(INVOICES_WRITE))],
)
def recalculate_invoice(invoice_id: int, db: Session = Depends(get_db)) -> InvoiceRead:
    return billing_service.refresh_totals(db, invoice_id)
