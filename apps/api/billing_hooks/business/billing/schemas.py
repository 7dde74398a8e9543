from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


InvoiceStatus = Literal["Draft", "Unpaid", "Paid", "Cancelled", "Refunded", "Collections", "Payment Pending"]


class InvoiceItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    user_id: int
    type: str
    rel_id: int
    description: str
    amount: Decimal
    taxed: bool


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str | None
    user_id: int
    status: InvoiceStatus | str
    issue_date: date | None
    due_date: date | None
    date_paid: datetime | None
    date_cancelled: datetime | None
    payment_method: str
    taxrate: Decimal
    taxrate2: Decimal
    credit: Decimal
    subtotal: Decimal
    tax: Decimal
    tax2: Decimal
    total: Decimal
    notes: str
    created_at: datetime
    updated_at: datetime
    items: list[InvoiceItemRead] = Field(default_factory=list)


class InvoiceItemCreate(BaseModel):
    type: str = ""
    rel_id: int = 0
    description: str = Field(min_length=1)
    amount: Decimal
    taxed: bool = False


class InvoiceCreate(BaseModel):
    user_id: int = Field(gt=0)
    status: Literal["Draft", "Unpaid"] = "Unpaid"
    payment_method: str = ""
    taxrate: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    taxrate2: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    issue_date: date | None = None
    due_date: date | None = None
    notes: str = ""
    send_invoice: bool = False
    items: list[InvoiceItemCreate] = Field(default_factory=list)
