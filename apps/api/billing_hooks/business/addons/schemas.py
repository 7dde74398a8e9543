from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AddonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    status: str
    payment_method: str
    subscription_id: str
    recurring_amount: Decimal
    next_due_date: date | None
    notes: str
    created_at: datetime
    updated_at: datetime


class InvoiceSplitRead(BaseModel):
    invoice_id: int
    new_invoice_id: int | None = None
    related_item_ids: list[int] = Field(default_factory=list)
    moved_item_ids: list[int] = Field(default_factory=list)


class CancellationOutcome(BaseModel):
    addon_id: int
    actor: str
    notes: str | None = None
    gateway_cancelled: bool = False
    subscription_cleared: bool = False
    splits: list[InvoiceSplitRead] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)


class ActivityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    user_id: int
    username: str | None
    correlation_id: str | None
    created_at: datetime
