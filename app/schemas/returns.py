# app/schemas/returns.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

ReturnReason = Literal[
    "Product damaged or defective",
    "Wrong item received",
    "Item not as described",
    "Quality not satisfactory",
    "Size/fit issues",
    "Changed my mind",
    "Other",
]
ReturnStatus = Literal["pending", "approved", "rejected", "completed"]


class ReturnRequestCreate(SQLModel):
    """
    Customer return request.

    item_ids: order lines to return; empty means the whole order.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID
    reason: ReturnReason
    description: str | None = None
    item_ids: list[uuid.UUID] = []
    request_refund: bool = True

    @field_validator("description")
    @classmethod
    def normalize_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ReturnStatusUpdate(SQLModel):
    """
    Admin decision on a return request.
    """

    model_config = ConfigDict(extra="forbid")

    status: ReturnStatus
    admin_notes: str | None = None


class ReturnRequestRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    user_id: uuid.UUID
    order_item_id: uuid.UUID | None
    reason: str
    description: str | None
    status: ReturnStatus
    refund_amount: Decimal | None
    refund_status: str | None
    admin_notes: str | None
    created_at: datetime
    updated_at: datetime
    processed_at: datetime | None
