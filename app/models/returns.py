# app/models/returns.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class ReturnRequest(SQLModel, table=True):
    """
    Customer request to return (part of) a delivered order.
    """

    __tablename__ = "return_requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Set only when exactly one line was selected
    order_item_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="order_items.id",
    )

    reason: str
    description: str | None = None

    # pending | approved | rejected | completed
    status: str = Field(default="pending", index=True)

    refund_amount: Decimal | None = Field(
        default=None, max_digits=12, decimal_places=2
    )
    # requested | processed
    refund_status: str | None = None

    admin_notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    processed_at: datetime | None = None
