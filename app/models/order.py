# app/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order: one shared shipping address, one payment method and
    the charges aggregated across every seller in the cart.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        description="Human-facing order number, e.g. GC250101A1B2C3",
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # One checkout attempt => at most one order
    idempotency_key: str = Field(
        unique=True,
        index=True,
        max_length=64,
    )

    shipping_address: dict = Field(
        sa_column=Column(JSON, nullable=False),
        description="Frozen copy of the selected address",
    )

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_cost: Decimal = Field(
        default=Decimal("0"), max_digits=12, decimal_places=2
    )
    gst_amount: Decimal = Field(
        default=Decimal("0"), max_digits=12, decimal_places=2
    )
    convenience_fee: Decimal = Field(
        default=Decimal("0"), max_digits=12, decimal_places=2
    )
    total: Decimal = Field(max_digits=12, decimal_places=2)

    # upi | cod
    payment_method: str = Field(index=True)

    # pending | paid | failed | refunded
    payment_status: str = Field(default="pending", index=True)

    # pending | confirmed | packed | shipped | out_for_delivery |
    # delivered | cancelled | returned
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    notes: str | None = Field(
        default=None,
        description="UPI transaction reference or COD marker",
    )

    tracking_id: str | None = None

    customer_cancel_reason: str | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    Name, image and price are a snapshot taken at checkout, not a live
    reference to the product row.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Plain references: products/sellers may disappear after the order
    product_id: str = Field(index=True)
    seller_id: str | None = Field(default=None, index=True)

    product_name: str
    product_image: str | None = None

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="Unit price at time of order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
