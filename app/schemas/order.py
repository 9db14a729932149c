# app/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.payment import PaymentMethod, SellerCartTotal
from app.schemas.user import AddressCreate

OrderStatus = Literal[
    "pending",
    "confirmed",
    "packed",
    "shipped",
    "out_for_delivery",
    "delivered",
    "cancelled",
    "returned",
]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]

CancelReason = Literal[
    "Changed my mind",
    "Found a better price elsewhere",
    "Ordered by mistake",
    "Delivery time too long",
    "Payment issues",
    "Other",
]


# ---- Order creation (checkout -> persistence) ----


class OrderLineCreate(SQLModel):
    """
    Frozen snapshot of one cart line.
    """

    product_id: str
    seller_id: str | None = None
    product_name: str
    product_image: str | None = None
    quantity: int = Field(gt=0)
    price: Decimal


class OrderCreate(SQLModel):
    """
    Order header + lines produced by the checkout orchestrator.

    Amounts are already rounded to paise.
    """

    idempotency_key: str
    shipping_address: dict
    subtotal: Decimal
    shipping_cost: Decimal
    gst_amount: Decimal
    convenience_fee: Decimal
    total: Decimal
    payment_method: PaymentMethod
    notes: str | None = None
    lines: list[OrderLineCreate]


class PlaceOrderRequest(SQLModel):
    """
    Payload for POST /checkout/orders.

    new_address wins over address_id; with neither, the default address
    is used.
    transaction_reference + payment_confirmed are required for UPI.
    idempotency_key should be generated once per checkout attempt by the
    client and resent on retries.
    """

    model_config = ConfigDict(extra="forbid")

    address_id: uuid.UUID | None = None
    new_address: AddressCreate | None = None
    payment_method: PaymentMethod
    transaction_reference: str | None = None
    payment_confirmed: bool = False
    idempotency_key: str | None = Field(default=None, max_length=64)

    @field_validator("transaction_reference")
    @classmethod
    def normalize_reference(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CheckoutSummary(SQLModel):
    """
    Review data for the checkout page.
    """

    sellers: list[SellerCartTotal]
    subtotal: Decimal
    shipping: Decimal
    gst: Decimal
    convenience: Decimal
    grand_total: Decimal
    payment_methods: list[PaymentMethod]
    default_payment_method: PaymentMethod | None = None
    default_address_id: uuid.UUID | None = None
    item_count: int


# ---- Read models ----


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    shipping_address: dict
    subtotal: Decimal
    shipping_cost: Decimal
    gst_amount: Decimal
    convenience_fee: Decimal
    total: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    status: OrderStatus
    notes: str | None
    tracking_id: str | None
    customer_cancel_reason: str | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: str
    seller_id: str | None
    product_name: str
    product_image: str | None
    quantity: int
    price: Decimal
    line_total: Decimal


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderTracking(SQLModel):
    """
    Public-facing progress of an order.
    """

    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    tracking_id: str | None
    steps: list[str]
    created_at: datetime
    updated_at: datetime


class OrderStatusUpdate(SQLModel):
    """
    Seller/admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    tracking_id: str | None = None


class PaymentStatusUpdate(SQLModel):
    """
    Admin payload to change payment status.
    """

    model_config = ConfigDict(extra="forbid")

    payment_status: PaymentStatus


class OrderCancel(SQLModel):
    """
    Customer cancellation payload.
    """

    model_config = ConfigDict(extra="forbid")

    reason: CancelReason
    details: str | None = None

    @field_validator("details")
    @classmethod
    def normalize_details(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None
