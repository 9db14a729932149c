# app/models/shop.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Shop(SQLModel, table=True):
    """
    A seller's storefront and direct-payment configuration.

    Checkout reads the payment columns as a SellerPaymentProfile; only
    the seller (or an admin) writes them.
    """

    __tablename__ = "shops"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    seller_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    shop_name: str = Field(max_length=100)

    # Direct payment
    upi_id: str | None = None
    accepts_cod: bool | None = Field(
        default=True,
        description="None is treated as accepting COD",
    )
    payment_qr_url: str | None = None
    payment_instructions: str | None = None

    # Charges
    shipping_charge: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=12,
        decimal_places=2,
    )
    free_shipping_above: Decimal | None = Field(
        default=None,
        ge=0,
        max_digits=12,
        decimal_places=2,
    )
    charge_gst: bool = Field(default=False)
    gst_percentage: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=5,
        decimal_places=2,
    )
    charge_convenience: bool = Field(default=False)
    convenience_charge: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=12,
        decimal_places=2,
    )

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
