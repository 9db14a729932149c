# app/schemas/shop.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class PaymentSettingsBase(SQLModel):
    """
    Seller-editable direct payment configuration.

    Rules:
      - charges are non-negative
      - gst_percentage between 0 and 28
      - upi_id looks like "<handle>@<bank>"
    """

    model_config = ConfigDict(extra="forbid")

    upi_id: str | None = None
    accepts_cod: bool | None = True
    payment_qr_url: str | None = None
    payment_instructions: str | None = None
    shipping_charge: Decimal = Field(default=Decimal("0"), ge=0)
    free_shipping_above: Decimal | None = Field(default=None, ge=0)
    charge_gst: bool = False
    gst_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=28)
    charge_convenience: bool = False
    convenience_charge: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("upi_id")
    @classmethod
    def check_upi(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        handle, sep, bank = v.partition("@")
        if not sep or not handle or not bank:
            raise ValueError("UPI ID must look like name@bank")
        return v

    @field_validator("payment_qr_url", "payment_instructions")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class PaymentSettingsUpdate(PaymentSettingsBase):
    """
    Full replacement of a seller's payment settings.
    """

    pass


class SellerRegister(PaymentSettingsBase):
    """
    Payload for opening a shop; the caller becomes a seller.
    """

    shop_name: str = Field(max_length=100)

    @field_validator("shop_name")
    @classmethod
    def check_shop_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Shop name is required")
        return v


class ShopRead(PaymentSettingsBase):
    """Seller's own view of their shop."""

    model_config = ConfigDict(extra="ignore")

    id: uuid.UUID
    seller_id: uuid.UUID
    shop_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
