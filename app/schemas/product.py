# app/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.user import PINCODE_RE


def _check_pincodes(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    cleaned = [p.strip() for p in v if p and p.strip()]
    for p in cleaned:
        if not PINCODE_RE.match(p):
            raise ValueError(f"invalid pincode: {p}")
    return cleaned


class ProductRead(SQLModel):
    """
    Product as shown on the storefront.
    """

    id: uuid.UUID
    seller_id: uuid.UUID | None
    name: str
    slug: str
    description: str | None = None
    price: Decimal
    original_price: Decimal | None = None
    category: str | None = None
    fabric: str | None = None
    color: str | None = None
    pattern: str | None = None
    images: list[str] = []
    deliverable_pincodes: list[str] | None = None
    stock_on_hand: int
    is_active: bool
    created_at: datetime


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    - images are public URLs (uploads happen elsewhere).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=150)
    slug: str | None = None
    description: str | None = None
    price: Decimal = Field(ge=0)
    original_price: Decimal | None = Field(default=None, ge=0)
    category: str | None = None
    fabric: str | None = None
    color: str | None = None
    pattern: str | None = None
    images: list[str] = []
    deliverable_pincodes: list[str] | None = None
    stock_on_hand: int = Field(default=0, ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        return v

    @field_validator("deliverable_pincodes")
    @classmethod
    def validate_pincodes(cls, v: list[str] | None) -> list[str] | None:
        return _check_pincodes(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload; omitted fields are left unchanged.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=150)
    slug: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    original_price: Decimal | None = Field(default=None, ge=0)
    category: str | None = None
    fabric: str | None = None
    color: str | None = None
    pattern: str | None = None
    images: list[str] | None = None
    deliverable_pincodes: list[str] | None = None
    stock_on_hand: int | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("deliverable_pincodes")
    @classmethod
    def validate_pincodes(cls, v: list[str] | None) -> list[str] | None:
        return _check_pincodes(v)
