# app/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry, owned by one seller.

    Images are plain URLs; uploading them is handled outside this service.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    seller_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
        description="Owning seller (users.id); None for legacy catalog rows",
    )

    name: str = Field(
        max_length=150,
        min_length=2,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: Decimal = Field(
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Unit price in INR",
    )

    original_price: Decimal | None = Field(
        default=None,
        max_digits=12,
        decimal_places=2,
        description="Strikethrough price shown next to price",
    )

    category: str | None = Field(default=None, index=True)
    fabric: str | None = None
    color: str | None = None
    pattern: str | None = None

    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Public image URLs, first one is the hero image",
    )

    # None / [] => ships everywhere
    deliverable_pincodes: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )

    stock_on_hand: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
