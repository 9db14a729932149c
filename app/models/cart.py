# app/models/cart.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class CartSnapshot(SQLModel, table=True):
    """
    Persisted cart + wishlist state, one JSON document per storage key.

    Key format: "<CART_STORAGE_PREFIX>:<user id>".
    Last writer wins; there is no merge between concurrent writers.
    """

    __tablename__ = "cart_snapshots"

    key: str = Field(
        primary_key=True,
        max_length=200,
    )

    payload: str = Field(
        description="Serialized CartState JSON",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
