# app/schemas/cart.py
import uuid
from decimal import Decimal

from sqlmodel import SQLModel, Field


class CartProduct(SQLModel):
    """
    Product snapshot held by the cart and wishlist.

    Copied from the catalog when the shopper adds the product; later
    price changes in the catalog do not touch it.
    """

    id: str
    name: str
    price: Decimal = Field(ge=0)
    original_price: Decimal | None = None
    seller_id: str | None = None
    category: str | None = None
    fabric: str | None = None
    color: str | None = None
    pattern: str | None = None
    image: str | None = None
    deliverable_pincodes: list[str] | None = None


class CartItem(CartProduct):
    """
    Cart line: a product snapshot plus a quantity (always >= 1).
    """

    quantity: int = Field(default=1, ge=1)


class WishlistItem(CartProduct):
    """
    Saved-for-later product, no quantity.
    """

    pass


class CartState(SQLModel):
    """
    Persisted form of the cart store (one JSON document per key).
    """

    items: list[CartItem] = Field(default_factory=list)
    wishlist: list[WishlistItem] = Field(default_factory=list)


# ---- HTTP payloads ----


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart. Every call adds one unit.
    """

    product_id: uuid.UUID


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.

    Zero or negative removes the line.
    """

    quantity: int


class CartItemRead(CartItem):
    """
    Read model for a single cart line, including line_total.
    """

    line_total: Decimal


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    total_quantity: int
    total_price: Decimal
    wishlist: list[WishlistItem] = Field(default_factory=list)
