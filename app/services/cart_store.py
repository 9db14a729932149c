# app/services/cart_store.py
import logging
from decimal import Decimal

from pydantic import ValidationError

from app.schemas.cart import (
    CartItem,
    CartItemRead,
    CartProduct,
    CartState,
    CartSummary,
    WishlistItem,
)

logger = logging.getLogger(__name__)


class CartStore:
    """
    Authoritative record of a shopper's cart lines and wishlist.

    Responsibilities:
      - one line per product id (adding again increments quantity)
      - quantity is always >= 1; setting it to 0 or below removes the line
      - wishlist has set semantics
      - every mutation is written to the injected storage

    Storage faults never reach the caller. A failed save is logged and the
    in-memory state stays authoritative. A failed load starts an empty
    cart, is retried before the next mutation and blocks saving until it
    succeeds, so an unread cart is never overwritten.

    `storage` is any object with `load(key) -> str | None` and
    `save(key, payload)`.
    """

    def __init__(self, storage, key: str):
        self.storage = storage
        self.key = key
        self.items: list[CartItem] = []
        self.wishlist: list[WishlistItem] = []
        self._load_failed = False
        self._load()

    # ---- persistence ----

    def _load(self) -> None:
        try:
            raw = self.storage.load(self.key)
        except Exception:
            logger.warning("Cart storage read failed for %s", self.key, exc_info=True)
            self._load_failed = True
            return

        self._load_failed = False
        if not raw:
            return

        try:
            state = CartState.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cart state for %s", self.key)
            return

        # Zero-quantity lines are never persisted, but never trust storage
        self.items = [it for it in state.items if it.quantity >= 1]
        self.wishlist = list(state.wishlist)

    def _reload_if_unread(self) -> None:
        if self._load_failed:
            self._load()

    def _persist(self) -> None:
        if self._load_failed:
            logger.warning("Not saving cart %s, stored state is still unread", self.key)
            return
        state = CartState(items=self.items, wishlist=self.wishlist)
        try:
            self.storage.save(self.key, state.model_dump_json())
        except Exception:
            logger.warning("Cart storage write failed for %s", self.key, exc_info=True)

    # ---- cart ----

    def _find(self, product_id: str) -> CartItem | None:
        return next((it for it in self.items if it.id == product_id), None)

    def add_to_cart(self, product: CartProduct) -> None:
        self._reload_if_unread()
        existing = self._find(product.id)
        if existing:
            existing.quantity += 1
        else:
            data = product.model_dump(include=set(CartProduct.model_fields))
            self.items.append(CartItem(**data, quantity=1))
        self._persist()

    def remove_from_cart(self, product_id: str) -> None:
        self._reload_if_unread()
        remaining = [it for it in self.items if it.id != product_id]
        if len(remaining) == len(self.items):
            return
        self.items = remaining
        self._persist()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """
        Set (not increment) the quantity of a line.

        quantity <= 0 behaves as remove_from_cart; unknown ids are ignored.
        """
        self._reload_if_unread()
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return

        item = self._find(product_id)
        if item is None:
            return
        item.quantity = quantity
        self._persist()

    def clear_cart(self) -> None:
        self._reload_if_unread()
        self.items = []
        self._persist()

    def is_in_cart(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    def get_cart_total(self) -> Decimal:
        return sum((it.price * it.quantity for it in self.items), Decimal("0"))

    def get_cart_count(self) -> int:
        return sum(it.quantity for it in self.items)

    # ---- wishlist ----

    def add_to_wishlist(self, product: CartProduct) -> None:
        self._reload_if_unread()
        if self.is_in_wishlist(product.id):
            return
        data = product.model_dump(include=set(CartProduct.model_fields))
        self.wishlist.append(WishlistItem(**data))
        self._persist()

    def remove_from_wishlist(self, product_id: str) -> None:
        self._reload_if_unread()
        remaining = [it for it in self.wishlist if it.id != product_id]
        if len(remaining) == len(self.wishlist):
            return
        self.wishlist = remaining
        self._persist()

    def toggle_wishlist(self, product: CartProduct) -> bool:
        """Flip wishlist membership; returns True when the product is now saved."""
        if self.is_in_wishlist(product.id):
            self.remove_from_wishlist(product.id)
            return False
        self.add_to_wishlist(product)
        return True

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(it.id == product_id for it in self.wishlist)

    # ---- read model ----

    def fingerprint(self) -> tuple:
        """Hashable view of the cart contents, used to spot stale checkout data."""
        return tuple((it.id, it.quantity, str(it.price), it.seller_id) for it in self.items)

    def summary(self) -> CartSummary:
        item_reads = [
            CartItemRead(**it.model_dump(), line_total=it.price * it.quantity)
            for it in self.items
        ]
        return CartSummary(
            items=item_reads,
            total_quantity=self.get_cart_count(),
            total_price=self.get_cart_total(),
            wishlist=list(self.wishlist),
        )
