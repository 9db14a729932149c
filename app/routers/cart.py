# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_customer
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import SqlCartStorage
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartSummary, WishlistItem
from app.services.cart_store import CartStore
from app.services.product_service import ProductService

router = APIRouter(tags=["Cart"])

settings = get_settings()
product_service = ProductService(ProductRepository())


def get_cart_store(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
) -> CartStore:
    """
    The caller's cart, persisted in `cart_snapshots` under
    "<CART_STORAGE_PREFIX>:<user id>".
    """
    key = f"{settings.CART_STORAGE_PREFIX}:{current_user.id}"
    return CartStore(SqlCartStorage(session), key)


# -------- Cart --------


@router.get("/cart", response_model=CartSummary)
def get_my_cart(cart: CartStore = Depends(get_cart_store)):
    return cart.summary()


@router.post("/cart", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    cart: CartStore = Depends(get_cart_store),
):
    """
    Add one unit of a product; a second add increments its quantity.

    Unknown products => 404, inactive products => 400.
    """
    product = product_service.get_purchasable(session, payload.product_id)
    cart.add_to_cart(product_service.to_cart_product(product))
    return cart.summary()


@router.patch("/cart/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    cart: CartStore = Depends(get_cart_store),
):
    """
    Set the quantity of a cart line; 0 or below removes it.
    """
    cart.update_quantity(str(product_id), payload.quantity)
    return cart.summary()


@router.delete("/cart/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: uuid.UUID,
    cart: CartStore = Depends(get_cart_store),
):
    cart.remove_from_cart(str(product_id))
    return cart.summary()


@router.delete("/cart", response_model=CartSummary)
def clear_my_cart(cart: CartStore = Depends(get_cart_store)):
    cart.clear_cart()
    return cart.summary()


# -------- Wishlist --------


@router.get("/wishlist", response_model=list[WishlistItem])
def get_my_wishlist(cart: CartStore = Depends(get_cart_store)):
    return cart.wishlist


@router.post("/wishlist/{product_id}", response_model=list[WishlistItem])
def add_to_wishlist(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    cart: CartStore = Depends(get_cart_store),
):
    product = product_service.get_purchasable(session, product_id)
    cart.add_to_wishlist(product_service.to_cart_product(product))
    return cart.wishlist


@router.delete("/wishlist/{product_id}", response_model=list[WishlistItem])
def remove_from_wishlist(
    product_id: uuid.UUID,
    cart: CartStore = Depends(get_cart_store),
):
    cart.remove_from_wishlist(str(product_id))
    return cart.wishlist
