# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import get_current_user
from app.database import get_session
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.schemas.delivery import DeliveryEstimate
from app.schemas.product import ProductRead
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    category: str | None = None,
    seller_id: uuid.UUID | None = None,
):
    """
    List active products.

    - Public endpoint.
    - Optional `category` and `seller_id` filters.
    """
    return service.list_products(
        session, skip=skip, limit=limit, category=category, seller_id=seller_id
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


@router.get("/{product_id}/delivery", response_model=DeliveryEstimate)
def get_delivery_estimate(
    product_id: uuid.UUID,
    pincode: str | None = None,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Delivery estimate of a product for a postal code.

    Without `pincode` the signed-in shopper's saved postal code is used;
    guests without one get `deliverable=false`.
    """
    if not pincode and current_user is not None:
        pincode = current_user.pincode
    return service.delivery_estimate(session, product_id, pincode)
