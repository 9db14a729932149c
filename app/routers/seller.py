# app/routers/seller.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth, require_seller
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.shop_repo import ShopRepository
from app.repositories.stats_repo import StatsRepository
from app.schemas.order import OrderRead, OrderStatus, OrderStatusUpdate, OrderWithItemsRead
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.schemas.shop import PaymentSettingsUpdate, SellerRegister, ShopRead
from app.schemas.stats import SellerDashboardStats
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.shop_service import ShopService
from app.services.stats_service import StatsService

router = APIRouter(prefix="/seller", tags=["Seller"])

shop_service = ShopService(ShopRepository())
product_service = ProductService(ProductRepository())
order_service = OrderService(OrderRepository())
stats_service = StatsService(StatsRepository())


# -------- Shop & payment settings --------


@router.post(
    "/register",
    response_model=ShopRead,
    status_code=status.HTTP_201_CREATED,
)
def register_shop(
    payload: SellerRegister,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Open a shop. A customer account becomes a seller account.
    """
    return shop_service.register_seller(session, current_user, payload)


@router.get("/payment-settings", response_model=ShopRead)
def get_payment_settings(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
):
    return shop_service.get_shop(session, current_user)


@router.put("/payment-settings", response_model=ShopRead)
def update_payment_settings(
    payload: PaymentSettingsUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
):
    """
    Replace UPI / COD / QR settings and the seller's charges
    (shipping, free-shipping threshold, GST, convenience fee).
    """
    return shop_service.update_payment_settings(session, current_user, payload)


# -------- Products --------


@router.post(
    "/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
):
    return product_service.create_product(session, current_user.id, payload)


@router.patch("/products/{product_id}", response_model=ProductRead)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
):
    """
    Partial update of one of the caller's products.
    """
    return product_service.update_product(session, current_user.id, product_id, payload)


# -------- Orders & stats --------


@router.get("/orders", response_model=list[OrderWithItemsRead])
def list_my_shop_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
    skip: int = 0,
    limit: int = 50,
    status: OrderStatus | None = None,
):
    """
    Orders that contain the caller's products; only those lines are listed.
    """
    return order_service.list_seller_orders(
        session, current_user.id, skip, limit, status_filter=status
    )


@router.patch("/orders/{order_id}/status", response_model=OrderRead)
def update_shop_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
):
    return order_service.update_status(session, order_id, payload, seller_id=current_user.id)


@router.get("/stats", response_model=SellerDashboardStats)
def get_my_stats(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller),
    top_n_products: int = 5,
):
    return stats_service.get_seller_dashboard_stats(
        session, current_user.id, top_n_products=top_n_products
    )
