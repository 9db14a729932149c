# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin, require_customer
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    OrderCancel,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderTracking,
    OrderWithItemsRead,
    PaymentStatus,
    PaymentStatusUpdate,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
service = OrderService(order_repo)


# -------- Customer endpoints --------


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated customer's orders (without items), newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.get_user_order(session, current_user.id, order_id)


@router.post(
    "/me/{order_id}/cancel",
    response_model=OrderRead,
)
def cancel_my_order(
    order_id: uuid.UUID,
    payload: OrderCancel,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Cancel an order that is still pending or confirmed.
    """
    return service.cancel_by_customer(session, current_user.id, order_id, payload)


@router.get(
    "/track/{order_number}",
    response_model=OrderTracking,
)
def track_my_order(
    order_number: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.track_order(session, current_user.id, order_number)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
):
    """
    List all orders (admin only), optionally filtered by status.
    """
    return service.list_all_orders(
        session, skip, limit, status_filter=status, payment_status=payment_status
    )


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along its lifecycle (admin only).

      pending          -> confirmed, cancelled

      confirmed        -> packed, cancelled

      packed           -> shipped, cancelled

      shipped          -> out_for_delivery, delivered

      out_for_delivery -> delivered

      delivered        -> returned

    """
    return service.update_status(session, order_id, payload)


@router.patch(
    "/{order_id}/payment-status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_payment_status(
    order_id: uuid.UUID,
    payload: PaymentStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Record the outcome of the shopper's direct payment (admin only).
    """
    return service.update_payment_status(session, order_id, payload)
