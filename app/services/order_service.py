# app/services/order_service.py
import logging
import secrets
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.order import Order, OrderItem
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
    OrderTracking,
    OrderWithItemsRead,
    PaymentStatusUpdate,
)

logger = logging.getLogger(__name__)

# Forward path of a successful order
FULFILMENT_FLOW = [
    "pending",
    "confirmed",
    "packed",
    "shipped",
    "out_for_delivery",
    "delivered",
]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"packed", "cancelled"},
    "packed": {"shipped", "cancelled"},
    "shipped": {"out_for_delivery", "delivered"},
    "out_for_delivery": {"delivered"},
    "delivered": {"returned"},
    "cancelled": set(),
    "returned": set(),
}

CUSTOMER_CANCELLABLE = {"pending", "confirmed"}


def generate_order_number(now: datetime | None = None) -> str:
    """
    Human-facing order number: "GC" + UTC date (YYMMDD) + 6 hex chars.
    """
    now = now or datetime.now(timezone.utc)
    return f"GC{now:%y%m%d}{secrets.token_hex(3).upper()}"


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Persist a checkout (header + lines) in one transaction
      - Return the existing order when an idempotency key is replayed
      - Order tracking and customer cancellation
      - Enforce status transitions (seller/admin)
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    # -------- Checkout persistence --------

    def create_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Write the order header and all its lines atomically.

        Steps:
          1. If this idempotency key already produced an order, return it.
          2. Insert the header (status='pending', payment_status='pending').
          3. Insert one OrderItem per cart line (frozen snapshot).
          4. Commit once; any failure rolls back header and lines together.
        """
        existing = self.order_repo.get_by_idempotency_key(session, payload.idempotency_key)
        if existing:
            return self._replayed(session, existing, user_id)

        order = Order(
            order_number=generate_order_number(),
            user_id=user_id,
            idempotency_key=payload.idempotency_key,
            shipping_address=payload.shipping_address,
            subtotal=payload.subtotal,
            shipping_cost=payload.shipping_cost,
            gst_amount=payload.gst_amount,
            convenience_fee=payload.convenience_fee,
            total=payload.total,
            payment_method=payload.payment_method,
            notes=payload.notes,
        )

        try:
            order = self.order_repo.create_order(session, order)
            items = self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product_id,
                        seller_id=line.seller_id,
                        product_name=line.product_name,
                        product_image=line.product_image,
                        quantity=line.quantity,
                        price=line.price,
                    )
                    for line in payload.lines
                ],
            )
            session.commit()
        except Exception:
            session.rollback()
            # A concurrent retry with the same key may have won the race
            existing = self.order_repo.get_by_idempotency_key(
                session, payload.idempotency_key
            )
            if existing:
                return self._replayed(session, existing, user_id)
            raise

        session.refresh(order)
        logger.info(
            "Order %s created for user %s (%d lines, total %s, %s)",
            order.order_number,
            user_id,
            len(items),
            order.total,
            order.payment_method,
        )
        return self._build_order_with_items_dto(order, items)

    def find_replay(
        self,
        session: Session,
        user_id: uuid.UUID,
        idempotency_key: str,
    ) -> OrderWithItemsRead | None:
        """
        Order already placed under `idempotency_key`, if any.
        """
        existing = self.order_repo.get_by_idempotency_key(session, idempotency_key)
        if existing is None:
            return None
        return self._replayed(session, existing, user_id)

    def _replayed(
        self,
        session: Session,
        order: Order,
        user_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        if order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Idempotency key already used",
            )
        logger.info("Duplicate checkout submission, returning order %s", order.order_number)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- User-facing operations --------

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user (without items).
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return orders  # type: ignore[return-value]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self._get_owned(session, user_id, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def track_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_number: str,
    ) -> OrderTracking:
        """
        Progress of an order looked up by its order number.
        """
        order = self.order_repo.get_by_number(session, order_number.strip().upper())
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        if order.status in FULFILMENT_FLOW:
            steps = FULFILMENT_FLOW[: FULFILMENT_FLOW.index(order.status) + 1]
        elif order.status == "returned":
            steps = FULFILMENT_FLOW + ["returned"]
        else:
            steps = ["pending", order.status]

        return OrderTracking(
            order_number=order.order_number,
            status=order.status,
            payment_status=order.payment_status,
            tracking_id=order.tracking_id,
            steps=steps,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def cancel_by_customer(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        payload: OrderCancel,
    ) -> OrderRead:
        """
        Customer cancellation, allowed while pending or confirmed.

        Reason text:
          - "Other"   => the free-text details (or "Other reason")
          - otherwise => "<reason>" or "<reason>: <details>"
        """
        order = self._get_owned(session, user_id, order_id)

        if order.status not in CUSTOMER_CANCELLABLE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order can no longer be cancelled",
            )

        if payload.reason == "Other":
            reason = payload.details or "Other reason"
        elif payload.details:
            reason = f"{payload.reason}: {payload.details}"
        else:
            reason = payload.reason

        now = datetime.now(timezone.utc)
        order.status = "cancelled"
        order.customer_cancel_reason = reason
        order.cancelled_by = "customer"
        order.cancelled_at = now
        order.updated_at = now
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    # -------- Seller / admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status_filter: str | None = None,
        payment_status: str | None = None,
    ) -> list[OrderRead]:
        """
        List all orders (admin only).
        """
        orders = self.order_repo.list_all(
            session, skip, limit, status=status_filter, payment_status=payment_status
        )
        return orders  # type: ignore[return-value]

    def list_seller_orders(
        self,
        session: Session,
        seller_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
        status_filter: str | None = None,
    ) -> list[OrderWithItemsRead]:
        """
        Orders containing the seller's lines; only those lines are shown.
        """
        result: list[OrderWithItemsRead] = []
        for order in self.order_repo.list_for_seller(
            session, str(seller_id), skip, limit, status=status_filter
        ):
            items = [
                it
                for it in self.order_repo.list_items_for_order(session, order.id)
                if it.seller_id == str(seller_id)
            ]
            result.append(self._build_order_with_items_dto(order, items))
        return result

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get any order with items (admin only).
        """
        order = self._get_or_404(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
        seller_id: uuid.UUID | None = None,
    ) -> OrderRead:
        """
        Status update with a simple state machine:

          pending          -> confirmed, cancelled
          confirmed        -> packed, cancelled
          packed           -> shipped, cancelled
          shipped          -> out_for_delivery, delivered
          out_for_delivery -> delivered
          delivered        -> returned
          cancelled        -> (no change)
          returned         -> (no change)

        When `seller_id` is given, the order must contain that seller's
        lines. Any invalid transition raises 400.
        """
        order = self._get_or_404(session, order_id)

        if seller_id is not None:
            items = self.order_repo.list_items_for_order(session, order.id)
            if not any(it.seller_id == str(seller_id) for it in items):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Order not found",
                )

        current = order.status
        new = payload.status

        if payload.tracking_id:
            order.tracking_id = payload.tracking_id.strip()

        if current != new:
            if current not in ALLOWED_TRANSITIONS or new not in ALLOWED_TRANSITIONS[current]:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid status transition: {current} -> {new}",
                )
            order.status = new
            if new == "cancelled":
                order.cancelled_by = "seller" if seller_id is not None else "admin"
                order.cancelled_at = datetime.now(timezone.utc)

        order.updated_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    def update_payment_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: PaymentStatusUpdate,
    ) -> OrderRead:
        """
        Admin marks the direct payment as paid / failed / refunded.
        """
        order = self._get_or_404(session, order_id)
        order.payment_status = payload.payment_status
        order.updated_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    # -------- Helpers --------

    def _get_or_404(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _get_owned(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from ORM models.
        """
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                seller_id=it.seller_id,
                product_name=it.product_name,
                product_image=it.product_image,
                quantity=it.quantity,
                price=it.price,
                line_total=it.price * it.quantity,
            )
            for it in items
        ]

        return OrderWithItemsRead(
            **OrderRead.model_validate(order).model_dump(),
            items=item_dtos,
        )
