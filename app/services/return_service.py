# app/services/return_service.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.returns import ReturnRequest
from app.repositories.order_repo import OrderRepository
from app.repositories.return_repo import ReturnRepository
from app.schemas.returns import ReturnRequestCreate, ReturnStatusUpdate

RETURN_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"approved", "rejected"},
    "approved": {"completed"},
    "rejected": set(),
    "completed": set(),
}


class ReturnService:
    """
    Business logic for return requests.

    Responsibilities:
      - only delivered orders of the caller can be returned
      - one open (pending/approved) request per order
      - refund amount from the selected order lines
      - completing a return marks the order returned (and refunded)
    """

    def __init__(self, return_repo: ReturnRepository, order_repo: OrderRepository):
        self.return_repo = return_repo
        self.order_repo = order_repo

    def create_request(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: ReturnRequestCreate,
    ) -> ReturnRequest:
        order = self.order_repo.get_by_id(session, payload.order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        if order.status != "delivered":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only delivered orders can be returned",
            )

        if self.return_repo.list_open_for_order(session, order.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A return request is already open for this order",
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        selected_ids = set(payload.item_ids)
        unknown = selected_ids - {it.id for it in items}
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Selected items do not belong to this order",
            )

        selected = [it for it in items if not selected_ids or it.id in selected_ids]

        refund_amount = None
        if payload.request_refund:
            refund_amount = sum((it.price * it.quantity for it in selected), Decimal("0"))

        request = ReturnRequest(
            order_id=order.id,
            user_id=user_id,
            order_item_id=payload.item_ids[0] if len(selected_ids) == 1 else None,
            reason=payload.reason,
            description=payload.description,
            refund_amount=refund_amount,
            refund_status="requested" if payload.request_refund else None,
        )
        return self.return_repo.create(session, request)

    def list_my_requests(self, session: Session, user_id: uuid.UUID) -> list[ReturnRequest]:
        return self.return_repo.list_for_user(session, user_id)

    def list_requests(
        self,
        session: Session,
        status_filter: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[ReturnRequest]:
        return self.return_repo.list_all(session, status=status_filter, skip=skip, limit=limit)

    def update_status(
        self,
        session: Session,
        request_id: uuid.UUID,
        payload: ReturnStatusUpdate,
    ) -> ReturnRequest:
        """
        Admin decision:

          pending  -> approved, rejected
          approved -> completed

        Completing marks the order 'returned'; when a refund was requested
        the order's payment status becomes 'refunded'.
        """
        request = self.return_repo.get_by_id(session, request_id)
        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Return request not found",
            )

        current = request.status
        new = payload.status
        if current != new and new not in RETURN_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        now = datetime.now(timezone.utc)
        request.status = new
        request.updated_at = now
        if payload.admin_notes is not None:
            request.admin_notes = payload.admin_notes.strip() or None

        if new in {"rejected", "completed"} and current != new:
            request.processed_at = now

        if new == "completed" and current != new:
            order = self.order_repo.get_by_id(session, request.order_id)
            if order is not None:
                order.status = "returned"
                order.updated_at = now
                if request.refund_amount is not None:
                    order.payment_status = "refunded"
                    request.refund_status = "processed"
                session.add(order)

        return self.return_repo.update(session, request)
