# app/routers/returns.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin, require_customer
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.return_repo import ReturnRepository
from app.schemas.returns import (
    ReturnRequestCreate,
    ReturnRequestRead,
    ReturnStatus,
    ReturnStatusUpdate,
)
from app.services.return_service import ReturnService

router = APIRouter(prefix="/returns", tags=["Returns"])

service = ReturnService(ReturnRepository(), OrderRepository())


@router.post(
    "",
    response_model=ReturnRequestRead,
    status_code=status.HTTP_201_CREATED,
)
def request_return(
    payload: ReturnRequestCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Ask to return a delivered order, or some of its lines.
    """
    return service.create_request(session, current_user.id, payload)


@router.get("/me", response_model=list[ReturnRequestRead])
def list_my_returns(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.list_my_requests(session, current_user.id)


@router.get(
    "",
    response_model=list[ReturnRequestRead],
    dependencies=[Depends(require_admin)],
)
def list_returns(
    session: Session = Depends(get_session),
    status: ReturnStatus | None = None,
    skip: int = 0,
    limit: int = 50,
):
    return service.list_requests(session, status_filter=status, skip=skip, limit=limit)


@router.patch(
    "/{request_id}",
    response_model=ReturnRequestRead,
    dependencies=[Depends(require_admin)],
)
def update_return_status(
    request_id: uuid.UUID,
    payload: ReturnStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Approve, reject or complete a return (admin only).

      pending  -> approved, rejected

      approved -> completed

    Completing marks the order returned and, when a refund was requested,
    refunded.
    """
    return service.update_status(session, request_id, payload)
