# app/repositories/return_repo.py
import uuid

from sqlmodel import Session, select

from app.models.returns import ReturnRequest


class ReturnRepository:
    """
    Data access layer for return requests.
    """

    def get_by_id(self, session: Session, request_id: uuid.UUID) -> ReturnRequest | None:
        return session.get(ReturnRequest, request_id)

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[ReturnRequest]:
        stmt = (
            select(ReturnRequest)
            .where(ReturnRequest.user_id == user_id)
            .order_by(ReturnRequest.created_at.desc())
        )
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[ReturnRequest]:
        stmt = select(ReturnRequest)
        if status:
            stmt = stmt.where(ReturnRequest.status == status)
        stmt = stmt.order_by(ReturnRequest.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_open_for_order(self, session: Session, order_id: uuid.UUID) -> list[ReturnRequest]:
        stmt = select(ReturnRequest).where(
            ReturnRequest.order_id == order_id,
            ReturnRequest.status.in_(["pending", "approved"]),
        )
        return session.exec(stmt).all()

    def create(self, session: Session, request: ReturnRequest) -> ReturnRequest:
        session.add(request)
        session.commit()
        session.refresh(request)
        return request

    def update(self, session: Session, request: ReturnRequest) -> ReturnRequest:
        session.add(request)
        session.commit()
        session.refresh(request)
        return request
