# app/repositories/user_repo.py
import uuid

from sqlmodel import Session, select

from app.models.user import Address, User


class UserRepository:
    """
    Data access layer for User and Address.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Users -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
    ) -> list[User]:
        """
        Paginated user listing, optionally filtered by role.
        """
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        stmt = stmt.offset(skip).limit(limit)
        return session.exec(stmt).all()

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    # ----- Addresses -----

    def list_addresses(self, session: Session, user_id: uuid.UUID) -> list[Address]:
        """Saved addresses, default first, then oldest first."""
        stmt = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at)
        )
        return session.exec(stmt).all()

    def create_address(
        self, session: Session, address: Address, commit: bool = True
    ) -> Address:
        """With commit=False the row is only flushed; the caller commits."""
        session.add(address)
        if commit:
            session.commit()
        else:
            session.flush()
        session.refresh(address)
        return address
