# app/services/user_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.user import Address, User
from app.repositories.user_repo import UserRepository
from app.schemas.user import AddressCreate, PincodeUpdate, UserUpdate


class UserService:
    """
    Business logic for User profiles and address books.

    Responsibilities:
      - profile edits and the saved delivery pincode
      - address book (first address becomes the default)
      - admin role changes
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name

        return self.repo.update(session, current_user)

    def update_pincode(
        self,
        session: Session,
        current_user: User,
        payload: PincodeUpdate,
    ) -> User:
        """Save (or clear) the pincode used for delivery estimates."""
        current_user.pincode = payload.pincode
        return self.repo.update(session, current_user)

    # ----- Addresses -----

    def list_addresses(self, session: Session, user_id: uuid.UUID) -> list[Address]:
        return self.repo.list_addresses(session, user_id)

    def add_address(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: AddressCreate,
        is_default: bool | None = None,
        commit: bool = True,
    ) -> Address:
        """
        Save a new address.

        When `is_default` is not given, the address becomes default only if
        it is the user's first one. `commit=False` leaves the commit to a
        larger write (checkout saves the address with the order).
        """
        if is_default is None:
            is_default = not self.repo.list_addresses(session, user_id)

        address = Address(user_id=user_id, is_default=is_default, **payload.model_dump())
        return self.repo.create_address(session, address, commit=commit)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        role: str | None = None,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=skip, limit=limit, role=role)

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        role: str,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        user.role = role
        return self.repo.update(session, user)
