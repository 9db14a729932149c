# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    AddressCreate,
    AddressRead,
    PincodeRead,
    PincodeUpdate,
    Role,
    UserRead,
    UserRoleUpdate,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    The row is created on the first authenticated request.
    """
    return current_user


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile. Only `name` is editable.
    """
    return service.update_me(session, current_user, payload)


@router.get("/me/pincode", response_model=PincodeRead)
def read_my_pincode(current_user: User = Depends(require_auth)):
    return PincodeRead(pincode=current_user.pincode)


@router.put("/me/pincode", response_model=PincodeRead)
def update_my_pincode(
    payload: PincodeUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Save the postal code used for delivery estimates; null clears it.
    """
    user = service.update_pincode(session, current_user, payload)
    return PincodeRead(pincode=user.pincode)


# -------- Address book --------


@router.get("/me/addresses", response_model=list[AddressRead])
def list_my_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Saved addresses, default first."""
    return service.list_addresses(session, current_user.id)


@router.post(
    "/me/addresses",
    response_model=AddressRead,
    status_code=status.HTTP_201_CREATED,
)
def add_my_address(
    payload: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Save a new address. The first one becomes the default.
    """
    return service.add_address(session, current_user.id, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: Role | None = None,
):
    """
    List users (admin only), optionally by role.
    """
    return service.list_users(session, skip, limit, role=role)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: customer, seller, admin.
    """
    return service.update_role(session, user_id, payload.role)
