# app/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.database import get_session
from app.models.user import User

settings = get_settings()

# auto_error=False: a missing Authorization header means "guest",
# catalog routes stay readable without a token.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Signature and expiry are checked; the audience is not, Supabase
    projects use different 'aud' values.

    Raises:
        HTTPException(401): invalid signature, malformed or expired token.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _display_name(email: str) -> str:
    local, _, _ = email.partition("@")
    return local or email


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the caller's profile row from the bearer token.

    Returns None for guests. First-time callers get a profile with the
    'customer' role; sellers open a shop to upgrade, admins are promoted
    by another admin.
    """
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    sub = claims.get("sub")
    email = claims.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    user = session.get(User, user_id)
    if user is None:
        user = User(
            id=user_id,
            email=email,
            name=_display_name(email),
            role="customer",
        )
        session.add(user)
        session.commit()
        session.refresh(user)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Reject guests with 401.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def _require_role(user: User, role: str, label: str) -> User:
    if user.role != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{label} access required",
        )
    return user


def require_customer(user: User = Depends(require_auth)) -> User:
    """
    Shoppers only (role='customer').

    Guards cart, wishlist, checkout and return requests; sellers and
    admins get 403.
    """
    return _require_role(user, "customer", "Customer")


def require_seller(user: User = Depends(require_auth)) -> User:
    """Back-office routes of a shop owner."""
    return _require_role(user, "seller", "Seller")


def require_admin(user: User = Depends(require_auth)) -> User:
    return _require_role(user, "admin", "Admin")
