# app/repositories/cart_repo.py
from datetime import datetime, timezone

from sqlmodel import Session

from app.models.cart import CartSnapshot


class MemoryCartStorage:
    """
    Dict-backed key-value storage for the cart store.

    Used for scratch carts and tests.
    """

    def __init__(self):
        self.data: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self.data.get(key)

    def save(self, key: str, payload: str) -> None:
        self.data[key] = payload


class SqlCartStorage:
    """
    Key-value storage for the cart store backed by the cart_snapshots table.

    Every save commits; a failed commit is rolled back before the error
    propagates to the store.
    """

    def __init__(self, session: Session):
        self.session = session

    def load(self, key: str) -> str | None:
        row = self.session.get(CartSnapshot, key)
        return row.payload if row else None

    def save(self, key: str, payload: str) -> None:
        row = self.session.get(CartSnapshot, key)
        if row is None:
            row = CartSnapshot(key=key, payload=payload)
        else:
            row.payload = payload
            row.updated_at = datetime.now(timezone.utc)
        self.session.add(row)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
