# app/schemas/user.py
import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Guests carry no token, so we don't store them.
Role = Literal["customer", "seller", "admin"]

PINCODE_RE = re.compile(r"^\d{6}$")


def _validate_pincode(v: str) -> str:
    v = v.strip()
    if not PINCODE_RE.match(v):
        raise ValueError("Valid 6-digit pincode required")
    return v


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: EmailStr
    name: str
    role: Role
    pincode: str | None = None
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `name` here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRoleUpdate(SQLModel):
    """Admin-only role change payload."""

    model_config = ConfigDict(extra="forbid")

    role: Role


class PincodeUpdate(SQLModel):
    """
    Saved delivery pincode; null clears it.
    """

    model_config = ConfigDict(extra="forbid")

    pincode: str | None = None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return _validate_pincode(v)


class PincodeRead(SQLModel):
    pincode: str | None


class AddressCreate(SQLModel):
    """
    New shipping address.

    Rules:
      - full_name, city, state: at least 2 characters
      - phone: at least 10 digits
      - address_line1: at least 5 characters
      - pincode: exactly 6 digits
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    pincode: str

    @field_validator("full_name", "city", "state")
    @classmethod
    def min_two_chars(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("field is required")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        v = v.strip()
        if sum(ch.isdigit() for ch in v) < 10:
            raise ValueError("Valid phone required")
        return v

    @field_validator("address_line1")
    @classmethod
    def check_line1(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Address is required")
        return v

    @field_validator("address_line2")
    @classmethod
    def normalize_line2(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v: str) -> str:
        return _validate_pincode(v)


class AddressRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    pincode: str
    is_default: bool
    created_at: datetime
