"""Domain models for the EA client API."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """Represents an entry of the users resource."""

    id: int
    name: str
    email: str
    age: int | None
    city: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AuthUserRecord:
    """Represents an account that can log in.

    The password is kept exactly as submitted; it is never hashed.
    """

    id: int
    username: str
    email: str
    password: str
    created_at: datetime
    updated_at: datetime
