"""Pydantic models for request payloads.

Every field is optional so that missing values reach the services, which
report them as validation errors with the API's own error shape.
"""

from pydantic import BaseModel, Field

MAX_AGE = 150


class UserPayload(BaseModel):
    """Body of user create and update requests."""

    name: str | None = None
    email: str | None = None
    age: int | None = Field(default=None, ge=0, le=MAX_AGE)
    city: str | None = None


class RegisterRequest(BaseModel):
    """Registration payload."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    """Login payload."""

    username: str | None = None
    password: str | None = None
