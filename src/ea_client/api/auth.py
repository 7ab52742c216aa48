"""Authentication endpoints: register, login and current user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, Request, status

from ea_client.api.models import LoginRequest, RegisterRequest
from ea_client.domain.models import AuthUserRecord
from ea_client.services.auth import AuthResult

if TYPE_CHECKING:
    from ea_client.containers import AppContainer

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, request: Request) -> dict[str, object]:
    """Register an account and return a session token."""
    container: AppContainer = request.app.state.container
    result = container.auth_service.register(payload.model_dump())
    return _serialize_result(result)


@router.post("/login")
async def login(payload: LoginRequest, request: Request) -> dict[str, object]:
    """Check credentials and return a session token."""
    container: AppContainer = request.app.state.container
    result = container.auth_service.login(payload.model_dump())
    return _serialize_result(result)


@router.get("/me")
async def me(
    request: Request, authorization: str | None = Header(default=None)
) -> dict[str, object]:
    """Return the account behind the bearer token."""
    container: AppContainer = request.app.state.container
    user = container.auth_service.current_user(authorization)
    return {"user": serialize_auth_user(user)}


def serialize_auth_user(user: AuthUserRecord) -> dict[str, object]:
    """Render an account without its password."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "createdAt": user.created_at.isoformat(),
        "updatedAt": user.updated_at.isoformat(),
    }


def _serialize_result(result: AuthResult) -> dict[str, object]:
    return {"token": result.token, "user": serialize_auth_user(result.user)}
