"""REST endpoints for the users resource."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request, status

from ea_client.api.models import UserPayload
from ea_client.domain.collections import MAX_RECORD_ID
from ea_client.domain.errors import NotFoundError
from ea_client.domain.models import UserRecord

if TYPE_CHECKING:
    from ea_client.containers import AppContainer

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    request: Request,
    skip: int = Query(default=0, ge=0, le=MAX_RECORD_ID),
    take: int | None = Query(default=None, ge=0, le=MAX_RECORD_ID),
) -> list[dict[str, object]]:
    """Return all users, newest first."""
    container: AppContainer = request.app.state.container
    users = container.user_service.list_users(skip=skip, take=take)
    return [serialize_user(user) for user in users]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserPayload, request: Request) -> dict[str, object]:
    """Create a user."""
    container: AppContainer = request.app.state.container
    user = container.user_service.create_user(payload.model_dump())
    return serialize_user(user)


@router.get("/{user_id}")
async def get_user(user_id: str, request: Request) -> dict[str, object]:
    """Return a single user."""
    container: AppContainer = request.app.state.container
    return serialize_user(container.user_service.get_user(_parse_id(user_id)))


@router.put("/{user_id}")
async def update_user(
    user_id: str, payload: UserPayload, request: Request
) -> dict[str, object]:
    """Apply a partial update to a user."""
    container: AppContainer = request.app.state.container
    user = container.user_service.update_user(
        _parse_id(user_id), payload.model_dump(exclude_unset=True)
    )
    return serialize_user(user)


@router.delete("/{user_id}")
async def delete_user(user_id: str, request: Request) -> dict[str, object]:
    """Delete a user."""
    container: AppContainer = request.app.state.container
    user = container.user_service.delete_user(_parse_id(user_id))
    return {"message": f"User {user.name} deleted", "id": user.id}


def serialize_user(user: UserRecord) -> dict[str, object]:
    """Render a user with camelCase timestamps."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "age": user.age,
        "city": user.city,
        "createdAt": user.created_at.isoformat(),
        "updatedAt": user.updated_at.isoformat(),
    }


def _parse_id(raw_id: str) -> int:
    if not (raw_id.isascii() and raw_id.isdigit()):
        raise NotFoundError("User not found")
    user_id = int(raw_id)
    if not 1 <= user_id <= MAX_RECORD_ID:
        raise NotFoundError("User not found")
    return user_id
