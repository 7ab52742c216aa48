"""Business logic for the users resource."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from ea_client.domain.errors import ConflictError, NotFoundError, ValidationError
from ea_client.domain.models import UserRecord
from ea_client.services.store import Record, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class UserService:
    """Application service mapping user operations onto a record store."""

    store: RecordStore

    def list_users(self, skip: int = 0, take: int | None = None) -> list[UserRecord]:
        """Return users, newest first."""
        if skip == 0 and take is None:
            rows = self.store.find_all()
        else:
            rows = self.store.find_many({}, skip=skip, take=take)
        return [_parse_user(row) for row in rows]

    def get_user(self, user_id: int) -> UserRecord:
        """Return a user or raise NotFoundError."""
        row = self.store.find_one({"id": user_id})
        if row is None:
            raise NotFoundError("User not found")
        return _parse_user(row)

    def create_user(self, payload: Mapping[str, object]) -> UserRecord:
        """Create a user after validating required fields and email uniqueness."""
        if not payload.get("name") or not payload.get("email"):
            raise ValidationError("Name and email are required")
        if self.store.find_one({"email": payload["email"]}) is not None:
            raise ConflictError("Email is already in use")
        row = self.store.create(payload)
        logger.info("Created user %s (%s)", row["name"], row["email"])
        return _parse_user(row)

    def update_user(self, user_id: int, changes: Mapping[str, object]) -> UserRecord:
        """Apply a partial update.

        Missing fields are left unchanged; an explicit ``None`` clears an
        optional field.
        """
        current = self.get_user(user_id)
        email = changes.get("email")
        if email and email != current.email:
            if self.store.find_one({"email": email}) is not None:
                raise ConflictError("Email is already used by another user")
        row = self.store.update(user_id, changes)
        logger.info("Updated user %s (id %s)", row["name"], user_id)
        return _parse_user(row)

    def delete_user(self, user_id: int) -> UserRecord:
        """Delete a user and return the removed record."""
        user = self.get_user(user_id)
        if not self.store.delete(user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s (id %s)", user.name, user_id)
        return user


def _parse_user(row: Record) -> UserRecord:
    return UserRecord(
        id=int(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        age=int(row["age"]) if row.get("age") is not None else None,
        city=row.get("city"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
