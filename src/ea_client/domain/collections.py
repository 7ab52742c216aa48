"""Collection schemas shared by every record store backend."""

from dataclasses import dataclass

MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})

# Largest id a SQLite INTEGER PRIMARY KEY (or Postgres bigint) can hold.
MAX_RECORD_ID = 2**63 - 1


@dataclass(frozen=True)
class CollectionSchema:
    """Describes one keyed collection of records."""

    name: str
    fields: tuple[str, ...]
    required: frozenset[str]
    unique: tuple[str, ...]

    @property
    def columns(self) -> tuple[str, ...]:
        """All columns, store-managed ones included."""
        return ("id", *self.fields, "created_at", "updated_at")


USERS = CollectionSchema(
    name="users",
    fields=("name", "email", "age", "city"),
    required=frozenset({"name", "email"}),
    unique=("email",),
)

AUTH_USERS = CollectionSchema(
    name="auth_users",
    fields=("username", "email", "password"),
    required=frozenset({"username", "email", "password"}),
    unique=("username", "email"),
)
