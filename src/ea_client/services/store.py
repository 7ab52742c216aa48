"""Generic record store contract and helpers shared by its backends."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Protocol

from ea_client.domain.collections import CollectionSchema
from ea_client.domain.errors import ConflictError, ValidationError

Record = dict[str, object]
Predicate = Mapping[str, object]


class RecordStore(Protocol):
    """Persistence interface for one keyed collection.

    Records are plain dicts holding ``id``, the schema fields and the
    ``created_at``/``updated_at`` timestamps. Listings are ordered by id,
    newest first.
    """

    schema: CollectionSchema

    def find_all(self) -> list[Record]:
        """Return every record."""

    def find_one(self, predicate: Predicate) -> Record | None:
        """Return the first record matching every field of the predicate."""

    def find_many(
        self, predicate: Predicate, skip: int = 0, take: int | None = None
    ) -> list[Record]:
        """Return matching records, sliced by skip/take."""

    def create(self, fields: Mapping[str, object]) -> Record:
        """Insert a record and return it with its assigned id and timestamps."""

    def update(self, record_id: int, fields: Mapping[str, object]) -> Record:
        """Apply a partial update and return the updated record."""

    def delete(self, record_id: int) -> bool:
        """Remove a record, returning False when it did not exist."""

    def count(self, predicate: Predicate | None = None) -> int:
        """Count records, optionally restricted to a predicate."""


def writable_fields(
    schema: CollectionSchema, fields: Mapping[str, object]
) -> dict[str, object]:
    """Drop unknown and store-managed keys."""
    return {key: value for key, value in fields.items() if key in schema.fields}


def validate_new(schema: CollectionSchema, fields: Mapping[str, object]) -> None:
    """Ensure every required field is present for an insert."""
    missing = sorted(name for name in schema.required if fields.get(name) is None)
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
        )


def validate_changes(schema: CollectionSchema, fields: Mapping[str, object]) -> None:
    """Reject updates that clear a required field."""
    cleared = sorted(
        name for name in schema.required if name in fields and fields[name] is None
    )
    if cleared:
        raise ValidationError(f"Fields cannot be cleared: {', '.join(cleared)}")


def unique_probes(
    schema: CollectionSchema, fields: Mapping[str, object]
) -> list[tuple[str, object]]:
    """Return the (field, value) pairs that must not collide."""
    return [
        (name, fields[name])
        for name in schema.unique
        if name in fields and fields[name] is not None
    ]


def ensure_unique(
    store: RecordStore, values: Mapping[str, object], exclude_id: int | None
) -> None:
    """Raise ConflictError when a unique value belongs to another record."""
    for name, value in unique_probes(store.schema, values):
        existing = store.find_one({name: value})
        if existing is not None and existing["id"] != exclude_id:
            raise ConflictError(f"{name} is already in use")


def matches(record: Mapping[str, object], predicate: Predicate) -> bool:
    """Exact-match AND over the predicate fields."""
    return all(record.get(key) == value for key, value in predicate.items())


def newest_first(records: Iterable[Record]) -> list[Record]:
    return sorted(records, key=lambda record: int(record["id"]), reverse=True)


def paginate(
    records: list[Record], skip: int = 0, take: int | None = None
) -> list[Record]:
    """Apply simple skip/take slicing."""
    start = max(skip, 0)
    if take is None:
        return records[start:]
    return records[start : start + max(take, 0)]


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Return the current UTC time, never earlier than ``previous``."""
    now = datetime.now(tz=UTC)
    if previous is not None and previous > now:
        return previous
    return now


def parse_timestamp(raw: object) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime."""
    if isinstance(raw, datetime):
        value = raw
    else:
        value = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value
