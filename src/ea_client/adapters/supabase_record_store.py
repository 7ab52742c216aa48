"""Supabase-backed record store."""

from collections.abc import Mapping
from dataclasses import dataclass

from supabase import Client

from ea_client.domain.collections import CollectionSchema
from ea_client.domain.errors import NotFoundError, StoreError
from ea_client.services.store import (
    Predicate,
    Record,
    RecordStore,
    ensure_unique,
    next_timestamp,
    parse_timestamp,
    validate_changes,
    validate_new,
    writable_fields,
)


@dataclass
class SupabaseRecordStore(RecordStore):
    """Supabase implementation over a table named after the collection."""

    client: Client
    schema: CollectionSchema

    def find_all(self) -> list[Record]:
        """Return every row, newest first."""
        return self.find_many({})

    def find_one(self, predicate: Predicate) -> Record | None:
        """Return the first matching row, if any."""
        query = self._select(predicate).limit(1)
        response = query.execute()
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def find_many(
        self, predicate: Predicate, skip: int = 0, take: int | None = None
    ) -> list[Record]:
        """Return matching rows, sliced by skip/take on the server."""
        start = max(skip, 0)
        query = self._select(predicate)
        if take is not None:
            if take <= 0:
                return []
            query = query.range(start, start + take - 1)
            start = 0
        response = query.execute()
        rows = [_parse_row(row) for row in response.data or []]
        # An open-ended range cannot be requested, so skip alone slices here.
        return rows[start:]

    def create(self, fields: Mapping[str, object]) -> Record:
        """Insert a row and return it."""
        values = writable_fields(self.schema, fields)
        validate_new(self.schema, values)
        ensure_unique(self, values, exclude_id=None)
        now = next_timestamp().isoformat()
        payload = {name: values.get(name) for name in self.schema.fields}
        response = (
            self.client.table(self.schema.name)
            .insert({**payload, "created_at": now, "updated_at": now})
            .execute()
        )
        if not response.data:
            raise StoreError(f"Failed to create {self.schema.name} record in Supabase")
        return _parse_row(response.data[0])

    def update(self, record_id: int, fields: Mapping[str, object]) -> Record:
        """Apply a partial update to an existing row."""
        current = self.find_one({"id": record_id})
        if current is None:
            raise NotFoundError(f"{self.schema.name} record {record_id} not found")
        changes = writable_fields(self.schema, fields)
        validate_changes(self.schema, changes)
        ensure_unique(self, changes, exclude_id=record_id)
        updated_at = next_timestamp(current["updated_at"]).isoformat()
        response = (
            self.client.table(self.schema.name)
            .update({**changes, "updated_at": updated_at})
            .eq("id", record_id)
            .execute()
        )
        if not response.data:
            raise StoreError(f"Failed to update {self.schema.name} record {record_id}")
        return _parse_row(response.data[0])

    def delete(self, record_id: int) -> bool:
        """Delete a row by id."""
        response = (
            self.client.table(self.schema.name).delete().eq("id", record_id).execute()
        )
        return bool(response.data)

    def count(self, predicate: Predicate | None = None) -> int:
        """Count all or matching rows."""
        query = self._select(predicate or {}, columns="id", count="exact")
        response = query.limit(1).execute()
        return response.count or 0

    def _select(  # type: ignore[no-untyped-def]
        self, predicate: Predicate, columns: str = "*", count: str | None = None
    ):
        query = self.client.table(self.schema.name).select(columns, count=count)
        for name, value in predicate.items():
            query = query.is_(name, "null") if value is None else query.eq(name, value)
        return query.order("id", desc=True)


def _parse_row(row: dict[str, object]) -> Record:
    """Parse a Supabase row into a store record."""
    record: Record = dict(row)
    record["id"] = int(row["id"])
    record["created_at"] = parse_timestamp(row["created_at"])
    record["updated_at"] = parse_timestamp(row["updated_at"])
    return record
