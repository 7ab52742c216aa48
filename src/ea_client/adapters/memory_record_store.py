"""Process-local record store with optional JSON snapshots."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ea_client.domain.collections import CollectionSchema
from ea_client.domain.errors import NotFoundError, StoreError
from ea_client.services.store import (
    Predicate,
    Record,
    RecordStore,
    ensure_unique,
    matches,
    newest_first,
    next_timestamp,
    paginate,
    parse_timestamp,
    validate_changes,
    validate_new,
    writable_fields,
)

logger = logging.getLogger(__name__)


@dataclass
class InMemoryRecordStore(RecordStore):
    """Dict-backed store with auto-incrementing integer ids."""

    schema: CollectionSchema
    snapshot_path: Path | None = None
    records: dict[int, Record] = field(default_factory=dict)
    next_id: int = 1
    dirty: bool = False

    def find_all(self) -> list[Record]:
        """Return every record, newest first."""
        return [dict(record) for record in newest_first(self.records.values())]

    def find_one(self, predicate: Predicate) -> Record | None:
        """Return the first record matching the predicate."""
        for record in newest_first(self.records.values()):
            if matches(record, predicate):
                return dict(record)
        return None

    def find_many(
        self, predicate: Predicate, skip: int = 0, take: int | None = None
    ) -> list[Record]:
        """Return matching records, sliced by skip/take."""
        found = [
            dict(record)
            for record in newest_first(self.records.values())
            if matches(record, predicate)
        ]
        return paginate(found, skip, take)

    def create(self, fields: Mapping[str, object]) -> Record:
        """Insert a record after checking unique fields."""
        values = writable_fields(self.schema, fields)
        validate_new(self.schema, values)
        ensure_unique(self, values, exclude_id=None)
        now = next_timestamp()
        record: Record = {name: values.get(name) for name in self.schema.fields}
        record.update(id=self.next_id, created_at=now, updated_at=now)
        self.records[self.next_id] = record
        self.next_id += 1
        self.dirty = True
        return dict(record)

    def update(self, record_id: int, fields: Mapping[str, object]) -> Record:
        """Apply a partial update to an existing record."""
        current = self.records.get(record_id)
        if current is None:
            raise NotFoundError(f"{self.schema.name} record {record_id} not found")
        changes = writable_fields(self.schema, fields)
        validate_changes(self.schema, changes)
        ensure_unique(self, changes, exclude_id=record_id)
        current.update(changes)
        current["updated_at"] = next_timestamp(current["updated_at"])
        self.dirty = True
        return dict(current)

    def delete(self, record_id: int) -> bool:
        """Remove a record if present."""
        removed = self.records.pop(record_id, None)
        if removed is None:
            return False
        self.dirty = True
        return True

    def count(self, predicate: Predicate | None = None) -> int:
        """Count all or matching records."""
        if not predicate:
            return len(self.records)
        return sum(1 for record in self.records.values() if matches(record, predicate))

    def load(self) -> None:
        """Load the snapshot file, if configured and present."""
        if self.snapshot_path is None or not self.snapshot_path.exists():
            return
        try:
            payload = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(
                f"Failed to load {self.schema.name} snapshot", details=str(exc)
            ) from exc
        self.records = {}
        for row in payload.get("records", []):
            record = dict(row)
            record["created_at"] = parse_timestamp(record["created_at"])
            record["updated_at"] = parse_timestamp(record["updated_at"])
            self.records[int(record["id"])] = record
        self.next_id = max(
            int(payload.get("next_id", 1)), max(self.records, default=0) + 1
        )
        self.dirty = False
        logger.info(
            "Loaded %s %s records from %s",
            len(self.records),
            self.schema.name,
            self.snapshot_path,
        )

    def flush(self) -> bool:
        """Write the snapshot file when there are unsaved changes."""
        if self.snapshot_path is None or not self.dirty:
            return False
        rows = [
            {
                **record,
                "created_at": record["created_at"].isoformat(),
                "updated_at": record["updated_at"].isoformat(),
            }
            for record in sorted(self.records.values(), key=lambda row: row["id"])
        ]
        self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.snapshot_path.with_suffix(".tmp")
        tmp_path.write_text(
            json.dumps({"next_id": self.next_id, "records": rows}, ensure_ascii=False),
            encoding="utf-8",
        )
        tmp_path.replace(self.snapshot_path)
        self.dirty = False
        return True
