"""SQLite-backed record stores sharing a single database file."""

import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import closing, contextmanager
from dataclasses import dataclass
from pathlib import Path

from ea_client.domain.collections import AUTH_USERS, USERS, CollectionSchema
from ea_client.domain.errors import ConflictError, NotFoundError, StoreError
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

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS auth_users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,
    age INTEGER,
    city TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_auth_users_username ON auth_users(username);
CREATE INDEX IF NOT EXISTS idx_auth_users_email ON auth_users(email);
CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
"""


@dataclass
class SqliteDatabase:
    """Single-file SQLite database holding the auth_users and users tables."""

    path: Path

    def initialize(self) -> None:
        """Create the tables and indexes if they do not already exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.executescript(_SCHEMA_SQL)
        logger.info("Database initialised at %s", self.path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        try:
            with closing(sqlite3.connect(self.path)) as conn:
                conn.row_factory = sqlite3.Row
                with conn:
                    yield conn
        except sqlite3.IntegrityError:
            raise
        except (sqlite3.Error, OverflowError) as exc:
            raise StoreError("Database operation failed", details=str(exc)) from exc

    def stores(self) -> tuple["SqliteRecordStore", "SqliteRecordStore"]:
        """Return the (auth_users, users) stores over this database."""
        return SqliteRecordStore(self, AUTH_USERS), SqliteRecordStore(self, USERS)


@dataclass
class SqliteRecordStore(RecordStore):
    """Record store over one table of a SqliteDatabase."""

    database: SqliteDatabase
    schema: CollectionSchema

    def find_all(self) -> list[Record]:
        """Return every row, newest first."""
        return self.find_many({})

    def find_one(self, predicate: Predicate) -> Record | None:
        """Return the first matching row, if any."""
        rows = self.find_many(predicate, take=1)
        return rows[0] if rows else None

    def find_many(
        self, predicate: Predicate, skip: int = 0, take: int | None = None
    ) -> list[Record]:
        """Return matching rows, sliced by skip/take in SQL."""
        where, params = self._where(predicate)
        sql = f"SELECT * FROM {self.schema.name}{where} ORDER BY id DESC"
        if skip > 0 or take is not None:
            # LIMIT -1 means no limit in SQLite.
            sql += " LIMIT ? OFFSET ?"
            params = [*params, -1 if take is None else max(take, 0), max(skip, 0)]
        with self.database.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_to_record(row) for row in rows]

    def create(self, fields: Mapping[str, object]) -> Record:
        """Insert a row and return it."""
        values = writable_fields(self.schema, fields)
        validate_new(self.schema, values)
        ensure_unique(self, values, exclude_id=None)
        now = next_timestamp().isoformat()
        columns = [*self.schema.fields, "created_at", "updated_at"]
        params = [values.get(name) for name in self.schema.fields] + [now, now]
        placeholders = ", ".join("?" for _ in columns)
        sql = (
            f"INSERT INTO {self.schema.name} ({', '.join(columns)}) "
            f"VALUES ({placeholders})"
        )
        try:
            with self.database.connect() as conn:
                cursor = conn.execute(sql, params)
                record_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise ConflictError(
                "Unique field already in use", details=str(exc)
            ) from exc
        created = self.find_one({"id": record_id})
        if created is None:
            raise StoreError(f"Failed to read back {self.schema.name} {record_id}")
        return created

    def update(self, record_id: int, fields: Mapping[str, object]) -> Record:
        """Apply a partial update to an existing row."""
        current = self.find_one({"id": record_id})
        if current is None:
            raise NotFoundError(f"{self.schema.name} record {record_id} not found")
        changes = writable_fields(self.schema, fields)
        validate_changes(self.schema, changes)
        ensure_unique(self, changes, exclude_id=record_id)
        changes["updated_at"] = next_timestamp(current["updated_at"]).isoformat()
        assignments = ", ".join(f"{name} = ?" for name in changes)
        sql = f"UPDATE {self.schema.name} SET {assignments} WHERE id = ?"
        try:
            with self.database.connect() as conn:
                conn.execute(sql, [*changes.values(), record_id])
        except sqlite3.IntegrityError as exc:
            raise ConflictError(
                "Unique field already in use", details=str(exc)
            ) from exc
        updated = self.find_one({"id": record_id})
        if updated is None:
            raise NotFoundError(f"{self.schema.name} record {record_id} not found")
        return updated

    def delete(self, record_id: int) -> bool:
        """Delete a row by id."""
        with self.database.connect() as conn:
            cursor = conn.execute(
                f"DELETE FROM {self.schema.name} WHERE id = ?", (record_id,)
            )
        return cursor.rowcount > 0

    def count(self, predicate: Predicate | None = None) -> int:
        """Count all or matching rows."""
        where, params = self._where(predicate or {})
        with self.database.connect() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS count FROM {self.schema.name}{where}", params
            ).fetchone()
        return int(row["count"])

    def _where(self, predicate: Predicate) -> tuple[str, list[object]]:
        unknown = set(predicate) - set(self.schema.columns)
        if unknown:
            raise StoreError(f"Unknown {self.schema.name} fields: {sorted(unknown)}")
        if not predicate:
            return "", []
        clauses = [
            f"{name} IS NULL" if value is None else f"{name} = ?"
            for name, value in predicate.items()
        ]
        params = [value for value in predicate.values() if value is not None]
        return " WHERE " + " AND ".join(clauses), params


def _to_record(row: sqlite3.Row) -> Record:
    record: Record = dict(row)
    record["created_at"] = parse_timestamp(record["created_at"])
    record["updated_at"] = parse_timestamp(record["updated_at"])
    return record
