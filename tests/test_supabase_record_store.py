"""Tests for the Supabase record store."""

from dataclasses import dataclass, field

import pytest

from ea_client.adapters.supabase_record_store import SupabaseRecordStore
from ea_client.domain.collections import AUTH_USERS, USERS
from ea_client.domain.errors import ConflictError, NotFoundError
from tests.conftest import ALICE

ROW = {
    "id": 7,
    "name": "Alice",
    "email": "alice@example.com",
    "age": 28,
    "city": "Beijing",
    "created_at": "2024-05-01T10:00:00+00:00",
    "updated_at": "2024-05-01T10:00:00+00:00",
}


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None
    count: int | None = None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_range: tuple[int, int] | None = None
    last_count: str | None = None
    exact_count: int | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args, count: str | None = None) -> "FakeTable":
        self._action = "select"
        self.last_count = count
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def is_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def range(self, start: int, end: int) -> "FakeTable":
        self.last_range = (start, end)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        count = self.exact_count if self.last_count == "exact" else None
        return FakeResponse(data=data, count=count)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_find_one_parses_row() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue("select", [ROW])

    store = SupabaseRecordStore(client, USERS)
    record = store.find_one({"email": "alice@example.com"})

    assert record is not None
    assert record["id"] == 7
    assert record["created_at"].year == 2024
    assert ("email", "alice@example.com") in client.table("users").last_filters


def test_find_one_returns_none_when_empty() -> None:
    store = SupabaseRecordStore(FakeSupabaseClient(), USERS)

    assert store.find_one({"id": 1}) is None
    assert store.find_all() == []


def test_find_many_requests_a_range_for_take() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue("select", [{**ROW, "id": 2}])

    store = SupabaseRecordStore(client, USERS)

    assert [row["id"] for row in store.find_many({}, skip=1, take=1)] == [2]
    assert client.table("users").last_range == (1, 1)


def test_find_many_with_only_skip_slices_locally() -> None:
    client = FakeSupabaseClient()
    rows = [{**ROW, "id": 3}, {**ROW, "id": 2}, {**ROW, "id": 1}]
    client.table("users").queue("select", rows)

    store = SupabaseRecordStore(client, USERS)

    assert [row["id"] for row in store.find_many({}, skip=1)] == [2, 1]
    assert client.table("users").last_range is None
    assert store.find_many({}, take=0) == []


def test_create_inserts_fields_with_timestamps() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    users_table.queue("insert", [ROW])

    store = SupabaseRecordStore(client, USERS)
    created = store.create({**ALICE, "id": 99})

    assert created["id"] == 7
    payload = users_table.last_payload
    assert isinstance(payload, dict)
    assert "id" not in payload
    assert payload["email"] == ALICE["email"]
    assert payload["created_at"] == payload["updated_at"]


def test_create_conflicts_on_existing_unique_value() -> None:
    client = FakeSupabaseClient()
    client.table("auth_users").queue(
        "select",
        [
            {
                "id": 1,
                "username": "admin",
                "email": "admin@example.com",
                "password": "admin123",
                "created_at": "2024-05-01T10:00:00+00:00",
                "updated_at": "2024-05-01T10:00:00+00:00",
            }
        ],
    )

    store = SupabaseRecordStore(client, AUTH_USERS)

    with pytest.raises(ConflictError):
        store.create({"username": "admin", "email": "new@example.com", "password": "x"})


def test_update_missing_record_raises_not_found() -> None:
    store = SupabaseRecordStore(FakeSupabaseClient(), USERS)

    with pytest.raises(NotFoundError):
        store.update(7, {"city": "Hangzhou"})


def test_update_sends_only_changes_and_refreshes_timestamp() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    users_table.queue("select", [ROW])
    users_table.queue("update", [{**ROW, "city": "Hangzhou"}])

    store = SupabaseRecordStore(client, USERS)
    updated = store.update(7, {"city": "Hangzhou", "created_at": "ignored"})

    assert updated["city"] == "Hangzhou"
    payload = users_table.last_payload
    assert isinstance(payload, dict)
    assert set(payload) == {"city", "updated_at"}
    assert payload["updated_at"] > ROW["updated_at"]


def test_delete_reports_whether_a_row_was_removed() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue("delete", [ROW])

    store = SupabaseRecordStore(client, USERS)

    assert store.delete(7) is True
    assert store.delete(7) is False


def test_count_asks_for_an_exact_count() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    users_table.exact_count = 2
    users_table.queue("select", [{"id": 1}])

    store = SupabaseRecordStore(client, USERS)

    assert store.count({"city": "Beijing"}) == 2
    assert users_table.last_count == "exact"
    assert ("city", "Beijing") in users_table.last_filters


def test_count_of_empty_table_is_zero() -> None:
    store = SupabaseRecordStore(FakeSupabaseClient(), USERS)

    assert store.count() == 0
