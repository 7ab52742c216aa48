"""Shared test fixtures."""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import pytest

from ea_client.adapters.memory_record_store import InMemoryRecordStore
from ea_client.adapters.sqlite_record_store import SqliteDatabase
from ea_client.config import Settings
from ea_client.containers import AppContainer
from ea_client.domain.collections import AUTH_USERS, USERS, CollectionSchema
from ea_client.domain.errors import StoreError
from ea_client.services.auth import AuthService
from ea_client.services.store import Predicate, Record, RecordStore
from ea_client.services.tokens import SessionTokenIssuer
from ea_client.services.users import UserService

ISSUED_AT = 1_700_000_000.0

ALICE = {"name": "Alice", "email": "alice@example.com", "age": 28, "city": "Beijing"}


@dataclass
class FailingRecordStore(RecordStore):
    """Store whose every operation fails like a broken backend."""

    schema: CollectionSchema
    error: Exception

    def _fail(self) -> None:
        raise self.error

    def find_all(self) -> list[Record]:
        self._fail()
        return []

    def find_one(self, predicate: Predicate) -> Record | None:
        self._fail()
        return None

    def find_many(
        self, predicate: Predicate, skip: int = 0, take: int | None = None
    ) -> list[Record]:
        self._fail()
        return []

    def create(self, fields: Mapping[str, object]) -> Record:
        self._fail()
        return {}

    def update(self, record_id: int, fields: Mapping[str, object]) -> Record:
        self._fail()
        return {}

    def delete(self, record_id: int) -> bool:
        self._fail()
        return False

    def count(self, predicate: Predicate | None = None) -> int:
        self._fail()
        return 0


def make_container(
    settings: Settings,
    auth_store: RecordStore,
    user_store: RecordStore,
    token_issuer: SessionTokenIssuer,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_store=auth_store,
        user_store=user_store,
        token_issuer=token_issuer,
        user_service=UserService(user_store),
        auth_service=AuthService(store=auth_store, token_issuer=token_issuer),
        snapshot_flusher=None,
        close_resources=close_resources,
    )


def failing_store(schema: CollectionSchema = USERS) -> FailingRecordStore:
    return FailingRecordStore(
        schema=schema,
        error=StoreError("Database operation failed", details="disk I/O error"),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", environment="test")


@pytest.fixture
def auth_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(schema=AUTH_USERS)


@pytest.fixture
def user_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(schema=USERS)


@pytest.fixture
def token_issuer() -> SessionTokenIssuer:
    return SessionTokenIssuer(clock=lambda: ISSUED_AT)


@pytest.fixture(params=["memory", "sqlite"])
def container(
    request: pytest.FixtureRequest,
    settings: Settings,
    token_issuer: SessionTokenIssuer,
    tmp_path: Path,
) -> AppContainer:
    """Container over each local backend, so endpoint tests cover both."""
    if request.param == "sqlite":
        database = SqliteDatabase(tmp_path / "data" / "ea-client.db")
        database.initialize()
        auth_store, user_store = database.stores()
    else:
        auth_store = InMemoryRecordStore(schema=AUTH_USERS)
        user_store = InMemoryRecordStore(schema=USERS)
    backend_settings = settings.model_copy(update={"storage_backend": request.param})
    return make_container(backend_settings, auth_store, user_store, token_issuer)
