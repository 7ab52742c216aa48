"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from ea_client.adapters.memory_record_store import InMemoryRecordStore
from ea_client.adapters.sqlite_record_store import SqliteDatabase
from ea_client.adapters.supabase_record_store import SupabaseRecordStore
from ea_client.config import Settings
from ea_client.domain.collections import AUTH_USERS, USERS
from ea_client.services.auth import AuthService
from ea_client.services.persistence import SnapshotFlusher
from ea_client.services.store import RecordStore
from ea_client.services.tokens import SessionTokenIssuer
from ea_client.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_store: RecordStore
    user_store: RecordStore
    token_issuer: SessionTokenIssuer
    user_service: UserService
    auth_service: AuthService
    snapshot_flusher: SnapshotFlusher | None
    close_resources: Callable[[], Awaitable[None]]


def build_stores(
    settings: Settings,
) -> tuple[RecordStore, RecordStore, SnapshotFlusher | None]:
    """Create the (auth_users, users) stores for the configured backend."""
    if settings.storage_backend == "sqlite":
        database = SqliteDatabase(Path(settings.database_path))
        database.initialize()
        auth_store, user_store = database.stores()
        return auth_store, user_store, None

    if settings.storage_backend == "memory":
        return _build_memory_stores(settings)

    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
            "for the supabase backend"
        )
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return (
        SupabaseRecordStore(client, AUTH_USERS),
        SupabaseRecordStore(client, USERS),
        None,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    auth_store, user_store, flusher = build_stores(resolved_settings)
    token_issuer = SessionTokenIssuer()

    async def close_resources() -> None:
        if flusher is not None:
            await flusher.stop()

    return AppContainer(
        settings=resolved_settings,
        auth_store=auth_store,
        user_store=user_store,
        token_issuer=token_issuer,
        user_service=UserService(user_store),
        auth_service=AuthService(store=auth_store, token_issuer=token_issuer),
        snapshot_flusher=flusher,
        close_resources=close_resources,
    )


def _build_memory_stores(
    settings: Settings,
) -> tuple[RecordStore, RecordStore, SnapshotFlusher | None]:
    snapshot_dir = Path(settings.snapshot_dir) if settings.snapshot_dir else None
    auth_store = InMemoryRecordStore(
        schema=AUTH_USERS, snapshot_path=_snapshot_path(snapshot_dir, AUTH_USERS.name)
    )
    user_store = InMemoryRecordStore(
        schema=USERS, snapshot_path=_snapshot_path(snapshot_dir, USERS.name)
    )
    auth_store.load()
    user_store.load()
    if snapshot_dir is None:
        return auth_store, user_store, None

    def flush() -> None:
        auth_store.flush()
        user_store.flush()

    flusher = SnapshotFlusher(
        flush=flush, interval_seconds=settings.snapshot_interval_seconds
    )
    return auth_store, user_store, flusher


def _snapshot_path(snapshot_dir: Path | None, name: str) -> Path | None:
    if snapshot_dir is None:
        return None
    return snapshot_dir / f"{name}.json"
