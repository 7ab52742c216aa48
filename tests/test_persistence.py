"""Tests for the periodic snapshot flusher."""

import asyncio

from ea_client.services.persistence import SnapshotFlusher


def test_flusher_runs_periodically_and_on_stop() -> None:
    calls: list[int] = []

    async def scenario() -> None:
        flusher = SnapshotFlusher(flush=lambda: calls.append(1), interval_seconds=0.01)
        flusher.start()
        await asyncio.sleep(0.05)
        await flusher.stop()

    asyncio.run(scenario())

    assert len(calls) >= 2


def test_flusher_survives_flush_errors() -> None:
    attempts: list[int] = []

    def flaky_flush() -> None:
        attempts.append(1)
        raise OSError("disk full")

    async def scenario() -> None:
        flusher = SnapshotFlusher(flush=flaky_flush, interval_seconds=0.01)
        flusher.start()
        await asyncio.sleep(0.05)
        await flusher.stop()

    asyncio.run(scenario())

    assert len(attempts) >= 2
