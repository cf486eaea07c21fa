from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from mcp_log_forensics.core.cache import (
    CacheSnapshot,
    CacheWriteError,
    ChunkedCache,
    DirectoryStore,
    MemoryStore,
    StoreQuotaError,
    session_from_snapshot,
    snapshot_from_session,
)
from mcp_log_forensics.core.session import Session


@pytest.fixture
def session(forensic_lines) -> Session:
    return Session.from_lines(forensic_lines, source_name="auth.log")


def test_snapshot_round_trip(session: Session) -> None:
    data = snapshot_from_session(session).model_dump_json()
    restored = session_from_snapshot(CacheSnapshot.model_validate_json(data))
    assert restored == session
    assert list(restored.report.source_counts) == list(session.report.source_counts)


def test_chunked_round_trip_across_many_chunks(session: Session) -> None:
    store = MemoryStore(max_value_size=64)
    cache = ChunkedCache(store, chunk_size=64)

    written = cache.save(session)

    assert written > 1
    assert store.get(cache.count_key) == str(written)
    assert cache.load() == session


def test_single_chunk_when_data_fits(session: Session) -> None:
    cache = ChunkedCache(MemoryStore(), chunk_size=10_000_000)
    assert cache.save(session) == 1
    assert cache.load() == session


def test_empty_session_round_trip() -> None:
    cache = ChunkedCache(MemoryStore(), chunk_size=32)
    empty = Session(captured_at=datetime(2024, 1, 1, tzinfo=UTC))
    cache.save(empty)
    restored = cache.load()
    assert restored == empty
    assert restored.is_empty


def test_load_without_cache_is_empty() -> None:
    cache = ChunkedCache(MemoryStore())
    assert cache.load() == Session.empty()


def test_save_failure_raises_and_leaves_session_untouched(session: Session) -> None:
    cache = ChunkedCache(MemoryStore(max_value_size=10), chunk_size=100)
    before = session

    with pytest.raises(CacheWriteError):
        cache.save(session)

    assert session == before
    assert cache.load() == Session.empty()


def test_total_quota_is_enforced(session: Session) -> None:
    store = MemoryStore(max_total_size=100)
    with pytest.raises(StoreQuotaError):
        store.set("k", "x" * 101)
    with pytest.raises(CacheWriteError):
        ChunkedCache(store, chunk_size=50).save(session)


def test_failed_save_leaves_no_chunks_behind(session: Session) -> None:
    store = MemoryStore(max_total_size=4000)
    cache = ChunkedCache(store, chunk_size=64)
    cache.save(Session.from_lines(["one line"], source_name="small.log"))

    with pytest.raises(CacheWriteError):
        cache.save(Session.from_lines(["denied from 10.0.0.1"] * 200, source_name="big.log"))

    cache.clear()
    assert store.keys() == []


def test_missing_chunk_loads_empty(session: Session) -> None:
    store = MemoryStore()
    cache = ChunkedCache(store, chunk_size=64)
    cache.save(session)
    store.delete(cache.chunk_key(1))

    assert cache.load() == Session.empty()


def test_corrupt_payload_loads_empty() -> None:
    store = MemoryStore()
    cache = ChunkedCache(store)
    store.set(cache.count_key, "1")
    store.set(cache.chunk_key(0), "{not json")

    assert cache.load() == Session.empty()


def test_resave_removes_stale_chunks(session: Session) -> None:
    store = MemoryStore()
    cache = ChunkedCache(store, chunk_size=64)
    first = cache.save(session)

    small = Session.from_lines(["one line"], source_name="small.log")
    second = cache.save(small)

    assert second < first
    assert store.get(cache.chunk_key(second)) is None
    assert cache.load() == small


def test_clear_removes_every_key(session: Session) -> None:
    store = MemoryStore()
    cache = ChunkedCache(store, chunk_size=64)
    cache.save(session)

    cache.clear()

    assert store.keys() == []
    assert cache.load() == Session.empty()


def test_directory_store_round_trip(tmp_path: Path, session: Session) -> None:
    cache = ChunkedCache(DirectoryStore(tmp_path / "cache"), chunk_size=128)
    cache.save(session)

    reopened = ChunkedCache(DirectoryStore(tmp_path / "cache"), chunk_size=128)
    assert reopened.load() == session


def test_chunk_size_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_FORENSICS_CHUNK_SIZE", "256")
    assert ChunkedCache(MemoryStore()).chunk_size == 256


def test_invalid_chunk_size_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_FORENSICS_CHUNK_SIZE", "zero")
    with pytest.raises(ValueError, match="LOG_FORENSICS_CHUNK_SIZE"):
        ChunkedCache(MemoryStore())
