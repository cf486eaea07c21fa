"""Session snapshots and chunked key/value persistence.

A snapshot is serialized to JSON and split into fixed-size chunks so it fits
stores that cap the size of a single value. Chunks are reassembled by
concatenating them in index order.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from pydantic import BaseModel, Field, ValidationError

from .config import resolve_chunk_size
from .models import AnalysisReport, LogRecord, TimeRange
from .session import Session

logger = logging.getLogger(__name__)


class CacheWriteError(RuntimeError):
    """Raised when a snapshot could not be written to the store."""


class StoreQuotaError(RuntimeError):
    """Raised by a store when a value or the store total exceeds its limit."""


class RecordModel(BaseModel):
    id: int
    raw: str
    timestamp: str | None = None
    level: str = "INFO"
    source_address: str | None = None
    actor: str | None = None
    status_code: str | None = None
    message: str = ""


class TimeRangeModel(BaseModel):
    start: str | None = None
    end: str | None = None


class ReportModel(BaseModel):
    total: int = 0
    time_range: TimeRangeModel = Field(default_factory=TimeRangeModel)
    level_counts: dict[str, int] = Field(default_factory=dict)
    source_counts: dict[str, int] = Field(default_factory=dict)
    actor_counts: dict[str, int] = Field(default_factory=dict)
    errors: list[RecordModel] = Field(default_factory=list)
    suspicious: list[RecordModel] = Field(default_factory=list)


class CacheSnapshot(BaseModel):
    """Serialized form of a Session."""

    records: list[RecordModel] = Field(default_factory=list)
    report: ReportModel = Field(default_factory=ReportModel)
    source_name: str = Field(default="", description="Name of the analyzed file.")
    captured_at: datetime | None = Field(default=None, description="When the batch was loaded.")


def _record_model(record: LogRecord) -> RecordModel:
    return RecordModel(**asdict(record))


def _record(model: RecordModel) -> LogRecord:
    return LogRecord(**model.model_dump())


def snapshot_from_session(session: Session) -> CacheSnapshot:
    report = session.report
    return CacheSnapshot(
        records=[_record_model(r) for r in session.records],
        report=ReportModel(
            total=report.total,
            time_range=TimeRangeModel(
                start=report.time_range.start, end=report.time_range.end
            ),
            level_counts=dict(report.level_counts),
            source_counts=dict(report.source_counts),
            actor_counts=dict(report.actor_counts),
            errors=[_record_model(r) for r in report.errors],
            suspicious=[_record_model(r) for r in report.suspicious],
        ),
        source_name=session.source_name,
        captured_at=session.captured_at,
    )


def session_from_snapshot(snapshot: CacheSnapshot) -> Session:
    rep = snapshot.report
    return Session(
        records=tuple(_record(m) for m in snapshot.records),
        report=AnalysisReport(
            total=rep.total,
            time_range=TimeRange(start=rep.time_range.start, end=rep.time_range.end),
            level_counts=dict(rep.level_counts),
            source_counts=dict(rep.source_counts),
            actor_counts=dict(rep.actor_counts),
            errors=tuple(_record(m) for m in rep.errors),
            suspicious=tuple(_record(m) for m in rep.suspicious),
        ),
        source_name=snapshot.source_name,
        captured_at=snapshot.captured_at,
    )


class KeyValueStore(Protocol):
    """String-to-string store interface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store with optional per-value and total size caps."""

    def __init__(
        self, *, max_value_size: int | None = None, max_total_size: int | None = None
    ) -> None:
        self.max_value_size = max_value_size
        self.max_total_size = max_total_size
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_value_size is not None and len(value) > self.max_value_size:
            raise StoreQuotaError(
                f"value for {key!r} is {len(value)} chars (limit {self.max_value_size})"
            )
        if self.max_total_size is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.max_total_size:
                raise StoreQuotaError(f"store quota of {self.max_total_size} chars exceeded")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class DirectoryStore:
    """Store each key as a UTF-8 file under a root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / quote(key, safe="")

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class ChunkedCache:
    """Persist a Session as numbered chunks plus a chunk-count key."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        chunk_size: int | None = None,
        prefix: str = "log_forensics",
    ) -> None:
        self.store = store
        self.chunk_size = resolve_chunk_size(chunk_size)
        self.prefix = prefix

    @property
    def count_key(self) -> str:
        return f"{self.prefix}_chunks"

    def chunk_key(self, index: int) -> str:
        return f"{self.prefix}_data_{index}"

    def _stored_count(self) -> int:
        raw = self.store.get(self.count_key)
        if not raw:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            return 0

    def _split(self, data: str) -> list[str]:
        return [data[i : i + self.chunk_size] for i in range(0, len(data), self.chunk_size)]

    def _drop_chunks(self, count: int) -> None:
        """Delete chunk keys 0..count-1 after a failed save; no key may outlive it."""
        for index in range(count):
            try:
                self.store.delete(self.chunk_key(index))
            except OSError as exc:
                logger.warning("Could not remove cache chunk %d: %s", index, exc)

    def save(self, session: Session) -> int:
        """Write the session and return the number of chunks written."""
        data = snapshot_from_session(session).model_dump_json()
        chunks = self._split(data)
        previous = self._stored_count()

        try:
            # Drop the count first so a half-written snapshot is never read back.
            self.store.delete(self.count_key)
            for index, chunk in enumerate(chunks):
                self.store.set(self.chunk_key(index), chunk)
            for index in range(len(chunks), previous):
                self.store.delete(self.chunk_key(index))
            self.store.set(self.count_key, str(len(chunks)))
        except (StoreQuotaError, OSError) as exc:
            logger.warning("Failed to cache %s: %s", session.source_name or "session", exc)
            self._drop_chunks(max(len(chunks), previous))
            raise CacheWriteError(f"Could not cache data: {exc}") from exc

        logger.info("Cached %s in %d chunk(s)", session.source_name or "session", len(chunks))
        return len(chunks)

    def load(self) -> Session:
        """Reassemble and deserialize the cached session; empty on any failure."""
        count = self._stored_count()
        if count == 0:
            return Session.empty()

        parts: list[str] = []
        try:
            for index in range(count):
                chunk = self.store.get(self.chunk_key(index))
                if chunk is None:
                    raise ValueError(f"missing cache chunk {index} of {count}")
                parts.append(chunk)
            snapshot = CacheSnapshot.model_validate_json("".join(parts))
        except (ValueError, ValidationError, OSError) as exc:
            logger.warning("Failed to load cache: %s", exc)
            return Session.empty()

        return session_from_snapshot(snapshot)

    def clear(self) -> None:
        """Remove every chunk and the chunk-count key."""
        count = self._stored_count()
        for index in range(count):
            self.store.delete(self.chunk_key(index))
        self.store.delete(self.count_key)
