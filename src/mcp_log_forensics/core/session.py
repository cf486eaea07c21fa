"""Session: one loaded batch, its report and where it came from."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from .analyzer import analyze
from .loader import load_records, parse_lines, split_lines
from .models import AnalysisReport, LogRecord


@dataclass(frozen=True, slots=True)
class Session:
    """A complete batch; replaced wholesale on every load."""

    records: tuple[LogRecord, ...] = ()
    report: AnalysisReport = field(default_factory=AnalysisReport)
    source_name: str = ""
    captured_at: datetime | None = None

    @classmethod
    def empty(cls) -> Session:
        return cls()

    @classmethod
    def from_records(
        cls,
        records: Iterable[LogRecord],
        *,
        source_name: str,
        captured_at: datetime | None = None,
    ) -> Session:
        """Analyze records and bundle them into a session."""
        recs = tuple(records)
        return cls(
            records=recs,
            report=analyze(recs),
            source_name=source_name,
            captured_at=captured_at or datetime.now(UTC),
        )

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, source_name: str) -> Session:
        """Build a session from already-filtered, non-blank lines."""
        return cls.from_records(parse_lines(lines), source_name=source_name)

    @classmethod
    def from_text(cls, text: str, *, source_name: str) -> Session:
        """Build a session from a whole file's text."""
        return cls.from_lines(split_lines(text), source_name=source_name)

    @property
    def is_empty(self) -> bool:
        return not self.records


async def load_session(log_path: str | Path, **iter_kwargs) -> Session:
    """Read, parse and analyze a log file."""
    path = Path(log_path)
    records = await load_records(path, **iter_kwargs)
    return Session.from_records(records, source_name=path.name)
