"""Core data models for log forensics."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_LEVEL = "INFO"


@dataclass(frozen=True, slots=True)
class LogRecord:
    """One structured record per non-blank input line."""

    id: int  # zero-based line index, also the display/sort key
    raw: str
    timestamp: str | None = None  # extracted text, not parsed into a datetime
    level: str = DEFAULT_LEVEL
    source_address: str | None = None
    actor: str | None = None
    status_code: str | None = None
    message: str = ""


@dataclass(frozen=True, slots=True)
class TimeRange:
    """First and last timestamps seen, in input order."""

    start: str | None = None
    end: str | None = None


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Aggregate statistics over one batch of records."""

    total: int = 0
    time_range: TimeRange = field(default_factory=TimeRange)
    # dicts keep first-seen order; use analyzer.ranked_counts for display order
    level_counts: dict[str, int] = field(default_factory=dict)
    source_counts: dict[str, int] = field(default_factory=dict)
    actor_counts: dict[str, int] = field(default_factory=dict)
    errors: tuple[LogRecord, ...] = ()
    suspicious: tuple[LogRecord, ...] = ()
