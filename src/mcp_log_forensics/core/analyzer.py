"""Batch analyzer: fold a sequence of records into an AnalysisReport."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import AnalysisReport, LogRecord, TimeRange
from .patterns import is_error_level, is_suspicious

ALL_LEVELS_FILTER = "ALL"


def _bump(counts: dict[str, int], key: str, by: int = 1) -> None:
    counts[key] = counts.get(key, 0) + by


def analyze(records: Iterable[LogRecord]) -> AnalysisReport:
    """Build a report in a single left-to-right pass over records."""
    total = 0
    level_counts: dict[str, int] = {}
    source_counts: dict[str, int] = {}
    actor_counts: dict[str, int] = {}
    errors: list[LogRecord] = []
    suspicious: list[LogRecord] = []
    start: str | None = None
    end: str | None = None

    for record in records:
        total += 1
        _bump(level_counts, record.level)

        if record.source_address:
            _bump(source_counts, record.source_address)

        if record.actor:
            _bump(actor_counts, record.actor)

        if is_error_level(record.level):
            errors.append(record)

        if is_suspicious(record.raw):
            suspicious.append(record)

        if record.timestamp:
            if start is None:
                start = record.timestamp
            # "end" is the last timestamp encountered, not the chronological max.
            end = record.timestamp

    return AnalysisReport(
        total=total,
        time_range=TimeRange(start=start, end=end),
        level_counts=level_counts,
        source_counts=source_counts,
        actor_counts=actor_counts,
        errors=tuple(errors),
        suspicious=tuple(suspicious),
    )


def merge_reports(reports: Iterable[AnalysisReport]) -> AnalysisReport:
    """Merge reports of consecutive partitions, given in input order.

    The result equals analyze() over the concatenated partitions.
    """
    total = 0
    level_counts: dict[str, int] = {}
    source_counts: dict[str, int] = {}
    actor_counts: dict[str, int] = {}
    errors: list[LogRecord] = []
    suspicious: list[LogRecord] = []
    start: str | None = None
    end: str | None = None

    for part in reports:
        total += part.total
        for target, counts in (
            (level_counts, part.level_counts),
            (source_counts, part.source_counts),
            (actor_counts, part.actor_counts),
        ):
            for key, n in counts.items():
                _bump(target, key, n)
        errors.extend(part.errors)
        suspicious.extend(part.suspicious)
        if start is None:
            start = part.time_range.start
        if part.time_range.end is not None:
            end = part.time_range.end

    return AnalysisReport(
        total=total,
        time_range=TimeRange(start=start, end=end),
        level_counts=level_counts,
        source_counts=source_counts,
        actor_counts=actor_counts,
        errors=tuple(sorted(errors, key=lambda r: r.id)),
        suspicious=tuple(sorted(suspicious, key=lambda r: r.id)),
    )


def ranked_counts(counts: Mapping[str, int], limit: int | None = None) -> list[tuple[str, int]]:
    """Return (key, count) pairs by descending count; ties keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    if limit is not None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        ranked = ranked[:limit]
    return ranked


def filter_records(
    records: Iterable[LogRecord],
    *,
    search: str | None = None,
    level: str | None = None,
) -> list[LogRecord]:
    """Filter by raw-text substring and level, both case-insensitive; order is kept."""
    needle = (search or "").lower()
    wanted = (level or "").strip().upper()
    if wanted == ALL_LEVELS_FILTER:
        wanted = ""

    out: list[LogRecord] = []
    for record in records:
        if needle and needle not in record.raw.lower():
            continue
        if wanted and record.level.upper() != wanted:
            continue
        out.append(record)
    return out
