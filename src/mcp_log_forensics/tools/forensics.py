"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import aiofiles

from mcp_log_forensics.core.analyzer import filter_records, ranked_counts
from mcp_log_forensics.core.cache import CacheWriteError, ChunkedCache
from mcp_log_forensics.core.export import (
    MAX_SUSPICIOUS_LINES,
    TOP_SOURCES,
    default_report_name,
    render_text_report,
)
from mcp_log_forensics.core.models import LogRecord
from mcp_log_forensics.core.patterns import LEVEL_VOCABULARY
from mcp_log_forensics.core.session import Session, load_session

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000


def parse_level_filter(level: str | None) -> str | None:
    """Normalize a level filter; 'all' or empty means no filter."""
    if level is None:
        return None
    name = level.strip().upper()
    if not name or name == "ALL":
        return None
    if name not in LEVEL_VOCABULARY:
        valid = ", ".join(LEVEL_VOCABULARY)
        raise ValueError(
            f"Unknown log level '{level}'. Valid values: {valid}, ALL. "
            "Tip: level is case-insensitive (e.g., 'error', 'WARN')."
        )
    return name


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return min(limit, HARD_LIMIT)


def _record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a LogRecord into a JSON-serializable dict."""
    return asdict(record)


def session_to_dict(session: Session) -> dict[str, Any]:
    """Summarize a session for tool output."""
    report = session.report
    return {
        "source_name": session.source_name,
        "captured_at": session.captured_at.isoformat() if session.captured_at else None,
        "summary": {
            "total": report.total,
            "time_range": {"start": report.time_range.start, "end": report.time_range.end},
            "error_count": len(report.errors),
            "suspicious_count": len(report.suspicious),
            "unique_sources": len(report.source_counts),
        },
        "levels": [{"level": k, "count": n} for k, n in ranked_counts(report.level_counts)],
        "top_sources": [
            {"address": k, "count": n}
            for k, n in ranked_counts(report.source_counts, limit=TOP_SOURCES)
        ],
        "actors": [{"actor": k, "count": n} for k, n in ranked_counts(report.actor_counts)],
        "errors": [_record_to_dict(r) for r in report.errors],
        "suspicious": [
            _record_to_dict(r) for r in report.suspicious[:MAX_SUSPICIOUS_LINES]
        ],
    }


def _try_cache(cache: ChunkedCache | None, session: Session) -> dict[str, Any]:
    if cache is None:
        return {"cached": False}
    try:
        cache.save(session)
    except CacheWriteError as e:
        logger.warning("Analysis not cached: %s", e)
        return {"cached": False, "cache_error": str(e)}
    return {"cached": True}


async def analyze_log_impl(
    *,
    log_path: str,
    search: str | None = None,
    level: str | None = None,
    limit: int | None = None,
    include_records: bool = False,
    max_workers: int | None = None,
    cache: ChunkedCache | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_log` MCP tool.

    Notes
    -----
    - search/level only narrow the returned `records`; the report always covers the
      whole file.
    - A failed cache write is reported in the result, never raised.
    """
    level_eff = parse_level_filter(level)
    limit_eff = _resolve_limit(limit)

    session = await load_session(log_path, max_workers=max_workers)
    out = session_to_dict(session)
    out.update(await asyncio.to_thread(_try_cache, cache, session))

    if include_records or search or level_eff:
        matched = filter_records(session.records, search=search, level=level_eff)
        out["matched_count"] = len(matched)
        out["records"] = [_record_to_dict(r) for r in matched[:limit_eff]]

    return out


def load_cached_analysis_impl(
    *,
    cache: ChunkedCache,
    search: str | None = None,
    level: str | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """Return the cached session, or an empty result if nothing usable is cached."""
    level_eff = parse_level_filter(level)
    limit_eff = _resolve_limit(limit)

    session = cache.load()
    out = session_to_dict(session)
    out["loaded"] = not session.is_empty
    if search or level_eff:
        matched = filter_records(session.records, search=search, level=level_eff)
        out["matched_count"] = len(matched)
        out["records"] = [_record_to_dict(r) for r in matched[:limit_eff]]
    return out


def clear_cached_analysis_impl(*, cache: ChunkedCache) -> dict[str, Any]:
    cache.clear()
    return {"cleared": True}


async def export_report_impl(
    *,
    log_path: str,
    output_path: str | None = None,
    max_workers: int | None = None,
) -> dict[str, Any]:
    """Analyze a file and write the plain-text report next to it (or to output_path)."""
    session = await load_session(log_path, max_workers=max_workers)
    text = render_text_report(session)

    target = Path(output_path) if output_path else Path(log_path).parent / default_report_name()
    async with aiofiles.open(target, "w", encoding="utf-8") as f:
        await f.write(text)

    logger.info("Wrote report for %s to %s", session.source_name, target)
    return {"output_path": str(target), "report": text}
