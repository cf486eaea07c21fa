"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (analyze a log file, export a report, cached results)
- Resources: addressable data blobs (patterns, schemas, log contents via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_forensics.server.log_server
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_forensics.core.cache import ChunkedCache, DirectoryStore
from mcp_log_forensics.core.config import resolve_cache_dir, resolve_log_level_name
from mcp_log_forensics.prompts.registry import register_prompts
from mcp_log_forensics.resources.registry import register_resources
from mcp_log_forensics.tools.forensics import (
    analyze_log_impl,
    clear_cached_analysis_impl,
    export_report_impl,
    load_cached_analysis_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level = getattr(logging, resolve_log_level_name(), logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _cache() -> ChunkedCache:
    return ChunkedCache(DirectoryStore(resolve_cache_dir()))


mcp = FastMCP("log-forensics", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_log(
    log_path: str,
    search: str | None = None,
    level: str | None = None,
    limit: int | None = None,
    include_records: bool = False,
) -> dict[str, Any]:
    """Parse a log file and return its forensic summary.

    Parameters
    ----------
    log_path:
        Path to a local log file. Supports plain text and .gz.
    search:
        Case-insensitive substring filter applied to the raw line of returned records.
    level:
        Case-insensitive level filter for returned records (e.g. "error", "WARN", "all").
    limit:
        Maximum number of records returned (hard-capped in the implementation).
    include_records:
        Return records even when no search/level filter is given.

    Returns
    -------
    dict:
        {"summary": ..., "levels": [...], "top_sources": [...], "errors": [...],
         "suspicious": [...], "cached": bool, optional "records": [...]}
    """
    return await analyze_log_impl(
        log_path=log_path,
        search=search,
        level=level,
        limit=limit,
        include_records=include_records,
        cache=_cache(),
    )


@mcp.tool()
def load_cached_analysis(
    search: str | None = None,
    level: str | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """Return the most recently cached analysis (empty if none or unreadable)."""
    return load_cached_analysis_impl(cache=_cache(), search=search, level=level, limit=limit)


@mcp.tool()
def clear_cached_analysis() -> dict[str, Any]:
    """Delete the cached analysis."""
    return clear_cached_analysis_impl(cache=_cache())


@mcp.tool()
async def export_report(log_path: str, output_path: str | None = None) -> dict[str, Any]:
    """Write a plain-text forensic report for a log file and return its text."""
    return await export_report_impl(log_path=log_path, output_path=output_path)


def main() -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
