"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_forensics.core.cache import CacheSnapshot
from mcp_log_forensics.core.patterns import pattern_config

ALLOWED_FILE_SUFFIXES = {".log", ".txt"}
BASE_DIR_ENV = "LOG_FORENSICS_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_LOG = (
    "2024-01-15 10:30:00 ERROR user: jdoe 192.168.1.5 login failed 403\n"
    "2024-01-15 10:30:02 INFO user: jdoe 192.168.1.5 login ok 200\n"
    '10.0.0.7 - - [15/Jan/2024:10:31:09 +0000] "GET /admin HTTP/1.1" 401 512\n'
    "2024-01-15 10:32:45 WARN unauthorized access attempt from 203.0.113.9\n"
    "2024-01-15 10:33:00 CRITICAL possible sql injection in /search?q=\n"
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _read_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-forensics/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://log-forensics/help\n"
            "- app://log-forensics/config/patterns\n"
            "- app://log-forensics/schemas/cache-snapshot\n"
            "- app://log-forensics/examples/sample-log\n"
            f"- file://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            "- log://{path} (same rules as file://; intended for logs)\n"
            f"\nBase directory: {_base_dir()}\n"
        )

    @mcp.resource("app://log-forensics/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny sample log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://log-forensics/config/patterns")
    def patterns() -> dict[str, list[str]]:
        """Return the extraction patterns in evaluation order."""
        return pattern_config()

    @mcp.resource("app://log-forensics/schemas/cache-snapshot")
    def cache_snapshot_schema() -> dict[str, Any]:
        """Return the JSON schema of a cached analysis."""
        return CacheSnapshot.model_json_schema()

    @mcp.resource("file://{path}")
    async def read_file(path: str) -> str:
        """Read a text file from within LOG_FORENSICS_BASE_DIR."""
        p = resolve_resource_path(path)
        return await asyncio.to_thread(_read_text, p)

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        p = resolve_resource_path(path)
        return await asyncio.to_thread(_read_text, p)
