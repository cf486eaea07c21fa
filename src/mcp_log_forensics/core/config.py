"""Environment-driven configuration."""

from __future__ import annotations

import os
from pathlib import Path

MAX_WORKERS_ENV = "LOG_FORENSICS_MAX_WORKERS"
CHUNK_SIZE_ENV = "LOG_FORENSICS_CHUNK_SIZE"
CACHE_DIR_ENV = "LOG_FORENSICS_CACHE_DIR"
LOG_LEVEL_ENV = "LOG_FORENSICS_LOG_LEVEL"

DEFAULT_CHUNK_SIZE = 1_000_000
DEFAULT_CACHE_DIR = Path("~/.cache/mcp-log-forensics")


def _positive_int_env(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_max_workers(max_workers: int | None) -> int:
    """Explicit value, then LOG_FORENSICS_MAX_WORKERS, then 1 (sequential parsing)."""
    if max_workers is not None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        return max_workers

    env = _positive_int_env(MAX_WORKERS_ENV)
    if env is not None:
        return env

    return 1


def resolve_chunk_size(chunk_size: int | None) -> int:
    """Explicit value, then LOG_FORENSICS_CHUNK_SIZE, then 1,000,000 characters."""
    if chunk_size is not None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        return chunk_size

    env = _positive_int_env(CHUNK_SIZE_ENV)
    return env if env is not None else DEFAULT_CHUNK_SIZE


def resolve_cache_dir() -> Path:
    """Directory used by the on-disk cache store."""
    raw = os.getenv(CACHE_DIR_ENV)
    path = Path(raw) if raw else DEFAULT_CACHE_DIR
    return path.expanduser()


def resolve_log_level_name() -> str:
    return os.getenv(LOG_LEVEL_ENV, "INFO").upper()
