"""Shared extraction patterns and classification heuristics.

All patterns are compiled with re.ASCII: digits, word characters, whitespace and
case folding follow ASCII rules.

Pattern order inside each sequence is part of the contract: the first pattern
that matches anywhere in a line wins, so reordering changes results on
ambiguous lines.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

TIMESTAMP_PATTERNS: Sequence[re.Pattern[str]] = (
    # [10/Oct/2000:13:55:36 -0700]
    re.compile(r"(\[\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2}[^\]]*\])", re.ASCII),
    # 10/Oct/2000:13:55:36
    re.compile(r"(\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2})", re.ASCII),
    # 2024-01-15 10:30:00
    re.compile(r"(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2})", re.ASCII),
)

LEVEL_VOCABULARY: Sequence[str] = (
    "DEBUG",
    "INFO",
    "WARN",
    "WARNING",
    "ERROR",
    "CRITICAL",
    "FATAL",
    "TRACE",
)
LEVEL_RE = re.compile(r"\b(" + "|".join(LEVEL_VOCABULARY) + r")\b", re.IGNORECASE | re.ASCII)

# Syntactic dotted quad only; octets are not range-checked.
IPV4_RE = re.compile(r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\b", re.ASCII)

ACTOR_RE = re.compile(r"(?:user|username|login)[:\s]+([^\s,]+)", re.IGNORECASE | re.ASCII)

# Whitespace-bounded 3-digit run; the end of a trimmed line counts as trailing whitespace.
STATUS_CODE_RE = re.compile(r"\s(\d{3})(?=\s|$)", re.ASCII)

ERROR_LEVELS: frozenset[str] = frozenset({"ERROR", "CRITICAL", "FATAL"})

SUSPICIOUS_KEYWORDS: Sequence[str] = (
    "failed",
    "unauthorized",
    "denied",
    "forbidden",
    "attack",
    "injection",
    "malicious",
    "breach",
    "exploit",
)
SUSPICIOUS_RE = re.compile("|".join(SUSPICIOUS_KEYWORDS), re.IGNORECASE | re.ASCII)


def is_error_level(level: str) -> bool:
    """Return True for levels counted as errors."""
    return level in ERROR_LEVELS


def is_suspicious(text: str) -> bool:
    """Return True when text contains any suspicious keyword (case-insensitive)."""
    return SUSPICIOUS_RE.search(text) is not None


def pattern_config() -> dict[str, list[str]]:
    """Return the active patterns as plain strings, in evaluation order."""
    return {
        "timestamp": [p.pattern for p in TIMESTAMP_PATTERNS],
        "level": [LEVEL_RE.pattern],
        "source_address": [IPV4_RE.pattern],
        "actor": [ACTOR_RE.pattern],
        "status_code": [STATUS_CODE_RE.pattern],
        "suspicious_keywords": list(SUSPICIOUS_KEYWORDS),
        "error_levels": sorted(ERROR_LEVELS),
    }
