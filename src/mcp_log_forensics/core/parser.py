"""Line parser: one raw line in, one LogRecord out."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .models import DEFAULT_LEVEL, LogRecord
from .patterns import ACTOR_RE, IPV4_RE, LEVEL_RE, STATUS_CODE_RE, TIMESTAMP_PATTERNS


class FieldExtractor(Protocol):
    """Extractor interface: return the field text if found, else None."""

    def extract(self, line: str) -> str | None:
        """Extract one field value from a line."""
        ...


def _strip_brackets(value: str) -> str:
    return value.replace("[", "").replace("]", "")


@dataclass(frozen=True, slots=True)
class FirstMatch:
    """Try patterns in order and return group 1 of the first match."""

    patterns: Sequence[re.Pattern[str]]
    transform: Callable[[str], str] | None = None

    def extract(self, line: str) -> str | None:
        """Return the first captured value, transformed if configured."""
        for pattern in self.patterns:
            m = pattern.search(line)
            if m:
                value = m.group(1)
                return self.transform(value) if self.transform else value
        return None


def default_extractors() -> tuple[tuple[str, FieldExtractor], ...]:
    """Default (field, extractor) pairs, in evaluation order."""
    return (
        ("timestamp", FirstMatch(TIMESTAMP_PATTERNS, transform=_strip_brackets)),
        ("level", FirstMatch((LEVEL_RE,), transform=str.upper)),
        ("source_address", FirstMatch((IPV4_RE,))),
        ("actor", FirstMatch((ACTOR_RE,))),
        ("status_code", FirstMatch((STATUS_CODE_RE,))),
    )


@dataclass(frozen=True, slots=True)
class LineParser:
    """Run each field extractor over a line; fields are independent of each other."""

    extractors: Sequence[tuple[str, FieldExtractor]] = field(default_factory=default_extractors)
    default_level: str = DEFAULT_LEVEL

    def parse(self, line: str, index: int) -> LogRecord:
        """Parse a single line into a LogRecord. Never raises for str input."""
        raw = line.rstrip("\r\n")
        fields: dict[str, str | None] = {}
        for name, extractor in self.extractors:
            fields[name] = extractor.extract(raw)

        return LogRecord(
            id=index,
            raw=raw,
            timestamp=fields.get("timestamp"),
            level=fields.get("level") or self.default_level,
            source_address=fields.get("source_address"),
            actor=fields.get("actor"),
            status_code=fields.get("status_code"),
            message=raw,
        )


_DEFAULT_PARSER = LineParser()


def parse_line(line: str, index: int) -> LogRecord:
    """Parse a line with the default extractor chain."""
    return _DEFAULT_PARSER.parse(line, index)
