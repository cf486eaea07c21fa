from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

FORENSIC_LINES = [
    "2024-01-15 10:30:00 ERROR user: jdoe 192.168.1.5 login failed 403",
    "2024-01-15 10:30:02 INFO user: jdoe 192.168.1.5 login ok 200",
    '10.0.0.7 - - [15/Jan/2024:10:31:09 +0000] "GET /admin HTTP/1.1" 401 512',
    "",
    "2024-01-15 10:32:45 WARN unauthorized access attempt from 203.0.113.9",
    "   ",
    "2024-01-15 10:33:00 CRITICAL possible sql injection username=x from 192.168.1.5",
    "plain text with no structure",
]


@pytest.fixture
def forensic_lines() -> list[str]:
    return [line for line in FORENSIC_LINES if line.strip()]


@pytest.fixture
def write_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text("\n".join(FORENSIC_LINES) + "\n", encoding="utf-8")

    return _write


@pytest.fixture
def write_lines() -> Callable[[Path, list[str]], None]:
    def _write(path: Path, lines: list[str]) -> None:
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")

    return _write
