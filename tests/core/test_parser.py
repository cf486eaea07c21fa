from __future__ import annotations

import re

import pytest

from mcp_log_forensics.core.parser import FirstMatch, LineParser, parse_line
from mcp_log_forensics.core.patterns import is_suspicious


def test_parse_line_extracts_every_field() -> None:
    rec = parse_line("2024-01-15 10:30:00 ERROR user: jdoe 192.168.1.5 login failed 403", 0)
    assert rec.id == 0
    assert rec.timestamp == "2024-01-15 10:30:00"
    assert rec.level == "ERROR"
    assert rec.source_address == "192.168.1.5"
    assert rec.actor == "jdoe"
    assert rec.status_code == "403"
    assert rec.message == rec.raw


def test_parse_line_without_structure_uses_defaults() -> None:
    rec = parse_line("plain text with no structure", 7)
    assert rec.id == 7
    assert rec.timestamp is None
    assert rec.level == "INFO"
    assert rec.source_address is None
    assert rec.actor is None
    assert rec.status_code is None
    assert rec.raw == "plain text with no structure"


def test_parse_line_trims_only_line_terminators() -> None:
    rec = parse_line("  indented WARN line  \r\n", 0)
    assert rec.raw == "  indented WARN line  "
    assert rec.message == rec.raw


def test_bracketed_access_log_timestamp_keeps_offset() -> None:
    line = '127.0.0.1 - - [10/Oct/2000:13:55:36 -0700] "GET / HTTP/1.0" 404 2326'
    rec = parse_line(line, 0)
    assert rec.timestamp == "10/Oct/2000:13:55:36 -0700"
    assert rec.source_address == "127.0.0.1"
    assert rec.status_code == "404"
    assert rec.level == "INFO"


def test_bracketless_access_log_timestamp() -> None:
    rec = parse_line("at 10/Oct/2000:13:55:36 something", 0)
    assert rec.timestamp == "10/Oct/2000:13:55:36"


def test_iso_timestamp_allows_multiple_spaces() -> None:
    rec = parse_line("2024-01-15   10:30:00 started", 0)
    assert rec.timestamp == "2024-01-15   10:30:00"


@pytest.mark.parametrize(
    ("line", "level"),
    [
        ("warn: disk almost full", "WARN"),
        ("WARNING disk almost full", "WARNING"),
        ("something Fatal happened", "FATAL"),
        ("trace enter handler", "TRACE"),
        ("INFORMATION only", "INFO"),  # no word boundary, so default
        ("debug then error", "DEBUG"),  # first occurrence wins
    ],
)
def test_level_detection(line: str, level: str) -> None:
    assert parse_line(line, 0).level == level


def test_dotted_quad_is_not_range_checked() -> None:
    assert parse_line("from 999.999.999.999 now", 0).source_address == "999.999.999.999"


def test_first_address_wins() -> None:
    assert parse_line("10.0.0.1 -> 10.0.0.2", 0).source_address == "10.0.0.1"


@pytest.mark.parametrize(
    ("line", "actor"),
    [
        ("Username: alice, role=admin", "alice"),
        ("login bob from host", "bob"),
        ("USER:carol", "carol"),
        ("username=dave", None),
    ],
)
def test_actor_detection(line: str, actor: str | None) -> None:
    assert parse_line(line, 0).actor == actor


@pytest.mark.parametrize(
    ("line", "status"),
    [
        ("GET /x 200 1234", "200"),
        ("request took 250 ms", "250"),  # heuristic false positive is kept
        ("port 8080 open", None),
        ("code:404 returned", None),
        ("200 at start", None),
        ("finished 500", "500"),
    ],
)
def test_status_code_detection(line: str, status: str | None) -> None:
    assert parse_line(line, 0).status_code == status


def test_parser_never_raises_on_odd_input() -> None:
    for line in ["", "[", "]]]", "\x00\x01", "user:", "[[10/Oct/2000:13:55:36"]:
        rec = parse_line(line, 3)
        assert rec.id == 3
        assert rec.level == "INFO"


def test_first_match_tries_patterns_in_order() -> None:
    extractor = FirstMatch((re.compile(r"(b+)"), re.compile(r"(a+)")))
    assert extractor.extract("aaa bb") == "bb"
    assert extractor.extract("aaa") == "aaa"
    assert extractor.extract("ccc") is None


def test_custom_extractor_chain() -> None:
    parser = LineParser(extractors=(("level", FirstMatch((re.compile(r"<(\w+)>"),))),))
    rec = parser.parse("<NOTICE> hi 10.0.0.1", 0)
    assert rec.level == "NOTICE"
    assert rec.source_address is None


def test_non_ascii_digits_are_not_addresses_or_status_codes() -> None:
    rec = parse_line("from ١٩٢.١٦٨.١.٥ code ٤٠٣ x", 0)
    assert rec.source_address is None
    assert rec.status_code is None
    assert rec.timestamp is None


def test_accented_prefix_does_not_hide_level() -> None:
    assert parse_line("éERROR disk", 0).level == "ERROR"


def test_unicode_case_folding_does_not_create_matches() -> None:
    rec = parse_line("uſer: bob faıled", 0)
    assert rec.actor is None
    assert not is_suspicious(rec.raw)
