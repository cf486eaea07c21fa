"""Parsing and analysis engine plus its file, cache and export collaborators."""

from __future__ import annotations

from .analyzer import analyze, filter_records, merge_reports, ranked_counts
from .models import AnalysisReport, LogRecord, TimeRange
from .parser import LineParser, parse_line
from .session import Session, load_session

__all__ = [
    "AnalysisReport",
    "LineParser",
    "LogRecord",
    "Session",
    "TimeRange",
    "analyze",
    "filter_records",
    "load_session",
    "merge_reports",
    "parse_line",
    "ranked_counts",
]
