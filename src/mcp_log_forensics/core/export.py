"""Plain-text forensic report."""

from __future__ import annotations

from datetime import UTC, datetime

from .analyzer import ranked_counts
from .session import Session

TOP_SOURCES = 10
MAX_SUSPICIOUS_LINES = 20
NO_VALUE = "N/A"
NO_TIMESTAMP = "No timestamp"


def default_report_name(now: datetime | None = None) -> str:
    """Return forensic_report_<epoch millis>.txt."""
    now = now or datetime.now(UTC)
    return f"forensic_report_{int(now.timestamp() * 1000)}.txt"


def render_text_report(session: Session, *, generated_at: datetime | None = None) -> str:
    """Render the fixed-layout report for a session."""
    report = session.report
    generated_at = generated_at or datetime.now(UTC)

    lines = [
        "DIGITAL FORENSIC LOG ANALYSIS REPORT",
        "=====================================",
        f"File: {session.source_name}",
        f"Generated: {generated_at.isoformat(sep=' ', timespec='seconds')}",
        "",
        "SUMMARY",
        "-------",
        f"Total Entries: {report.total}",
        f"Time Range: {report.time_range.start or NO_VALUE} to {report.time_range.end or NO_VALUE}",
        "",
        "LOG LEVELS",
        "----------",
    ]
    lines += [f"{level}: {count}" for level, count in ranked_counts(report.level_counts)]
    lines += [
        "",
        "TOP IP ADDRESSES",
        "----------------",
    ]
    lines += [
        f"{ip}: {count} requests"
        for ip, count in ranked_counts(report.source_counts, limit=TOP_SOURCES)
    ]
    lines += [
        "",
        "ERRORS DETECTED",
        "---------------",
        f"{len(report.errors)} error(s) found",
        "",
        "SUSPICIOUS ACTIVITIES",
        "---------------------",
        f"{len(report.suspicious)} suspicious entries detected",
        "",
    ]
    lines += [
        f"[{r.timestamp or NO_TIMESTAMP}] {r.raw}"
        for r in report.suspicious[:MAX_SUSPICIOUS_LINES]
    ]
    return "\n".join(lines) + "\n"
