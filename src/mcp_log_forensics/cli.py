from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from mcp_log_forensics.core.analyzer import filter_records, ranked_counts
from mcp_log_forensics.core.export import render_text_report
from mcp_log_forensics.core.session import load_session
from mcp_log_forensics.tools.forensics import parse_level_filter, session_to_dict


def _positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError("must be an integer") from e
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _parse_level(s: str) -> str | None:
    try:
        return parse_level_filter(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Heuristic forensic summary of a log file.")
    p.add_argument("log_path")
    p.add_argument("--search", default=None, help="Case-insensitive substring filter on raw lines")
    p.add_argument("--level", type=_parse_level, default=None, help="Level filter (e.g., ERROR, warn, all)")
    p.add_argument("--max", dest="max_results", type=_positive_int, default=None,
                   help="Max matching records to print (default: no cap)")
    p.add_argument("--max-workers", type=_positive_int, default=None,
                   help="Parse worker threads (default: LOG_FORENSICS_MAX_WORKERS or 1)")
    p.add_argument("--export", default=None, help="Write the plain-text report to this file")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the summary as JSON")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    path = Path(args.log_path)

    try:
        session = asyncio.run(load_session(path, max_workers=args.max_workers))
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.export:
        Path(args.export).write_text(render_text_report(session), encoding="utf-8")

    if args.as_json:
        print(json.dumps(session_to_dict(session), indent=2))
        return

    report = session.report
    print(f"File: {session.source_name}")
    print(f"Total entries: {report.total}")
    print(f"Time range: {report.time_range.start or 'N/A'} to {report.time_range.end or 'N/A'}")
    print("Levels: " + ", ".join(f"{k}={n}" for k, n in ranked_counts(report.level_counts)))
    print(f"Errors: {len(report.errors)}  Suspicious: {len(report.suspicious)}")

    if args.search or args.level:
        matched = filter_records(session.records, search=args.search, level=args.level)
        shown = matched if args.max_results is None else matched[: args.max_results]
        print()
        for r in shown:
            print(f"#{r.id} {r.timestamp or '-'} [{r.level}] {r.raw}")
        print(f"\nFound {len(matched)} matching entries.")


if __name__ == "__main__":
    main()
