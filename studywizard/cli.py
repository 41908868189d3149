"""
CLI (Command Line Interface).

Terminal commands for trying the extractor on real syllabi, e.g.:

    studywizard preview syllabus.txt
    studywizard preview --url https://example.edu/contracts/syllabus
    studywizard table schedule.csv --course-start 2025-08-25
    studywizard tasks syllabus.txt --course "Contracts"
    studywizard pages count "1-10, 15"
    studywizard pages remaining "1-20" --done "1-5"

Note:
- Results are rendered with rich; --json writes the raw preview instead
  ("-" prints it to stdout)
- --verbose turns on debug logging of the extraction steps
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from studywizard.model import (
    DEFAULT_MINUTES_PER_PAGE,
    DEFAULT_TIMEZONE,
    ExtractOptions,
    TableMapping,
    WizardPreview,
)
from studywizard.pages import (
    count_pages,
    estimate_minutes_from_pages,
    format_page_ranges,
    parse_page_ranges,
    subtract_pages,
    validate_completed_pages,
)
from studywizard.preview import extract_from_table_rows, extract_from_text, extract_tasks
from studywizard.textsource import TextSourceError, fetch_text, load_rows, load_text


LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

_DAY_ABBR = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _console() -> Console:
    return Console()


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _options(args: argparse.Namespace) -> ExtractOptions:
    return ExtractOptions(
        timezone=args.timezone,
        minutes_per_page=args.minutes_per_page,
        reference_date=args.reference_date,
        course_start=args.course_start,
        course_end=args.course_end,
        extended_page_ranges=not args.no_extended_pages,
    )


def _write_json(data: Any, out: str) -> None:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if out == "-":
        print(text)
        return
    Path(out).write_text(text + "\n", encoding="utf-8")
    print(f"Wrote: {out}")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_preview(preview: WizardPreview) -> None:
    console = _console()

    course = preview.course
    if course is not None:
        days = ", ".join(_DAY_ABBR[d] for d in course.meeting_days or [])
        when = f"{course.meeting_start}-{course.meeting_end}" if course.meeting_start else "?"
        label = " ".join(x for x in (course.code, course.title) if x)
        console.print(f"[bold cyan]{escape(label)}[/]  {days or '?'} {when}")
        if course.instructor:
            console.print(f"Instructor: {escape(course.instructor)}" + (f" <{course.instructor_email}>" if course.instructor_email else ""))
        if course.start_date:
            console.print(f"Term: {course.start_date} - {course.end_date or '?'}")

    sessions = Table(title=f"Sessions ({len(preview.sessions)})", box=box.SIMPLE)
    sessions.add_column("#", justify="right")
    sessions.add_column("Date")
    sessions.add_column("Topic")
    sessions.add_column("Readings", justify="right")
    sessions.add_column("Due", justify="right")
    sessions.add_column("Notes")
    for s in preview.sessions:
        notes = f"[red]{escape(s.notes or 'canceled')}[/]" if s.canceled else escape(s.notes or "")
        sessions.add_row(
            str(s.sequence_number),
            s.date.strftime("%a %Y-%m-%d"),
            escape(s.topic or ""),
            str(len(s.readings)),
            str(len(s.assignments_due)),
            notes,
        )
    console.print(sessions)

    if preview.readings:
        readings = Table(title="Readings", box=box.SIMPLE)
        readings.add_column("Type")
        readings.add_column("Title")
        readings.add_column("Pages")
        readings.add_column("Priority")
        for r in preview.readings:
            readings.add_row(r.source_type, escape(r.short_title or ""), escape(r.pages or ""), r.priority)
        console.print(readings)

    if preview.tasks:
        tasks = Table(title="Tasks", box=box.SIMPLE)
        tasks.add_column("Due")
        tasks.add_column("Type")
        tasks.add_column("Title")
        tasks.add_column("Min", justify="right")
        for t in preview.tasks:
            minutes = "" if t.estimated_minutes is None else str(t.estimated_minutes)
            flag = " [bold](blocking)[/]" if t.blocking else ""
            tasks.add_row(t.due_datetime.strftime("%Y-%m-%d %H:%M"), t.type, escape(t.title) + flag, minutes)
        console.print(tasks)

    if preview.low_confidence:
        console.print(f"[yellow]Needs review ({len(preview.low_confidence)}):[/]")
        for item in preview.low_confidence:
            reason = f" - {escape(item.reason)}" if item.reason else ""
            console.print(f"  {item.kind} {item.ref or ''} ({item.confidence:.2f}){reason}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_preview(args: argparse.Namespace) -> int:
    if bool(args.path) == bool(args.url):
        print("Please provide either a file path or --url.")
        return 1

    text = fetch_text(args.url) if args.url else load_text(args.path)
    preview = extract_from_text(text, args.course, _options(args))

    if args.json:
        _write_json(preview.to_dict(), args.json)
        return 0
    _render_preview(preview)
    return 0


def _cmd_table(args: argparse.Namespace) -> int:
    cols = (args.date_col, args.topic_col, args.readings_col, args.assignments_col)
    if min(cols) < 0:
        print("Column indices must be >= 0.")
        return 1

    rows = load_rows(args.path)
    if not rows:
        print("No table rows found.")
        return 0

    mapping = TableMapping(*cols)
    preview = extract_from_table_rows(rows, mapping, _options(args))

    if args.json:
        _write_json(preview.to_dict(), args.json)
        return 0
    _render_preview(preview)
    return 0


def _cmd_tasks(args: argparse.Namespace) -> int:
    tasks = extract_tasks(load_text(args.path), args.course, _options(args))

    if args.json:
        _write_json([t.to_dict() for t in tasks], args.json)
        return 0
    if not tasks:
        print("No tasks found.")
        return 0

    table = Table(title=f"Tasks ({len(tasks)})", box=box.SIMPLE)
    table.add_column("Due")
    table.add_column("Title")
    table.add_column("Min", justify="right")
    for t in tasks:
        table.add_row(t.due_date.isoformat(), escape(t.title), "" if t.estimated_minutes is None else str(t.estimated_minutes))
    _console().print(table)
    return 0


def _cmd_pages(args: argparse.Namespace) -> int:
    ranges = parse_page_ranges(args.spec, allow_roman=True, allow_prefixed=True)
    if not ranges:
        print(f"No valid page ranges in: {args.spec}")
        return 1

    if args.pages_command == "count":
        n = count_pages(ranges)
        minutes = estimate_minutes_from_pages(n, args.minutes_per_page)
        print(f"{format_page_ranges(ranges)}: {n} pages (~{minutes} min)")
        return 0

    ok, reason = validate_completed_pages(ranges, args.done)
    if not ok:
        print(reason)
        return 1
    remaining = subtract_pages(ranges, args.done)
    if not remaining:
        print("All pages done.")
        return 0
    n = count_pages(remaining)
    print(f"Remaining: {format_page_ranges(remaining)} ({n} pages, ~{estimate_minutes_from_pages(n, args.minutes_per_page)} min)")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_extract_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--timezone", default=DEFAULT_TIMEZONE, help=f"IANA timezone (default {DEFAULT_TIMEZONE})")
    p.add_argument("--minutes-per-page", type=float, default=DEFAULT_MINUTES_PER_PAGE)
    p.add_argument("--reference-date", type=_iso_date, default=None, help="Anchor for ambiguous dates (YYYY-MM-DD)")
    p.add_argument("--course-start", type=_iso_date, default=None)
    p.add_argument("--course-end", type=_iso_date, default=None)
    p.add_argument("--no-extended-pages", action="store_true", help="Ignore roman and letter-prefixed page ranges")
    p.add_argument("--json", metavar="OUT", default=None, help="Write JSON to OUT ('-' for stdout)")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="studywizard", description="Syllabus to study plan extractor")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_preview = sub.add_parser("preview", help="Extract sessions, readings and tasks from a syllabus")
    p_preview.add_argument("path", nargs="?", default=None, help="Syllabus file (.txt, .md, .html)")
    p_preview.add_argument("--url", default=None, help="Fetch the syllabus from a URL instead")
    p_preview.add_argument("--course", default=None, help="Course name hint")
    _add_extract_options(p_preview)

    p_table = sub.add_parser("table", help="Map table rows (Date | Topic | Readings | Assignments)")
    p_table.add_argument("path", help="Table file (.csv, .tsv, or text with | / tab rows)")
    p_table.add_argument("--date-col", type=int, default=0)
    p_table.add_argument("--topic-col", type=int, default=1)
    p_table.add_argument("--readings-col", type=int, default=2)
    p_table.add_argument("--assignments-col", type=int, default=3)
    _add_extract_options(p_table)

    p_tasks = sub.add_parser("tasks", help="Quick import: flat task list")
    p_tasks.add_argument("path", help="Syllabus file")
    p_tasks.add_argument("--course", default=None, help="Course name stored on each task")
    _add_extract_options(p_tasks)

    p_pages = sub.add_parser("pages", help="Page range helpers")
    pages_sub = p_pages.add_subparsers(dest="pages_command", required=True)
    p_count = pages_sub.add_parser("count", help="Count pages in a range spec")
    p_count.add_argument("spec", help='e.g. "1-10, 15, xii-xv"')
    p_count.add_argument("--minutes-per-page", type=float, default=DEFAULT_MINUTES_PER_PAGE)
    p_rem = pages_sub.add_parser("remaining", help="Pages left after completing some")
    p_rem.add_argument("spec")
    p_rem.add_argument("--done", required=True, help="Completed pages")
    p_rem.add_argument("--minutes-per-page", type=float, default=DEFAULT_MINUTES_PER_PAGE)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    handlers = {
        "preview": _cmd_preview,
        "table": _cmd_table,
        "tasks": _cmd_tasks,
        "pages": _cmd_pages,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args))
    except TextSourceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1)
