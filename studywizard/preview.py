"""
Entry points.

    extract_from_text(raw_text)        -> WizardPreview
    extract_from_table_rows(rows, ...) -> WizardPreview (course is None)
    extract_tasks(raw_text)            -> [PlannedTask]  (quick import)

Every call builds its own resolver/extractor/aligner from an ExtractOptions;
nothing is shared between calls. None of these raise for any input string.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from studywizard.align import SessionAligner, split_row_cells
from studywizard.classify import has_task_keyword, is_admin_line, strip_bullet, unwrap_hyphenation
from studywizard.dates import DateResolver, is_mostly_date, week_number
from studywizard.extract import EntityExtractor, clean_title, confidence, estimate_minutes, split_items
from studywizard.meta import extract_course_meta
from studywizard.model import (
    LOW_CONFIDENCE_THRESHOLD,
    CourseMeta,
    ExtractOptions,
    LowConfidenceItem,
    PlannedTask,
    Session,
    TableMapping,
    WizardPreview,
)
from studywizard.table import TableMapper


logger = logging.getLogger(__name__)

COURSE_CONFIDENCE = 0.5
OUTSIDE_WINDOW_PENALTY = 0.3
FALLBACK_TITLE = "Syllabus item"


# ---------------------------------------------------------------------------
# Low-confidence report
# ---------------------------------------------------------------------------


def low_confidence_report(
    course: Optional[CourseMeta],
    sessions: Sequence[Session],
    threshold: float = LOW_CONFIDENCE_THRESHOLD,
    *,
    include_course: bool = True,
) -> List[LowConfidenceItem]:
    """
    Everything the reviewer should look at first: sessions, readings and tasks
    scored below `threshold`, plus a course entry when the meeting days or
    start time are unknown.
    """
    items: List[LowConfidenceItem] = []

    if include_course and (course is None or not course.meeting_days or not course.meeting_start):
        items.append(LowConfidenceItem(kind="course", confidence=COURSE_CONFIDENCE, reason="Missing meeting days/time"))

    for s in sessions:
        if s.confidence < threshold:
            items.append(LowConfidenceItem(kind="session", confidence=s.confidence, ref=s.source_ref))
    for s in sessions:
        for r in s.readings:
            if r.confidence < threshold:
                items.append(LowConfidenceItem(kind="reading", confidence=r.confidence, ref=r.source_ref))
    for s in sessions:
        for t in s.assignments_due:
            if t.confidence < threshold:
                items.append(LowConfidenceItem(kind="task", confidence=t.confidence, ref=t.source_ref))
    return items


def _outside_course_window(
    sessions: Iterable[Session],
    start: Optional[date],
    end: Optional[date],
) -> List[LowConfidenceItem]:
    out: List[LowConfidenceItem] = []
    if start is None and end is None:
        return out
    for s in sessions:
        if (start and s.date < start) or (end and s.date > end):
            out.append(
                LowConfidenceItem(
                    kind="session",
                    confidence=confidence(s.confidence, -OUTSIDE_WINDOW_PENALTY),
                    ref=s.source_ref,
                    reason="Outside course dates",
                )
            )
    return out


def _bundle(course: Optional[CourseMeta], sessions: List[Session], low: List[LowConfidenceItem]) -> WizardPreview:
    return WizardPreview(
        course=course,
        sessions=tuple(sessions),
        readings=tuple(r for s in sessions for r in s.readings),
        tasks=tuple(t for s in sessions for t in s.assignments_due),
        low_confidence=tuple(low),
    )


# ---------------------------------------------------------------------------
# Freeform text
# ---------------------------------------------------------------------------


def extract_from_text(
    raw_text: str,
    course_hint: Optional[str] = None,
    options: Optional[ExtractOptions] = None,
) -> WizardPreview:
    """
    Syllabus text -> WizardPreview.

    Course meta is a separate best-effort pass; when it finds a term start,
    "Week N" headings resolve against it, and its meeting start becomes the
    default due time of deliverables.
    """
    options = options or ExtractOptions()
    text = unwrap_hyphenation(raw_text or "")

    course = extract_course_meta(
        text,
        course_hint,
        reference_date=options.reference_date,
        timezone=options.timezone,
    )

    resolver = DateResolver(options.reference_date, term_start=course.start_date if course else None)
    extractor = EntityExtractor(
        meeting_start=course.meeting_start if course else None,
        minutes_per_page=options.minutes_per_page,
        extended_pages=options.extended_page_ranges,
    )
    aligner = SessionAligner(resolver, extractor, date_fraction_threshold=options.date_fraction_threshold)
    sessions = aligner.align_lines(text.splitlines())
    logger.debug("aligned %d sessions", len(sessions))

    low = low_confidence_report(course, sessions, options.low_confidence_threshold, include_course=True)
    return _bundle(course, sessions, low)


build_preview = extract_from_text


# ---------------------------------------------------------------------------
# Table rows
# ---------------------------------------------------------------------------


def extract_from_table_rows(
    rows: Sequence[Sequence[Optional[str]]],
    mapping: Optional[TableMapping] = None,
    options: Optional[ExtractOptions] = None,
) -> WizardPreview:
    """
    Pre-split rows -> WizardPreview. The course is supplied by the caller (via
    options.course_start/course_end), so the result carries course=None.
    """
    options = options or ExtractOptions()
    sessions = TableMapper(mapping, options).map_rows(rows or [])
    logger.debug("mapped %d rows into %d sessions", len(rows or []), len(sessions))

    low = low_confidence_report(None, sessions, options.low_confidence_threshold, include_course=False)
    low.extend(_outside_course_window(sessions, options.course_start, options.course_end))
    return _bundle(None, sessions, low)


# ---------------------------------------------------------------------------
# Quick import
# ---------------------------------------------------------------------------


def extract_tasks(
    raw_text: str,
    course: Optional[str] = None,
    options: Optional[ExtractOptions] = None,
) -> List[PlannedTask]:
    """
    Flat task list for quick import: every task-like item becomes a
    PlannedTask due on the date in effect at its line.

    When nothing is found, a single "Syllabus item" dated at the first date
    anywhere in the text is returned (nothing at all without a date).
    """
    options = options or ExtractOptions()
    text = unwrap_hyphenation(raw_text or "")
    resolver = DateResolver(options.reference_date)
    aligner = SessionAligner(
        resolver,
        EntityExtractor(minutes_per_page=options.minutes_per_page, extended_pages=options.extended_page_ranges),
        date_fraction_threshold=options.date_fraction_threshold,
    )

    def planned(item: str, due: date) -> PlannedTask:
        return PlannedTask(
            title=clean_title(item),
            course=course,
            due_date=due,
            estimated_minutes=estimate_minutes(item, options.minutes_per_page, extended=options.extended_page_ranges),
        )

    lines = [l.strip() for l in text.splitlines() if l.strip()]
    tasks: List[PlannedTask] = []
    current: Optional[date] = None

    for i, raw in enumerate(lines):
        line = strip_bullet(raw)
        if not line or is_admin_line(line):
            continue

        if week_number(line) is not None and resolver.first(line) is None:
            current = aligner.lookahead_date(lines, i) or current
            continue

        cells = split_row_cells(raw)
        if cells is not None:
            hit, rest = aligner.row_date(cells)
            if hit is not None:
                for cell in rest:
                    tasks.extend(planned(part, hit.value) for part in split_items(cell) if has_task_keyword(part))
                continue

        hit = resolver.first(line)
        if hit is not None:
            current = hit.value
            if is_mostly_date(hit, line, options.date_fraction_threshold) and not has_task_keyword(line):
                continue

        if current is not None and has_task_keyword(line):
            tasks.extend(planned(part, current) for part in split_items(line))

    if not tasks:
        first = resolver.first(text)
        if first is not None:
            tasks.append(PlannedTask(title=FALLBACK_TITLE, course=course, due_date=first.value, estimated_minutes=None))
    return tasks
