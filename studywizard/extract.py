"""
Entity extraction (content line or table cell -> Readings / Tasks).

Freeform lines and table cells go through the same rules:
- split multi-item content into parts
- decide per part whether it is a reading or a deliverable
- build Reading / WizardTask entities with due-time rules, minute estimates
  and confidence scores
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import List, Optional, Tuple

from studywizard.classify import (
    classify_task_type,
    detect_reading_priority,
    has_task_keyword,
    is_bullet,
    strip_bullet,
)
from studywizard.model import DEFAULT_MINUTES_PER_PAGE, Reading, Session, WizardTask
from studywizard.pages import roman_to_int


logger = logging.getLogger(__name__)

DEFAULT_CLASS_START = "09:00"
END_OF_DAY = "23:59"

READING_TITLE_LIMIT = 120
TASK_TITLE_LIMIT = 160

SESSION_BASE = 0.9
READING_BASE = 0.8
TASK_BASE = 0.75

MIN_ESTIMATE = 10
MAX_ESTIMATE = 8 * 60


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

PAGE_REF_RE = re.compile(
    r"\b(?:pp?\.|pages?)\s*[^;,.]+"
    r"(?:,\s*\d{1,4}(?:\s*[-–—]\s*\d{1,4})?(?=\s*(?:[,;.)]|$)))*"
    r"|\bch(?:apter)?\.?\s*\d+(?:\s*[-–—]\s*\d+)?"
    r"|§+\s*[^;,.]+"
    r"|(?<![:/\d])\b\d{1,4}\s*[-–—]\s*\d{1,4}\b(?![:/])",
    re.IGNORECASE,
)

READING_RE = re.compile(
    r"\bread|\bcasebook|\bsupp\b|\bsupplement|\barticle|\bpp?\.|\bchapter|\bch\.|§",
    re.IGNORECASE,
)

DELIVERABLE_RE = re.compile(
    r"\bdue\b|\bsubmit|\bturn\s+in\b|\bupload|\bbrief|\bmemo|\bquiz|\bexam"
    r"|\bfinal\b|\bmidterm|start\s+of\s+class|\bat\s+class\b|by\s+class\s+time|11:59",
    re.IGNORECASE,
)

START_OF_CLASS_RE = re.compile(
    r"start\s+of\s+class|\bat\s+class\b|by\s+class\s+time|before\s+class", re.IGNORECASE
)
END_OF_DAY_RE = re.compile(
    r"11:59\s*(?:pm|p\.m\.)?|\bend\s+of\s+(?:the\s+)?day\b|\beod\b|\bmidnight\b", re.IGNORECASE
)
BLOCKING_RE = re.compile(r"\bmust\b|\brequired\b|\bblock", re.IGNORECASE)

_CASE_NAME_RE = re.compile(r"\b[A-Z][A-Za-z.'&-]*\s+v(?:s)?\.?\s+[A-Z]")

_PAGE_WORD_RE = re.compile(r"\bpp?\.|\bpages?\b", re.IGNORECASE)
_DASH_RANGE_RE = re.compile(r"\d+\s*[-–—]\s*\d+")

# minute estimation
_NUM_RANGE_RE = re.compile(r"(?<![A-Za-z\d:/])(\d{1,4})\s*[-–—]\s*(\d{1,4})(?![A-Za-z\d:/])")
_PREFIXED_RANGE_RE = re.compile(r"\b[A-Za-z](\d{1,4})\s*[-–—]\s*[A-Za-z]?(\d{1,4})\b")
_ROMAN_RANGE_RE = re.compile(r"\b([ivxlcdm]+)\s*[-–—]\s*([ivxlcdm]+)\b", re.IGNORECASE)
_N_PAGES_RE = re.compile(r"\b(\d{1,3})\s+pages?\b", re.IGNORECASE)
_PAGE_LIST_RE = re.compile(r"\b(?:pp?\.|pages?)\s*([0-9ivxlcdm\s,–—-]+(?:\s*and\s*[0-9ivxlcdm\s,–—-]+)*)", re.IGNORECASE)

# keyword fallbacks, checked in order
_KEYWORD_MINUTES: List[Tuple[re.Pattern, int]] = [
    (re.compile(r"^(?=.*\bbrief)(?=.*\bcase)", re.IGNORECASE | re.DOTALL), 60),
    (re.compile(r"\bbrief", re.IGNORECASE), 45),
    (re.compile(r"\bmemo", re.IGNORECASE), 180),
    (re.compile(r"\boutline", re.IGNORECASE), 90),
    (re.compile(r"\bquiz", re.IGNORECASE), 30),
    (re.compile(r"\bexam|\bmidterm|\bfinal\b", re.IGNORECASE), 180),
    (re.compile(r"\bpaper", re.IGNORECASE), 180),
    (re.compile(r"\bdiscussion", re.IGNORECASE), 30),
    (re.compile(r"\bassignment", re.IGNORECASE), 90),
    (re.compile(r"\bchapter|\bch\.", re.IGNORECASE), 60),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


_CANONICAL_ROMAN_RE = re.compile(r"^(?=[ivxlc])c{0,1}(?:xc|xl|l?x{0,3})(?:ix|iv|v?i{0,3})$", re.IGNORECASE)


def _front_matter_page(token: str) -> Optional[int]:
    # roman page numbers only appear in front matter, so anything above c is a word
    if not _CANONICAL_ROMAN_RE.match(token.strip()):
        return None
    return roman_to_int(token)


def confidence(base: float, *modifiers: float) -> float:
    c = base + sum(modifiers)
    return round(max(0.0, min(1.0, c)), 2)


def page_reference(text: str) -> Optional[str]:
    """
    First page/section reference in `text` ("pp. 10-25", "ch. 3", "§ 2-207").
    """
    m = PAGE_REF_RE.search(text)
    return m.group(0).strip() if m else None


def is_reading_like(text: str) -> bool:
    return bool(READING_RE.search(text) or page_reference(text) or is_bullet(text))


def is_deliverable(text: str) -> bool:
    return bool(DELIVERABLE_RE.search(text))


def looks_like_task(text: str) -> bool:
    return bool(has_task_keyword(text) or _PAGE_WORD_RE.search(text) or _DASH_RANGE_RE.search(text))


def guess_source_type(text: str) -> str:
    if re.search(r"\bcases?\b", text, re.IGNORECASE) or _CASE_NAME_RE.search(text):
        return "case"
    if re.search(r"\bstatut", text, re.IGNORECASE):
        return "statute"
    if re.search(r"\barticle|\bjournal", text, re.IGNORECASE):
        return "article"
    return "casebook"


def split_items(line: str) -> List[str]:
    """
    Split a content line into separate items.

    Semicolons and bullet glyphs split first. Otherwise the line is cut at the
    first " and " / " & ", but only when both halves look like tasks on their
    own. Non-task parts are dropped as long as one part is task-like.
    """
    parts = [p.strip() for p in re.split(r";|•", line) if p.strip()]

    if len(parts) <= 1:
        m = re.search(r"\s+(?:and|&)\s+", line, re.IGNORECASE)
        if m and m.start() > 0:
            left = line[: m.start()].strip()
            right = line[m.end():].strip()
            if left and right and looks_like_task(left) and looks_like_task(right):
                parts = [left, right]

    if len(parts) <= 1:
        return [line.strip()]

    tasky = [p for p in parts if looks_like_task(p)]
    return tasky or [line.strip()]


def split_cell(cell: str) -> List[str]:
    return [p.strip() for p in re.split(r";|•|\n", cell) if p.strip()]


def resolve_due_time(text: str, meeting_start: Optional[str] = None) -> Tuple[str, bool]:
    """
    Due time for a deliverable: (HH:MM, explicitly_recognized).

    "start of class" -> the course meeting start (09:00 when unknown),
    "11:59" / end of day -> 23:59, anything else -> the meeting start fallback.
    """
    start = meeting_start or DEFAULT_CLASS_START
    if START_OF_CLASS_RE.search(text):
        return start, True
    if END_OF_DAY_RE.search(text):
        return END_OF_DAY, True
    return start, False


def estimate_minutes(
    text: str,
    minutes_per_page: float = DEFAULT_MINUTES_PER_PAGE,
    *,
    extended: bool = True,
) -> Optional[int]:
    """
    Rough minutes needed for an item.

    Page signals are added up across the line (numeric ranges, letter-prefixed
    and roman ranges when `extended`, "N pages", comma lists of single pages)
    and clamped to 10..480 minutes. Without pages, fixed per-keyword estimates
    apply; otherwise None.
    """
    per_page = minutes_per_page
    if re.search(r"\bskim\b", text, re.IGNORECASE):
        per_page = max(1, round(minutes_per_page * 0.5))

    total = 0
    for m in _NUM_RANGE_RE.finditer(text):
        a, b = int(m.group(1)), int(m.group(2))
        if b >= a:
            total += b - a + 1

    if extended:
        for m in _PREFIXED_RANGE_RE.finditer(text):
            a, b = int(m.group(1)), int(m.group(2))
            if b >= a:
                total += b - a + 1
        for m in _ROMAN_RANGE_RE.finditer(text):
            a, b = _front_matter_page(m.group(1)), _front_matter_page(m.group(2))
            if a and b and b >= a:
                total += b - a + 1

    m = _N_PAGES_RE.search(text)
    if m:
        total += int(m.group(1))

    m = _PAGE_LIST_RE.search(text)
    if m:
        tokens = [t.strip() for t in re.sub(r"\band\b", ",", m.group(1)).split(",")]
        for tok in tokens:
            if not tok or re.search(r"[-–—\s]", tok):
                # ranges were counted above
                continue
            if tok.isdigit() or (extended and _front_matter_page(tok)):
                total += 1

    if total > 0:
        return int(min(MAX_ESTIMATE, max(MIN_ESTIMATE, round(total * per_page))))

    for pattern, minutes in _KEYWORD_MINUTES:
        if pattern.search(text):
            return minutes
    return None


def clean_title(text: str) -> str:
    """
    Short task title for the quick-import flow: drops "Reading:"-style
    prefixes, Canvas/class-time boilerplate and trailing page specs.
    """
    t = text.strip()
    t = re.sub(r"^(?:reading:|read:|due:|assignment:|homework:|submit:|pages?:)\s*", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\b(?:on|via)\s+canvas\b", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\bby\s+(?:start\s+of\s+)?class\b", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\bpp?\.\s*[^;,.]+", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\bpages?\s+[^;,.]+", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\s{2,}", " ", t)
    t = re.sub(r"[;,:.\-\s]+$", "", t).strip()
    return t or text.strip()


def make_reading(text: str, source_ref: Optional[str], *, title_limit: int = READING_TITLE_LIMIT) -> Reading:
    bullet = is_bullet(text)
    body = strip_bullet(text)
    pages = page_reference(body)

    title = re.sub(r"^read(?:ing)?:?\s*", "", body, flags=re.IGNORECASE)
    title = re.sub(r"\s*\([^)]*\)\s*$", "", title).strip()

    return Reading(
        source_type=guess_source_type(body),
        short_title=title[:title_limit] or None,
        pages=pages,
        priority=detect_reading_priority(body),
        source_ref=source_ref,
        confidence=confidence(READING_BASE, 0.1 if pages else 0, 0.05 if bullet else 0),
    )


def make_task(
    text: str,
    due_date: date,
    source_ref: str,
    *,
    meeting_start: Optional[str] = None,
    minutes_per_page: float = DEFAULT_MINUTES_PER_PAGE,
    extended_pages: bool = True,
) -> WizardTask:
    body = strip_bullet(text)
    hhmm, explicit = resolve_due_time(body, meeting_start)
    hour, minute = (int(x) for x in hhmm.split(":"))

    return WizardTask(
        type=classify_task_type(body),
        title=body[:TASK_TITLE_LIMIT],
        due_datetime=datetime(due_date.year, due_date.month, due_date.day, hour, minute),
        estimated_minutes=estimate_minutes(body, minutes_per_page, extended=extended_pages),
        blocking=bool(BLOCKING_RE.search(body)),
        source_ref=source_ref,
        status="planned",
        confidence=confidence(TASK_BASE, 0.1 if explicit else 0),
    )


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class EntityExtractor:
    """
    Turns content into Readings/Tasks attached to a Session.

    Holds only per-call context (course meeting start, minutes per page).
    """

    def __init__(
        self,
        meeting_start: Optional[str] = None,
        minutes_per_page: float = DEFAULT_MINUTES_PER_PAGE,
        extended_pages: bool = True,
    ):
        self.meeting_start = meeting_start
        self.minutes_per_page = minutes_per_page
        self.extended_pages = extended_pages

    def _task(self, text: str, session: Session, source_ref: str) -> WizardTask:
        return make_task(
            text,
            session.date,
            source_ref,
            meeting_start=self.meeting_start,
            minutes_per_page=self.minutes_per_page,
            extended_pages=self.extended_pages,
        )

    def extract_line(self, content: str, session: Session, source_ref: str) -> None:
        """
        Freeform content line. The caller has already checked for a task
        keyword, so a single unsplit line is always kept.
        """
        for part in split_items(content):
            body = strip_bullet(part)
            strong_reading = bool(READING_RE.search(body)) and (page_reference(body) is not None or is_bullet(part))

            if strong_reading:
                session.readings.append(make_reading(part, source_ref))
            elif is_deliverable(body):
                session.assignments_due.append(self._task(part, session, source_ref))
            elif is_reading_like(part):
                session.readings.append(make_reading(part, source_ref))
            else:
                session.assignments_due.append(self._task(part, session, source_ref))

    def extract_readings(self, cell: str, session: Session, source_ref: str) -> None:
        for item in split_cell(cell):
            if not is_reading_like(item):
                logger.debug("%s: skipping non-reading item %r", source_ref, item)
                continue
            session.readings.append(make_reading(item, source_ref))

    def extract_assignments(self, cell: str, session: Session, source_ref: str) -> None:
        for item in split_cell(cell):
            if not is_deliverable(item):
                logger.debug("%s: skipping non-deliverable item %r", source_ref, item)
                continue
            session.assignments_due.append(self._task(item, session, source_ref))
