"""
Course metadata extraction.

A best-effort pass over the whole document, independent of session alignment:
title/code, instructor and email, room, meeting days/times (possibly several
meeting blocks), term start/end and semester/year.

extract_course_meta() never raises: a failed pass is reported as None.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from studywizard.dates import DateResolver, date_spans
from studywizard.model import CourseMeta, MeetingBlock


logger = logging.getLogger(__name__)

HEADER_LINES = 40
SCAN_LINES = 80


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DAY_NAMES: Dict[str, int] = {
    "su": 0, "sun": 0, "sunday": 0,
    "m": 1, "mon": 1, "monday": 1,
    "tu": 2, "tue": 2, "tues": 2, "tuesday": 2,
    "w": 3, "wed": 3, "wednesday": 3,
    "th": 4, "thu": 4, "thur": 4, "thurs": 4, "thursday": 4,
    "f": 5, "fri": 5, "friday": 5,
    "sa": 6, "sat": 6, "saturday": 6,
}

# compact codes: MWF, TR, TTh, TuTh, MTWRF
_COMPACT_DAY_RE = re.compile(r"^(?:th|tu|sa|su|m|t|w|r|f)+$", re.IGNORECASE)
_COMPACT_TOKEN_RE = re.compile(r"th|tu|sa|su|m|t|w|r|f", re.IGNORECASE)
_COMPACT_CODES = {"th": 4, "tu": 2, "sa": 6, "su": 0, "m": 1, "t": 2, "w": 3, "r": 4, "f": 5}

_DAY_LINE_RE = re.compile(
    r"\b(?:mwf|mw|tr|tth|tuth|mon|tue|tues|wed|thu|thur|thurs|fri|sat|sun)"
    r"(?:day|nesday|sday|urday)?s?\b",
    re.IGNORECASE,
)
_TIME_RANGE_RE = re.compile(
    r"(?<![\d:])(\d{1,2}(?::\d{2})?\s*(?:am|pm|a\.m\.|p\.m\.)?)\s*(?:[-–—]|to)\s*"
    r"(\d{1,2}(?::\d{2})?(?!\d)\s*(?:am|pm|a\.m\.|p\.m\.)?)",
    re.IGNORECASE,
)
_TIME_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm|a\.m\.|p\.m\.)?$", re.IGNORECASE)

_CODE_RE = re.compile(r"\b([A-Z]{2,}[-\s]?\d{2,}[A-Z]?)\b")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_INSTRUCTOR_RE = re.compile(r"\b(?:instructor|professor|prof\.)", re.IGNORECASE)
_ROOM_RE = re.compile(r"\b(?:room|location|building|classroom)\b", re.IGNORECASE)
_SEMESTER_RE = re.compile(r"\b(spring|summer|fall|winter)\s*(\d{4})\b", re.IGNORECASE)


def parse_days(token: str) -> Optional[List[int]]:
    """
    Weekday indices (0=Sun..6=Sat) named in `token`: "MWF", "TTh", "Mon/Wed",
    "Tuesday & Thursday". Returns None when no day is found.
    """
    days: List[int] = []
    for word in re.split(r"[^A-Za-z]+", token.replace(".", "")):
        if not word:
            continue
        low = word.lower()
        found: List[int] = []
        if low in _DAY_NAMES and (len(low) > 1 or word.isupper()):
            found = [_DAY_NAMES[low]]
        elif word[0].isupper() and not word.islower() and len(word) <= 6 and _COMPACT_DAY_RE.match(word):
            # only capitalised codes, so ordinary words are never read as days
            found = [_COMPACT_CODES[t.lower()] for t in _COMPACT_TOKEN_RE.findall(word)]
            if word.istitle() and len(word) >= 2:
                found = []
        for d in found:
            if d not in days:
                days.append(d)
    return sorted(days) if days else None


def _meridiem(token: str) -> Optional[str]:
    m = re.search(r"(am|pm|a\.m\.|p\.m\.)\s*$", token.strip(), re.IGNORECASE)
    return m.group(1).lower().replace(".", "") if m else None


def parse_time_24h(token: str) -> Optional[str]:
    """
    "10", "10:30", "1pm", "1:15 pm", "13:00" -> "HH:MM" (24h).
    """
    m = _TIME_RE.match(token.strip())
    if not m:
        return None
    h = int(m.group(1))
    minute = int(m.group(2)) if m.group(2) else 0
    ap = (m.group(3) or "").lower().replace(".", "")
    if ap == "pm" and h < 12:
        h += 12
    if ap == "am" and h == 12:
        h = 0
    if not (0 <= h <= 23 and 0 <= minute <= 59):
        return None
    return f"{h:02d}:{minute:02d}"


def parse_time_range(text: str) -> Optional[Tuple[str, str]]:
    """
    First "start - end" time range in `text`. A start without am/pm takes the
    end's meridiem when that keeps start <= end ("1:30-2:45 pm").
    """
    m = _TIME_RANGE_RE.search(text)
    if not m:
        return None
    raw_start, raw_end = m.group(1).strip(), m.group(2).strip()
    end = parse_time_24h(raw_end)
    start = parse_time_24h(raw_start)
    if start is None or end is None:
        return None

    end_ap = _meridiem(raw_end)
    if end_ap and not _meridiem(raw_start):
        inherited = parse_time_24h(f"{raw_start} {end_ap}")
        if inherited and inherited <= end:
            start = inherited
    return start, end


def parse_semester_year(text: str) -> Tuple[Optional[str], Optional[int]]:
    m = _SEMESTER_RE.search(text)
    if m:
        return m.group(1).capitalize(), int(m.group(2))
    y = re.search(r"\b(20\d{2}|19\d{2})\b", text)
    return None, int(y.group(1)) if y else None


def _same_year(d: date, year: int) -> Optional[date]:
    try:
        return d.replace(year=year)
    except ValueError:
        return None


def _strip_label(line: str, labels: str) -> str:
    return re.sub(rf"^(?:{labels})\s*[:\-]?\s*", "", line, flags=re.IGNORECASE).strip()


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _extract(text: str, course_hint: Optional[str], reference_date: Optional[date], timezone: Optional[str]) -> Optional[CourseMeta]:
    lines = [l.strip() for l in text.splitlines() if l.strip()]
    header = "\n".join(lines[:HEADER_LINES])
    resolver = DateResolver(reference_date)

    meta = CourseMeta(timezone=timezone)

    # title / code: prefer an explicit "Course:" line, else the first line
    title_line = next((l for l in lines if re.match(r"^(?:course|class)\s*[:\-]", l, re.IGNORECASE)), None)
    if title_line is None and lines:
        title_line = lines[0]
    if title_line:
        value = re.sub(r"^(?:course|class)\s*[:\-]\s*", "", title_line, flags=re.IGNORECASE)
        code = _CODE_RE.search(value)
        if code:
            meta.code = code.group(1)
            value = value.replace(code.group(1), "")
        value = re.sub(r"^[\s:\-–—|]+|[\s:\-–—|]+$", "", value)
        meta.title = value or None
    if not meta.title and course_hint:
        meta.title = course_hint

    blocks: List[MeetingBlock] = []
    for line in lines[:SCAN_LINES]:
        if meta.instructor is None and _INSTRUCTOR_RE.search(line):
            name = _strip_label(line, r"instructor|professor|prof\.")
            name = _EMAIL_RE.sub("", name)
            name = re.sub(r"[\s,;|()<>]+$", "", name).strip()
            meta.instructor = name or None

        email = _EMAIL_RE.search(line)
        if email and meta.instructor_email is None:
            meta.instructor_email = email.group(0)

        if meta.room is None and _ROOM_RE.search(line):
            meta.room = _strip_label(line, r"room|location|building|classroom") or None
            meta.location = meta.room

        if re.search(r"\boffice\b", line, re.IGNORECASE):
            continue

        # meeting pattern: "Mon/Wed 10:00-11:15 am", "MWF, 1:30-2:45 pm"
        if _DAY_LINE_RE.search(line) and _TIME_RANGE_RE.search(line):
            for part in (p.strip() for p in re.split(r"[,;]|\s{2,}", line)):
                if not part:
                    continue
                days = parse_days(part)
                times = parse_time_range(part)
                if days and times:
                    block = MeetingBlock(days=days, start=times[0], end=times[1])
                    if block not in blocks:
                        blocks.append(block)
                else:
                    if days and not meta.meeting_days:
                        meta.meeting_days = days
                    if times and not meta.meeting_start:
                        meta.meeting_start, meta.meeting_end = times

        # term dates: "Aug 28 - Dec 6, 2025"
        if meta.start_date is None:
            for a, b in date_spans(resolver.find_all(line), line):
                start = a.value
                if start > b.value and not re.search(r"\d{4}", a.text):
                    # "Aug 25 - Dec 5, 2025": the year belongs to both ends
                    start = _same_year(start, b.value.year)
                if start is not None and start <= b.value:
                    meta.start_date, meta.end_date = start, b.value
                    break

    meta.semester, meta.year = parse_semester_year(header)

    if blocks:
        meta.meeting_blocks = blocks
        if not meta.meeting_days:
            meta.meeting_days = list(blocks[0].days)
        if not meta.meeting_start:
            meta.meeting_start = blocks[0].start
        if not meta.meeting_end:
            meta.meeting_end = blocks[0].end

    if not (meta.title or meta.instructor or meta.meeting_days or meta.semester or meta.year):
        return None
    if not meta.title:
        meta.title = course_hint or "Course"
    return meta


def extract_course_meta(
    text: str,
    course_hint: Optional[str] = None,
    *,
    reference_date: Optional[date] = None,
    timezone: Optional[str] = None,
) -> Optional[CourseMeta]:
    """
    Best-effort CourseMeta for a whole document, or None.
    """
    try:
        return _extract(text or "", course_hint, reference_date, timezone)
    except Exception:
        # a broken heuristic must not take session extraction down with it
        logger.warning("course meta extraction failed", exc_info=True)
        return None
