"""
Date phrase resolution.

Finds date phrases in a line ("Sep 12", "Tue, Sept. 9th", "9/12", "2025-09-12",
"next Monday") and resolves them to calendar dates with dateparser, preferring
the nearest future occurrence relative to a reference date.

"Week 3" style headings are resolved only when the term start is known.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

import dateparser


logger = logging.getLogger(__name__)


_MONTHS = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)
_WEEKDAYS = (
    r"mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?"
    r"|fri(?:day)?|sat(?:urday)?|sun(?:day)?"
)
_WEEKDAYS_FULL = r"monday|tuesday|wednesday|thursday|friday|saturday|sunday"

_DATE_RE = re.compile(
    rf"""
    (?:\b(?:{_WEEKDAYS})\b\.?,?\s+)?
    (?:
        \b(?P<md_month>{_MONTHS})\b\.?\s+(?P<md_day>\d{{1,2}})(?:st|nd|rd|th)?\b
            (?:,?\s+(?P<md_year>\d{{4}})\b)?
        |
        \b(?P<dm_day>\d{{1,2}})(?:st|nd|rd|th)?\s+(?P<dm_month>{_MONTHS})\b\.?
            (?:,?\s+(?P<dm_year>\d{{4}})\b)?
        |
        \b(?P<iso>\d{{4}}-\d{{2}}-\d{{2}})\b
        |
        \b(?P<num>\d{{1,2}}/\d{{1,2}}(?:/\d{{2,4}})?)\b
    )
    |
    \b(?P<rel>today|tomorrow|(?:next|this)\s+(?:{_WEEKDAYS_FULL}))\b
    """,
    re.IGNORECASE | re.VERBOSE,
)

WEEK_HEADING_RE = re.compile(r"^\s*week\s+(\d{1,2})\b", re.IGNORECASE)
SPAN_GAP_RE = re.compile(r"\s*(?:[-–—]|to|through|until)\s*", re.IGNORECASE)
_PROSE_BEFORE_RE = re.compile(r"[A-Za-z]\s*$")


@dataclass(frozen=True)
class DateMatch:
    """
    One resolved date phrase. start/end are offsets into the scanned text.
    """

    text: str
    start: int
    end: int
    value: date

    def fraction(self, line: str) -> float:
        return len(self.text) / max(1, len(line))


def is_mostly_date(match: Optional[DateMatch], line: str, threshold: float = 0.3) -> bool:
    """
    True when the matched date text covers more than `threshold` of the line,
    i.e. the line is a date heading rather than content with a date in it.
    """
    return match is not None and match.fraction(line.strip()) > threshold


class DateResolver:
    """
    Resolves date phrases against a fixed reference date.

    One resolver is built per extraction call; it holds no state beyond its
    reference date and the optional term start.
    """

    def __init__(self, reference_date: Optional[date] = None, term_start: Optional[date] = None):
        self.reference_date = reference_date or date.today()
        self.term_start = term_start
        self._settings = {
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": datetime.combine(self.reference_date, time()),
            "DATE_ORDER": "MDY",
            "RETURN_AS_TIMEZONE_AWARE": False,
        }

    def _parse_fragment(self, fragment: str) -> Optional[date]:
        try:
            parsed = dateparser.parse(fragment, languages=["en"], settings=self._settings)
        except ValueError:
            logger.debug("dateparser rejected %r", fragment)
            return None
        return parsed.date() if parsed else None

    def _resolve_match(self, m: re.Match) -> Optional[date]:
        if m.group("iso"):
            try:
                return date.fromisoformat(m.group("iso"))
            except ValueError:
                return None

        if m.group("num"):
            return self._parse_fragment(m.group("num"))

        if m.group("rel"):
            # forward preference already makes a bare weekday the upcoming one
            rel = re.sub(r"^(?:next|this)\s+", "", m.group("rel").lower())
            return self._parse_fragment(rel)

        month = m.group("md_month") or m.group("dm_month")
        day = m.group("md_day") or m.group("dm_day")
        year = m.group("md_year") or m.group("dm_year")
        if int(day) > 31:
            return None
        if month.lower() == "may" and not month[0].isupper() and _PROSE_BEFORE_RE.search(m.string[: m.start()]):
            # "students may 3 ..." is a verb, not a month
            return None
        fragment = f"{month[:3]} {int(day)}" + (f" {year}" if year else "")
        return self._parse_fragment(fragment)

    def find_all(self, text: str) -> List[DateMatch]:
        """
        Return every resolvable date phrase in `text`, left to right.
        """
        out: List[DateMatch] = []
        for m in _DATE_RE.finditer(text or ""):
            value = self._resolve_match(m)
            if value is None:
                continue
            out.append(DateMatch(text=m.group(0), start=m.start(), end=m.end(), value=value))
        return out

    def first(self, text: str) -> Optional[DateMatch]:
        for m in _DATE_RE.finditer(text or ""):
            value = self._resolve_match(m)
            if value is not None:
                return DateMatch(text=m.group(0), start=m.start(), end=m.end(), value=value)
        return None

    def resolve(self, text: str) -> Optional[date]:
        hit = self.first(text)
        return hit.value if hit else None

    def week_date(self, week: int) -> Optional[date]:
        """
        First day of teaching week `week` (1-based), counted from the term start.
        """
        if self.term_start is None or week < 1:
            return None
        return self.term_start + timedelta(days=7 * (week - 1))


def resolve(text: str, reference_date: Optional[date] = None) -> Optional[date]:
    """
    Most likely calendar date encoded in `text`, or None.
    """
    return DateResolver(reference_date).resolve(text)


def week_number(line: str) -> Optional[int]:
    m = WEEK_HEADING_RE.match(line)
    return int(m.group(1)) if m else None


def date_spans(matches: List[DateMatch], text: str) -> List[Tuple[DateMatch, DateMatch]]:
    """
    Consecutive matches joined by a range connector ("Aug 25 - Dec 5",
    "Sep 2 through Sep 4").
    """
    return [(a, b) for a, b in zip(matches, matches[1:]) if SPAN_GAP_RE.fullmatch(text[a.end:b.start])]
