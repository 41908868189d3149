"""
Page range utilities.

Parses and manipulates page references like "241-250, 107-111":

    parse_page_ranges("pp. 241–250, 107")  -> [241-250, 107-107]
    format_page_ranges(ranges)             -> "241–250, 107"
    subtract_pages(ranges, "241-247")      -> [248-250, 107-107]

Malformed segments are skipped, so partial input still yields a partial parse.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class PageRange:
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start + 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PREFIX_RE = re.compile(r"^(?:pages?|pp?)\.?\s*", re.IGNORECASE)
_DASH_RE = re.compile(r"[–—]")
_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_SINGLE_RE = re.compile(r"^(\d+)$")
_ROMAN_RANGE_RE = re.compile(r"^([ivxlcdm]+)\s*-\s*([ivxlcdm]+)$", re.IGNORECASE)
_ROMAN_SINGLE_RE = re.compile(r"^([ivxlcdm]+)$", re.IGNORECASE)
# "S10-S20", "A5 - 9"
_PREFIXED_RANGE_RE = re.compile(r"^[A-Za-z](\d+)\s*-\s*[A-Za-z]?(\d+)$")

# page spec inside a task title: "Read p. 241-250, 107-111"
_TITLE_PAGES_RE = re.compile(r"\bp(?:ages?|p)?\.?\s*([0-9](?:[0-9,\s–—-]*[0-9])?)", re.IGNORECASE)

_ROMAN_VALUES = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100, "d": 500, "m": 1000}


def roman_to_int(token: str) -> Optional[int]:
    """
    Convert a roman numeral ("xiv") to an int. Returns None for anything else.
    """
    t = token.strip().lower()
    if not t or any(ch not in _ROMAN_VALUES for ch in t):
        return None

    total = 0
    prev = 0
    for ch in reversed(t):
        val = _ROMAN_VALUES[ch]
        if val < prev:
            total -= val
        else:
            total += val
            prev = val
    return total if total > 0 else None


def _segment_to_range(part: str, allow_roman: bool, allow_prefixed: bool) -> Optional[PageRange]:
    m = _RANGE_RE.match(part)
    if m:
        start, end = int(m.group(1)), int(m.group(2))
        return PageRange(start, end) if start <= end else None

    m = _SINGLE_RE.match(part)
    if m:
        page = int(m.group(1))
        return PageRange(page, page)

    if allow_prefixed:
        m = _PREFIXED_RANGE_RE.match(part)
        if m:
            start, end = int(m.group(1)), int(m.group(2))
            return PageRange(start, end) if start <= end else None

    if allow_roman:
        m = _ROMAN_RANGE_RE.match(part)
        if m:
            start, end = roman_to_int(m.group(1)), roman_to_int(m.group(2))
            if start and end and start <= end:
                return PageRange(start, end)
            return None
        m = _ROMAN_SINGLE_RE.match(part)
        if m:
            page = roman_to_int(m.group(1))
            return PageRange(page, page) if page else None

    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_page_ranges(
    value: Optional[str],
    *,
    allow_roman: bool = False,
    allow_prefixed: bool = False,
) -> List[PageRange]:
    """
    Parse a page spec into an ordered list of ranges.

    Accepts "241-250, 107-111", "p. 241-250", "pp. 10–25; 30". With
    allow_roman, "xiii-xvii" and "xv" are accepted; with allow_prefixed,
    letter-prefixed ranges like "S10-S20" are accepted.
    """
    if not value:
        return []

    s = _PREFIX_RE.sub("", value.strip()).strip()
    s = _DASH_RE.sub("-", s)

    ranges: List[PageRange] = []
    for part in re.split(r"[,;]", s):
        part = part.strip()
        if not part:
            continue
        r = _segment_to_range(part, allow_roman, allow_prefixed)
        if r is not None:
            ranges.append(r)

    return ranges


def parse_roman_page_ranges(value: Optional[str]) -> List[PageRange]:
    """
    Roman-numeral aware variant of parse_page_ranges (front matter like
    "pp. xi-xv, 1-10").
    """
    return parse_page_ranges(value, allow_roman=True, allow_prefixed=True)


def format_page_ranges(ranges: Iterable[PageRange]) -> str:
    return ", ".join(
        str(r.start) if r.start == r.end else f"{r.start}–{r.end}"
        for r in ranges
    )


def count_pages(ranges: Iterable[PageRange]) -> int:
    return sum(r.end - r.start + 1 for r in ranges)


def subtract_pages(ranges: List[PageRange], completed: str) -> List[PageRange]:
    """
    Remove the pages listed in `completed` from `ranges`.

    Each original range is re-emitted as its maximal runs of pages that were
    not completed, in the original order.

    Example:
        ranges:    241-250, 107-111
        completed: "241-247"
        result:    248-250, 107-111
    """
    done = parse_page_ranges(completed)
    if not done:
        return list(ranges)

    done_pages: set[int] = set()
    for d in done:
        done_pages.update(range(d.start, d.end + 1))

    result: List[PageRange] = []
    for r in ranges:
        run_start: Optional[int] = None
        # walk one past the end so the last open run is closed
        for p in range(r.start, r.end + 2):
            is_done = p > r.end or p in done_pages
            if not is_done and run_start is None:
                run_start = p
            elif is_done and run_start is not None:
                result.append(PageRange(run_start, p - 1))
                run_start = None

    return result


def estimate_minutes_from_pages(page_count: int, minutes_per_page: float = 3) -> int:
    return int(round(page_count * minutes_per_page))


def extract_page_spec(title: str) -> Optional[str]:
    """
    Return the page spec from a title ("Read p. 241-250" -> "241-250").
    """
    m = _TITLE_PAGES_RE.search(title or "")
    if not m:
        return None
    return m.group(1).strip() or None


def count_pages_from_title(title: str) -> int:
    return count_pages(parse_page_ranges(extract_page_spec(title)))


def update_title_with_remaining_pages(title: str, remaining: List[PageRange]) -> str:
    """
    Rewrite the page spec of a title after a partial reading session.

    With nothing remaining, the page spec is dropped from the title.
    """
    if not remaining:
        return re.sub(r"\s*" + _TITLE_PAGES_RE.pattern, "", title, flags=re.IGNORECASE).strip()

    if not _TITLE_PAGES_RE.search(title):
        return title

    formatted = format_page_ranges(remaining)
    return _TITLE_PAGES_RE.sub(lambda _: f"p. {formatted}", title, count=1).rstrip()


def validate_completed_pages(ranges: List[PageRange], completed: str) -> Tuple[bool, Optional[str]]:
    """
    Check that every completed page lies inside the task's ranges.

    Returns (True, None) or (False, reason).
    """
    done = parse_page_ranges(completed)
    if not done:
        return False, "No valid pages specified"

    valid: set[int] = set()
    for r in ranges:
        valid.update(range(r.start, r.end + 1))

    for d in done:
        for p in range(d.start, d.end + 1):
            if p not in valid:
                return False, f"Page {p} is not in the task's page range"

    return True, None
