"""
Line classification.

Decides what a single line (or table cell) of syllabus text is about:

- administrative non-class lines ("No class", "Fall break", "Reading period")
- lines carrying a reading/deliverable keyword
- the task sub-type (first match wins: brief > memo > quiz > exam > admin > reading)
- the reading priority (skim / optional / required)
- bullet or numbered list items
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Keyword sets
# ---------------------------------------------------------------------------

TASK_KEYWORD_RE = re.compile(
    r"(?:\b(?:read|reading|readings|skim|pages?|chapters?|sections?"
    r"|assignments?|submit|due|turn\s+in|upload"
    r"|memos?|briefs?|quiz(?:zes)?|exams?|midterms?|outlines?|problems?|problem\s+set"
    r"|practice|discussion|papers?|cases?"
    r"|casebook|supp|supplement|ucc|frcp|restatement|statutes?|articles?|handouts?)\b"
    r"|\bpp?\.\s*\d|\bch\.|§)",
    re.IGNORECASE,
)

ADMIN_RE = re.compile(
    r"\bno\s+class\b|\bholiday\b|\bbreak\b|\breading\s+(?:day|period)\b|\bcancell?ed\b",
    re.IGNORECASE,
)

CANCEL_RE = re.compile(r"\bno\s+class\b|\bcancell?ed\b", re.IGNORECASE)
ONLINE_RE = re.compile(r"\b(?:online|zoom|remote)\b", re.IGNORECASE)

BULLET_RE = re.compile(r"^\s*(?:[-–—•*]|\d+[).])\s+")

_ADMIN_TASK_RE = re.compile(r"\bsubmit|\bdue\b|\bturn\s+in\b|\bupload", re.IGNORECASE)


@dataclass(frozen=True)
class LineClass:
    is_admin: bool
    has_task_keyword: bool
    task_type: str
    reading_priority: str
    is_bullet: bool


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_admin_line(line: str) -> bool:
    return bool(ADMIN_RE.search(line))


def is_cancellation(line: str) -> bool:
    return bool(CANCEL_RE.search(line))


def is_online(line: str) -> bool:
    return bool(ONLINE_RE.search(line))


def has_task_keyword(line: str) -> bool:
    return bool(TASK_KEYWORD_RE.search(line))


def is_bullet(line: str) -> bool:
    return bool(BULLET_RE.match(line))


def strip_bullet(line: str) -> str:
    return BULLET_RE.sub("", line, count=1).strip()


def classify_task_type(line: str) -> str:
    """
    Task sub-type. The order of the checks is the tie-break policy for lines
    that mention several deliverables.
    """
    l = line.lower()
    if re.search(r"\bbrief", l) and re.search(r"\bcase", l):
        return "brief"
    if re.search(r"\bmemo", l):
        return "memo"
    if re.search(r"\bquiz", l):
        return "quiz"
    if re.search(r"\bexam(?:s|ination)?\b|\bmidterm|\bfinal\b", l):
        return "exam"
    if _ADMIN_TASK_RE.search(l):
        return "admin"
    return "reading"


def detect_reading_priority(line: str) -> str:
    l = line.lower()
    if re.search(r"\bskim\b", l):
        return "skim"
    if re.search(r"\boptional\b", l):
        return "optional"
    return "required"


def classify(line: str) -> LineClass:
    return LineClass(
        is_admin=is_admin_line(line),
        has_task_keyword=has_task_keyword(line),
        task_type=classify_task_type(line),
        reading_priority=detect_reading_priority(line),
        is_bullet=is_bullet(line),
    )


def unwrap_hyphenation(text: str) -> str:
    """
    Join words hyphenated across a line break ("exam-\\nple" -> "example").
    """
    return re.sub(r"([A-Za-z])-[\r\n]+([a-z])", r"\1\2", text)
