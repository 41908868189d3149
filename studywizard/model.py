"""
Central data model definitions used across the project.

This module defines the canonical structure of the extraction results so that:
- the aligner, the table mapper and the entry points share the same field names
- results serialize the same way for the CLI and for HTTP handlers
- per-call settings travel in one explicit object (ExtractOptions)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional


DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_MINUTES_PER_PAGE = 3.0
DATE_FRACTION_THRESHOLD = 0.3
LOW_CONFIDENCE_THRESHOLD = 0.8


def _jsonable(value: Any) -> Any:
    # asdict() keeps date/datetime objects; JSON wants ISO strings
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class MeetingBlock:
    """
    One weekly meeting pattern, e.g. Mon/Wed 10:00-11:15.
    """

    days: List[int]
    start: str
    end: str
    location: Optional[str] = None


@dataclass
class CourseMeta:
    """
    Best-effort course identity. Every field is optional.

    meeting_days uses 0=Sun .. 6=Sat, meeting_start/meeting_end are HH:MM (24h).
    """

    code: Optional[str] = None
    title: Optional[str] = None
    instructor: Optional[str] = None
    instructor_email: Optional[str] = None
    room: Optional[str] = None
    location: Optional[str] = None
    meeting_days: Optional[List[int]] = None
    meeting_start: Optional[str] = None
    meeting_end: Optional[str] = None
    meeting_blocks: Optional[List[MeetingBlock]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    semester: Optional[str] = None
    year: Optional[int] = None
    timezone: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class Reading:
    """
    One assigned reading. `pages` is the raw page/section string as matched.
    """

    source_type: str
    short_title: Optional[str]
    pages: Optional[str]
    priority: str = "required"
    source_ref: Optional[str] = None
    confidence: float = 0.8

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WizardTask:
    """
    One deliverable found in the document.

    status is always "planned" at extraction time; the review UI moves it to
    "confirmed" or "edited".
    """

    type: str
    title: str
    due_datetime: datetime
    estimated_minutes: Optional[int]
    blocking: bool
    source_ref: str
    status: str = "planned"
    confidence: float = 0.75

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class Session:
    """
    One class meeting (one calendar date).
    """

    date: date
    sequence_number: int
    topic: Optional[str] = None
    readings: List[Reading] = field(default_factory=list)
    assignments_due: List[WizardTask] = field(default_factory=list)
    notes: Optional[str] = None
    canceled: bool = False
    source_ref: Optional[str] = None
    confidence: float = 0.9

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class LowConfidenceItem:
    kind: str
    confidence: float
    ref: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WizardPreview:
    """
    The output bundle handed to the review UI. Readings and tasks are the
    per-session lists flattened in session order.
    """

    course: Optional[CourseMeta]
    sessions: tuple[Session, ...]
    readings: tuple[Reading, ...]
    tasks: tuple[WizardTask, ...]
    low_confidence: tuple[LowConfidenceItem, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "course": self.course.to_dict() if self.course else None,
            "sessions": [s.to_dict() for s in self.sessions],
            "readings": [r.to_dict() for r in self.readings],
            "tasks": [t.to_dict() for t in self.tasks],
            "low_confidence": [x.to_dict() for x in self.low_confidence],
        }


@dataclass
class PlannedTask:
    """
    Flat task candidate produced by the quick-import flow.
    """

    title: str
    course: Optional[str]
    due_date: date
    estimated_minutes: Optional[int]
    status: str = "todo"

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class TableMapping:
    """
    Column indices of a pre-split table.
    """

    date_col: int = 0
    topic_col: int = 1
    readings_col: int = 2
    assignments_col: int = 3


@dataclass(frozen=True)
class ExtractOptions:
    """
    Per-call settings. Callers pass one of these explicitly; nothing here is
    read from global state.

    reference_date anchors relative/ambiguous date phrases (defaults to today).
    course_start/course_end are only used by table mode, where the course is
    not re-derived from the document.
    """

    timezone: str = DEFAULT_TIMEZONE
    minutes_per_page: float = DEFAULT_MINUTES_PER_PAGE
    reference_date: Optional[date] = None
    course_start: Optional[date] = None
    course_end: Optional[date] = None
    date_fraction_threshold: float = DATE_FRACTION_THRESHOLD
    low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD
    extended_page_ranges: bool = True
