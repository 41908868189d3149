"""
studywizard: syllabus text -> sessions, readings and tasks for review.
"""

from studywizard.model import (
    CourseMeta,
    ExtractOptions,
    LowConfidenceItem,
    MeetingBlock,
    PlannedTask,
    Reading,
    Session,
    TableMapping,
    WizardPreview,
    WizardTask,
)
from studywizard.preview import (
    build_preview,
    extract_from_table_rows,
    extract_from_text,
    extract_tasks,
    low_confidence_report,
)

__all__ = [
    "CourseMeta",
    "ExtractOptions",
    "LowConfidenceItem",
    "MeetingBlock",
    "PlannedTask",
    "Reading",
    "Session",
    "TableMapping",
    "WizardPreview",
    "WizardTask",
    "build_preview",
    "extract_from_table_rows",
    "extract_from_text",
    "extract_tasks",
    "low_confidence_report",
]
