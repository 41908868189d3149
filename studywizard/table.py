"""
Table-mode mapping.

Maps pre-split rows (Date | Topic | Readings | Assignments, at caller-chosen
column indices) onto Sessions, reusing the freeform rules per cell:

- rows empty across the mapped columns are skipped
- front-matter rows (professor, office, email, phone ...) are skipped
- the date comes from the date column, else from all mapped cells joined
- rows without a date of their own attach to the last dated row
- an empty readings/assignments column falls back to reading- or
  deliverable-shaped text in the topic column
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional, Sequence

from studywizard.align import SessionAligner, split_row_cells
from studywizard.classify import is_admin_line, is_cancellation
from studywizard.dates import DateResolver, week_number
from studywizard.extract import EntityExtractor, is_deliverable, is_reading_like
from studywizard.model import ExtractOptions, Session, TableMapping


logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"\b(?:professor|instructor|suite|office|e-?mail|phone)\b", re.IGNORECASE)

MAX_SCAN_LINES = 500


def table_rows_from_text(text: str, limit: int = 100) -> List[List[str]]:
    """
    Candidate table rows in plain text: pipe- or tab-separated lines with at
    least two non-empty cells.
    """
    rows: List[List[str]] = []
    for line in (text or "").splitlines()[:MAX_SCAN_LINES]:
        cells = split_row_cells(line)
        if cells is None or len([c for c in cells if c]) < 2:
            continue
        rows.append(cells)
        if len(rows) >= limit:
            break
    return rows


def _cell(row: Sequence[Optional[str]], idx: int) -> str:
    if 0 <= idx < len(row) and row[idx] is not None:
        return str(row[idx]).strip()
    return ""


class TableMapper:
    """
    Row-by-row mapper. One mapper per table; it carries the last seen date
    forward to rows without one.
    """

    def __init__(self, mapping: Optional[TableMapping] = None, options: Optional[ExtractOptions] = None):
        options = options or ExtractOptions()
        self.mapping = mapping or TableMapping()
        self.resolver = DateResolver(
            options.course_start or options.reference_date,
            term_start=options.course_start,
        )
        self.extractor = EntityExtractor(
            meeting_start=None,
            minutes_per_page=options.minutes_per_page,
            extended_pages=options.extended_page_ranges,
        )
        self.aligner = SessionAligner(
            self.resolver,
            self.extractor,
            date_fraction_threshold=options.date_fraction_threshold,
        )
        self.current_key: Optional[date] = None

    def _row_date(self, date_cell: str, joined: str) -> Optional[date]:
        hit = self.resolver.first(date_cell) or self.resolver.first(joined)
        if hit is not None:
            return hit.value
        week = week_number(date_cell)
        if week is not None:
            return self.resolver.week_date(week)
        return None

    def map_row(self, row: Sequence[Optional[str]], i: int) -> None:
        ref = f"row:{i}"
        m = self.mapping
        dc = _cell(row, m.date_col)
        tp = _cell(row, m.topic_col)
        rd = _cell(row, m.readings_col)
        asg = _cell(row, m.assignments_col)

        if not (dc or tp or rd or asg):
            return

        joined = " | ".join(c for c in (dc, tp, rd, asg) if c)
        if HEADER_RE.search(joined):
            logger.debug("%s: front matter row skipped", ref)
            return

        own = self._row_date(dc, joined)
        when = own or self.current_key
        if when is None:
            logger.debug("%s: no date and nothing to carry forward", ref)
            return

        if is_admin_line(joined):
            # breaks and holidays never take over the carried date
            if is_cancellation(joined):
                self.current_key = when
                session = self.aligner.session_for(when, ref)
                self.aligner.mark_canceled(session, tp or dc)
            else:
                logger.debug("%s: administrative row skipped", ref)
            return
        self.current_key = when

        session = self.aligner.session_for(when, ref)
        if session.canceled:
            return

        readings_text = rd
        assignments_text = asg
        topic_used = False
        if not rd and tp and is_reading_like(tp):
            readings_text = tp
            topic_used = True
        if not asg and tp and is_deliverable(tp):
            assignments_text = tp
            topic_used = True

        if tp and not topic_used:
            self.aligner.note_topic(session, tp)
        if readings_text:
            self.extractor.extract_readings(readings_text, session, ref)
        if assignments_text:
            self.extractor.extract_assignments(assignments_text, session, ref)

    def map_rows(self, rows: Sequence[Sequence[Optional[str]]]) -> List[Session]:
        for i, row in enumerate(rows):
            self.map_row(row or [], i)
        return list(self.aligner.sessions)
