"""
Session alignment.

Walks the ordered lines of a document keeping a "current date". Every newly
recognized date opens (or continues) the Session for that date; readings,
tasks, topic and notes on the following lines attach to it until the next
date appears.

Rules per line:
- blank lines and administrative lines without a date are skipped
- "Week N" headings adopt a date from the next few lines, emitting nothing
- a line that is mostly a date (and has no task keyword) is a date heading
- a line with a date inside content sets the date and is processed as content
- content lines with a task keyword go to the EntityExtractor
- pipe/tab separated rows use their best date cell as the line's date
- date spans ("Aug 25 - Dec 5, 2025") without a task keyword are skipped
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from studywizard.classify import (
    has_task_keyword,
    is_admin_line,
    is_cancellation,
    is_online,
    strip_bullet,
)
from studywizard.dates import DateMatch, DateResolver, date_spans, is_mostly_date, week_number
from studywizard.extract import SESSION_BASE, EntityExtractor, confidence
from studywizard.model import DATE_FRACTION_THRESHOLD, Session


logger = logging.getLogger(__name__)

LOOKAHEAD_LINES = 3
TOPIC_LIMIT = 180


def _remove_span(line: str, hit: DateMatch) -> str:
    rest = line[: hit.start] + " " + line[hit.end:]
    rest = re.sub(r"^[\s:\-–—|,.]+|[\s:\-–—|,]+$", "", rest)
    return re.sub(r"\s{2,}", " ", rest).strip()


def split_row_cells(line: str) -> Optional[List[str]]:
    """
    Cells of a pipe- or tab-separated row, or None for ordinary prose.
    """
    if "|" in line:
        cells = [c.strip() for c in line.split("|")]
    elif "\t" in line:
        cells = [c.strip() for c in re.split(r"\t+", line)]
    else:
        return None
    return cells if len(cells) >= 2 else None


class SessionAligner:
    """
    Line-by-line state machine producing Sessions in discovery order.

    One aligner is used per document; `session_for` is shared with the table
    mapper so both modes keep the same one-session-per-date invariant.
    """

    def __init__(
        self,
        resolver: DateResolver,
        extractor: EntityExtractor,
        *,
        date_fraction_threshold: float = DATE_FRACTION_THRESHOLD,
    ):
        self.resolver = resolver
        self.extractor = extractor
        self.date_fraction_threshold = date_fraction_threshold

        self.current_date: Optional[date] = None
        self.sessions_by_date: Dict[date, Session] = {}
        self.sessions: List[Session] = []
        self._sequence = 0

    # -----------------------------------------------------------------------
    # Session bookkeeping
    # -----------------------------------------------------------------------

    def session_for(self, when: date, source_ref: str) -> Session:
        """
        Session for `when`, created on first reference.
        """
        session = self.sessions_by_date.get(when)
        if session is None:
            self._sequence += 1
            session = Session(
                date=when,
                sequence_number=self._sequence,
                source_ref=source_ref,
                confidence=confidence(SESSION_BASE),
            )
            self.sessions_by_date[when] = session
            self.sessions.append(session)
            logger.debug("%s: new session #%d on %s", source_ref, self._sequence, when)
        return session

    @staticmethod
    def note_topic(session: Session, text: str) -> None:
        if session.topic is None and text:
            topic = re.sub(r"^week\s+\d{1,2}\b[\s:\-–—]*", "", text, flags=re.IGNORECASE)
            topic = re.sub(r"^topic\s*[:\-]\s*", "", topic, flags=re.IGNORECASE).strip()
            session.topic = topic[:TOPIC_LIMIT] or None
        if is_online(text) and not session.notes:
            session.notes = "Online class"

    @staticmethod
    def mark_canceled(session: Session, text: str) -> None:
        session.canceled = True
        if text:
            session.notes = text

    # -----------------------------------------------------------------------
    # Line handling
    # -----------------------------------------------------------------------

    def lookahead_date(self, lines: List[str], i: int) -> Optional[date]:
        for nxt in lines[i + 1 : i + 1 + LOOKAHEAD_LINES]:
            nxt = nxt.strip()
            if week_number(nxt) is not None:
                break
            hit = self.resolver.first(nxt)
            if hit is not None and not has_task_keyword(nxt):
                return hit.value
        return None

    def row_date(self, cells: List[str]) -> Tuple[Optional[DateMatch], List[str]]:
        """
        Best date cell of a delimited row (largest date fraction) and the
        remaining non-empty cells.
        """
        best: Optional[DateMatch] = None
        best_idx = -1
        best_score = 0.0
        for idx, cell in enumerate(cells):
            hit = self.resolver.first(cell)
            if hit is None:
                continue
            score = hit.fraction(cell)
            if score > best_score:
                best, best_idx, best_score = hit, idx, score
        rest = [c for k, c in enumerate(cells) if k != best_idx and c]
        return best, rest

    def _open(self, when: date, line: str, content: str, ref: str) -> bool:
        """
        Make `when` the current date. Returns False when the line is
        administrative and its content must not be processed.
        """
        if is_admin_line(line):
            if is_cancellation(line):
                self.current_date = when
                self.mark_canceled(self.session_for(when, ref), strip_bullet(content))
            else:
                logger.debug("%s: administrative date line dropped", ref)
            return False

        self.current_date = when
        self.session_for(when, ref)
        return True

    def feed(self, lines: List[str], i: int) -> None:
        raw = lines[i]
        line = raw.strip()
        if not line:
            return
        ref = f"line:{i}"

        # "Week 3" heading without its own date
        week = week_number(line)
        if week is not None and self.resolver.first(line) is None:
            when = self.lookahead_date(lines, i)
            if when is None:
                when = self.resolver.week_date(week)
            if when is not None:
                self.current_date = when
            return

        cells = split_row_cells(line)
        if cells is not None:
            hit, rest = self.row_date(cells)
            if hit is not None:
                if self._open(hit.value, line, " | ".join(rest), ref):
                    for cell in rest:
                        self._content(cell, ref)
                return

        found = self.resolver.find_all(line)
        if date_spans(found, line) and not has_task_keyword(line):
            # term or break spans ("Aug 25 - Dec 5") are not class meetings
            logger.debug("%s: date span skipped", ref)
            return

        hit = found[0] if found else None
        if hit is not None:
            content = _remove_span(line, hit)
            if not self._open(hit.value, line, content, ref):
                return
            if is_mostly_date(hit, line, self.date_fraction_threshold) and not has_task_keyword(line):
                # date heading; any leftover text can only be a topic
                if content:
                    self.note_topic(self.session_for(hit.value, ref), strip_bullet(content))
                return
            if content:
                self._content(content, ref)
            return

        if is_admin_line(line):
            logger.debug("%s: administrative line dropped", ref)
            return

        self._content(line, ref)

    def _content(self, line: str, ref: str) -> None:
        if self.current_date is None:
            return
        session = self.session_for(self.current_date, ref)

        if not has_task_keyword(line):
            self.note_topic(session, strip_bullet(line))
            return

        if session.canceled:
            logger.debug("%s: content on a canceled session dropped", ref)
            return
        self.extractor.extract_line(line, session, ref)

    def align_lines(self, lines: Iterable[str]) -> List[Session]:
        lines = list(lines)
        for i in range(len(lines)):
            self.feed(lines, i)
        return list(self.sessions)
