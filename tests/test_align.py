"""
Tests for the line-by-line session aligner.

These tests focus on:
- date headings vs. dates inside content lines
- cancellation and other administrative lines
- "Week N" headings (look-ahead and term-start fallback)
- session uniqueness and sequence numbering
"""

import unittest
from datetime import date
from typing import List, Optional

from studywizard.align import SessionAligner, split_row_cells
from studywizard.dates import DateResolver
from studywizard.extract import EntityExtractor
from studywizard.model import Session


REF = date(2025, 9, 1)


def align(text: str, term_start: Optional[date] = None, meeting_start: Optional[str] = None) -> List[Session]:
    aligner = SessionAligner(DateResolver(REF, term_start=term_start), EntityExtractor(meeting_start=meeting_start))
    return aligner.align_lines(text.splitlines())


class TestDates(unittest.TestCase):
    def test_date_heading_then_reading(self) -> None:
        sessions = align("Contracts I\nSep 12\nRead pp. 10-25, Smith v. Jones")

        self.assertEqual(len(sessions), 1)
        s = sessions[0]
        self.assertEqual(s.date, date(2025, 9, 12))
        self.assertEqual(s.sequence_number, 1)
        self.assertEqual(s.source_ref, "line:1")
        self.assertEqual(len(s.readings), 1)
        r = s.readings[0]
        self.assertIn("10-25", r.pages)
        self.assertEqual(r.source_type, "case")
        self.assertEqual(r.priority, "required")
        self.assertEqual(r.source_ref, "line:2")

    def test_content_before_any_date_is_ignored(self) -> None:
        self.assertEqual(align("Read the syllabus carefully\nMemo due"), [])

    def test_date_inside_content_line(self) -> None:
        sessions = align("Memo due Sep 15 at start of class", meeting_start="10:30")
        self.assertEqual(len(sessions), 1)
        task = sessions[0].assignments_due[0]
        self.assertEqual(task.type, "memo")
        self.assertEqual((task.due_datetime.date(), task.due_datetime.hour, task.due_datetime.minute), (date(2025, 9, 15), 10, 30))

    def test_topic_from_heading_and_plain_line(self) -> None:
        sessions = align("Sep 12 – Offer and acceptance\nSep 15\nConsideration\nRead ch. 4")
        self.assertEqual(sessions[0].topic, "Offer and acceptance")
        self.assertEqual(sessions[1].topic, "Consideration")
        self.assertEqual(len(sessions[1].readings), 1)

    def test_repeated_date_merges_into_one_session(self) -> None:
        sessions = align("Sep 12\nRead ch. 1\nSep 15\nRead ch. 2\nSep 12\nMemo due")
        self.assertEqual([s.date for s in sessions], [date(2025, 9, 12), date(2025, 9, 15)])
        self.assertEqual([s.sequence_number for s in sessions], [1, 2])
        self.assertEqual(len(sessions[0].readings), 1)
        self.assertEqual(len(sessions[0].assignments_due), 1)

    def test_weekday_numeric_heading(self) -> None:
        sessions = align("Tue 9/9 – Intro\nRead ch. 1")
        self.assertEqual([s.date for s in sessions], [date(2025, 9, 9)])
        self.assertEqual(sessions[0].topic, "Intro")

    def test_modal_may_does_not_open_a_session(self) -> None:
        sessions = align("Sep 12\nStudents may 3 questions\nRead ch. 1")
        self.assertEqual([s.date for s in sessions], [date(2025, 9, 12)])
        self.assertEqual(len(sessions[0].readings), 1)

    def test_term_span_is_not_a_session(self) -> None:
        self.assertEqual(align("Classes run Aug 25 - Dec 5, 2025"), [])


class TestAdministrativeLines(unittest.TestCase):
    def test_cancellation(self) -> None:
        sessions = align("Sep 19 – No class (holiday)\nRead ch. 9")
        self.assertEqual(len(sessions), 1)
        s = sessions[0]
        self.assertEqual(s.date, date(2025, 9, 19))
        self.assertTrue(s.canceled)
        self.assertEqual(s.notes, "No class (holiday)")
        self.assertEqual(s.readings, [])
        self.assertEqual(s.assignments_due, [])

    def test_break_line_is_dropped(self) -> None:
        sessions = align("Sep 12\nRead ch. 1\nOct 13 Fall break\nRead ch. 2")
        self.assertEqual(len(sessions), 1)
        # content after a dropped date line stays with the previous session
        self.assertEqual(len(sessions[0].readings), 2)

    def test_online_note(self) -> None:
        sessions = align("Sep 12\nMeets on Zoom")
        self.assertEqual(sessions[0].notes, "Online class")


class TestWeekHeadings(unittest.TestCase):
    def test_week_heading_looks_ahead(self) -> None:
        sessions = align("Week 2\nTopic: Remedies\nSep 10\nRead ch. 5")
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].date, date(2025, 9, 10))

    def test_week_heading_uses_term_start(self) -> None:
        sessions = align("Week 2\nRead ch. 3", term_start=date(2025, 9, 1))
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].date, date(2025, 9, 8))
        self.assertEqual(sessions[0].readings[0].pages, "ch. 3")

    def test_week_heading_without_anchor_emits_nothing(self) -> None:
        self.assertEqual(align("Week 2\nRead ch. 3"), [])


class TestDelimitedRows(unittest.TestCase):
    def test_split_row_cells(self) -> None:
        self.assertEqual(split_row_cells("Sep 12 | Offer"), ["Sep 12", "Offer"])
        self.assertEqual(split_row_cells("Sep 12\tOffer"), ["Sep 12", "Offer"])
        self.assertIsNone(split_row_cells("Sep 12 Offer"))

    def test_pipe_row(self) -> None:
        sessions = align("Sep 12 | Offer | Read pp. 1-10 | Memo due")
        self.assertEqual(len(sessions), 1)
        s = sessions[0]
        self.assertEqual(s.topic, "Offer")
        self.assertEqual(len(s.readings), 1)
        self.assertEqual(len(s.assignments_due), 1)


if __name__ == "__main__":
    unittest.main()
