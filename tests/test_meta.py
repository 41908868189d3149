import unittest
from datetime import date

from studywizard.meta import (
    extract_course_meta,
    parse_days,
    parse_semester_year,
    parse_time_24h,
    parse_time_range,
)


HEADER = """\
LAW 501 Contracts I
Fall 2025
Instructor: Prof. Jane Doe (jdoe@law.edu)
Room: Hall 210
Class meets Mon/Wed 10:30-11:45 am
Office hours: Tue 2-4 pm
Classes run Aug 25 - Dec 5, 2025
"""


class TestParseHelpers(unittest.TestCase):
    def test_parse_days(self) -> None:
        self.assertEqual(parse_days("MWF"), [1, 3, 5])
        self.assertEqual(parse_days("TTh"), [2, 4])
        self.assertEqual(parse_days("TR"), [2, 4])
        self.assertEqual(parse_days("Mon/Wed"), [1, 3])
        self.assertEqual(parse_days("Tuesday & Thursday"), [2, 4])
        self.assertIsNone(parse_days("Instructor"))
        self.assertIsNone(parse_days(""))

    def test_parse_time_24h(self) -> None:
        self.assertEqual(parse_time_24h("1:15 pm"), "13:15")
        self.assertEqual(parse_time_24h("12am"), "00:00")
        self.assertEqual(parse_time_24h("9"), "09:00")
        self.assertIsNone(parse_time_24h("25:00"))

    def test_parse_time_range_inherits_meridiem(self) -> None:
        self.assertEqual(parse_time_range("1:30-2:45 pm"), ("13:30", "14:45"))
        self.assertEqual(parse_time_range("10:30-11:45 am"), ("10:30", "11:45"))
        # 11:00 pm would end before it starts, so the start keeps its own reading
        self.assertEqual(parse_time_range("11:00-12:15 pm"), ("11:00", "12:15"))
        self.assertIsNone(parse_time_range("no times here"))

    def test_parse_semester_year(self) -> None:
        self.assertEqual(parse_semester_year("Spring 2026 syllabus"), ("Spring", 2026))
        self.assertEqual(parse_semester_year("Syllabus 2025"), (None, 2025))
        self.assertEqual(parse_semester_year("Syllabus"), (None, None))


class TestExtractCourseMeta(unittest.TestCase):
    def test_header_fields(self) -> None:
        meta = extract_course_meta(HEADER, reference_date=date(2025, 9, 1), timezone="America/Chicago")

        self.assertIsNotNone(meta)
        assert meta is not None

        self.assertEqual(meta.code, "LAW 501")
        self.assertEqual(meta.title, "Contracts I")
        self.assertIn("Jane Doe", meta.instructor)
        self.assertNotIn("@", meta.instructor)
        self.assertEqual(meta.instructor_email, "jdoe@law.edu")
        self.assertEqual(meta.room, "Hall 210")
        self.assertEqual(meta.meeting_days, [1, 3])
        self.assertEqual(meta.meeting_start, "10:30")
        self.assertEqual(meta.meeting_end, "11:45")
        self.assertEqual(meta.semester, "Fall")
        self.assertEqual(meta.year, 2025)
        self.assertEqual(meta.timezone, "America/Chicago")

    def test_term_range_shares_year(self) -> None:
        meta = extract_course_meta(HEADER, reference_date=date(2025, 9, 1))
        assert meta is not None
        self.assertEqual(meta.start_date, date(2025, 8, 25))
        self.assertEqual(meta.end_date, date(2025, 12, 5))

    def test_office_hours_are_not_meetings(self) -> None:
        meta = extract_course_meta("Torts\nOffice hours: Tue/Thu 2:00-4:00 pm")
        assert meta is not None
        self.assertIsNone(meta.meeting_days)
        self.assertIsNone(meta.meeting_start)

    def test_multiple_meeting_blocks(self) -> None:
        meta = extract_course_meta("Civil Procedure\nLecture: Mon 10:00-11:15 am; Lab: Fri 2:00-4:00 pm")
        assert meta is not None
        self.assertEqual(len(meta.meeting_blocks), 2)
        self.assertEqual(meta.meeting_blocks[1].days, [5])
        self.assertEqual(meta.meeting_blocks[1].start, "14:00")
        self.assertEqual(meta.meeting_days, [1])
        self.assertEqual(meta.meeting_start, "10:00")

    def test_course_hint_and_compact_days(self) -> None:
        meta = extract_course_meta("Course:\nMWF, 9:00-9:50 am", "Torts")
        assert meta is not None
        self.assertEqual(meta.title, "Torts")
        self.assertEqual(meta.meeting_days, [1, 3, 5])
        self.assertEqual(meta.meeting_start, "09:00")

    def test_empty_text_is_none(self) -> None:
        self.assertIsNone(extract_course_meta(""))
        self.assertIsNone(extract_course_meta(None))  # type: ignore[arg-type]

    def test_never_raises(self) -> None:
        for text in ("|||", "\x00\x01", "Week 99 Feb 30", "-" * 5000):
            extract_course_meta(text)


if __name__ == "__main__":
    unittest.main()
