import unittest
from datetime import date

from studywizard.model import ExtractOptions, TableMapping
from studywizard.table import TableMapper, table_rows_from_text


OPTIONS = ExtractOptions(reference_date=date(2025, 9, 1))


class TestTableMapper(unittest.TestCase):
    def test_carry_forward(self) -> None:
        rows = [
            ["2025-09-12", "Offer and acceptance", "", "Memo 1 due"],
            ["", "", "Read pp. 30-45", ""],
        ]
        sessions = TableMapper(options=OPTIONS).map_rows(rows)

        self.assertEqual(len(sessions), 1)
        s = sessions[0]
        self.assertEqual(s.date, date(2025, 9, 12))
        self.assertEqual(s.topic, "Offer and acceptance")
        self.assertEqual(len(s.assignments_due), 1)
        self.assertEqual(len(s.readings), 1)
        self.assertEqual(s.readings[0].source_ref, "row:1")

    def test_rows_before_first_date_are_skipped(self) -> None:
        rows = [["", "Intro", "Read ch. 1", ""], ["Sep 12", "Offer", "", ""]]
        sessions = TableMapper(options=OPTIONS).map_rows(rows)
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].readings, [])

    def test_header_and_empty_rows_are_skipped(self) -> None:
        rows = [
            ["Professor Doe", "Office: Suite 200", "", ""],
            ["", "", "", ""],
            ["Sep 12", "Offer", "", ""],
        ]
        sessions = TableMapper(options=OPTIONS).map_rows(rows)
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].source_ref, "row:2")

    def test_topic_fallback_for_readings_and_assignments(self) -> None:
        rows = [["Sep 12", "Read pp. 1-10; Memo due", "", ""]]
        s = TableMapper(options=OPTIONS).map_rows(rows)[0]
        self.assertIsNone(s.topic)
        self.assertEqual(len(s.readings), 1)
        self.assertEqual([t.title for t in s.assignments_due], ["Memo due"])

    def test_custom_mapping_and_fallback_date_scan(self) -> None:
        mapping = TableMapping(date_col=3, topic_col=0, readings_col=1, assignments_col=2)
        rows = [["Offer (Sep 15)", "Read ch. 2", "", ""]]
        sessions = TableMapper(mapping, OPTIONS).map_rows(rows)
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0].date, date(2025, 9, 15))
        self.assertEqual(len(sessions[0].readings), 1)

    def test_cancellation_row(self) -> None:
        rows = [["Sep 19", "No class", "Read ch. 9", ""]]
        s = TableMapper(options=OPTIONS).map_rows(rows)[0]
        self.assertTrue(s.canceled)
        self.assertEqual(s.readings, [])

    def test_break_row_does_not_take_over_carried_date(self) -> None:
        rows = [
            ["Sep 12", "Offer", "Read ch. 1", ""],
            ["Oct 13", "Fall break", "", ""],
            ["", "", "Read ch. 2", ""],
        ]
        sessions = TableMapper(options=OPTIONS).map_rows(rows)
        self.assertEqual([s.date for s in sessions], [date(2025, 9, 12)])
        self.assertEqual(len(sessions[0].readings), 2)

    def test_cancellation_row_is_carried(self) -> None:
        rows = [["Sep 19", "No class", "", ""], ["", "", "Read ch. 9", ""]]
        sessions = TableMapper(options=OPTIONS).map_rows(rows)
        self.assertEqual(len(sessions), 1)
        self.assertTrue(sessions[0].canceled)
        self.assertEqual(sessions[0].readings, [])

    def test_week_column_uses_course_start(self) -> None:
        options = ExtractOptions(course_start=date(2025, 8, 25))
        sessions = TableMapper(options=options).map_rows([["Week 3", "Remedies", "", ""]])
        self.assertEqual(sessions[0].date, date(2025, 9, 8))

    def test_short_rows_do_not_fail(self) -> None:
        sessions = TableMapper(options=OPTIONS).map_rows([["Sep 12"], [], ["Sep 15", None]])
        self.assertEqual([s.date for s in sessions], [date(2025, 9, 12), date(2025, 9, 15)])


class TestRowsFromText(unittest.TestCase):
    def test_rows_from_text(self) -> None:
        text = "Schedule\nDate | Topic\nSep 12 | Offer\nplain line\nSep 15\tConsideration\n| |"
        self.assertEqual(
            table_rows_from_text(text),
            [["Date", "Topic"], ["Sep 12", "Offer"], ["Sep 15", "Consideration"]],
        )

    def test_limit(self) -> None:
        text = "\n".join(f"a{i} | b{i}" for i in range(10))
        self.assertEqual(len(table_rows_from_text(text, limit=3)), 3)


if __name__ == "__main__":
    unittest.main()
