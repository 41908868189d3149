import unittest

from studywizard.classify import (
    classify,
    classify_task_type,
    detect_reading_priority,
    has_task_keyword,
    is_admin_line,
    is_bullet,
    is_cancellation,
    strip_bullet,
    unwrap_hyphenation,
)


class TestAdminLines(unittest.TestCase):
    def test_admin_patterns(self) -> None:
        for line in ("No class", "Thanksgiving holiday", "Fall break", "Reading period", "Class cancelled"):
            self.assertTrue(is_admin_line(line), line)
        self.assertFalse(is_admin_line("Read pp. 10-25"))

    def test_cancellation_is_narrower_than_admin(self) -> None:
        self.assertTrue(is_cancellation("Sep 19 – No class (holiday)"))
        self.assertTrue(is_cancellation("Class canceled"))
        self.assertFalse(is_cancellation("Fall break"))


class TestKeywords(unittest.TestCase):
    def test_task_keywords(self) -> None:
        for line in ("Read ch. 3", "Memo due", "§ 2-207", "Problem set 2", "Discussion post"):
            self.assertTrue(has_task_keyword(line), line)
        self.assertFalse(has_task_keyword("Introduction and overview"))

    def test_task_type_precedence(self) -> None:
        self.assertEqual(classify_task_type("Case brief due"), "brief")
        self.assertEqual(classify_task_type("Brief the assigned readings"), "reading")
        self.assertEqual(classify_task_type("Memo and quiz"), "memo")
        self.assertEqual(classify_task_type("Quiz before the midterm"), "quiz")
        self.assertEqual(classify_task_type("Midterm exam"), "exam")
        self.assertEqual(classify_task_type("Submit paper"), "admin")
        self.assertEqual(classify_task_type("Read ch. 1"), "reading")

    def test_reading_priority(self) -> None:
        self.assertEqual(detect_reading_priority("Skim ch. 2 (optional)"), "skim")
        self.assertEqual(detect_reading_priority("Optional: Smith article"), "optional")
        self.assertEqual(detect_reading_priority("Read ch. 2"), "required")


class TestBullets(unittest.TestCase):
    def test_bullets(self) -> None:
        for line in ("- Read", "• Read", "* Read", "1) Read", "2. Read"):
            self.assertTrue(is_bullet(line), line)
        self.assertFalse(is_bullet("-Read"))
        self.assertFalse(is_bullet("Read"))

    def test_strip_bullet(self) -> None:
        self.assertEqual(strip_bullet("  - Read ch. 1"), "Read ch. 1")
        self.assertEqual(strip_bullet("Read ch. 1"), "Read ch. 1")

    def test_classify_bundle(self) -> None:
        c = classify("- Skim pp. 1-5")
        self.assertFalse(c.is_admin)
        self.assertTrue(c.has_task_keyword)
        self.assertEqual(c.task_type, "reading")
        self.assertEqual(c.reading_priority, "skim")
        self.assertTrue(c.is_bullet)


class TestUnwrap(unittest.TestCase):
    def test_unwrap_hyphenation(self) -> None:
        self.assertEqual(unwrap_hyphenation("exam-\nple"), "example")
        self.assertEqual(unwrap_hyphenation("pp. 10-\n25"), "pp. 10-\n25")


if __name__ == "__main__":
    unittest.main()
