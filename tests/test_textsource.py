import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from studywizard.textsource import TextSourceError, fetch_text, html_to_text, load_rows, load_text


HTML = """\
<html><head><title>Syllabus</title><style>p { color: red; }</style></head>
<body>
<h1>Contracts I</h1>
<table>
  <tr><th>Date</th><th>Topic</th></tr>
  <tr><td>Sep 12</td><td>Read <b>ch. 1</b></td></tr>
</table>
<script>var x = 1;</script>
</body></html>
"""


class TestHtml(unittest.TestCase):
    def test_html_to_text_keeps_rows(self) -> None:
        lines = html_to_text(HTML).splitlines()
        self.assertIn("Contracts I", lines)
        self.assertIn("Date | Topic", lines)
        self.assertIn("Sep 12 | Read ch. 1", lines)
        self.assertFalse(any("var x" in l or "color" in l for l in lines))


class TestFiles(unittest.TestCase):
    def test_load_text_and_html(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            txt = Path(d) / "syllabus.txt"
            txt.write_text("Sep 12\nRead ch. 1\n", encoding="utf-8")
            self.assertEqual(load_text(txt), "Sep 12\nRead ch. 1\n")

            html = Path(d) / "syllabus.html"
            html.write_text(HTML, encoding="utf-8")
            self.assertIn("Sep 12 | Read ch. 1", load_text(html))

    def test_unsupported_and_missing(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            pdf = Path(d) / "syllabus.pdf"
            pdf.write_bytes(b"%PDF-1.4")
            with self.assertRaises(TextSourceError):
                load_text(pdf)
            with self.assertRaises(TextSourceError):
                load_text(Path(d) / "missing.txt")

    def test_load_rows_csv(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.csv"
            p.write_text('Date,Topic,Readings,Assignments\n2025-09-12,Offer,"Read ch. 1; ch. 2",\n,,,\n', encoding="utf-8")
            self.assertEqual(
                load_rows(p),
                [["Date", "Topic", "Readings", "Assignments"], ["2025-09-12", "Offer", "Read ch. 1; ch. 2", ""]],
            )

    def test_load_rows_from_text(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.txt"
            p.write_text("Schedule\nSep 12 | Offer | Read ch. 1\n", encoding="utf-8")
            self.assertEqual(load_rows(p), [["Sep 12", "Offer", "Read ch. 1"]])


class TestFetch(unittest.TestCase):
    def test_fetch_html(self) -> None:
        resp = mock.Mock()
        resp.headers = {"Content-Type": "text/html; charset=utf-8"}
        resp.text = HTML
        resp.content = HTML.encode("utf-8")
        with mock.patch("studywizard.textsource.requests.get", return_value=resp) as get:
            text = fetch_text("https://example.edu/syllabus")
        get.assert_called_once_with("https://example.edu/syllabus", timeout=30)
        self.assertIn("Sep 12 | Read ch. 1", text)

    def test_fetch_plain_text(self) -> None:
        resp = mock.Mock()
        resp.headers = {"Content-Type": "text/plain"}
        resp.text = "Sep 12\nRead ch. 1"
        resp.content = resp.text.encode("utf-8")
        with mock.patch("studywizard.textsource.requests.get", return_value=resp):
            self.assertEqual(fetch_text("https://example.edu/syllabus.txt"), "Sep 12\nRead ch. 1")

    def test_fetch_error(self) -> None:
        with mock.patch("studywizard.textsource.requests.get", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(TextSourceError):
                fetch_text("https://example.edu/syllabus")


if __name__ == "__main__":
    unittest.main()
