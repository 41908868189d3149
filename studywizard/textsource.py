"""
Text sources.

Turns files and URLs into the plain text / rows the extractor works on:

    load_text(path)   .txt/.md as-is, .html/.htm flattened with BeautifulSoup
    fetch_text(url)   downloaded with requests, HTML flattened the same way
    load_rows(path)   .csv/.tsv via csv, anything else via table_rows_from_text

PDF/DOCX extraction is not done here; convert those to text first.
"""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import List, Union

import requests
from bs4 import BeautifulSoup

from studywizard.table import table_rows_from_text


logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md", ".text", ""}
HTML_SUFFIXES = {".html", ".htm"}
ROW_SUFFIXES = {".csv": ",", ".tsv": "\t"}


class TextSourceError(Exception):
    """
    A syllabus source could not be read (missing file, unsupported format,
    HTTP failure).
    """


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TextSourceError(f"File not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise TextSourceError(f"Could not read {path}: {exc}") from exc


def html_to_text(html: str) -> str:
    """
    Visible text of an HTML page, one block per line.

    Table cells are joined with " | " so schedule tables keep their row shape.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    for tr in soup.find_all("tr"):
        cells = [c.get_text(" ", strip=True) for c in tr.find_all(["td", "th"])]
        tr.replace_with(soup.new_string("\n" + " | ".join(cells) + "\n"))

    text = soup.get_text("\n")
    lines = [re.sub(r"[ \t\xa0]+", " ", l).strip() for l in text.splitlines()]
    return "\n".join(l for l in lines if l)


def load_text(path: Union[str, Path]) -> str:
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in HTML_SUFFIXES:
        return html_to_text(_read(p))
    if suffix in TEXT_SUFFIXES:
        return _read(p)
    raise TextSourceError(f"Unsupported file type '{suffix}' (convert it to .txt first)")


def fetch_text(url: str, timeout: float = 30) -> str:
    """
    Download a syllabus page. HTML responses are flattened to text.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise TextSourceError(f"Could not fetch {url}: {exc}") from exc

    content_type = resp.headers.get("Content-Type", "")
    logger.debug("fetched %s (%s, %d bytes)", url, content_type, len(resp.content))
    if "html" in content_type.lower() or resp.text.lstrip().startswith("<"):
        return html_to_text(resp.text)
    return resp.text


def load_rows(path: Union[str, Path]) -> List[List[str]]:
    """
    Table rows from a .csv/.tsv file, or pipe/tab rows found in a text file.
    """
    p = Path(path)
    delimiter = ROW_SUFFIXES.get(p.suffix.lower())
    if delimiter is None:
        return table_rows_from_text(load_text(p))

    text = _read(p)
    try:
        rows = [list(r) for r in csv.reader(text.splitlines(), delimiter=delimiter)]
    except csv.Error as exc:
        raise TextSourceError(f"Malformed table in {p}: {exc}") from exc
    return [[c.strip() for c in r] for r in rows if any(c.strip() for c in r)]
