"""Shared parser utilities for positioned-text report imports."""

from __future__ import annotations

from abc import ABC, abstractmethod
import re
from typing import Iterable, List, Optional, Union

from .config import LayoutKeywordConfig, get_keyword_config
from .models import CellValue, Fragment, Numeric, ParseResult, Row, Text
from .pdf_text import DocumentReadError, DocumentSource, extract_fragments

RE_WHITESPACE = re.compile(r"\s+")
RE_CURRENCY = re.compile(r"[£$€,]")
RE_TRAILING_PERCENT = re.compile(r"%$")
RE_PLAIN_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
RE_INTEGER = re.compile(r"^[+-]?\d+$")
RE_NUMERIC_NOISE = re.compile(r"[£,%\s]")


def normalize_text(value: Optional[str]) -> str:
    if not value:
        return ""
    return RE_WHITESPACE.sub(" ", value).strip()


def _to_number(value: str) -> Optional[Union[int, float]]:
    if not RE_PLAIN_NUMBER.match(value):
        return None
    if RE_INTEGER.match(value):
        return int(value)
    return float(value)


def parse_numeric_value(raw: str) -> CellValue:
    """Strip currency symbols, commas and a trailing % and parse as a number.

    Returns ``Text`` with the trimmed input when the cleaned value is empty or
    not numeric, e.g. ``"N/A"``.
    """

    trimmed = raw.strip()
    if not trimmed:
        return Text(trimmed)

    cleaned = RE_CURRENCY.sub("", trimmed).strip()
    cleaned = RE_TRAILING_PERCENT.sub("", cleaned).strip()
    number = _to_number(cleaned) if cleaned else None
    if number is None:
        return Text(trimmed)
    return Numeric(number)


def looks_numeric(text: str) -> bool:
    """True for cells that would read as a number once £, commas and % are gone."""

    cleaned = RE_NUMERIC_NOISE.sub("", text)
    if not cleaned:
        return True
    return _to_number(cleaned) is not None


def row_text(row: Iterable[Fragment]) -> str:
    return " ".join(fragment.text for fragment in row)


def group_into_rows(fragments: Iterable[Fragment], tolerance: float = 3.0) -> List[Row]:
    """Group fragments into visual rows, top-to-bottom.

    Fragments whose y lies within ``tolerance`` of the first fragment of the
    current row share that row, regardless of page. Every row is ordered left
    to right.
    """

    ordered = sorted(fragments, key=lambda f: (-f.y, f.x, f.page, f.text))
    if not ordered:
        return []

    rows: List[Row] = []
    current: List[Fragment] = [ordered[0]]
    reference_y = ordered[0].y
    for fragment in ordered[1:]:
        if abs(fragment.y - reference_y) <= tolerance:
            current.append(fragment)
            continue
        rows.append(tuple(sorted(current, key=lambda f: f.x)))
        current = [fragment]
        reference_y = fragment.y
    rows.append(tuple(sorted(current, key=lambda f: f.x)))
    return rows


class BaseLayoutParser(ABC):
    """Reconstructs table rows from the positioned text of a document.

    Subclasses bring their own anchors and assembly heuristics; the fragment
    extraction and the ``ParseResult`` contract are shared.
    """

    def __init__(self, config: Optional[LayoutKeywordConfig] = None) -> None:
        self.config = config or get_keyword_config()

    @abstractmethod
    def parse_fragments(self, fragments: Iterable[Fragment]) -> ParseResult:
        raise NotImplementedError

    def parse_document(self, source: DocumentSource) -> ParseResult:
        return self.parse_fragments(extract_fragments(source))


__all__ = [
    "BaseLayoutParser",
    "DocumentReadError",
    "DocumentSource",
    "group_into_rows",
    "looks_numeric",
    "normalize_text",
    "parse_numeric_value",
    "row_text",
]
