"""Value types shared by the layout parser.

Alle types zijn immutable: elke parse-stap bouwt nieuwe tuples of lists op in
plaats van bestaande fragmenten aan te passen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Fragment:
    """A positioned text run on a page (PDF user space, y grows upward)."""

    text: str
    x: float
    y: float
    page: int


Row = Tuple[Fragment, ...]


@dataclass(frozen=True)
class HeaderPosition:
    name: str
    x: float
    page: int


@dataclass(frozen=True)
class Numeric:
    value: Union[int, float]


@dataclass(frozen=True)
class Text:
    value: str


CellValue = Union[Numeric, Text]
ParsedRow = Dict[str, CellValue]
CanonicalMap = Dict[str, str]


@dataclass(frozen=True)
class HeaderLayout:
    """Header cells of the table plus the index of the first data row."""

    positions: Tuple[HeaderPosition, ...]
    data_start: int
    overflow: bool = False


@dataclass
class ParseResult:
    rows: List[ParsedRow] = field(default_factory=list)
    detected_week_number: Optional[int] = None
    detected_store_number: Optional[str] = None
    section_found: bool = False
    header_found: bool = False

    def plain_rows(self) -> List[Dict[str, Union[int, float, str]]]:
        """Unwrap the cell variants for JSON/legacy callers."""

        return [{name: cell.value for name, cell in row.items()} for row in self.rows]


__all__ = [
    "CanonicalMap",
    "CellValue",
    "Fragment",
    "HeaderLayout",
    "HeaderPosition",
    "Numeric",
    "ParseResult",
    "ParsedRow",
    "Row",
    "Text",
]
