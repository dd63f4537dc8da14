"""Positioned text extraction for PDF reports.

Deze module probeert eerst `pdfplumber` te gebruiken voor het uitlezen van
PDF-bestanden. Als dat pakket niet beschikbaar is, valt het terug op
`PyPDF2`. Beide leveren tekstfragmenten met een positie op; de coördinaten
worden omgerekend naar PDF user space (y loopt omhoog).
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, List, Union

try:  # pdfplumber levert vaak de beste tekstextractie
    import pdfplumber  # type: ignore
except Exception:  # pragma: no cover - optionele dependency
    pdfplumber = None  # type: ignore

try:  # eenvoudige fallback wanneer pdfplumber ontbreekt
    from PyPDF2 import PdfReader  # type: ignore
except Exception:  # pragma: no cover - PyPDF2 kan ontbreken
    PdfReader = None  # type: ignore

from .models import Fragment

logger = logging.getLogger(__name__)

DocumentSource = Union[str, Path, bytes, BinaryIO]

WORD_SETTINGS = {
    "keep_blank_chars": True,
    "use_text_flow": True,
    "x_tolerance": 3,
    "y_tolerance": 3,
}


class DocumentReadError(RuntimeError):
    """Raised when the source bytes cannot be decoded as a document."""


def _read_bytes(source: DocumentSource) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, (str, Path)):
        try:
            return Path(source).read_bytes()
        except OSError as exc:
            raise DocumentReadError(f"Kon document niet lezen: {source}") from exc
    try:
        return source.read()
    except OSError as exc:
        raise DocumentReadError("Kon uploadstroom niet lezen") from exc


def _fragments_with_pdfplumber(data: bytes) -> List[Fragment]:
    fragments: List[Fragment] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:  # type: ignore[union-attr]
        for idx, page in enumerate(pdf.pages, start=1):
            height = float(page.height)
            for word in page.extract_words(**WORD_SETTINGS):
                text = (word.get("text") or "").strip()
                if not text:
                    continue
                fragments.append(
                    Fragment(
                        text=text,
                        x=float(word["x0"]),
                        y=height - float(word["bottom"]),
                        page=idx,
                    )
                )
    return fragments


def _fragments_with_pypdf2(data: bytes) -> List[Fragment]:
    fragments: List[Fragment] = []
    reader = PdfReader(io.BytesIO(data))  # type: ignore[misc]
    for idx, page in enumerate(reader.pages, start=1):

        def visitor(text, cm, tm, font_dict, font_size, _page=idx):
            cleaned = (text or "").strip()
            if cleaned:
                fragments.append(Fragment(text=cleaned, x=float(tm[4]), y=float(tm[5]), page=_page))

        page.extract_text(visitor_text=visitor)
    return fragments


def extract_fragments(source: DocumentSource) -> List[Fragment]:
    """Return all non-empty text fragments of a PDF in content-stream order.

    Gebruikt pdfplumber als dat aanwezig is; anders valt het terug op PyPDF2.
    Als beide ontbreken wordt een RuntimeError opgegooid.
    """

    data = _read_bytes(source)
    if pdfplumber is not None:  # voorkeursoptie
        extractor = _fragments_with_pdfplumber
    elif PdfReader is not None:  # eenvoudige fallback
        extractor = _fragments_with_pypdf2
    else:
        raise RuntimeError("PDF-ondersteuning ontbreekt (pdfplumber/PyPDF2 niet geïnstalleerd)")

    try:
        fragments = extractor(data)
    except Exception as exc:
        raise DocumentReadError(f"Kon PDF niet decoderen: {exc}") from exc
    logger.debug("%d tekstfragmenten geëxtraheerd", len(fragments))
    return fragments


__all__ = ["DocumentReadError", "DocumentSource", "extract_fragments"]
