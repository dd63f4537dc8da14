"""Table reconstruction for the OIS employee tracker PDF.

Het rapport bevat geen echte tabelstructuur, alleen tekst met coördinaten.
De parser zoekt het "Last Week"-blok, groepeert fragmenten tot rijen, vindt
de kopregel (ook als een kolom doorloopt op de volgende pagina) en wijst elk
fragment toe aan de dichtstbijzijnde kolomkop.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .base_parser import (
    BaseLayoutParser,
    group_into_rows,
    looks_numeric,
    normalize_text,
    parse_numeric_value,
    row_text,
)
from .config import LayoutKeywordConfig, get_keyword_config
from .models import (
    CanonicalMap,
    Fragment,
    HeaderLayout,
    HeaderPosition,
    ParseResult,
    ParsedRow,
    Row,
)
from .pdf_text import DocumentSource, extract_fragments
from .reconcile import ColumnReconciler, build_canonical_name_map, get_reconciler

logger = logging.getLogger(__name__)


# ============================================================
# Marker scanning
# ============================================================


def _full_text(fragments: Iterable[Fragment]) -> str:
    return " ".join(fragment.text for fragment in fragments)


def detect_week_number(
    fragments: Sequence[Fragment], config: Optional[LayoutKeywordConfig] = None
) -> Optional[int]:
    """Week number from e.g. ``Last Week 202547`` (the last two digits)."""

    config = config or get_keyword_config()
    pattern = re.compile(rf"{config.week_anchor}\s+(\d{{4,6}})", re.I)
    match = pattern.search(_full_text(fragments))
    if not match:
        return None
    return int(match.group(1)[-2:])


def detect_store_number(
    fragments: Sequence[Fragment], config: Optional[LayoutKeywordConfig] = None
) -> Optional[str]:
    config = config or get_keyword_config()
    match = re.search(config.store_pattern, _full_text(fragments), re.I)
    return match.group(1) if match else None


# ============================================================
# Section isolation
# ============================================================


class TotalsPolicy:
    """Decides which fragments still belong to the section after the totals row started."""

    name = "base"

    def admits(self, fragment: Fragment, totals: Fragment, tolerance: float) -> bool:
        raise NotImplementedError


class ContinueToTerminator(TotalsPolicy):
    # Overflowkolommen (bv. "% of OIS Sales") staan soms pas op de volgende
    # pagina, dus doorgaan tot een terminator.
    name = "continue"

    def admits(self, fragment: Fragment, totals: Fragment, tolerance: float) -> bool:
        return True


class TotalsRowThenOverflow(TotalsPolicy):
    name = "totals_row"

    def admits(self, fragment: Fragment, totals: Fragment, tolerance: float) -> bool:
        if fragment.page > totals.page:
            return True
        return fragment.page == totals.page and abs(fragment.y - totals.y) <= tolerance


CONTINUE_TO_TERMINATOR = ContinueToTerminator()
TOTALS_ROW_THEN_OVERFLOW = TotalsRowThenOverflow()

TOTALS_POLICIES: Dict[str, TotalsPolicy] = {
    CONTINUE_TO_TERMINATOR.name: CONTINUE_TO_TERMINATOR,
    TOTALS_ROW_THEN_OVERFLOW.name: TOTALS_ROW_THEN_OVERFLOW,
}


def get_totals_policy(name: str) -> TotalsPolicy:
    try:
        return TOTALS_POLICIES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Onbekend totals-beleid: {name!r}") from None


def find_section_anchor(
    fragments: Sequence[Fragment], config: LayoutKeywordConfig
) -> Optional[Fragment]:
    anchor = re.compile(config.section_anchor, re.I)
    return next((f for f in fragments if anchor.search(f.text)), None)


def isolate_section(
    fragments: Sequence[Fragment],
    config: Optional[LayoutKeywordConfig] = None,
    policy: Optional[TotalsPolicy] = None,
) -> Tuple[Fragment, ...]:
    """Return the fragments between the section anchor and the next terminator.

    PDF y loopt omhoog: "onder" het anker betekent een kleinere y op dezelfde
    pagina, of een latere pagina.
    """

    config = config or get_keyword_config()
    policy = policy or get_totals_policy(config.totals_policy)

    anchor = find_section_anchor(fragments, config)
    if anchor is None:
        return ()

    terminators = [re.compile(p, re.I) for p in config.section_terminators]
    totals_start = re.compile(rf"^{re.escape(config.totals_keyword)}", re.I)
    header_anchor = re.compile(config.header_anchor, re.I)

    candidates: List[Fragment] = []
    for fragment in fragments:
        if fragment.page < anchor.page:
            continue
        # titels en de sectiekop zelf staan boven (of op) het anker
        if fragment.page == anchor.page and fragment.y >= anchor.y:
            continue
        if any(t.search(fragment.text) for t in terminators):
            break
        candidates.append(fragment)

    # Een kolomkop "Total" op de kopregel is geen totaalrij: de grens ligt
    # pas onder de kopregel.
    header = next((f for f in candidates if header_anchor.search(f.text)), None)
    totals = next(
        (
            f
            for f in candidates
            if totals_start.match(f.text)
            and (header is None or _below(f, header, config.y_tolerance))
        ),
        None,
    )
    if totals is None:
        return tuple(candidates)

    boundary = candidates.index(totals)
    section = list(candidates[: boundary + 1])
    section.extend(
        f for f in candidates[boundary + 1 :] if policy.admits(f, totals, config.y_tolerance)
    )
    return tuple(section)


def _below(fragment: Fragment, reference: Fragment, tolerance: float) -> bool:
    if fragment.page != reference.page:
        return fragment.page > reference.page
    return fragment.y < reference.y - tolerance


# ============================================================
# Header resolution and column assignment
# ============================================================


def resolve_header(
    rows: Sequence[Row], config: Optional[LayoutKeywordConfig] = None
) -> Optional[HeaderLayout]:
    config = config or get_keyword_config()
    anchor = re.compile(config.header_anchor, re.I)

    header_idx = next(
        (idx for idx, row in enumerate(rows) if anchor.search(row_text(row))), None
    )
    if header_idx is None:
        return None

    header_row = rows[header_idx]
    positions = [HeaderPosition(name=f.text, x=f.x, page=f.page) for f in header_row]

    # De tabel kan doorlopen op de volgende pagina; die herhaalt alleen de kop
    # van de overgelopen kolom(men), op andere x-posities.
    overflow = False
    if header_idx + 1 < len(rows):
        next_row = rows[header_idx + 1]
        if next_row and next_row[0].page != header_row[0].page:
            overflow = any(not looks_numeric(f.text) for f in next_row)
    if overflow:
        positions.extend(
            HeaderPosition(name=f.text, x=f.x, page=f.page) for f in rows[header_idx + 1]
        )

    data_start = header_idx + (2 if overflow else 1)
    logger.debug(
        "Kopregel gevonden op rij %d (%d kolommen, overflow=%s)",
        header_idx,
        len(positions),
        overflow,
    )
    return HeaderLayout(positions=tuple(positions), data_start=data_start, overflow=overflow)


def assign_to_column(
    x: float, page: int, headers: Sequence[HeaderPosition]
) -> Optional[str]:
    """Name of the nearest header, preferring headers on the fragment's page."""

    if not headers:
        return None
    same_page = [h for h in headers if h.page == page]
    candidates = same_page or list(headers)
    best = min(candidates, key=lambda h: abs(x - h.x))
    return best.name


# ============================================================
# Row assembly
# ============================================================


def _is_skipped_row(row: Row, config: LayoutKeywordConfig) -> bool:
    text = row_text(row).strip()
    keyword = config.totals_keyword.lower()
    if text.lower().startswith(keyword):
        return True
    if any(f.text.strip().rstrip(":").lower() == keyword for f in row):
        return True
    return any(re.search(phrase, text, re.I) for phrase in config.footer_phrases)


def assemble_rows(
    rows: Sequence[Row],
    layout: HeaderLayout,
    canonical: CanonicalMap,
    config: Optional[LayoutKeywordConfig] = None,
) -> List[ParsedRow]:
    config = config or get_keyword_config()
    parsed_rows: List[ParsedRow] = []

    for row in rows[layout.data_start:]:
        if _is_skipped_row(row, config):
            continue

        values: Dict[str, str] = {}
        for fragment in row:
            raw_name = assign_to_column(fragment.x, fragment.page, layout.positions)
            if raw_name is None:
                continue
            name = canonical.get(raw_name, raw_name)
            existing = values.get(name)
            if existing is None:
                values[name] = fragment.text
            elif existing != fragment.text:
                # meerdelige waarde, bv. voor- en achternaam
                values[name] = f"{existing} {fragment.text}"

        if not values or all(not normalize_text(v) for v in values.values()):
            continue
        parsed_rows.append({name: parse_numeric_value(v) for name, v in values.items()})

    return parsed_rows


# ============================================================
# Parser
# ============================================================


class TrackerPdfParser(BaseLayoutParser):
    """Layout parser for the weekly "Last Week" staff table."""

    def __init__(
        self,
        config: Optional[LayoutKeywordConfig] = None,
        totals_policy: Optional[TotalsPolicy] = None,
        reconciler: Optional[ColumnReconciler] = None,
    ) -> None:
        super().__init__(config)
        self.totals_policy = totals_policy or get_totals_policy(self.config.totals_policy)
        self.reconciler = reconciler or get_reconciler(self.config)

    def parse_fragments(self, fragments: Iterable[Fragment]) -> ParseResult:
        items = tuple(fragments)
        if not items:
            logger.info("Geen tekstfragmenten in document")
            return ParseResult()

        result = ParseResult(
            detected_week_number=detect_week_number(items, self.config),
            detected_store_number=detect_store_number(items, self.config),
        )

        section = isolate_section(items, self.config, self.totals_policy)
        if not section:
            logger.info("Sectie-anker %r niet gevonden", self.config.section_anchor)
            return result
        result.section_found = True

        rows = group_into_rows(section, self.config.y_tolerance)
        layout = resolve_header(rows, self.config)
        if layout is None:
            logger.info("Geen kopregel gevonden in sectie (%d rijen)", len(rows))
            return result
        result.header_found = True

        canonical = build_canonical_name_map(
            layout.positions, self.reconciler, self.config.spaced_tokens
        )
        result.rows = assemble_rows(rows, layout, canonical, self.config)
        logger.debug(
            "%d datarijen, week %s, winkel %s",
            len(result.rows),
            result.detected_week_number,
            result.detected_store_number,
        )
        return result


def parse_fragments(
    fragments: Iterable[Fragment], config: Optional[LayoutKeywordConfig] = None
) -> ParseResult:
    return TrackerPdfParser(config).parse_fragments(fragments)


def parse_pdf(source: DocumentSource, config: Optional[LayoutKeywordConfig] = None) -> ParseResult:
    return TrackerPdfParser(config).parse_document(source)


def extract_rows_from_pdf(path: str) -> List[Dict[str, object]]:
    return parse_pdf(path).plain_rows()


__all__ = [
    "CONTINUE_TO_TERMINATOR",
    "TOTALS_ROW_THEN_OVERFLOW",
    "ContinueToTerminator",
    "TotalsPolicy",
    "TotalsRowThenOverflow",
    "TrackerPdfParser",
    "assemble_rows",
    "assign_to_column",
    "detect_store_number",
    "detect_week_number",
    "extract_fragments",
    "extract_rows_from_pdf",
    "find_section_anchor",
    "get_totals_policy",
    "isolate_section",
    "parse_fragments",
    "parse_pdf",
    "resolve_header",
]
