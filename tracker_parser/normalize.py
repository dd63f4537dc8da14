from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import uuid4

from backend.parsers import TrackerPdfParser
from backend.parsers.pdf_text import DocumentSource
from backend.schemas.normalized import Meta, NormalizedReport, Warning

logger = logging.getLogger(__name__)


def _source_name(source: DocumentSource, file_name: Optional[str]) -> str:
    if file_name:
        return file_name
    if isinstance(source, (str, Path)):
        return Path(source).name
    return getattr(source, "name", None) or "upload.pdf"


def parse_to_normalized(
    source: DocumentSource,
    file_name: Optional[str] = None,
    parser: Optional[TrackerPdfParser] = None,
) -> Tuple[str, NormalizedReport]:
    """Parse a tracker PDF into a report with warnings for missing structure.

    Onleesbare PDF's leveren een ``DocumentReadError`` op; een document zonder
    herkenbare sectie of kopregel is geen fout maar geeft lege rijen met een
    waarschuwing, zodat de gebruiker handmatig verder kan.
    """

    name = _source_name(source, file_name)
    parsed_at = datetime.now(timezone.utc).isoformat()
    parser = parser or TrackerPdfParser()
    result = parser.parse_document(source)

    warnings: List[Warning] = []
    if not result.section_found:
        warnings.append(
            Warning(
                code="SECTION_NOT_FOUND",
                message="Sectie met de gegevens van vorige week niet gevonden.",
                context={"source": name, "anchor": parser.config.section_anchor},
            )
        )
    elif not result.header_found:
        warnings.append(
            Warning(
                code="HEADER_NOT_FOUND",
                message="Geen kopregel gevonden in de sectie.",
                context={"source": name, "anchor": parser.config.header_anchor},
            )
        )
    elif not result.rows:
        warnings.append(
            Warning(
                code="NO_DATA_ROWS",
                message="Kopregel gevonden maar geen datarijen.",
                context={"source": name},
            )
        )

    if result.detected_week_number is None:
        warnings.append(
            Warning(
                code="WEEK_NOT_DETECTED",
                message="Weeknummer kon niet uit het document worden gehaald.",
                context={"source": name},
            )
        )

    report = NormalizedReport(
        meta=Meta(source=name, parsed_at=parsed_at),
        rows=result.plain_rows(),
        detectedWeekNumber=result.detected_week_number,
        detectedStoreNumber=result.detected_store_number,
        warnings=warnings,
    )

    parse_id = uuid4().hex[:12]
    logger.info(
        "Parse %s: %d rijen uit %s (%d waarschuwingen)",
        parse_id,
        len(report.rows),
        name,
        len(warnings),
    )
    return parse_id, report
