# eenvoudige re-export, met absolute imports intern
from .base_parser import BaseLayoutParser, group_into_rows, parse_numeric_value
from .config import LayoutKeywordConfig, get_keyword_config
from .models import Fragment, HeaderPosition, Numeric, ParseResult, Text
from .pdf_text import DocumentReadError, extract_fragments
from .parser_pdf import TrackerPdfParser, extract_rows_from_pdf, parse_fragments, parse_pdf

__all__ = [
    "BaseLayoutParser",
    "DocumentReadError",
    "Fragment",
    "HeaderPosition",
    "LayoutKeywordConfig",
    "Numeric",
    "ParseResult",
    "Text",
    "TrackerPdfParser",
    "extract_fragments",
    "extract_rows_from_pdf",
    "get_keyword_config",
    "group_into_rows",
    "parse_fragments",
    "parse_numeric_value",
    "parse_pdf",
]
