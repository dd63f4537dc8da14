from types import SimpleNamespace

import pytest

from backend.parsers import pdf_text
from backend.parsers.config import LayoutKeywordConfig
from backend.parsers.models import Fragment, Numeric, Text
from backend.parsers.parser_pdf import TOTALS_ROW_THEN_OVERFLOW, TrackerPdfParser, parse_fragments
from backend.parsers.pdf_text import DocumentReadError, extract_fragments


def test_two_page_report_with_overflow_column(tracker_fragments) -> None:
    result = parse_fragments(tracker_fragments)

    assert result.section_found and result.header_found
    assert result.detected_week_number == 47
    assert result.detected_store_number == "1234"
    assert len(result.rows) == 2

    jane, bob = result.rows
    assert set(jane) == {"Staff Member", "Captured", "Total", "Pct Of Total"}
    assert jane["Staff Member"] == Text("Jane Smith")
    assert jane["Captured"] == Numeric(12)
    assert jane["Total"] == Numeric(1234)
    assert jane["Pct Of Total"] == Numeric(86)
    assert bob["Pct Of Total"] == Numeric(14)


def test_plain_rows_unwrap_values(tracker_fragments) -> None:
    rows = parse_fragments(tracker_fragments).plain_rows()
    assert rows[0] == {"Staff Member": "Jane Smith", "Captured": 12, "Total": 1234, "Pct Of Total": 86}


def test_week_number_is_null_without_week_token(tracker_fragments) -> None:
    fragments = [
        Fragment("Multi Channel - Last Week", f.x, f.y, f.page) if "202547" in f.text and f.page == 1 else f
        for f in tracker_fragments
    ]
    result = parse_fragments(fragments)
    assert result.detected_week_number is None
    assert len(result.rows) == 2


def test_structural_absence_returns_empty_rows(tracker_fragments) -> None:
    no_header = [f for f in tracker_fragments if f.text != "Staff Member"]
    result = parse_fragments(no_header)
    assert result.rows == []
    assert result.section_found is True
    assert result.header_found is False
    assert result.detected_week_number == 47

    empty = parse_fragments([])
    assert empty.rows == [] and empty.detected_week_number is None


def test_spaced_token_artifact_is_repaired_in_column_names() -> None:
    fragments = [
        Fragment("Last Week 202601", 40, 760, 1),
        Fragment("Staff Member", 40, 700, 1),
        Fragment("% of O IS Sa", 300, 700, 1),
        Fragment("% of O IS Sales", 60, 690, 2),
        Fragment("Jane", 40, 680, 1),
        Fragment("4%", 300, 680, 1),
        Fragment("4%", 60, 680, 2),
    ]
    result = parse_fragments(fragments)
    assert result.detected_week_number == 1
    assert result.plain_rows() == [{"Staff Member": "Jane", "% of OIS Sales": 4}]


def test_columns_extending_a_shared_prefix_keep_their_own_values() -> None:
    fragments = [
        Fragment("Last Week 202547", 40, 760, 1),
        Fragment("Staff Member", 40, 700, 1),
        Fragment("Sales", 200, 700, 1),
        Fragment("Sales Qty", 300, 700, 1),
        Fragment("Sales Value", 400, 700, 1),
        Fragment("Jane", 40, 680, 1),
        Fragment("1", 200, 680, 1),
        Fragment("2", 300, 680, 1),
        Fragment("£30", 400, 680, 1),
    ]
    (row,) = parse_fragments(fragments).plain_rows()
    assert set(row) == {"Staff Member", "Sales Qty", "Sales Value"}
    assert row["Staff Member"] == "Jane"
    assert row["Sales Value"] == 30
    assert row["Sales Qty"] == "1 2"


def test_totals_row_policy_on_report_with_total_column(tracker_fragments) -> None:
    strict = TrackerPdfParser(totals_policy=TOTALS_ROW_THEN_OVERFLOW).parse_fragments(tracker_fragments)
    relaxed = parse_fragments(tracker_fragments)

    assert strict.plain_rows() == relaxed.plain_rows()
    assert [row["Staff Member"] for row in strict.plain_rows()] == ["Jane Smith", "Bob Jones"]
    assert strict.plain_rows()[1] == {"Staff Member": "Bob Jones", "Captured": 7, "Total": 950, "Pct Of Total": 14}


def test_alternate_anchors_via_config() -> None:
    config = LayoutKeywordConfig(
        section_anchor=r"This\s*Week",
        week_anchor=r"This\s+Week",
        header_anchor=r"Colleague",
    )
    fragments = [
        Fragment("This Week 202512", 40, 760, 1),
        Fragment("Colleague", 40, 700, 1),
        Fragment("Sales", 200, 700, 1),
        Fragment("Ann", 40, 680, 1),
        Fragment("£10", 200, 680, 1),
    ]
    result = TrackerPdfParser(config).parse_fragments(fragments)
    assert result.detected_week_number == 12
    assert result.plain_rows() == [{"Colleague": "Ann", "Sales": 10}]


class _FakePage:
    height = 842.0

    def __init__(self, words):
        self._words = words

    def extract_words(self, **kwargs):
        assert kwargs["keep_blank_chars"] is True
        return self._words


class _FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_extract_fragments_with_pdfplumber(monkeypatch: pytest.MonkeyPatch) -> None:
    pages = [
        _FakePage([{"text": "Staff Member ", "x0": 40.0, "bottom": 142.0}, {"text": "  ", "x0": 90.0, "bottom": 142.0}]),
        _FakePage([{"text": "86%", "x0": 60.0, "bottom": 162.0}]),
    ]
    fake = SimpleNamespace(open=lambda stream: _FakePdf(pages))
    monkeypatch.setattr(pdf_text, "pdfplumber", fake)

    fragments = extract_fragments(b"%PDF-1.4")

    assert fragments == [
        Fragment("Staff Member", 40.0, 700.0, 1),
        Fragment("86%", 60.0, 680.0, 2),
    ]


def test_extract_fragments_wraps_decode_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_open(stream):
        raise ValueError("not a pdf")

    monkeypatch.setattr(pdf_text, "pdfplumber", SimpleNamespace(open=broken_open))
    with pytest.raises(DocumentReadError):
        extract_fragments(b"garbage")


def test_extract_fragments_without_pdf_libraries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pdf_text, "pdfplumber", None)
    monkeypatch.setattr(pdf_text, "PdfReader", None)
    with pytest.raises(RuntimeError):
        extract_fragments(b"%PDF-1.4")


def test_parse_document_uses_extracted_fragments(monkeypatch: pytest.MonkeyPatch, tracker_fragments) -> None:
    monkeypatch.setattr("backend.parsers.base_parser.extract_fragments", lambda source: tracker_fragments)
    result = TrackerPdfParser().parse_document(b"%PDF-1.4")
    assert len(result.rows) == 2


def test_extract_fragments_wraps_stream_read_errors() -> None:
    class BrokenStream:
        def read(self) -> bytes:
            raise OSError("connection reset")

    with pytest.raises(DocumentReadError):
        extract_fragments(BrokenStream())
