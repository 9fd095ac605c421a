"""
Tests for the certificate layout and PDF rendering.
"""

from __future__ import annotations

from datetime import date
import re
import time

import pytest
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from models.work_order import PowerSupplyResults, SerialEntry, SerialTestResults, WorkOrder
from models.work_order import TestOutcome as Outcome
from services.certificate_renderer import (
    CELL_PADDING,
    COLUMNS,
    CONTENT_BOTTOM,
    DATA_ROW_HEIGHT,
    DEFAULT_COLOR,
    ELLIPSIS,
    HEADER_ROW_HEIGHT,
    PASS_COLOR,
    build_layout,
    decode_data_url,
    fit_text,
    render_certificate,
    to_data_url,
)


def _work_order(serials, results=None, **overrides) -> WorkOrder:
    fields = dict(
        work_order_number="WO-1001",
        operator="J.Smith",
        test_date=date(2024, 5, 1),
        part_number="PN-4471",
        test_voltage="240V",
        serial_entries=[
            SerialEntry(serial_number=s, test_results=(results or {}).get(s, SerialTestResults()))
            for s in serials
        ],
    )
    fields.update(overrides)
    return WorkOrder(**fields)


def _cell(row, column):
    return next(c for c in row.cells if c.column == column)


class TestLayout:

    @pytest.mark.parametrize("count", [1, 2, 5, 10])
    def test_one_header_and_one_block_per_serial(self, count) -> None:
        layout = build_layout(_work_order([f"SN-{i:02d}" for i in range(count)]))

        assert len(layout.pages) == 1
        assert len(layout.header_rows) == 1
        assert [r.serial_number for r in layout.data_rows] == [f"SN-{i:02d}" for i in range(count)]

    def test_header_columns_and_fixed_widths(self) -> None:
        layout = build_layout(_work_order(["SN-01"], operator="An Operator With A Very Long Name Indeed"))
        header = layout.header_rows[0]

        assert [c.lines[0].text for c in header.cells] == [label for _, label, _ in COLUMNS]
        for row in layout.header_rows + layout.data_rows:
            assert [c.width for c in row.cells] == [width for _, _, width in COLUMNS]
        assert all(c.height == HEADER_ROW_HEIGHT for c in header.cells)
        assert all(c.height == DATA_ROW_HEIGHT for c in layout.data_rows[0].cells)

    def test_data_row_values(self) -> None:
        row = build_layout(_work_order(["SN-01"])).data_rows[0]

        assert _cell(row, "date").lines[0].text == "05/01/2024"
        assert _cell(row, "operator").lines[0].text == "J.Smith"
        assert _cell(row, "part_number").lines[0].text == "PN-4471"
        assert _cell(row, "serial_number").lines[0].text == "SN-01"
        assert _cell(row, "test_voltage").lines[0].text == "240V"
        assert [l.text for l in _cell(row, "test_type").lines] == [
            "PS1: Hi-Pot", "PS1: Ground-Bond", "PS2: Hi-Pot", "PS2: Ground-Bond",
        ]

    def test_pass_colour_iff_pass(self) -> None:
        mixed = SerialTestResults(
            ps1=PowerSupplyResults(hp=Outcome.PASS, gb=Outcome.FAIL),
            ps2=PowerSupplyResults(hp=Outcome.NOT_APPLICABLE, gb=Outcome.PASS),
        )
        layout = build_layout(_work_order(["SN-01", "SN-02"], results={"SN-01": mixed}))

        first = _cell(layout.data_rows[0], "results").lines
        assert [l.outcome for l in first] == [
            Outcome.PASS, Outcome.FAIL, Outcome.NOT_APPLICABLE, Outcome.PASS]
        assert [l.text for l in first] == ["PASSED", "FAILED", "N/A", "PASSED"]

        for row in layout.data_rows:
            for cell in row.cells:
                for line in cell.lines:
                    assert (line.color == PASS_COLOR) == (line.outcome == Outcome.PASS)
        for line in layout.header_rows[0].cells[0].lines + layout.pages[0].footer:
            assert line.color == DEFAULT_COLOR

    def test_overflowing_text_truncated_to_column(self) -> None:
        long_operator = "Operator " * 10
        row = build_layout(_work_order(["SN-01"], operator=long_operator)).data_rows[0]
        line = _cell(row, "operator").lines[0]

        assert line.text.endswith(ELLIPSIS)
        assert long_operator.startswith(line.text[:-len(ELLIPSIS)])
        width = dict((key, w) for key, _, w in COLUMNS)["operator"]
        assert stringWidth(line.text, line.font_name, line.font_size) <= (width - 2 * CELL_PADDING) * mm

    def test_rows_past_page_capacity_start_new_page(self) -> None:
        layout = build_layout(_work_order([f"SN-{i:02d}" for i in range(11)]))

        assert len(layout.pages) == 2
        assert len(layout.data_rows) == 11
        for page in layout.pages:
            assert page.rows[0].kind == "header"
            assert len(page.footer) == 2
            for row in page.rows:
                assert row.cells[0].y + row.cells[0].height <= CONTENT_BOTTOM


class TestFitText:

    def test_short_text_unchanged(self) -> None:
        assert fit_text("SN-01", 45.0) == "SN-01"

    def test_keeps_longest_prefix_that_fits(self) -> None:
        fitted = fit_text("W" * 500, 35.0)
        kept = len(fitted) - len(ELLIPSIS)
        available = (35.0 - 2 * CELL_PADDING) * mm

        assert fitted == "W" * kept + ELLIPSIS
        assert stringWidth(fitted, "Helvetica", 10) <= available
        assert stringWidth("W" * (kept + 1) + ELLIPSIS, "Helvetica", 10) > available

    def test_very_long_text_truncated_quickly(self) -> None:
        text = "Operator " * 25_000

        started = time.perf_counter()
        fitted = fit_text(text, 35.0)
        elapsed = time.perf_counter() - started

        assert fitted.endswith(ELLIPSIS)
        assert text.startswith(fitted[:-len(ELLIPSIS)])
        assert elapsed < 5.0


class TestRender:

    def test_render_returns_pdf_bytes(self) -> None:
        pdf_bytes = render_certificate(_work_order(["SN-01", "SN-02"]))

        assert isinstance(pdf_bytes, bytes)
        assert pdf_bytes.startswith(b"%PDF")
        assert pdf_bytes.rstrip().endswith(b"%%EOF")

    @pytest.mark.parametrize("count, pages", [(10, 1), (11, 2)])
    def test_pdf_page_count_follows_layout(self, count, pages) -> None:
        pdf_bytes = render_certificate(_work_order([f"SN-{i:02d}" for i in range(count)]))
        assert re.search(rb"/Count " + str(pages).encode() + rb"\b", pdf_bytes)

    def test_non_latin_identifiers_render(self) -> None:
        pdf_bytes = render_certificate(
            _work_order(["SN\u201301"], work_order_number="WO\u2013\u4e2d"))
        assert pdf_bytes.startswith(b"%PDF")

    def test_render_is_deterministic(self) -> None:
        work_order = _work_order(["SN-01"])
        assert render_certificate(work_order) == render_certificate(work_order)

    def test_data_url_round_trip(self) -> None:
        pdf_bytes = render_certificate(_work_order(["SN-01"]))
        data_url = to_data_url(pdf_bytes)

        assert data_url.startswith("data:application/pdf;base64,")
        assert decode_data_url(data_url) == pdf_bytes

    def test_non_base64_data_url_refused(self) -> None:
        with pytest.raises(ValueError):
            decode_data_url("data:application/pdf,%PDF-1.4")
