"""
Hi-Pot Test Log - Certificate Renderer Service
Version: 1.3.0

Changelog:
v1.3.0 (2026-10-19): Pages drawn as platypus Tables in a SimpleDocTemplate;
                      truncation searches the cut point instead of trimming
                      one character at a time
v1.2.0 (2026-10-14): Rows that would run into the footer start a new page,
                      which repeats the header row
v1.1.0 (2026-10-09): Over-wide cell text is truncated with "..." instead of
                      spilling into the next column
v1.0.0 (2026-10-01): Initial fixed-layout landscape certificate

The certificate is a single table: one header row of seven fixed-width
columns and one double-height row per serial entry. The Test Type and
Results cells stack PS1 above PS2, each listing Hi-Pot then Ground-Bond.
Passing outcomes are drawn green, everything else black.

Layout is computed first (build_layout, all coordinates in mm from the
top-left corner) and then drawn as one platypus Table per page. Page breaks
are decided by build_layout, so the drawn pages match the layout model.
Rendering is pure: no I/O, no shared state.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Table, TableStyle

from models.work_order import TestOutcome, WorkOrder

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DATA_URL_PREFIX = f"data:{PDF_MIME_TYPE};base64,"

# -- Page geometry (mm) --
PAGE_WIDTH_MM = landscape(A4)[0] / mm
PAGE_HEIGHT_MM = landscape(A4)[1] / mm
LEFT_MARGIN = 10.0
TOP_MARGIN = 20.0
HEADER_ROW_HEIGHT = 8.0
DATA_ROW_HEIGHT = 16.0
CELL_PADDING = 2.0
FOOTER_Y = PAGE_HEIGHT_MM - 12.0
CONTENT_BOTTOM = FOOTER_Y - 4.0

# -- Typography --
FONT_NAME = "Helvetica"
HEADER_FONT_NAME = "Helvetica"
FONT_SIZE = 10
STACKED_FONT_SIZE = 8
FOOTER_FONT_SIZE = 8
STACKED_LINE_PITCH = 3.5
ELLIPSIS = "..."

DEFAULT_COLOR = (0, 0, 0)
PASS_COLOR = (34, 197, 94)

# (key, header label, width in mm)
COLUMNS = [
    ("date", "Date", 30.0),
    ("operator", "Operator", 35.0),
    ("part_number", "Top Level PN*", 40.0),
    ("serial_number", "Top Level SN*", 45.0),
    ("test_voltage", "Test Voltage", 25.0),
    ("test_type", "Test Type", 45.0),
    ("results", "Results", 50.0),
]

TEST_TYPE_LABELS = [
    ("ps1", "hp", "PS1: Hi-Pot"),
    ("ps1", "gb", "PS1: Ground-Bond"),
    ("ps2", "hp", "PS2: Hi-Pot"),
    ("ps2", "gb", "PS2: Ground-Bond"),
]

OUTCOME_LABELS = {
    TestOutcome.PASS: "PASSED",
    TestOutcome.FAIL: "FAILED",
    TestOutcome.NOT_APPLICABLE: "N/A",
}

FOOTER_LINES = [
    "* As shown on unit",
    "** HP = Hi-Pot, GB = Ground Bond, PS1/PS2 = Power Supply 1/2",
]


# -- Layout model --

@dataclass(frozen=True)
class TextLine:
    """One line of text; (x, y) is the baseline start in mm from top-left"""
    text: str
    x: float
    y: float
    font_name: str = FONT_NAME
    font_size: float = FONT_SIZE
    color: Tuple[int, int, int] = DEFAULT_COLOR
    outcome: Optional[TestOutcome] = None


@dataclass
class Cell:
    column: str
    x: float
    y: float
    width: float
    height: float
    lines: List[TextLine] = field(default_factory=list)


@dataclass
class Row:
    kind: str  # "header" or "data"
    cells: List[Cell]
    serial_number: Optional[str] = None


@dataclass
class Page:
    rows: List[Row] = field(default_factory=list)
    footer: List[TextLine] = field(default_factory=list)


@dataclass
class CertificateLayout:
    title: str
    pages: List[Page]
    width: float = PAGE_WIDTH_MM
    height: float = PAGE_HEIGHT_MM

    @property
    def header_rows(self) -> List[Row]:
        return [r for p in self.pages for r in p.rows if r.kind == "header"]

    @property
    def data_rows(self) -> List[Row]:
        return [r for p in self.pages for r in p.rows if r.kind == "data"]


# -- Text fitting --

def fit_text(text: str, width_mm: float, font_name: str = FONT_NAME,
             font_size: float = FONT_SIZE) -> str:
    """Truncate text with an ellipsis so it fits inside width_mm"""
    available = (width_mm - 2 * CELL_PADDING) * mm
    if stringWidth(text, font_name, font_size) <= available:
        return text

    # Longest prefix that still fits with the ellipsis appended
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if stringWidth(text[:mid] + ELLIPSIS, font_name, font_size) <= available:
            lo = mid
        else:
            hi = mid - 1
    trimmed = text[:lo].rstrip()
    return trimmed + ELLIPSIS if trimmed else ELLIPSIS


# -- Layout --

def _header_row(y: float) -> Row:
    cells = []
    x = LEFT_MARGIN
    for key, label, width in COLUMNS:
        text = fit_text(label, width, HEADER_FONT_NAME)
        cells.append(Cell(
            column=key, x=x, y=y, width=width, height=HEADER_ROW_HEIGHT,
            lines=[TextLine(text, x + CELL_PADDING, y + 5.5, font_name=HEADER_FONT_NAME)],
        ))
        x += width
    return Row(kind="header", cells=cells)


def _data_row(work_order: WorkOrder, entry, y: float) -> Row:
    single_values = {
        "date": work_order.test_date.strftime("%m/%d/%Y"),
        "operator": work_order.operator,
        "part_number": work_order.part_number,
        "serial_number": entry.serial_number,
        "test_voltage": work_order.test_voltage,
    }
    results = entry.test_results

    cells = []
    x = LEFT_MARGIN
    for key, _, width in COLUMNS:
        lines = []
        if key in single_values:
            text = fit_text(single_values[key], width)
            lines.append(TextLine(text, x + CELL_PADDING, y + 9.5))
        else:
            for index, (supply, test, label) in enumerate(TEST_TYPE_LABELS):
                baseline = y + 4.0 + index * STACKED_LINE_PITCH
                if key == "test_type":
                    lines.append(TextLine(
                        fit_text(label, width, font_size=STACKED_FONT_SIZE),
                        x + CELL_PADDING, baseline, font_size=STACKED_FONT_SIZE,
                    ))
                else:
                    outcome = getattr(getattr(results, supply), test)
                    color = PASS_COLOR if outcome == TestOutcome.PASS else DEFAULT_COLOR
                    lines.append(TextLine(
                        fit_text(OUTCOME_LABELS[outcome], width, font_size=STACKED_FONT_SIZE),
                        x + CELL_PADDING, baseline, font_size=STACKED_FONT_SIZE,
                        color=color, outcome=outcome,
                    ))
        cells.append(Cell(column=key, x=x, y=y, width=width,
                          height=DATA_ROW_HEIGHT, lines=lines))
        x += width
    return Row(kind="data", cells=cells, serial_number=entry.serial_number)


def _footer() -> List[TextLine]:
    return [
        TextLine(text, LEFT_MARGIN, FOOTER_Y + i * 5.0, font_size=FOOTER_FONT_SIZE)
        for i, text in enumerate(FOOTER_LINES)
    ]


def build_layout(work_order: WorkOrder) -> CertificateLayout:
    """Lay out the certificate table for a validated work order"""
    pages = []
    page = None
    y = 0.0
    for entry in work_order.serial_entries:
        if page is None or y + DATA_ROW_HEIGHT > CONTENT_BOTTOM:
            page = Page(rows=[_header_row(TOP_MARGIN)], footer=_footer())
            pages.append(page)
            y = TOP_MARGIN + HEADER_ROW_HEIGHT
        page.rows.append(_data_row(work_order, entry, y))
        y += DATA_ROW_HEIGHT

    return CertificateLayout(
        title=f"Hi-Pot Test Certificate {work_order.work_order_number}",
        pages=pages,
    )


# -- Drawing --

# Frame padding SimpleDocTemplate applies inside its margins (points)
FRAME_PADDING = 6


def _line_style(line: TextLine, cache: dict) -> ParagraphStyle:
    key = (line.font_name, line.font_size, line.color)
    if key not in cache:
        r, g, b = line.color
        if line.font_size == STACKED_FONT_SIZE:
            leading = STACKED_LINE_PITCH * mm
        else:
            leading = line.font_size * 1.2
        cache[key] = ParagraphStyle(
            f"cert-{len(cache)}",
            fontName=line.font_name,
            fontSize=line.font_size,
            leading=leading,
            textColor=colors.Color(r / 255.0, g / 255.0, b / 255.0),
        )
    return cache[key]


def _page_table(page: Page, styles: dict) -> Table:
    data = [
        [[Paragraph(escape(line.text), _line_style(line, styles)) for line in cell.lines]
         for cell in row.cells]
        for row in page.rows
    ]
    table = Table(
        data,
        colWidths=[width * mm for _, _, width in COLUMNS],
        rowHeights=[row.cells[0].height * mm for row in page.rows],
        hAlign="LEFT",
    )
    table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), CELL_PADDING * mm),
        ('RIGHTPADDING', (0, 0), (-1, -1), CELL_PADDING * mm),
        ('TOPPADDING', (0, 0), (-1, -1), 0.5 * mm),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 0.5 * mm),
    ]))
    return table


def render_layout(layout: CertificateLayout) -> bytes:
    """Draw a computed layout; each layout page becomes one PDF page"""
    buffer = BytesIO()
    page_width, page_height = landscape(A4)
    doc = SimpleDocTemplate(
        buffer,
        pagesize=(page_width, page_height),
        leftMargin=LEFT_MARGIN * mm - FRAME_PADDING,
        rightMargin=LEFT_MARGIN * mm - FRAME_PADDING,
        topMargin=TOP_MARGIN * mm - FRAME_PADDING,
        bottomMargin=(PAGE_HEIGHT_MM - CONTENT_BOTTOM) * mm - FRAME_PADDING,
        title=layout.title,
        subject="Hi-Pot / Ground-Bond test certificate",
        invariant=1,
    )

    def draw_footer(pdf, _doc):
        page = layout.pages[min(pdf.getPageNumber(), len(layout.pages)) - 1]
        pdf.saveState()
        for line in page.footer:
            r, g, b = line.color
            pdf.setFillColorRGB(r / 255.0, g / 255.0, b / 255.0)
            pdf.setFont(line.font_name, line.font_size)
            pdf.drawString(line.x * mm, page_height - line.y * mm, line.text)
        pdf.restoreState()

    styles = {}
    story = []
    for index, page in enumerate(layout.pages):
        if index:
            story.append(PageBreak())
        story.append(_page_table(page, styles))

    doc.build(story, onFirstPage=draw_footer, onLaterPages=draw_footer)
    return buffer.getvalue()


def render_certificate(work_order: WorkOrder) -> bytes:
    """Render the certificate PDF for a validated work order"""
    layout = build_layout(work_order)
    pdf_bytes = render_layout(layout)
    logger.info(f"Rendered certificate for WO {work_order.work_order_number}: "
                f"{len(layout.data_rows)} serials, {len(layout.pages)} page(s), "
                f"{len(pdf_bytes)} bytes")
    return pdf_bytes


# -- Data URL encoding --

def to_data_url(pdf_bytes: bytes) -> str:
    """Encode certificate bytes as a self-describing data URL"""
    return DATA_URL_PREFIX + base64.b64encode(pdf_bytes).decode("ascii")


def decode_data_url(data: str) -> bytes:
    """Decode a base64 data URL (or bare base64) back into bytes"""
    if data.startswith("data:"):
        header, sep, encoded = data.partition(",")
        if not sep or not header.endswith(";base64"):
            raise ValueError("PDF data URL must be base64 encoded")
    else:
        encoded = data
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("PDF data is not valid base64")
