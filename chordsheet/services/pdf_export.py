from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from chordsheet.logging_utils import log_event
from chordsheet.services.document import ParsedDocument
from chordsheet.services.html_renderer import render_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfLayoutConfig:
    margin_left: float = 0.8 * inch
    margin_top: float = 0.8 * inch
    margin_bottom: float = 0.8 * inch
    body_font_size: int = 10
    chord_font_size: int = 10
    line_height: float = 13
    blank_height: float = 7


DEFAULT_LAYOUT = PdfLayoutConfig()


def build_chord_sheet_pdf(
    doc: ParsedDocument,
    *,
    title: str,
    author: str | None = None,
    key: str | None = None,
    layout: PdfLayoutConfig = DEFAULT_LAYOUT,
) -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(title)
    _, height = A4
    pages = 1

    def draw_header(heading: str) -> float:
        y = height - layout.margin_top
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(layout.margin_left, y, heading)
        y -= 0.25 * inch
        c.setFont("Helvetica", 10)
        details = [f"by {author}" if author else "", f"Key: {key}" if key else ""]
        line = "   ".join(part for part in details if part)
        if line:
            c.drawString(layout.margin_left, y, line)
            y -= 0.2 * inch
        return y - 0.2 * inch

    y = draw_header(title)
    for kind, text in render_rows(doc):
        step = layout.blank_height if kind == "blank" else layout.line_height
        if y - step < layout.margin_bottom:
            c.showPage()
            pages += 1
            y = draw_header(f"{title} (cont.)")

        if kind == "section":
            c.setFont("Helvetica-Bold", layout.body_font_size + 1)
            c.setFillColorRGB(0.2, 0.3, 0.5)
        elif kind == "chords":
            c.setFont("Courier-Bold", layout.chord_font_size)
            c.setFillColorRGB(0.1, 0.4, 0.7)
        else:
            c.setFont("Courier", layout.body_font_size)
            c.setFillColorRGB(0.1, 0.1, 0.1)
        if text:
            c.drawString(layout.margin_left, y, text)
        y -= step

    c.showPage()
    c.save()
    buffer.seek(0)
    content = buffer.read()
    log_event(logger, "chord_sheet_pdf_built", pages=pages, output_size_bytes=len(content))
    return content
