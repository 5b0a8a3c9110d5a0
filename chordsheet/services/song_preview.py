from __future__ import annotations

import logging

from chordsheet.logging_utils import log_event
from chordsheet.models import SongPreview
from chordsheet.services.document_parser import parse_document
from chordsheet.services.format_detector import Format, detect_format, section_headers
from chordsheet.services.html_renderer import render_html
from chordsheet.services.transposer import detect_key, extract_chords

logger = logging.getLogger(__name__)

AMBIGUOUS_FORMAT = "ambiguous_format"
NO_CHORDS = "no_chords"


def build_preview(markdown: str) -> SongPreview:
    """Run detect, parse and render once and package the result as a stored preview record."""
    fmt = detect_format(markdown)
    doc = parse_document(markdown, fmt)
    chords = extract_chords(doc)

    warnings: list[str] = []
    # Inline wins over section headers; these documents need a human look.
    if fmt is Format.INLINE and section_headers(markdown):
        warnings.append(AMBIGUOUS_FORMAT)
    if markdown.strip() and not chords:
        warnings.append(NO_CHORDS)
    if warnings:
        log_event(logger, "song_preview_flagged", level=logging.WARNING, chord_format=fmt.value, warnings=warnings)

    return SongPreview(
        markdown=markdown,
        format=fmt,
        html=render_html(doc),
        chords=chords,
        key=detect_key(doc),
        warnings=warnings,
    )
