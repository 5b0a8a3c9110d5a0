from __future__ import annotations

import html
import logging

from chordsheet.logging_utils import log_event
from chordsheet.services.chord_grammar import ChordSymbol, serialize_chord
from chordsheet.services.document import Anchor, DocumentLine, LyricLine, LyricRun, ParsedDocument, SectionLine

logger = logging.getLogger(__name__)

SHEET_CLASS = "chord-sheet"
LYRIC_LINE_CLASS = "lyric-line"
CHORD_WORD_CLASS = "chord-word"
CHORD_CLASS = "chord"
ABOVE_CLASS = "chords-above"
STANDALONE_CLASS = "standalone"
CHORD_ROW_CLASS = "chord-row"
LYRIC_ROW_CLASS = "lyric-row"
INSTRUMENTAL_CLASS = "instrumental-section"
SECTION_LABEL_CLASS = "section-label"
INSTRUMENTAL_ROW_CLASS = "instrumental-row"
BLANK_LINE_CLASS = "blank-line"

NBSP = "&nbsp;"


def _clamped_offset(run: LyricRun, offset: int) -> int:
    if 0 <= offset <= len(run.text):
        return offset
    clamped = min(max(offset, 0), len(run.text))
    log_event(
        logger,
        "chord_anchor_clamped",
        level=logging.WARNING,
        offset=offset,
        clamped_offset=clamped,
        run_length=len(run.text),
    )
    return clamped


def _chord_span(label: str) -> str:
    return f'<span class="{CHORD_CLASS}" data-chord-length="{len(label)}">{html.escape(label)}</span>'


def _render_inline_run(run: LyricRun) -> str:
    if not run.chords:
        return html.escape(run.text)

    by_offset: dict[int, list[ChordSymbol]] = {}
    for anchor in run.chords:
        by_offset.setdefault(_clamped_offset(run, anchor.offset), []).append(anchor.chord)

    parts: list[str] = []
    cursor = 0
    for offset in sorted(by_offset):
        parts.append(html.escape(run.text[cursor:offset]))
        parts.extend(_chord_span(serialize_chord(chord)) for chord in by_offset[offset])
        cursor = offset
    parts.append(html.escape(run.text[cursor:]))
    return f'<span class="{CHORD_WORD_CLASS}">{"".join(parts)}</span>'


def layout_chord_row(run: LyricRun) -> list[tuple[int, str]]:
    """
    Resolve final columns for the chords of a column-anchored run.

    Chords keep their recorded column unless that would overlap the chord to
    their left (after a transposition lengthened it), in which case they move
    to one space past it.
    """
    placed: list[tuple[int, str]] = []
    next_free = 0
    for anchor in sorted(run.chords, key=lambda a: a.offset):
        label = serialize_chord(anchor.chord)
        column = max(_clamped_offset(run, anchor.offset), next_free)
        placed.append((column, label))
        next_free = column + len(label) + 1
    return placed


def _render_above_run(run: LyricRun) -> str:
    row: list[str] = []
    width = 0
    for column, label in layout_chord_row(run):
        row.append(NBSP * (column - width))
        row.append(_chord_span(label))
        width = column + len(label)

    lyric = html.escape(run.text.rstrip()).replace(" ", NBSP)
    block_class = ABOVE_CLASS if lyric else f"{ABOVE_CLASS} {STANDALONE_CLASS}"
    out = [f'<div class="{block_class}">', f'<div class="{CHORD_ROW_CLASS}">{"".join(row)}</div>']
    if lyric:
        out.append(f'<div class="{LYRIC_ROW_CLASS}">{lyric}</div>')
    out.append("</div>")
    return "".join(out)


def _render_section(line: SectionLine) -> str:
    out = [f'<div class="{INSTRUMENTAL_CLASS}">', f'<div class="{SECTION_LABEL_CLASS}">{html.escape(line.label)}</div>']
    for row in line.instrumental:
        chords = " ".join(_chord_span(serialize_chord(chord)) for chord in row)
        out.append(f'<div class="{INSTRUMENTAL_ROW_CLASS}">{chords}</div>')
    out.append("</div>")
    return "".join(out)


def _render_lyric_line(line: LyricLine) -> str:
    if line.is_blank:
        return f'<div class="{BLANK_LINE_CLASS}"></div>'
    if any(run.anchor is Anchor.COLUMN for run in line.runs):
        return "".join(_render_above_run(run) for run in line.runs)
    return f'<p class="{LYRIC_LINE_CLASS}">{"".join(_render_inline_run(run) for run in line.runs)}</p>'


def render_line(line: DocumentLine) -> str:
    if isinstance(line, SectionLine):
        return _render_section(line)
    return _render_lyric_line(line)


def render_html(doc: ParsedDocument) -> str:
    """Serialize a parsed document to a self-contained HTML fragment."""
    if doc.is_empty:
        return ""
    body = "\n".join(render_line(line) for line in doc.lines)
    return f'<div class="{SHEET_CLASS} format-{doc.format.value}">\n{body}\n</div>'


def _text_rows(line: DocumentLine) -> list[tuple[str, str]]:
    if isinstance(line, SectionLine):
        rows = [("section", line.label)]
        rows.extend(("chords", "  ".join(serialize_chord(chord) for chord in row)) for row in line.instrumental)
        return rows
    if line.is_blank:
        return [("blank", "")]

    chord_row = ""
    lyric_row = ""
    for run in line.runs:
        base = len(lyric_row)
        if run.anchor is Anchor.COLUMN:
            placed = layout_chord_row(run)
        else:
            placed = [(_clamped_offset(run, anchor.offset), serialize_chord(anchor.chord)) for anchor in run.chords]
        for column, label in placed:
            start = max(base + column, len(chord_row) + 1 if chord_row else 0)
            chord_row = chord_row.ljust(start) + label
        lyric_row += run.text

    rows: list[tuple[str, str]] = []
    if chord_row:
        rows.append(("chords", chord_row))
    if lyric_row.strip():
        rows.append(("lyrics", lyric_row.rstrip()))
    return rows


def render_rows(doc: ParsedDocument) -> list[tuple[str, str]]:
    """Plain-text rows tagged ``section``, ``chords``, ``lyrics`` or ``blank``, chords placed above lyrics."""
    return [row for line in doc.lines for row in _text_rows(line)]


def render_text(doc: ParsedDocument) -> str:
    return "\n".join(text for _, text in render_rows(doc))
