from __future__ import annotations

import logging
import re

from chordsheet.logging_utils import log_event
from chordsheet.services.chord_grammar import ChordParseError, ChordSymbol, parse_chord, read_chord_token
from chordsheet.services.document import Anchor, ChordAnchor, DocumentLine, LyricLine, LyricRun, ParsedDocument, SectionLine
from chordsheet.services.format_detector import BRACKET_TOKEN_RE, INLINE_DIRECTIVE, Format, detect_format, section_label

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"\s+|\S+")
_CHORD_TOKEN_RE = re.compile(r"\[[^\[\]\n]*\]|\S+")
_BARE_QUALITY_RE = re.compile(r"(?:maj|min|dim|aug|sus|add|m|M|b|[0-9+°ø()])*")


def _normalize_lines(text: str) -> list[str]:
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    if lines and lines[0].strip() == INLINE_DIRECTIVE:
        lines.pop(0)
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _split_runs(text: str, anchors: list[tuple[int, ChordSymbol]]) -> tuple[LyricRun, ...]:
    """Split a line into word and whitespace runs, moving anchors into the run that holds them."""
    runs: list[LyricRun] = []
    pending = sorted(anchors, key=lambda item: item[0])
    for segment in _SEGMENT_RE.finditer(text):
        owned = [item for item in pending if segment.start() <= item[0] < segment.end()]
        pending = [item for item in pending if item[0] >= segment.end()]
        runs.append(
            LyricRun(
                text=segment.group(0),
                chords=tuple(ChordAnchor(offset - segment.start(), chord) for offset, chord in owned),
            )
        )
    if pending:
        runs.append(LyricRun(text="", chords=tuple(ChordAnchor(0, chord) for _, chord in pending)))
    return tuple(runs)


def parse_inline_line(line: str) -> LyricLine:
    if not line.strip():
        return LyricLine()

    pieces: list[str] = []
    anchors: list[tuple[int, ChordSymbol]] = []
    length = 0
    cursor = 0
    for match in BRACKET_TOKEN_RE.finditer(line):
        before = line[cursor : match.start()]
        pieces.append(before)
        length += len(before)
        chord = read_chord_token(match.group(1))
        if chord is None:
            pieces.append(match.group(0))
            length += len(match.group(0))
        else:
            anchors.append((length, chord))
        cursor = match.end()
    pieces.append(line[cursor:])

    return LyricLine(runs=_split_runs("".join(pieces), anchors))


def _is_bracketed(token: str) -> bool:
    return len(token) >= 2 and token[0] == "[" and token[-1] == "]"


def chord_line_tokens(line: str, *, bracketed: bool = False) -> list[tuple[int, ChordSymbol]] | None:
    """
    Columns and chords of a chord-only line, or ``None`` when any token is not a chord.

    Bare tokens must also read like a chord (``Am7``, ``Bb/D``), so capitalised
    lyric words such as ``Deus`` are refused. With ``bracketed`` every token has
    to be a ``[chord]``.
    """
    found: list[tuple[int, ChordSymbol]] = []
    for match in _CHORD_TOKEN_RE.finditer(line):
        token = match.group(0)
        is_bracketed = _is_bracketed(token)
        if bracketed and not is_bracketed:
            return None
        try:
            chord = parse_chord(token)
        except ChordParseError:
            return None
        if not is_bracketed and not _BARE_QUALITY_RE.fullmatch(chord.quality):
            return None
        found.append((match.start(), chord))
    return found or None


def _column_line(chords: list[tuple[int, ChordSymbol]], lyric: str) -> LyricLine:
    last_column = max(column for column, _ in chords)
    text = lyric.ljust(last_column)
    return LyricLine(
        runs=(
            LyricRun(
                text=text,
                chords=tuple(ChordAnchor(column, chord) for column, chord in chords),
                anchor=Anchor.COLUMN,
            ),
        )
    )


def _parse_above(lines: list[str]) -> list[DocumentLine]:
    out: list[DocumentLine] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            out.append(LyricLine())
            i += 1
            continue

        chords = chord_line_tokens(line)
        if chords is None:
            out.append(parse_inline_line(line))
            i += 1
            continue

        following = lines[i + 1] if i + 1 < len(lines) else ""
        if following.strip() and chord_line_tokens(following) is None:
            out.append(_column_line(chords, following.rstrip()))
            i += 2
        else:
            out.append(_column_line(chords, ""))
            i += 1
    return out


def _parse_mixed(lines: list[str]) -> list[DocumentLine]:
    out: list[DocumentLine] = []
    i = 0
    while i < len(lines):
        label = section_label(lines[i])
        if label is None:
            out.append(parse_inline_line(lines[i]))
            i += 1
            continue

        rows: list[tuple[ChordSymbol, ...]] = []
        i += 1
        while i < len(lines) and lines[i].strip():
            row = chord_line_tokens(lines[i], bracketed=True)
            if row is None:
                break
            rows.append(tuple(chord for _, chord in row))
            i += 1
        out.append(SectionLine(label=label, instrumental=tuple(rows)))
    return out


def parse_document(text: str, fmt: Format | None = None) -> ParsedDocument:
    """
    Build the structured document for a lyrics text.

    ``fmt`` defaults to the detected format. Inline lines keep chords at
    character offsets and above-style chord lines anchor onto the following
    lyric line by column. In inline and mixed documents section headers and
    their bracketed chord rows become instrumental blocks.
    """
    fmt = detect_format(text) if fmt is None else Format(fmt)
    lines = _normalize_lines(text)

    if fmt is Format.ABOVE:
        parsed = _parse_above(lines)
    else:
        # Inline documents may still carry instrumental sections.
        parsed = _parse_mixed(lines)

    document = ParsedDocument(format=fmt, lines=tuple(parsed))
    log_event(
        logger,
        "chord_document_parsed",
        level=logging.DEBUG,
        chord_format=fmt.value,
        line_count=len(document.lines),
        chord_count=len(document.chords),
    )
    return document
