from __future__ import annotations

from dataclasses import replace

from chordsheet.services.chord_grammar import ChordSymbol, PitchName, serialize_chord
from chordsheet.services.document import ChordAnchor, DocumentLine, LyricLine, LyricRun, ParsedDocument, SectionLine
from chordsheet.services.music_theory import Spelling, pitch_class, transpose_note


def _transpose_pitch(pitch: PitchName, interval: int, spelling: Spelling) -> PitchName:
    letter, accidental = transpose_note(pitch.letter, pitch.accidental, interval, spelling)
    return PitchName(letter, accidental)


def transpose_chord(chord: ChordSymbol, interval: int, spelling: Spelling = Spelling.FLAT) -> ChordSymbol:
    if pitch_class(interval) == 0:
        return chord
    root = _transpose_pitch(chord.root_name, interval, spelling)
    bass = _transpose_pitch(chord.bass, interval, spelling) if chord.bass is not None else None
    return replace(chord, root=root.letter, accidental=root.accidental, bass=bass)


def _transpose_run(run: LyricRun, interval: int, spelling: Spelling) -> LyricRun:
    if not run.chords:
        return run
    chords = tuple(ChordAnchor(anchor.offset, transpose_chord(anchor.chord, interval, spelling)) for anchor in run.chords)
    return replace(run, chords=chords)


def _transpose_line(line: DocumentLine, interval: int, spelling: Spelling) -> DocumentLine:
    if isinstance(line, SectionLine):
        rows = tuple(tuple(transpose_chord(chord, interval, spelling) for chord in row) for row in line.instrumental)
        return replace(line, instrumental=rows)
    return LyricLine(runs=tuple(_transpose_run(run, interval, spelling) for run in line.runs))


def transpose(doc: ParsedDocument, interval: int, *, spelling: Spelling = Spelling.FLAT) -> ParsedDocument:
    """
    Shift every chord root and bass by ``interval`` semitones.

    Qualities and lyric text are never touched. Any multiple of 12 returns the
    document unchanged, so chord spellings survive octave shifts byte for byte.
    Other intervals re-spell through the flat table unless ``spelling`` asks for
    sharps.
    """
    spelling = Spelling(spelling)
    if pitch_class(interval) == 0:
        return doc
    return replace(doc, lines=tuple(_transpose_line(line, interval, spelling) for line in doc.lines))


def extract_chords(doc: ParsedDocument) -> list[str]:
    """Distinct chord spellings in the order they first appear."""
    return list(dict.fromkeys(serialize_chord(chord) for chord in doc.chords))


def detect_key(doc: ParsedDocument) -> str | None:
    """The song key, taken from the first chord: its root, plus ``m`` for a minor chord."""
    chords = doc.chords
    if not chords:
        return None
    first = chords[0]
    return f"{first.root_name}{'m' if first.is_minor else ''}"
