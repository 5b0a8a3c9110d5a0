"""Structured chord-sheet document shared by the parser, transposer and renderers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from chordsheet.services.chord_grammar import ChordSymbol
from chordsheet.services.format_detector import Format


class Anchor(str, Enum):
    CHARACTER = "character"  # inline: chord sits before the character at ``offset``
    COLUMN = "column"  # above: chord sits over the column at ``offset``


@dataclass(frozen=True)
class ChordAnchor:
    offset: int
    chord: ChordSymbol


@dataclass(frozen=True)
class LyricRun:
    text: str
    chords: tuple[ChordAnchor, ...] = ()
    anchor: Anchor = Anchor.CHARACTER


@dataclass(frozen=True)
class LyricLine:
    runs: tuple[LyricRun, ...] = ()

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def is_blank(self) -> bool:
        return not self.runs

    @property
    def chords(self) -> list[ChordSymbol]:
        return [anchor.chord for run in self.runs for anchor in run.chords]


@dataclass(frozen=True)
class SectionLine:
    label: str
    instrumental: tuple[tuple[ChordSymbol, ...], ...] = ()

    @property
    def chords(self) -> list[ChordSymbol]:
        return [chord for row in self.instrumental for chord in row]


DocumentLine = Union[LyricLine, SectionLine]


@dataclass(frozen=True)
class ParsedDocument:
    format: Format
    lines: tuple[DocumentLine, ...] = ()

    @property
    def chords(self) -> list[ChordSymbol]:
        return [chord for line in self.lines for chord in line.chords]

    @property
    def is_empty(self) -> bool:
        return not self.lines
