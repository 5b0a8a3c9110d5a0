from __future__ import annotations

import re
from enum import Enum

NOTE_TO_SEMITONE = {
    "C": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "E#": 5,
    "Fb": 4,
    "F": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
    "B#": 0,
    "Cb": 11,
}

FLAT_SPELLING = ["C", "Db", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B"]
SHARP_SPELLING = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

ROOT_LETTERS = frozenset("ABCDEFG")
ACCIDENTALS = frozenset("#b")

_KEY_RE = re.compile(r"([A-G])([#b]?)(m?)")


class Spelling(str, Enum):
    FLAT = "flat"
    SHARP = "sharp"


def pitch_class(value: int) -> int:
    return ((value % 12) + 12) % 12


def note_index(letter: str, accidental: str = "") -> int:
    name = f"{letter}{accidental}"
    if name not in NOTE_TO_SEMITONE:
        raise ValueError(f"Unknown pitch name '{name}'.")
    return NOTE_TO_SEMITONE[name]


def spell_pitch_class(pc: int, spelling: Spelling = Spelling.FLAT) -> tuple[str, str]:
    """Return (letter, accidental) for a pitch class in the requested spelling table."""
    table = SHARP_SPELLING if spelling is Spelling.SHARP else FLAT_SPELLING
    name = table[pitch_class(pc)]
    return name[0], name[1:]


def transpose_note(letter: str, accidental: str, interval: int, spelling: Spelling = Spelling.FLAT) -> tuple[str, str]:
    return spell_pitch_class(note_index(letter, accidental) + interval, spelling)


def parse_key(key: str) -> tuple[str, bool]:
    """Split a key label like ``F#m`` into its tonic and a minor flag."""
    m = _KEY_RE.fullmatch(key.strip())
    if not m:
        raise ValueError(f"Invalid key '{key}'. Use pitch-class keys like C, F#, Bb, Am.")
    return f"{m.group(1)}{m.group(2)}", bool(m.group(3))


def transpose_key(key: str, interval: int, spelling: Spelling = Spelling.FLAT) -> str:
    tonic, is_minor = parse_key(key)
    if pitch_class(interval) == 0:
        return key.strip()
    letter, accidental = transpose_note(tonic[0], tonic[1:], interval, spelling)
    return f"{letter}{accidental}{'m' if is_minor else ''}"


def interval_to_key(from_key: str, to_key: str) -> int:
    """Smallest signed semitone interval (-5..+6) taking ``from_key`` to ``to_key``."""
    source, _ = parse_key(from_key)
    target, _ = parse_key(to_key)
    diff = pitch_class(NOTE_TO_SEMITONE[target] - NOTE_TO_SEMITONE[source])
    return diff - 12 if diff > 6 else diff
