from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from chordsheet.logging_utils import log_event
from chordsheet.services.music_theory import ACCIDENTALS, ROOT_LETTERS

logger = logging.getLogger(__name__)

_QUALITY_RE = re.compile(r"[A-Za-z0-9+°ø()]*")


class ChordParseErrorKind(str, Enum):
    INVALID_ROOT = "invalid_root"
    INVALID_BASS = "invalid_bass"
    INVALID_QUALITY = "invalid_quality"


class ChordParseError(ValueError):
    def __init__(self, kind: ChordParseErrorKind, token: str) -> None:
        super().__init__(f"{kind.value}: '{token}' is not a chord symbol.")
        self.kind = kind
        self.token = token


@dataclass(frozen=True)
class PitchName:
    letter: str
    accidental: str = ""

    def __str__(self) -> str:
        return f"{self.letter}{self.accidental}"


@dataclass(frozen=True)
class ChordSymbol:
    root: str
    accidental: str = ""
    quality: str = ""
    bass: PitchName | None = None

    @property
    def root_name(self) -> PitchName:
        return PitchName(self.root, self.accidental)

    @property
    def is_minor(self) -> bool:
        return self.quality.startswith("m") and not self.quality.startswith("maj")

    def __str__(self) -> str:
        return serialize_chord(self)


def _read_pitch(text: str) -> tuple[PitchName, str] | None:
    if not text or text[0] not in ROOT_LETTERS:
        return None
    if len(text) > 1 and text[1] in ACCIDENTALS:
        return PitchName(text[0], text[1]), text[2:]
    return PitchName(text[0]), text[1:]


def parse_chord(token: str) -> ChordSymbol:
    """
    Parse one chord token such as ``Cmaj7``, ``[Am]`` or ``D/F#``.

    The grammar is root letter, optional ``#``/``b``, a verbatim quality up to an
    optional single ``/``, then an optional bass pitch. Surrounding brackets are
    accepted and ignored.

    Raises:
        ChordParseError: If the root or bass is not a pitch name, or the quality
            holds anything outside letters, digits, ``+``, ``°``, ``ø`` and parentheses.
    """
    body = token[1:-1] if len(token) >= 2 and token[0] == "[" and token[-1] == "]" else token

    head = _read_pitch(body)
    if head is None:
        raise ChordParseError(ChordParseErrorKind.INVALID_ROOT, token)
    root, rest = head

    quality, slash, bass_text = rest.partition("/")
    if not _QUALITY_RE.fullmatch(quality):
        raise ChordParseError(ChordParseErrorKind.INVALID_QUALITY, token)

    bass: PitchName | None = None
    if slash:
        tail = _read_pitch(bass_text)
        if tail is None or tail[1]:
            raise ChordParseError(ChordParseErrorKind.INVALID_BASS, token)
        bass = tail[0]

    return ChordSymbol(root=root.letter, accidental=root.accidental, quality=quality, bass=bass)


def read_chord_token(token: str) -> ChordSymbol | None:
    """Parse a token, or return ``None`` so the caller keeps it as literal text."""
    try:
        return parse_chord(token)
    except ChordParseError as exc:
        log_event(logger, "chord_token_literal", level=logging.DEBUG, token=token, reason=exc.kind.value)
        return None


def serialize_chord(chord: ChordSymbol) -> str:
    out = f"{chord.root}{chord.accidental}{chord.quality}"
    if chord.bass is not None:
        out += f"/{chord.bass}"
    return out
