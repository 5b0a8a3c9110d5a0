from __future__ import annotations

import re
from enum import Enum

INLINE_DIRECTIVE = "#mic#"

SECTION_KEYWORDS = frozenset({"intro", "ponte", "solo", "bridge", "instrumental", "interlude"})

BRACKET_TOKEN_RE = re.compile(r"\[([^\[\]\n]*)\]")


class Format(str, Enum):
    INLINE = "inline"
    ABOVE = "above"
    MIXED = "mixed"


def section_label(line: str) -> str | None:
    """Return the stripped header text if ``line`` is a section header like ``Intro:``."""
    stripped = line.strip()
    keyword = stripped[:-1].rstrip() if stripped.endswith(":") else stripped
    if keyword.lower() in SECTION_KEYWORDS:
        return stripped
    return None


def has_inline_directive(text: str) -> bool:
    for line in text.splitlines():
        if line.strip():
            return line.strip() == INLINE_DIRECTIVE
    return False


def line_has_inline_chord(line: str) -> bool:
    """True when a bracket token touches a letter on either side."""
    for match in BRACKET_TOKEN_RE.finditer(line):
        before = line[match.start() - 1] if match.start() > 0 else ""
        after = line[match.end()] if match.end() < len(line) else ""
        if before.isalpha() or after.isalpha():
            return True
    return False


def section_headers(text: str) -> list[str]:
    return [label for label in map(section_label, text.splitlines()) if label is not None]


def detect_format(text: str) -> Format:
    """
    Classify a lyrics document into one of the three notation styles.

    A leading ``#mic#`` directive or any bracket chord touching lyric letters
    means inline. Otherwise a section header line (``Intro:``, ``Ponte`` ...)
    means mixed. Everything else, including empty text, is above.
    """
    if has_inline_directive(text):
        return Format.INLINE
    lines = text.splitlines()
    if any(line_has_inline_chord(line) for line in lines):
        return Format.INLINE
    if any(section_label(line) is not None for line in lines):
        return Format.MIXED
    return Format.ABOVE
