from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

from chordsheet.services.format_detector import Format
from chordsheet.services.music_theory import Spelling

MAX_TEXT_LENGTH = 100_000
MAX_TRANSPOSE = 48


def _normalize_key(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    m = re.fullmatch(r"([A-Ga-g])([#b]?)(m?)", cleaned)
    if not m:
        raise ValueError("Invalid key. Use pitch-class keys like C, F#, Bb, Am.")
    return f"{m.group(1).upper()}{m.group(2)}{m.group(3)}"


class DetectRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)


class DetectResponse(BaseModel):
    format: Format
    section_headers: list[str] = Field(default_factory=list)


class RenderRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)
    transpose: int = Field(default=0, ge=-MAX_TRANSPOSE, le=MAX_TRANSPOSE)
    spelling: Spelling = Spelling.FLAT
    target_key: str | None = None

    @field_validator("target_key")
    @classmethod
    def validate_target_key(cls, value: str | None) -> str | None:
        return _normalize_key(value)


class RenderResponse(BaseModel):
    format: Format
    html: str
    chords: list[str] = Field(default_factory=list)
    original_key: str | None = None
    key: str | None = None
    interval: int = 0


class PreviewRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)


class SongPreview(BaseModel):
    markdown: str
    format: Format
    html: str
    chords: list[str] = Field(default_factory=list)
    key: str | None = None
    warnings: list[str] = Field(default_factory=list)


class PDFExportRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)
    title: str = Field(min_length=1, max_length=200)
    author: str | None = Field(default=None, max_length=200)
    transpose: int = Field(default=0, ge=-MAX_TRANSPOSE, le=MAX_TRANSPOSE)
    spelling: Spelling = Spelling.FLAT

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title must not be blank.")
        return cleaned
