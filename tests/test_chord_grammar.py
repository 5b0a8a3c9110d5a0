import pytest

from chordsheet.services.chord_grammar import (
    ChordParseError,
    ChordParseErrorKind,
    ChordSymbol,
    PitchName,
    parse_chord,
    read_chord_token,
    serialize_chord,
)


def test_parse_plain_major_chord_has_empty_quality():
    chord = parse_chord("C")

    assert chord == ChordSymbol(root="C", accidental="", quality="", bass=None)
    assert chord.quality == ""


def test_parse_captures_accidental_quality_and_bass():
    chord = parse_chord("Bbmaj7/F#")

    assert chord.root == "B"
    assert chord.accidental == "b"
    assert chord.quality == "maj7"
    assert chord.bass == PitchName("F", "#")


def test_quality_is_kept_verbatim():
    assert parse_chord("G7(4)").quality == "7(4)"
    assert parse_chord("Bø").quality == "ø"
    assert parse_chord("C°").quality == "°"
    assert parse_chord("Caug+").quality == "aug+"


@pytest.mark.parametrize("token", ["C", "Am", "F#m7", "Ebsus4", "D/F#", "Cmaj7", "Bb9/Ab", "E+", "G7(9)"])
def test_serialize_is_inverse_of_parse(token):
    assert serialize_chord(parse_chord(token)) == token
    assert str(parse_chord(token)) == token


def test_brackets_around_token_are_accepted():
    assert parse_chord("[Am]") == parse_chord("Am")


@pytest.mark.parametrize("token", ["Hmaj", "[Hmaj]", "", "x", "cm", "#C"])
def test_invalid_root_raises_typed_error(token):
    with pytest.raises(ChordParseError) as excinfo:
        parse_chord(token)

    assert excinfo.value.kind is ChordParseErrorKind.INVALID_ROOT
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize("token", ["C/", "C/H", "D/F#m", "C/E/G"])
def test_invalid_bass_raises_typed_error(token):
    with pytest.raises(ChordParseError) as excinfo:
        parse_chord(token)

    assert excinfo.value.kind is ChordParseErrorKind.INVALID_BASS


def test_whitespace_inside_token_is_invalid_quality():
    with pytest.raises(ChordParseError) as excinfo:
        parse_chord("C G")

    assert excinfo.value.kind is ChordParseErrorKind.INVALID_QUALITY


def test_read_chord_token_demotes_invalid_tokens_without_raising():
    assert read_chord_token("Hmaj") is None
    assert read_chord_token("[Hmaj]") is None
    assert read_chord_token("Am") == parse_chord("Am")


def test_minor_flag_ignores_major_seventh():
    assert parse_chord("Am7").is_minor
    assert not parse_chord("Amaj7").is_minor
    assert not parse_chord("A").is_minor


@pytest.mark.parametrize("token", ["Glória!", "Deus,", "Cantai.", "C#9-", "Am|"])
def test_punctuation_and_accents_are_invalid_quality(token):
    with pytest.raises(ChordParseError) as excinfo:
        parse_chord(token)

    assert excinfo.value.kind is ChordParseErrorKind.INVALID_QUALITY


def test_brackets_inside_token_are_invalid_quality():
    assert read_chord_token("C][G") is None
