import pytest

from chordsheet.services.chord_grammar import parse_chord
from chordsheet.services.document_parser import parse_document
from chordsheet.services.html_renderer import render_html
from chordsheet.services.music_theory import Spelling, interval_to_key, pitch_class, transpose_key
from chordsheet.services.transposer import detect_key, extract_chords, transpose, transpose_chord

INLINE_SONG = "[C]Santo, [Am]santo, [F]santo é o [G7]Senhor\n\n[Dm7]Deus do uni[G/B]verso"
ABOVE_SONG = "C        Am\nSanto    santo\nF     G7\nSenhor Deus"
MIXED_SONG = "Intro:\n[C] [G] [Am] [F]\n\nSanto, santo\n[C] Senhor"


def test_inline_transpose_up_two_semitones():
    doc = transpose(parse_document("[C]Santo, [Am]santo"), 2)

    assert extract_chords(doc) == ["D", "Bm"]
    assert doc.lines[0].text == "Santo, santo"


def test_slash_chord_root_and_bass_move_together():
    doc = transpose(parse_document("[D/F#]Glória"), 1)

    assert extract_chords(doc) == ["Eb/G"]
    assert doc.lines[0].text == "Glória"


def test_sharp_spelling_on_request():
    chord = transpose_chord(parse_chord("C"), 1, Spelling.SHARP)

    assert str(chord) == "C#"
    assert str(transpose_chord(parse_chord("C"), 1)) == "Db"


def test_quality_is_never_touched():
    assert str(transpose_chord(parse_chord("Bbmaj7(9)/D"), 3)) == "Dbmaj7(9)/F"


def test_negative_intervals_wrap_around():
    assert str(transpose_chord(parse_chord("C"), -1)) == "B"
    assert str(transpose_chord(parse_chord("C"), -13)) == "B"


def test_zero_interval_is_identity_even_for_non_canonical_spellings():
    doc = parse_document("[C#m]Santo [Gb]santo")

    assert transpose(doc, 0) is doc
    assert extract_chords(transpose(doc, 0)) == ["C#m", "Gb"]


@pytest.mark.parametrize("song", [INLINE_SONG, ABOVE_SONG, MIXED_SONG])
@pytest.mark.parametrize("interval", [-11, -5, -1, 1, 2, 6, 7, 13])
def test_round_trip_transpose_renders_identically(song, interval):
    doc = parse_document(song)

    back = transpose(transpose(doc, interval), -interval)

    assert back == doc
    assert render_html(back) == render_html(doc)


@pytest.mark.parametrize("song", [INLINE_SONG, ABOVE_SONG, MIXED_SONG])
def test_octave_transpose_renders_identically(song):
    doc = parse_document(song)

    assert render_html(transpose(doc, 12)) == render_html(doc)
    assert render_html(transpose(doc, -24)) == render_html(doc)


def test_composed_transpositions_match_single_transposition():
    doc = parse_document(INLINE_SONG)

    assert transpose(transpose(doc, 1), 1) == transpose(doc, 2)


def test_transpose_does_not_mutate_input():
    doc = parse_document(MIXED_SONG)
    before = render_html(doc)

    transpose(doc, 5)

    assert render_html(doc) == before


def test_mixed_instrumental_rows_are_transposed():
    doc = transpose(parse_document(MIXED_SONG), 2)

    assert [str(c) for c in doc.lines[0].instrumental[0]] == ["D", "A", "Bm", "G"]


def test_literal_tokens_are_left_alone():
    doc = transpose(parse_document("[Hmaj]Santo [C]santo"), 2)

    assert doc.lines[0].text == "[Hmaj]Santo santo"
    assert extract_chords(doc) == ["D"]


def test_extract_chords_keeps_first_appearance_order():
    doc = parse_document("[G]a [C]b [G]c [D]d")

    assert extract_chords(doc) == ["G", "C", "D"]


def test_detect_key_uses_first_chord():
    assert detect_key(parse_document("[Am7]Santo [C]santo")) == "Am"
    assert detect_key(parse_document("[Bbmaj7]Santo")) == "Bb"
    assert detect_key(parse_document("Santo santo")) is None


def test_key_helpers():
    assert pitch_class(-1) == 11
    assert transpose_key("Am", 2) == "Bm"
    assert transpose_key("C", 1, Spelling.SHARP) == "C#"
    assert transpose_key("F#", 12) == "F#"
    assert interval_to_key("C", "G") == -5
    assert interval_to_key("C", "F#") == 6
    assert interval_to_key("Am", "Bm") == 2


def test_transpose_key_rejects_garbage():
    with pytest.raises(ValueError):
        transpose_key("H", 1)


def test_round_trip_respells_sharps_through_the_flat_table():
    doc = parse_document("[C#]Santo [F#m]santo")

    back = transpose(transpose(doc, 3), -3)

    assert extract_chords(back) == ["Db", "F#m"]
    assert back != doc


def test_round_trip_with_matching_spelling_restores_sharps():
    doc = parse_document("[C#]Santo [F#m]santo")

    back = transpose(transpose(doc, 3, spelling=Spelling.SHARP), -3, spelling=Spelling.SHARP)

    assert back == doc


def test_inline_song_with_intro_transposes_its_instrumental_row():
    doc = transpose(parse_document("Intro:\n[C] [G]\n\n[C]Santo"), 2)

    assert [str(c) for c in doc.lines[0].instrumental[0]] == ["D", "A"]
    assert extract_chords(doc) == ["D", "A"]
