"""Unit tests for the notation parser."""

from fractions import Fraction

import pytest

from tunescript.notation import PitchedNote, Rest, Score, TimeSignature
from tunescript.notation_parser import NotationParser, parse


def _only_note(text: str):
    score = parse(text)
    assert len(score.measures) == 1
    assert len(score.measures[0].notes) == 1
    return score.measures[0].notes[0]


def test_parse_empty_string_gives_empty_score() -> None:
    score = parse("")
    assert score == Score()
    assert score.measures == ()
    assert score.tempo == 120
    assert score.key is None


def test_parse_simple_quarter_notes() -> None:
    score = parse("C4q D4q E4q F4q")
    assert len(score.measures) == 1
    notes = score.measures[0].notes
    assert [note.letter for note in notes] == ["C", "D", "E", "F"]
    for note in notes:
        assert isinstance(note, PitchedNote)
        assert note.octave == 4
        assert note.duration == Fraction(1, 4)
        assert note.accidental is None
        assert not note.dotted
        assert not note.tied


def test_parse_dotted_sharp_half_note() -> None:
    note = _only_note("D#5h.")
    assert isinstance(note, PitchedNote)
    assert note.letter == "D"
    assert note.accidental == "#"
    assert note.octave == 5
    assert note.base_duration == Fraction(1, 2)
    assert note.dotted
    assert note.duration == Fraction(3, 4)
    assert float(note.duration) == 0.75


def test_parse_measures_with_time_signatures() -> None:
    score = parse("4/4 C4q D4q E4q F4q | 3/4 G4q A4q B4q")
    assert len(score.measures) == 2
    first, second = score.measures
    assert first.time_signature == TimeSignature(4, 4)
    assert len(first.notes) == 4
    assert second.time_signature == TimeSignature(3, 4)
    assert len(second.notes) == 3


def test_parse_tempo_and_key() -> None:
    score = parse("tempo=100 key=G C4q")
    assert score.tempo == 100
    assert score.key == "G"
    assert len(score.measures) == 1
    assert len(score.measures[0].notes) == 1


def test_last_tempo_and_key_win_across_measures() -> None:
    score = parse("tempo=90 key=C C4q | tempo=140 key=Eb D4q")
    assert score.tempo == 140
    assert score.key == "Eb"


def test_settings_only_measure_is_dropped_but_applies() -> None:
    score = parse("tempo=80 key=F | C4q")
    assert score.tempo == 80
    assert score.key == "F"
    assert len(score.measures) == 1


def test_tempo_token_is_never_parsed_as_a_note() -> None:
    assert parse("tempo=100").measures == ()


def test_invalid_tempo_values_keep_default() -> None:
    assert parse("tempo=fast C4q").tempo == 120
    assert parse("tempo=0 C4q").tempo == 120


def test_empty_key_value_clears_key() -> None:
    assert parse("key= C4q").key is None
    assert parse("key=G key= C4q").key is None
    assert parse("key= key=D C4q").key == "D"


def test_rests() -> None:
    note = _only_note("Re")
    assert isinstance(note, Rest)
    assert note.is_rest
    assert note.duration == Fraction(1, 8)


def test_dotted_rest() -> None:
    note = _only_note("Rq.")
    assert note == Rest(base_duration=Fraction(1, 4), dotted=True)
    assert note.duration == Fraction(3, 8)


def test_rest_never_carries_tie() -> None:
    note = _only_note("Rh~")
    assert isinstance(note, Rest)
    assert not hasattr(note, "tied")


def test_tied_note() -> None:
    note = _only_note("F4q~")
    assert isinstance(note, PitchedNote)
    assert note.tied
    assert not note.dotted


def test_flat_and_natural_accidentals() -> None:
    flat, natural = parse("Eb3w Bn4e").measures[0].notes
    assert flat.letter == "E" and flat.accidental == "b" and flat.octave == 3
    assert flat.duration == Fraction(1)
    assert natural.letter == "B" and natural.accidental == "n"
    assert natural.duration == Fraction(1, 8)


def test_octave_defaults_to_four() -> None:
    note = _only_note("Gs")
    assert note.octave == 4
    assert note.duration == Fraction(1, 16)


def test_lowercase_input_is_normalised() -> None:
    note = _only_note("c#5e")
    assert note.letter == "C"
    assert note.accidental == "#"
    assert note.octave == 5


def test_unmapped_duration_letter_falls_back_to_quarter() -> None:
    note = _only_note("C4d")
    assert note.base_duration == Fraction(1, 4)


def test_legacy_simple_notation() -> None:
    score = parse("C4 D#5 Bb3")
    notes = score.measures[0].notes
    assert notes[0] == PitchedNote(base_duration=Fraction(1, 4), letter="C", octave=4)
    assert notes[1].accidental == "#" and notes[1].octave == 5
    assert notes[2].accidental == "b" and notes[2].octave == 3
    assert all(note.duration == Fraction(1, 4) for note in notes)
    assert not any(note.dotted or note.tied for note in notes)


def test_unparseable_tokens_are_dropped() -> None:
    score = parse("xyz C4q ??? D4q")
    assert [note.letter for note in score.measures[0].notes] == ["C", "D"]


def test_measure_without_notes_is_dropped() -> None:
    score = parse("3/4 | 4/4 C4q | xyz ???")
    assert len(score.measures) == 1
    assert score.measures[0].time_signature == TimeSignature(4, 4)


def test_time_signature_must_lead_the_measure() -> None:
    score = parse("C4q 3/4 D4q")
    assert score.measures[0].time_signature is None
    assert len(score.measures[0].notes) == 2


@pytest.mark.parametrize(
    "text",
    [
        "|||",
        "   ",
        "\n\t",
        "🎵 ♯",
        "tempo= key=",
        "1/0",
        "R",
        "=|=|=",
        "9" * 5000 + "/4 C4q",
        "4/" + "9" * 5000 + " C4q",
        "tempo=" + "1" * 5000 + " C4q",
    ],
)
def test_parse_never_raises(text: str) -> None:
    assert isinstance(parse(text), Score)


def test_overlong_numbers_are_not_recognised() -> None:
    score = parse("9" * 5000 + "/4 tempo=" + "1" * 5000 + " C4q")
    assert score.tempo == 120
    assert score.measures[0].time_signature is None
    assert [note.letter for note in score.measures[0].notes] == ["C"]


def test_nine_digit_tempo_is_accepted() -> None:
    assert parse("tempo=999999999 C4q").tempo == 999999999


def test_parser_with_custom_matchers() -> None:
    parser = NotationParser(matchers=())
    assert parser.parse("C4q D4q").measures == ()


def test_score_is_immutable() -> None:
    score = parse("C4q")
    with pytest.raises(AttributeError):
        score.tempo = 90  # type: ignore[misc]
