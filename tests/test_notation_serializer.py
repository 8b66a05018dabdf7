"""Unit tests for turning scores back into notation text."""

from fractions import Fraction

import pytest

from tunescript.notation import Measure, PitchedNote, Rest, Score, TimeSignature
from tunescript.notation_parser import parse
from tunescript.notation_serializer import format_note, stringify


@pytest.mark.parametrize(
    "text",
    [
        "C4q D4q E4q F4q",
        "4/4 C4q D4q E4q F4q | 3/4 G4q A4q B4q",
        "D#5h. Eb3w Bn4e",
        "C4q Rq D4h Re.",
        "tempo=100 key=G C4q",
        "4/4 tempo=90 key=F A4q~ A4q",
    ],
)
def test_round_trip_preserves_score(text: str) -> None:
    score = parse(text)
    assert parse(stringify(score)) == score


def test_canonical_text_is_stable() -> None:
    assert stringify(parse("tempo=100 key=G C4q")) == "tempo=100 key=G C4q"
    assert stringify(parse("4/4 C4q D4q | 3/4 E4h.")) == "4/4 C4q D4q | 3/4 E4h."


def test_header_follows_leading_time_signature() -> None:
    text = stringify(parse("4/4 tempo=90 C4q"))
    assert text == "4/4 tempo=90 C4q"
    assert parse(text).measures[0].time_signature == TimeSignature(4, 4)


def test_legacy_tokens_are_written_in_full_form() -> None:
    assert stringify(parse("C4 D#5")) == "C4q D#5q"


def test_whitespace_is_normalised() -> None:
    assert stringify(parse("  C4q    D4q |   E4q  ")) == "C4q D4q | E4q"


def test_default_tempo_is_omitted() -> None:
    assert stringify(parse("tempo=120 C4q")) == "C4q"


def test_empty_score_gives_empty_text() -> None:
    assert stringify(Score()) == ""


def test_format_note_tokens() -> None:
    assert format_note(Rest(base_duration=Fraction(1, 4), dotted=True)) == "Rq."
    assert format_note(Rest(base_duration=Fraction(1, 8))) == "Re"
    assert format_note(PitchedNote(letter="F", octave=4, tied=True)) == "F4q~"
    assert format_note(PitchedNote(base_duration=Fraction(1, 16), letter="B", accidental="n")) == "Bn4s"


def test_unmapped_duration_is_written_as_quarter() -> None:
    note = PitchedNote(base_duration=Fraction(1, 32), letter="C", octave=4)
    assert format_note(note) == "C4q"


def test_dot_takes_precedence_over_tie() -> None:
    note = PitchedNote(letter="G", octave=3, dotted=True, tied=True)
    assert format_note(note) == "G3q."


def test_stringify_hand_built_score() -> None:
    score = Score(
        measures=(
            Measure(notes=(PitchedNote(letter="A", octave=4),), time_signature=TimeSignature(2, 4)),
            Measure(notes=(Rest(base_duration=Fraction(1, 2)),)),
        ),
        tempo=72,
    )
    assert stringify(score) == "2/4 tempo=72 A4q | Rh"
