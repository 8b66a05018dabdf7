"""Data models for parsed notation: notes, rests, measures and scores."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

DEFAULT_TEMPO = 120
DEFAULT_OCTAVE = 4

DOT_FACTOR = Fraction(3, 2)

#: Duration letter → fraction of a whole note.
DURATION_LETTERS: dict[str, Fraction] = {
    "w": Fraction(1),
    "h": Fraction(1, 2),
    "q": Fraction(1, 4),
    "e": Fraction(1, 8),
    "s": Fraction(1, 16),
}

QUARTER = DURATION_LETTERS["q"]

SHARP = "#"
FLAT = "b"
NATURAL = "n"

ACCIDENTALS: frozenset[str] = frozenset({SHARP, FLAT, NATURAL})


@dataclass(frozen=True)
class Note:
    """
    Common fields shared by every note variant.

    Attributes:
        base_duration: Undotted length as a fraction of a whole note.
        dotted:        When True the effective duration is 1.5 × base.
    """

    base_duration: Fraction = QUARTER
    dotted: bool = False

    @property
    def duration(self) -> Fraction:
        """Effective duration as a fraction of a whole note."""
        if self.dotted:
            return self.base_duration * DOT_FACTOR
        return self.base_duration

    @property
    def is_rest(self) -> bool:
        return False


@dataclass(frozen=True)
class Rest(Note):
    """A silent note. Rests never carry pitch, accidental or tie."""

    @property
    def is_rest(self) -> bool:
        return True


@dataclass(frozen=True)
class PitchedNote(Note):
    """
    A sounding note.

    Attributes:
        letter:     Natural pitch letter, "C" … "B" (upper case).
        octave:     Scientific octave number; C4 is middle C.
        accidental: "#", "b", "n" or None. Taken literally; key context is
                    never applied.
        tied:       Tie to the following note (render/playback hint only).
    """

    letter: str = "C"
    octave: int = DEFAULT_OCTAVE
    accidental: str | None = None
    tied: bool = False

    @property
    def name(self) -> str:
        """Human-readable pitch name, e.g. 'D#5'."""
        return f"{self.letter}{self.accidental or ''}{self.octave}"


@dataclass(frozen=True)
class TimeSignature:
    numerator: int
    denominator: int

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


@dataclass(frozen=True)
class Measure:
    """An ordered group of notes, optionally prefixed by a time signature."""

    notes: tuple[Note, ...]
    time_signature: TimeSignature | None = None

    @property
    def duration(self) -> Fraction:
        return sum((note.duration for note in self.notes), Fraction(0))


@dataclass(frozen=True)
class Score:
    """
    Result of parsing a notation string.

    Attributes:
        measures: Measures in playback/layout order.
        tempo:    Beats per minute; applies to the whole score.
        key:      Free-form key label. Informational only, never transposes.
    """

    measures: tuple[Measure, ...] = ()
    tempo: int = DEFAULT_TEMPO
    key: str | None = None

    @property
    def notes(self) -> list[Note]:
        """All notes of the score flattened in sequence order."""
        return [note for measure in self.measures for note in measure.notes]

    @property
    def duration(self) -> Fraction:
        return sum((measure.duration for measure in self.measures), Fraction(0))
