"""NotationSerializer: Turns a Score back into notation text.

The output re-parses to the same measures. It is not a byte-exact copy of
the original input: whitespace is normalised, legacy tokens are written in
the full form, and the default tempo is omitted.
"""

from __future__ import annotations

from typing import Final

from tunescript.notation import (
    DEFAULT_TEMPO,
    DURATION_LETTERS,
    Measure,
    Note,
    PitchedNote,
    Score,
)

MEASURE_JOINER: Final[str] = " | "

_LETTER_FOR_DURATION: Final = {value: letter for letter, value in DURATION_LETTERS.items()}
_FALLBACK_LETTER: Final[str] = "q"


def _duration_letter(note: Note) -> str:
    return _LETTER_FOR_DURATION.get(note.base_duration, _FALLBACK_LETTER)


def format_note(note: Note) -> str:
    """Render a single note or rest token, e.g. ``D#5h.`` or ``Re``."""
    if not isinstance(note, PitchedNote):
        return f"R{_duration_letter(note)}{'.' if note.dotted else ''}"

    token = f"{note.letter}{note.accidental or ''}{note.octave}{_duration_letter(note)}"
    if note.dotted:
        token += "."
    elif note.tied:
        token += "~"
    return token


def format_measure(measure: Measure, header: str = "") -> str:
    # The time signature must stay first in the measure to be recognised.
    prefix = f"{measure.time_signature} " if measure.time_signature else ""
    return prefix + header + " ".join(format_note(note) for note in measure.notes)


def format_header(score: Score) -> str:
    header = ""
    if score.tempo != DEFAULT_TEMPO:
        header += f"tempo={score.tempo} "
    if score.key:
        header += f"key={score.key} "
    return header


def stringify(score: Score) -> str:
    """
    Render a Score as notation text.

    A ``tempo=`` header is written only for non-default tempos and a
    ``key=`` header only when a key is set. The header leads the text,
    except when the first measure opens with a time signature, in which case
    it follows that signature.
    """
    header = format_header(score)
    if not score.measures:
        return header

    first, *rest = score.measures
    parts = [format_measure(first, header)]
    parts.extend(format_measure(measure) for measure in rest)
    return MEASURE_JOINER.join(parts)
