"""NotationParser: Turns notation text into a structured Score.

Notation format
---------------
Measures are separated by ``|``. A measure may start with a time signature
(``3/4``). Tokens inside a measure are separated by whitespace:

    C4q     C in octave 4, quarter note
    D#5h.   D sharp in octave 5, dotted half note
    Eb3w    E flat in octave 3, whole note
    Re      eighth rest
    F4q~    F in octave 4, quarter note tied to the next note
    C4      legacy form: C in octave 4, quarter note
    tempo=100 / key=G   global settings, last occurrence wins; a bare
                        key= clears the key

Parsing never fails. Tokens that match no grammar are dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Final

from tunescript.notation import (
    DEFAULT_OCTAVE,
    DEFAULT_TEMPO,
    DURATION_LETTERS,
    QUARTER,
    Measure,
    Note,
    PitchedNote,
    Rest,
    Score,
    TimeSignature,
)

logger = logging.getLogger(__name__)

MEASURE_SEPARATOR: Final[str] = "|"
TEMPO_PREFIX: Final[str] = "tempo="
KEY_PREFIX: Final[str] = "key="

# Numbers longer than nine digits are not recognised.
_TIME_SIGNATURE_RE: Final = re.compile(r"^\s*(\d{1,9})/(\d{1,9})(?!\d)\s*")
_TEMPO_VALUE_RE: Final = re.compile(r"\d{1,9}(?!\d)")

# Both grammars search anywhere inside the token.
_RICH_NOTE_RE: Final = re.compile(r"([A-G][#bn]?|R)(\d)?([whdqes])(\.|~)?", re.IGNORECASE)
_SIMPLE_NOTE_RE: Final = re.compile(r"([A-G][#b]?)(\d)", re.IGNORECASE)

NoteMatcher = Callable[[str], Note | None]


def _match_rich_note(token: str) -> Note | None:
    """Match ``<letter|R><accidental?><octave?><duration><./~?>``."""
    match = _RICH_NOTE_RE.search(token)
    if match is None:
        return None

    name, octave_digit, duration_letter, modifier = match.groups()
    base_duration = DURATION_LETTERS.get(duration_letter.lower(), QUARTER)
    dotted = modifier == "."

    if name.upper() == "R":
        return Rest(base_duration=base_duration, dotted=dotted)

    return PitchedNote(
        base_duration=base_duration,
        dotted=dotted,
        letter=name[0].upper(),
        octave=int(octave_digit) if octave_digit else DEFAULT_OCTAVE,
        accidental=name[1:].lower() or None,
        tied=modifier == "~",
    )


def _match_simple_note(token: str) -> Note | None:
    """Match the legacy ``<letter><accidental?><octave>`` form (quarter note)."""
    match = _SIMPLE_NOTE_RE.search(token)
    if match is None:
        return None

    name, octave_digit = match.groups()
    return PitchedNote(
        base_duration=QUARTER,
        letter=name[0].upper(),
        octave=int(octave_digit),
        accidental=name[1:].lower() or None,
    )


#: Tried in order; the first matcher returning a note wins.
NOTE_MATCHERS: Final[tuple[NoteMatcher, ...]] = (_match_rich_note, _match_simple_note)


class NotationParser:
    """
    Parses notation text into a Score.

    The parser is stateless between calls; one instance may be shared.
    """

    def __init__(self, matchers: tuple[NoteMatcher, ...] = NOTE_MATCHERS) -> None:
        self.matchers = matchers

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _split_time_signature(self, raw: str) -> tuple[TimeSignature | None, str]:
        match = _TIME_SIGNATURE_RE.match(raw)
        if match is None:
            return None, raw
        signature = TimeSignature(int(match.group(1)), int(match.group(2)))
        return signature, raw[match.end():]

    def _parse_note(self, token: str) -> Note | None:
        for matcher in self.matchers:
            note = matcher(token)
            if note is not None:
                return note
        return None

    def _parse_tempo(self, value: str) -> int | None:
        match = _TEMPO_VALUE_RE.match(value)
        if match is None:
            return None
        tempo = int(match.group(0))
        return tempo if tempo > 0 else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, text: str) -> Score:
        """
        Parse notation text into a Score.

        Args:
            text: Notation string. Any string is accepted.

        Returns:
            A Score. Measures without a single parsed note are left out.
        """
        tempo = DEFAULT_TEMPO
        key: str | None = None
        measures: list[Measure] = []

        for raw_measure in text.split(MEASURE_SEPARATOR):
            time_signature, body = self._split_time_signature(raw_measure)
            notes: list[Note] = []

            for token in body.split():
                if token.startswith(TEMPO_PREFIX):
                    value = self._parse_tempo(token[len(TEMPO_PREFIX):])
                    if value is None:
                        logger.debug("Ignoring invalid tempo token %r", token)
                    else:
                        tempo = value
                    continue

                if token.startswith(KEY_PREFIX):
                    key = token[len(KEY_PREFIX):] or None
                    continue

                note = self._parse_note(token)
                if note is None:
                    logger.debug("Dropping unparseable token %r", token)
                    continue
                notes.append(note)

            if notes:
                measures.append(Measure(notes=tuple(notes), time_signature=time_signature))

        return Score(measures=tuple(measures), tempo=tempo, key=key)


_default_parser = NotationParser()


def parse(text: str) -> Score:
    """Parse notation text with the default grammar."""
    return _default_parser.parse(text)
