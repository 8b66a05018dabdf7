"""tunescript: text music notation parser with MIDI, audio and sheet export."""

from tunescript.notation import Measure, Note, PitchedNote, Rest, Score, TimeSignature
from tunescript.notation_parser import NotationParser, parse
from tunescript.notation_serializer import stringify
from tunescript.pitch import frequency, midi_note_number

__version__ = "0.1.0"

__all__ = [
    "Measure",
    "NotationParser",
    "Note",
    "PitchedNote",
    "Rest",
    "Score",
    "TimeSignature",
    "frequency",
    "midi_note_number",
    "parse",
    "stringify",
]
