"""Pitch helpers: note → frequency (Hz) and note → MIDI note number."""

from tunescript.notation import FLAT, SHARP, Note, PitchedNote

# ── Constants ────────────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE = 12
MIDDLE_C_MIDI = 60  # C4 in Scientific Pitch Notation
MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127

A4_FREQUENCY = 440.0
A4_POSITION = 9 + 4 * SEMITONES_PER_OCTAVE  # A is chromatic index 9, octave 4

#: Natural letter → semitones above C
DIATONIC_OFFSETS: dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


def accidental_shift(accidental: str | None) -> int:
    """Semitone shift for an accidental: +1 sharp, -1 flat, 0 otherwise."""
    if accidental == SHARP:
        return 1
    if accidental == FLAT:
        return -1
    return 0


def frequency(note: Note) -> float:
    """
    Convert a note to its frequency in Hz (12-TET, A4 = 440 Hz).

    The accidental moves the chromatic index within the octave, wrapping
    modulo 12 without changing the octave, so Cb4 sounds as B4 and B#4 as C4.

    Returns:
        0.0 for rests, 440.0 for an unknown letter.
    """
    if not isinstance(note, PitchedNote):
        return 0.0

    if note.letter not in DIATONIC_OFFSETS:
        return A4_FREQUENCY

    index = (DIATONIC_OFFSETS[note.letter] + accidental_shift(note.accidental)) % SEMITONES_PER_OCTAVE
    distance = index + note.octave * SEMITONES_PER_OCTAVE - A4_POSITION
    return A4_FREQUENCY * 2 ** (distance / SEMITONES_PER_OCTAVE)


def pitch_class_to_midi(pitch_class: int, octave: int) -> int:
    """
    Convert a pitch class and an octave number to an absolute MIDI note.

    MIDI octave numbering: C-1 = 0, C0 = 12, C1 = 24, ... C4 (Middle C) = 60.
    """
    return (octave + 1) * SEMITONES_PER_OCTAVE + pitch_class


def midi_note_number(note: Note) -> int:
    """
    Convert a note to a MIDI note number, clamped to 0-127.

    Unlike frequency(), the accidental is applied without wrapping, so Cb4
    is 59 and B#4 is 72. Rests map to 0.
    """
    if not isinstance(note, PitchedNote):
        return 0

    pitch_class = DIATONIC_OFFSETS.get(note.letter, 0) + accidental_shift(note.accidental)
    number = pitch_class_to_midi(pitch_class, note.octave)
    return max(MIDI_NOTE_MIN, min(MIDI_NOTE_MAX, number))
