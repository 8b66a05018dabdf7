"""MidiExporter: Converts a parsed Score into a single-track Standard MIDI File."""

import logging
import math
import struct
from fractions import Fraction

from midiutil.MidiFile import writeVarLength

from tunescript.notation import Score
from tunescript.pitch import midi_note_number

logger = logging.getLogger(__name__)

HEADER_CHUNK_ID = b"MThd"
TRACK_CHUNK_ID = b"MTrk"
HEADER_LENGTH = 6
FORMAT = 1
TRACK_COUNT = 1

# Channel 0 status bytes
NOTE_ON = 0x90
NOTE_OFF = 0x80
PROGRAM_CHANGE = 0xC0

META_EVENT = 0xFF
META_SET_TEMPO = 0x51
META_END_OF_TRACK = 0x2F

MICROSECONDS_PER_MINUTE = 60_000_000
MIN_TEMPO_VALUE = 1
MAX_TEMPO_VALUE = 0xFFFFFF  # set-tempo carries 3 bytes


class MidiExporter:
    """
    Writes a one-track MIDI file from a Score.

    Byte layout
    -----------
    MThd: length 6, format 1, one track, division 480.

    MTrk: set-tempo meta event, program change to piano, then one
    Note-On/Note-Off pair per pitched note in sequence order, and the
    end-of-track meta event. The chunk length is filled in once the event
    stream is complete.

    Timing
    ------
    Note durations are fractions of a whole note and are converted to ticks
    as ``round(duration × 480)``; a quarter note therefore spans 120 ticks.
    Rests emit nothing, but the silence they cover is added to the delta
    time of the next Note-On.
    """

    DIVISION = 480          # ticks per quarter note written to the header
    PROGRAM = 0             # General MIDI Acoustic Grand Piano
    NOTE_ON_VELOCITY = 0x64
    NOTE_OFF_VELOCITY = 0x40

    def __init__(
        self,
        program: int = PROGRAM,
        velocity: int = NOTE_ON_VELOCITY,
    ) -> None:
        """
        Args:
            program:  General MIDI program number (0-127).
            velocity: MIDI note-on velocity for every note.
        """
        self.program = program
        self.velocity = velocity

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ticks(self, whole_notes: Fraction) -> int:
        """Convert a duration in whole-note units to ticks."""
        return round(whole_notes * self.DIVISION)

    def _microseconds_per_quarter(self, tempo: int) -> int:
        value = math.floor(MICROSECONDS_PER_MINUTE / tempo)
        return max(MIN_TEMPO_VALUE, min(MAX_TEMPO_VALUE, value))

    def _header_chunk(self) -> bytes:
        return HEADER_CHUNK_ID + struct.pack(">LHHH", HEADER_LENGTH, FORMAT, TRACK_COUNT, self.DIVISION)

    def _event(self, delta_ticks: int, *data: int) -> bytes:
        return bytes(writeVarLength(delta_ticks)) + bytes(data)

    def _track_events(self, score: Score) -> bytes:
        events = bytearray()

        tempo_value = self._microseconds_per_quarter(score.tempo)
        events += self._event(0, META_EVENT, META_SET_TEMPO, 3, *tempo_value.to_bytes(3, "big"))
        events += self._event(0, PROGRAM_CHANGE, self.program)

        # Both cursors are in whole-note units.
        cursor = Fraction(0)
        last_event = Fraction(0)
        for note in score.notes:
            duration = note.duration
            if note.is_rest:
                cursor += duration
                continue

            number = midi_note_number(note)
            events += self._event(self._ticks(cursor - last_event), NOTE_ON, number, self.velocity)
            events += self._event(self._ticks(duration), NOTE_OFF, number, self.NOTE_OFF_VELOCITY)
            cursor += duration
            last_event = cursor

        events += self._event(0, META_EVENT, META_END_OF_TRACK, 0)
        return bytes(events)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encode(self, score: Score) -> bytes:
        """
        Render a Score to Standard MIDI File bytes.

        Args:
            score: Parsed score. Not modified.

        Returns:
            The complete file contents.
        """
        events = self._track_events(score)
        track = TRACK_CHUNK_ID + struct.pack(">L", len(events)) + events
        midi_bytes = self._header_chunk() + track

        logger.info("MIDI encoding complete: %d notes, %d bytes", len(score.notes), len(midi_bytes))
        return midi_bytes

    def export(self, score: Score, output_path: str) -> None:
        """
        Write a Score to a Standard MIDI File.

        Args:
            score:       Parsed score to write.
            output_path: Destination file path (e.g. "output.mid").

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi_bytes = self.encode(score)
        with open(output_path, "wb") as f:
            f.write(midi_bytes)
