"""Unit tests for MidiExporter byte output."""

import struct

from tunescript.midi_exporter import MidiExporter
from tunescript.notation import Score
from tunescript.notation_parser import parse

HEADER = b"MThd\x00\x00\x00\x06\x00\x01\x00\x01\x01\xe0"
TEMPO_120 = bytes([0x00, 0xFF, 0x51, 0x03, 0x07, 0xA1, 0x20])
PIANO = bytes([0x00, 0xC0, 0x00])
END_OF_TRACK = bytes([0x00, 0xFF, 0x2F, 0x00])


def _track_events(midi_bytes: bytes) -> bytes:
    assert midi_bytes[:14] == HEADER
    assert midi_bytes[14:18] == b"MTrk"
    (length,) = struct.unpack(">L", midi_bytes[18:22])
    events = midi_bytes[22:]
    assert len(events) == length
    return events


def test_single_quarter_note_exact_bytes() -> None:
    midi_bytes = MidiExporter().encode(parse("C4q"))
    expected_events = (
        TEMPO_120
        + PIANO
        + bytes([0x00, 0x90, 0x3C, 0x64])
        + bytes([0x78, 0x80, 0x3C, 0x40])
        + END_OF_TRACK
    )
    assert midi_bytes == HEADER + b"MTrk\x00\x00\x00\x16" + expected_events


def test_empty_score_has_only_meta_events() -> None:
    events = _track_events(MidiExporter().encode(Score()))
    assert events == TEMPO_120 + PIANO + END_OF_TRACK
    assert len(events) == 14


def test_notes_follow_each_other_without_gaps() -> None:
    events = _track_events(MidiExporter().encode(parse("C4q D4q")))
    body = events[len(TEMPO_120) + len(PIANO):-len(END_OF_TRACK)]
    assert body == bytes(
        [
            0x00, 0x90, 0x3C, 0x64,
            0x78, 0x80, 0x3C, 0x40,
            0x00, 0x90, 0x3E, 0x64,
            0x78, 0x80, 0x3E, 0x40,
        ]
    )


def test_rest_delays_next_note_on() -> None:
    events = _track_events(MidiExporter().encode(parse("C4q Rq D4q")))
    body = events[len(TEMPO_120) + len(PIANO):-len(END_OF_TRACK)]
    assert body[8:12] == bytes([0x78, 0x90, 0x3E, 0x64])


def test_leading_rest_delays_first_note() -> None:
    events = _track_events(MidiExporter().encode(parse("Rh C4q")))
    body = events[len(TEMPO_120) + len(PIANO):]
    assert body[:4] == bytes([0x81, 0x70, 0x90, 0x3C])


def test_long_durations_use_variable_length_deltas() -> None:
    events = _track_events(MidiExporter().encode(parse("C4w")))
    body = events[len(TEMPO_120) + len(PIANO):-len(END_OF_TRACK)]
    assert body == bytes([0x00, 0x90, 0x3C, 0x64, 0x83, 0x60, 0x80, 0x3C, 0x40])


def test_dotted_note_ticks() -> None:
    events = _track_events(MidiExporter().encode(parse("C4q.")))
    body = events[len(TEMPO_120) + len(PIANO):-len(END_OF_TRACK)]
    assert body[4:6] == bytes([0x81, 0x34])


def test_tempo_is_encoded_as_microseconds_per_quarter() -> None:
    events = _track_events(MidiExporter().encode(parse("tempo=100 C4q")))
    assert events[:7] == bytes([0x00, 0xFF, 0x51, 0x03, 0x09, 0x27, 0xC0])


def test_very_slow_tempo_is_clamped_to_three_bytes() -> None:
    events = _track_events(MidiExporter().encode(parse("tempo=1 C4q")))
    assert events[4:7] == b"\xff\xff\xff"


def test_very_fast_tempo_never_writes_zero() -> None:
    events = _track_events(MidiExporter().encode(parse("tempo=999999999 C4q")))
    assert events[4:7] == b"\x00\x00\x01"


def test_custom_program_and_velocity() -> None:
    events = _track_events(MidiExporter(program=40, velocity=90).encode(parse("A4q")))
    assert events[7:10] == bytes([0x00, 0xC0, 40])
    assert events[10:14] == bytes([0x00, 0x90, 69, 90])


def test_out_of_range_pitch_is_clamped() -> None:
    events = _track_events(MidiExporter().encode(parse("B9q")))
    assert events[10:14] == bytes([0x00, 0x90, 127, 0x64])


def test_export_writes_file(tmp_path) -> None:
    output = tmp_path / "song.mid"
    score = parse("4/4 C4q E4q G4h")
    MidiExporter().export(score, str(output))
    assert output.read_bytes() == MidiExporter().encode(score)
