"""AudioRenderer: Schedules a Score as timed tones and synthesises a waveform."""

import logging
import math
from dataclasses import dataclass

import librosa
import numpy as np

from tunescript.notation import Note, Score
from tunescript.pitch import frequency

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True)
class ScheduledTone:
    """
    One sounding note on the playback timeline.

    Attributes:
        start:     Onset in seconds from the start of the score.
        duration:  Length of the note's time slot in seconds.
        frequency: Pitch in Hz.
        note:      The note that produced this tone.
    """

    start: float
    duration: float
    frequency: float
    note: Note


class AudioRenderer:
    """
    Turns a Score into audio the way the in-browser player schedules it.

    Timing
    ------
    A note occupies ``duration × 60 / tempo`` seconds, with durations in
    whole notes, which keeps playback in step with the MIDI export. Rests
    advance the timeline silently. Tied notes are still played as separate
    tones.

    Synthesis
    ---------
    Each tone is a sine wave (``librosa.tone``) that stops ``RELEASE_GAP``
    seconds before its slot ends, shaped by a linear attack/release ramp of
    ``RAMP_SECONDS`` to avoid clicks.
    """

    SAMPLE_RATE = 22050
    DEFAULT_VOLUME = 0.75
    RAMP_SECONDS = 0.01
    RELEASE_GAP = 0.01

    def __init__(self, sample_rate: int = SAMPLE_RATE, volume: float = DEFAULT_VOLUME) -> None:
        """
        Args:
            sample_rate: Output sample rate in Hz.
            volume:      Peak gain per tone, 0.0 - 1.0.
        """
        if not 0.0 <= volume <= 1.0:
            raise ValueError(f"volume must be between 0 and 1, got {volume}")
        self.sample_rate = sample_rate
        self.volume = volume

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _seconds(self, whole_notes: float, tempo: int) -> float:
        return whole_notes * (SECONDS_PER_MINUTE / tempo)

    def _envelope(self, n_samples: int) -> np.ndarray:
        """Linear 0 → volume → 0 gain curve over n_samples."""
        length = n_samples / self.sample_rate
        peak = min(self.RAMP_SECONDS, length / 2)
        t = np.arange(n_samples) / self.sample_rate
        return np.interp(t, [0.0, peak, length - peak, length], [0.0, self.volume, self.volume, 0.0])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def schedule(self, score: Score) -> list[ScheduledTone]:
        """
        Lay out the pitched notes of a Score on a timeline in seconds.

        Args:
            score: Parsed score. Not modified.

        Returns:
            Tones ordered by start time.
        """
        tones: list[ScheduledTone] = []
        current = 0.0
        for note in score.notes:
            slot = self._seconds(float(note.duration), score.tempo)
            if not note.is_rest:
                tones.append(ScheduledTone(start=current, duration=slot, frequency=frequency(note), note=note))
            current += slot
        return tones

    def total_duration(self, score: Score) -> float:
        """Playing time of the whole score in seconds, rests included."""
        return self._seconds(float(score.duration), score.tempo)

    def render(self, score: Score) -> np.ndarray:
        """
        Synthesise a Score to a mono float waveform.

        Returns:
            1-D float32 array of length ceil(total_duration × sample_rate).
        """
        total_samples = math.ceil(self.total_duration(score) * self.sample_rate)
        audio = np.zeros(total_samples, dtype=np.float32)

        tones = self.schedule(score)
        for tone in tones:
            sounding = max(0.0, tone.duration - self.RELEASE_GAP)
            start = int(round(tone.start * self.sample_rate))
            n_samples = min(int(round(sounding * self.sample_rate)), total_samples - start)
            if n_samples <= 0:
                continue

            wave = librosa.tone(tone.frequency, sr=self.sample_rate, length=n_samples)
            audio[start:start + n_samples] += (wave * self._envelope(n_samples)).astype(np.float32)

        logger.info("Rendered %d tones into %.2f s of audio", len(tones), total_samples / self.sample_rate)
        return audio

    def export(self, score: Score, output_path: str) -> None:
        """
        Render a Score and write it as a WAV file.

        Raises:
            OSError: If the output file cannot be written.
        """
        import soundfile

        audio = self.render(score)
        with open(output_path, "wb") as fh:
            soundfile.write(fh, audio, self.sample_rate, format="WAV")
