"""SheetExporter: writes a Score as SVG, PNG or engraved HTML sheet music."""

from __future__ import annotations

import logging
from typing import Any, Final

from tunescript.notation import FLAT, NATURAL, SHARP, PitchedNote, Score
from tunescript.score_layout import LayoutEngine
from tunescript.sheet_models import THEMES
from tunescript.sheet_renderers import (
    CanvasRenderer,
    SheetRenderer,
    SvgRenderer,
    VerovioHtmlRenderer,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"svg", "png", "html"}

#: Notation accidental → music21 pitch-name suffix
_MUSIC21_ACCIDENTALS: Final[dict[str, str]] = {SHARP: "#", FLAT: "-"}

QUARTERS_PER_WHOLE: Final[int] = 4


class SheetExporter:
    """
    Convert a Score into sheet output via a pluggable renderer.

    Supported formats:
    - ``svg``: staff drawing from the layout engine as an SVG document.
    - ``png``: the same drawing painted on a cairo canvas.
    - ``html``: Score -> music21 -> MusicXML -> verovio -> inline SVG pages.
    """

    def __init__(
        self,
        title: str = "",
        output_format: str = "svg",
        theme: str = "light",
        layout_engine: LayoutEngine | None = None,
    ) -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        if theme not in THEMES:
            supported = ", ".join(sorted(THEMES))
            raise ValueError(f"Unknown theme '{theme}'. Use one of: {supported}.")
        self.output_format = normalized
        self.theme = THEMES[theme]
        self.layout_engine = layout_engine or LayoutEngine()
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        if output_format == "png":
            return CanvasRenderer(theme=self.theme)
        return SvgRenderer(theme=self.theme)

    def _pitch_name(self, note: PitchedNote) -> str:
        return f"{note.letter}{_MUSIC21_ACCIDENTALS.get(note.accidental or '', '')}{note.octave}"

    def _score_to_music21(self, score: Score) -> Any:
        """Build a single-part music21 score mirroring the parsed measures."""
        from music21 import key, metadata, meter, note, pitch, stream, tempo, tie
        from music21.exceptions21 import Music21Exception

        m21_score = stream.Score()
        m21_score.metadata = metadata.Metadata(title=self.title)
        part = stream.Part()

        # Pitch name of the previous note when it carried a tie.
        open_tie: str | None = None
        for number, measure in enumerate(score.measures, start=1):
            m21_measure = stream.Measure(number=number)
            if number == 1:
                m21_measure.insert(0, tempo.MetronomeMark(number=score.tempo))
                if score.key:
                    try:
                        m21_measure.insert(0, key.Key(score.key))
                    except Exception as exc:
                        logger.warning("Key '%s' not understood by music21, omitting: %s", score.key, exc)
            if measure.time_signature is not None:
                try:
                    m21_measure.timeSignature = meter.TimeSignature(str(measure.time_signature))
                except (Music21Exception, ZeroDivisionError) as exc:
                    logger.warning(
                        "Time signature '%s' not understood by music21, omitting: %s",
                        measure.time_signature,
                        exc,
                    )

            for item in measure.notes:
                quarter_length = float(item.duration * QUARTERS_PER_WHOLE)
                if not isinstance(item, PitchedNote):
                    m21_measure.append(note.Rest(quarterLength=quarter_length))
                    open_tie = None
                    continue

                name = self._pitch_name(item)
                m21_note = note.Note(name, quarterLength=quarter_length)
                if item.accidental == NATURAL:
                    m21_note.pitch.accidental = pitch.Accidental("natural")

                continues_tie = open_tie == name
                if continues_tie and item.tied:
                    m21_note.tie = tie.Tie("continue")
                elif continues_tie:
                    m21_note.tie = tie.Tie("stop")
                elif item.tied:
                    m21_note.tie = tie.Tie("start")
                open_tie = name if item.tied else None
                m21_measure.append(m21_note)

            part.append(m21_measure)

        m21_score.insert(0, part)
        return m21_score

    def _score_to_musicxml_bytes(self, score: Score) -> bytes:
        from music21.exceptions21 import Music21Exception
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        exporter = GeneralObjectExporter(self._score_to_music21(score))
        try:
            return exporter.parse()
        except Music21Exception as exc:
            raise ValueError(f"music21 could not write MusicXML: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, score: Score) -> str | bytes:
        """
        Render a Score in the selected format without touching the disk.

        Raises:
            ValueError: If rendering fails or the score cannot be engraved.
        """
        if self.output_format == "html":
            if not score.measures:
                raise ValueError("Score has no measures to engrave.")
            return self.renderer.render(
                title=self.title,
                musicxml_bytes=self._score_to_musicxml_bytes(score),
            )
        return self.renderer.render(title=self.title, layout=self.layout_engine.layout(score))

    def export(self, score: Score, output_path: str) -> None:
        """
        Render a Score and write it to disk.

        Raises:
            ValueError: If rendering fails or required data is missing.
            OSError: If the output file cannot be written.
        """
        content = self.render(score)

        if isinstance(content, bytes):
            with open(output_path, "wb") as fh:
                fh.write(content)
        else:
            with open(output_path, "w", encoding="utf-8") as fh:
                fh.write(content)

        logger.info("Wrote %s sheet to %s", self.output_format, output_path)
