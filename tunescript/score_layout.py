"""LayoutEngine: Places a Score on a single treble staff as drawing primitives.

The engine decides every coordinate. Renderers only replay the primitives,
so the SVG and the pixel canvas output of a score are geometrically
identical.
"""

from fractions import Fraction

from tunescript.notation import FLAT, NATURAL, SHARP, Measure, Note, PitchedNote, Score
from tunescript.sheet_models import (
    ACCIDENTAL,
    BAR_LINE,
    CLEF,
    DOT,
    FLAG,
    KEY_LABEL,
    NOTEHEAD,
    REST,
    STAFF_LINE,
    STEM,
    TEMPO_LABEL,
    TIE,
    TIME_SIGNATURE,
    Circle,
    Curve,
    DrawPrimitive,
    Ellipse,
    Glyph,
    Line,
    ScoreLayout,
)

#: Natural letter → staff steps relative to C (each step is staff_height / 8).
STAFF_OFFSETS: dict[str, int] = {"C": 0, "D": -1, "E": -2, "F": -3, "G": -4, "A": -5, "B": -6}

TREBLE_CLEF_GLYPH = "\U0001D11E"
WHOLE_REST_GLYPH = "\U0001D13B"
HALF_REST_GLYPH = "\U0001D13C"
QUARTER_REST_GLYPH = "\U0001D13D"
EIGHTH_REST_GLYPH = "\U0001D13E"
QUARTER_NOTE_GLYPH = "♩"

ACCIDENTAL_GLYPHS: dict[str, str] = {SHARP: "♯", FLAT: "♭", NATURAL: "♮"}

HALF = Fraction(1, 2)
EIGHTH = Fraction(1, 8)


def rest_glyph(duration: Fraction) -> str:
    """Pick the rest symbol for a duration given in whole notes."""
    if duration >= 1:
        return WHOLE_REST_GLYPH
    if duration >= HALF:
        return HALF_REST_GLYPH
    if duration <= EIGHTH:
        return EIGHTH_REST_GLYPH
    return QUARTER_REST_GLYPH


class LayoutEngine:
    """
    Computes staff geometry for a Score.

    Horizontal placement
    --------------------
    A cursor starts at ``left_margin``. A time signature advances it by
    ``time_signature_width``; each note by ``note_width`` plus
    ``modifier_width`` for an accidental and again for a dot. Every
    measure except the last ends with a bar line followed by
    ``bar_spacing``.

    Vertical placement
    ------------------
    ``y = middle_line + offset × staff_height/8 − (octave − 4) × staff_height/2``
    where offset is the letter's entry in STAFF_OFFSETS, so one octave up
    moves a note by exactly half the staff height.
    """

    WIDTH = 800
    HEIGHT = 200
    STAFF_TOP = 100
    STAFF_HEIGHT = 40
    STAFF_INSET = 20
    LEFT_MARGIN = 60
    NOTE_WIDTH = 30
    TIME_SIGNATURE_WIDTH = 20
    MODIFIER_WIDTH = 5
    BAR_SPACING = 20

    NOTEHEAD_RX = 8
    NOTEHEAD_RY = 6
    STEM_OFFSET = 6
    STEM_LENGTH = 30
    DOT_OFFSET = 14
    DOT_RADIUS = 2
    ACCIDENTAL_OFFSET = 15

    def __init__(
        self,
        width: int = WIDTH,
        height: int = HEIGHT,
        staff_top: int = STAFF_TOP,
        staff_height: int = STAFF_HEIGHT,
        note_width: int = NOTE_WIDTH,
    ) -> None:
        """
        Args:
            width:        Minimum canvas width; grows to fit long scores.
            height:       Canvas height.
            staff_top:    y of the top staff line.
            staff_height: Distance between the top and bottom staff lines.
            note_width:   Horizontal advance per note.
        """
        self.width = width
        self.height = height
        self.staff_top = staff_top
        self.staff_height = staff_height
        self.note_width = note_width

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    @property
    def middle_line_y(self) -> float:
        return self.staff_top + 2 * (self.staff_height / 4)

    def note_y(self, note: PitchedNote) -> float:
        """Vertical centre of a notehead."""
        offset = STAFF_OFFSETS.get(note.letter, 0)
        return (
            self.middle_line_y
            + offset * (self.staff_height / 8)
            - (note.octave - 4) * (self.staff_height / 2)
        )

    def note_advance(self, note: Note) -> float:
        accidental = isinstance(note, PitchedNote) and note.accidental is not None
        return (
            self.note_width
            + (self.MODIFIER_WIDTH if accidental else 0)
            + (self.MODIFIER_WIDTH if note.dotted else 0)
        )

    # ------------------------------------------------------------------
    # Primitive builders
    # ------------------------------------------------------------------

    def _header(self, score: Score) -> list[DrawPrimitive]:
        primitives: list[DrawPrimitive] = []
        label_y = self.staff_top - 20

        primitives.append(
            Glyph(CLEF, 30, self.staff_top + 16, text=TREBLE_CLEF_GLYPH, font_size=40, font_family="serif")
        )
        primitives.append(
            Glyph(
                TEMPO_LABEL, 25, label_y,
                text=f"{QUARTER_NOTE_GLYPH} = {score.tempo}", font_size=12, font_family="sans-serif",
            )
        )
        if score.key:
            primitives.append(
                Glyph(KEY_LABEL, 100, label_y, text=f"Key: {score.key}", font_size=12, font_family="sans-serif")
            )
        return primitives

    def _staff_lines(self, width: float) -> list[DrawPrimitive]:
        lines: list[DrawPrimitive] = []
        for i in range(5):
            y = self.staff_top + i * (self.staff_height / 4)
            lines.append(Line(STAFF_LINE, self.STAFF_INSET, y, x2=width - self.STAFF_INSET, y2=y))
        return lines

    def _time_signature(self, measure: Measure, x: float) -> list[DrawPrimitive]:
        signature = measure.time_signature
        if signature is None:
            return []
        return [
            Glyph(TIME_SIGNATURE, x, self.staff_top + 8,
                  text=str(signature.numerator), font_size=20, font_family="serif"),
            Glyph(TIME_SIGNATURE, x, self.staff_top + 24,
                  text=str(signature.denominator), font_size=20, font_family="serif"),
        ]

    def _rest(self, note: Note, x: float) -> list[DrawPrimitive]:
        return [
            Glyph(REST, x, self.staff_top + 16, text=rest_glyph(note.duration), font_size=20, font_family="serif")
        ]

    def _pitched(self, note: PitchedNote, x: float) -> list[DrawPrimitive]:
        y = self.note_y(note)
        duration = note.duration
        stem_x = x + self.STEM_OFFSET
        stem_top = y - self.STEM_LENGTH

        primitives: list[DrawPrimitive] = [
            Ellipse(NOTEHEAD, x, y, rx=self.NOTEHEAD_RX, ry=self.NOTEHEAD_RY, filled=duration < HALF)
        ]
        if duration < 1:
            primitives.append(Line(STEM, stem_x, y, x2=stem_x, y2=stem_top))
        if duration <= EIGHTH:
            primitives.append(
                Curve(FLAG, stem_x, stem_top,
                      cx1=stem_x, cy1=stem_top, cx2=x + 20, cy2=y - 25, x2=x + 20, y2=y - 15)
            )
        if note.dotted:
            primitives.append(Circle(DOT, x + self.DOT_OFFSET, y, r=self.DOT_RADIUS))
        if note.tied:
            primitives.append(
                Curve(TIE, x + 10, y - 10, cx1=x + 20, cy1=y - 20, cx2=x + 30, cy2=y - 20, x2=x + 40, y2=y - 10)
            )
        if note.accidental in ACCIDENTAL_GLYPHS:
            primitives.append(
                Glyph(ACCIDENTAL, x - self.ACCIDENTAL_OFFSET, y + 5,
                      text=ACCIDENTAL_GLYPHS[note.accidental], font_size=16, font_family="serif")
            )
        return primitives

    def _bar_line(self, x: float) -> DrawPrimitive:
        return Line(BAR_LINE, x, self.staff_top, x2=x, y2=self.staff_top + self.staff_height)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def layout(self, score: Score) -> ScoreLayout:
        """
        Lay out a Score.

        Args:
            score: Parsed score. Not modified.

        Returns:
            ScoreLayout whose primitives are ordered: staff lines, clef,
            tempo and key labels, then each measure's contents in sequence.
        """
        body: list[DrawPrimitive] = []
        x: float = self.LEFT_MARGIN
        last_index = len(score.measures) - 1

        for index, measure in enumerate(score.measures):
            if measure.time_signature is not None:
                body.extend(self._time_signature(measure, x))
                x += self.TIME_SIGNATURE_WIDTH

            for note in measure.notes:
                if isinstance(note, PitchedNote):
                    body.extend(self._pitched(note, x))
                else:
                    body.extend(self._rest(note, x))
                x += self.note_advance(note)

            if index < last_index:
                body.append(self._bar_line(x))
                x += self.BAR_SPACING

        width = max(self.width, x + self.STAFF_INSET)
        primitives = self._staff_lines(width) + self._header(score) + body
        return ScoreLayout(width=width, height=self.height, primitives=tuple(primitives))
