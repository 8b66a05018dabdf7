"""Data models for sheet music rendering outputs."""

from dataclasses import dataclass

# ── Primitive kinds ──────────────────────────────────────────────────────────
STAFF_LINE = "staff_line"
BAR_LINE = "bar_line"
CLEF = "clef"
TEMPO_LABEL = "tempo_label"
KEY_LABEL = "key_label"
TIME_SIGNATURE = "time_signature"
NOTEHEAD = "notehead"
STEM = "stem"
FLAG = "flag"
DOT = "dot"
TIE = "tie"
ACCIDENTAL = "accidental"
REST = "rest"

# ── Colour roles ─────────────────────────────────────────────────────────────
ROLE_LINE = "line"
ROLE_NOTE = "note"
ROLE_TEXT = "text"

#: Which theme colour each primitive kind is drawn with.
ROLE_FOR_KIND: dict[str, str] = {
    STAFF_LINE: ROLE_LINE,
    BAR_LINE: ROLE_LINE,
    CLEF: ROLE_NOTE,
    TEMPO_LABEL: ROLE_TEXT,
    KEY_LABEL: ROLE_TEXT,
    TIME_SIGNATURE: ROLE_NOTE,
    NOTEHEAD: ROLE_NOTE,
    STEM: ROLE_NOTE,
    FLAG: ROLE_NOTE,
    DOT: ROLE_NOTE,
    TIE: ROLE_NOTE,
    ACCIDENTAL: ROLE_NOTE,
    REST: ROLE_NOTE,
}


@dataclass(frozen=True)
class DrawPrimitive:
    """Base of every drawing command: what it depicts and its anchor point."""

    kind: str
    x: float
    y: float


@dataclass(frozen=True)
class Line(DrawPrimitive):
    """Straight stroke from (x, y) to (x2, y2)."""

    x2: float
    y2: float


@dataclass(frozen=True)
class Ellipse(DrawPrimitive):
    """Axis-aligned ellipse centred on (x, y); stroked when not filled."""

    rx: float
    ry: float
    filled: bool


@dataclass(frozen=True)
class Circle(DrawPrimitive):
    """Filled circle centred on (x, y)."""

    r: float


@dataclass(frozen=True)
class Curve(DrawPrimitive):
    """Stroked cubic Bézier from (x, y) through two control points to (x2, y2)."""

    cx1: float
    cy1: float
    cx2: float
    cy2: float
    x2: float
    y2: float


@dataclass(frozen=True)
class Glyph(DrawPrimitive):
    """Text or music symbol with its baseline starting at (x, y)."""

    text: str
    font_size: int
    font_family: str


@dataclass(frozen=True)
class ScoreLayout:
    """Canvas size plus the ordered drawing commands for one score."""

    width: float
    height: float
    primitives: tuple[DrawPrimitive, ...]

    def of_kind(self, kind: str) -> list[DrawPrimitive]:
        return [primitive for primitive in self.primitives if primitive.kind == kind]


@dataclass(frozen=True)
class Theme:
    """Colours used by the renderers, as CSS hex strings."""

    line: str
    note: str
    text: str
    background: str

    def color_for(self, kind: str) -> str:
        role = ROLE_FOR_KIND.get(kind, ROLE_NOTE)
        return getattr(self, role)


LIGHT_THEME = Theme(line="#333", note="#333", text="#666", background="#fff")
DARK_THEME = Theme(line="#888", note="#fff", text="#aaa", background="#1a1a1a")

THEMES: dict[str, Theme] = {"light": LIGHT_THEME, "dark": DARK_THEME}
