"""Renderer implementations for sheet music output formats."""

from __future__ import annotations

import io
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, cast

from tunescript.sheet_models import (
    LIGHT_THEME,
    Circle,
    Curve,
    DrawPrimitive,
    Ellipse,
    Glyph,
    Line,
    ScoreLayout,
    Theme,
)

logger = logging.getLogger(__name__)

STROKE_WIDTH = 1


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _num(value: float) -> str:
    """Format a coordinate without a trailing '.0'."""
    return f"{value:g}"


def _hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Convert '#rgb' or '#rrggbb' to cairo's 0-1 channel floats."""
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Unsupported colour '{color}'. Use #rgb or #rrggbb.")
    r, g, b = (int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
    return r, g, b


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        layout: ScoreLayout | None = None,
        musicxml_bytes: bytes | None = None,
    ) -> str | bytes:
        """Render output into file content."""


class SvgRenderer(SheetRenderer):
    """Write a ScoreLayout as a standalone SVG document."""

    def __init__(self, theme: Theme = LIGHT_THEME) -> None:
        self.theme = theme

    @property
    def default_extension(self) -> str:
        return ".svg"

    def render(
        self,
        *,
        title: str,
        layout: ScoreLayout | None = None,
        musicxml_bytes: bytes | None = None,
    ) -> str:
        if layout is None:
            raise ValueError("layout is required for SVG rendering.")

        width, height = _num(layout.width), _num(layout.height)
        title_tag = f"  <title>{_escape_html(title)}</title>\n" if title else ""
        body = "\n".join(f"  {self.element(primitive)}" for primitive in layout.primitives)

        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}">\n'
            f"{title_tag}"
            f'  <rect width="{width}" height="{height}" fill="{self.theme.background}" />\n'
            f"{body}\n"
            "</svg>\n"
        )

    def element(self, primitive: DrawPrimitive) -> str:
        """Serialise one primitive to an SVG element string."""
        color = self.theme.color_for(primitive.kind)
        stroke = f'fill="none" stroke="{color}" stroke-width="{STROKE_WIDTH}"'
        css = f'class="{primitive.kind.replace("_", "-")}"'

        if isinstance(primitive, Line):
            return (
                f'<line {css} x1="{_num(primitive.x)}" y1="{_num(primitive.y)}" '
                f'x2="{_num(primitive.x2)}" y2="{_num(primitive.y2)}" {stroke} />'
            )
        if isinstance(primitive, Ellipse):
            paint = f'fill="{color}"' if primitive.filled else stroke
            return (
                f'<ellipse {css} cx="{_num(primitive.x)}" cy="{_num(primitive.y)}" '
                f'rx="{_num(primitive.rx)}" ry="{_num(primitive.ry)}" {paint} />'
            )
        if isinstance(primitive, Circle):
            return (
                f'<circle {css} cx="{_num(primitive.x)}" cy="{_num(primitive.y)}" '
                f'r="{_num(primitive.r)}" fill="{color}" />'
            )
        if isinstance(primitive, Curve):
            path = (
                f"M {_num(primitive.x)} {_num(primitive.y)} "
                f"C {_num(primitive.cx1)} {_num(primitive.cy1)}, "
                f"{_num(primitive.cx2)} {_num(primitive.cy2)}, "
                f"{_num(primitive.x2)} {_num(primitive.y2)}"
            )
            return f'<path {css} d="{path}" {stroke} />'
        if isinstance(primitive, Glyph):
            return (
                f'<text {css} x="{_num(primitive.x)}" y="{_num(primitive.y)}" '
                f'font-family="{primitive.font_family}" font-size="{primitive.font_size}" '
                f'fill="{color}">{_escape_html(primitive.text)}</text>'
            )
        raise ValueError(f"Unsupported primitive type: {type(primitive).__name__}")


class CanvasRenderer(SheetRenderer):
    """
    Paint a ScoreLayout onto a cairo pixel canvas and encode it as PNG.

    paint() accepts any cairo context, so the same drawing code serves
    image surfaces and on-screen widgets.
    """

    def __init__(self, theme: Theme = LIGHT_THEME, scale: float = 1.0) -> None:
        self.theme = theme
        self.scale = scale

    @property
    def default_extension(self) -> str:
        return ".png"

    def render(
        self,
        *,
        title: str,
        layout: ScoreLayout | None = None,
        musicxml_bytes: bytes | None = None,
    ) -> bytes:
        if layout is None:
            raise ValueError("layout is required for PNG rendering.")

        import cairo

        surface = cairo.ImageSurface(
            cairo.FORMAT_ARGB32,
            math.ceil(layout.width * self.scale),
            math.ceil(layout.height * self.scale),
        )
        ctx = cairo.Context(surface)
        ctx.scale(self.scale, self.scale)
        self.paint(ctx, layout)

        buffer = io.BytesIO()
        surface.write_to_png(buffer)
        png_bytes = buffer.getvalue()
        logger.info("Canvas rendering complete: %d primitives, %d bytes", len(layout.primitives), len(png_bytes))
        return png_bytes

    def paint(self, ctx: Any, layout: ScoreLayout) -> None:
        """Draw the background and every primitive onto a cairo context."""
        import cairo

        ctx.set_source_rgb(*_hex_to_rgb(self.theme.background))
        ctx.rectangle(0, 0, layout.width, layout.height)
        ctx.fill()
        ctx.set_line_width(STROKE_WIDTH)

        for primitive in layout.primitives:
            ctx.set_source_rgb(*_hex_to_rgb(self.theme.color_for(primitive.kind)))

            if isinstance(primitive, Line):
                ctx.move_to(primitive.x, primitive.y)
                ctx.line_to(primitive.x2, primitive.y2)
                ctx.stroke()
            elif isinstance(primitive, Ellipse):
                ctx.save()
                ctx.translate(primitive.x, primitive.y)
                ctx.scale(primitive.rx, primitive.ry)
                ctx.arc(0, 0, 1, 0, 2 * math.pi)
                ctx.restore()
                if primitive.filled:
                    ctx.fill()
                else:
                    ctx.stroke()
            elif isinstance(primitive, Circle):
                ctx.arc(primitive.x, primitive.y, primitive.r, 0, 2 * math.pi)
                ctx.fill()
            elif isinstance(primitive, Curve):
                ctx.move_to(primitive.x, primitive.y)
                ctx.curve_to(
                    primitive.cx1, primitive.cy1,
                    primitive.cx2, primitive.cy2,
                    primitive.x2, primitive.y2,
                )
                ctx.stroke()
            elif isinstance(primitive, Glyph):
                ctx.select_font_face(primitive.font_family, cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL)
                ctx.set_font_size(primitive.font_size)
                ctx.move_to(primitive.x, primitive.y)
                ctx.show_text(primitive.text)
                ctx.new_path()
            else:
                raise ValueError(f"Unsupported primitive type: {type(primitive).__name__}")


class VerovioHtmlRenderer(SheetRenderer):
    """Engrave MusicXML bytes into a self-contained HTML document with inline SVG."""

    # Verovio A4 layout constants (verovio abstract units; ~1 unit ≈ 0.1 mm)
    _PAGE_HEIGHT: int = 2970  # A4 portrait height
    _PAGE_WIDTH: int = 2100  # A4 portrait width
    _SCALE: int = 40
    _PAGE_MARGIN: int = 100

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        layout: ScoreLayout | None = None,
        musicxml_bytes: bytes | None = None,
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        svgs = self.render_svgs(musicxml_bytes)
        return self.build_html(title, svgs)

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Engrave a MusicXML document to a list of SVG page strings via verovio.

        Raises:
            ValueError: If verovio cannot load the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageHeight": self._PAGE_HEIGHT,
                "pageWidth": self._PAGE_WIDTH,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
            }
        )

        if not tk.loadData(musicxml_bytes.decode("utf-8")):
            raise ValueError("verovio could not load the MusicXML data.")

        page_count: int = tk.getPageCount()
        logger.info("Engraving %d page(s) with verovio", page_count)
        return [self._render_page_svg(tk, page_no) for page_no in range(1, page_count + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        """Render one page; older verovio bindings only take positional args."""
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            return cast(str, toolkit.renderToSVG(page_no))

    def build_html(self, title: str, svgs: list[str]) -> str:
        """
        Wrap SVG pages in a printable HTML document, one ``.page`` div each.
        """
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        pages = "\n".join(f'  <div class="page">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{title_safe}</title>
  <style>
    body {{ font-family: Georgia, serif; background: #f4f4f4; margin: 0; padding: 2rem; }}
    h1 {{ text-align: center; font-size: 1.5rem; color: #222; }}
    .page {{ background: #fff; margin: 0 auto 2rem; max-width: 860px; padding: 1rem; }}
    .page svg {{ display: block; width: 100%; height: auto; }}
    @media print {{
      body {{ background: #fff; padding: 0; }}
      .page {{ margin: 0; padding: 0; max-width: 100%; page-break-after: always; }}
      .page:last-child {{ page-break-after: avoid; }}
    }}
  </style>
</head>
<body>
{heading}{pages}
</body>
</html>"""
