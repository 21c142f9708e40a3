"""Text backend that blits every glyph straight into the display."""

from __future__ import annotations

import errno
from typing import Tuple

from kmstext.text import TextBackend, TextError

__all__ = ["BblitBackend"]

# Fonts used by these backends provide ``attr`` (width, height, underline,
# italic) and ``render(glyph_id, ch)``, ``render_empty()`` and
# ``render_inval()``, each returning a glyph whose ``buf`` is a greyscale
# video buffer.


def _screen_size(display) -> Tuple[int, int]:
    width = getattr(display, "width", None)
    height = getattr(display, "height", None)
    if not width or not height:
        raise TextError(errno.EINVAL, "display has no current mode")
    return width, height


def _render_glyph(text, glyph_id, ch, attr):
    font = text.bold_font if attr.bold else text.font
    font.attr.underline = bool(attr.underline)
    font.attr.italic = bool(attr.italic)
    try:
        if ch:
            return font.render(glyph_id, ch)
        return font.render_empty()
    except Exception:
        return font.render_inval()


def _colours(attr):
    fore = (attr.fr, attr.fg, attr.fb)
    back = (attr.br, attr.bg, attr.bb)
    if attr.inverse:
        return back, fore
    return fore, back


class BblitBackend(TextBackend):
    """Draws each glyph immediately with a blend onto the display."""

    name = "bblit"

    def set(self, text) -> None:
        """Compute the console size from the display and font."""
        width, height = _screen_size(text.display)
        text.cols = width // text.font.attr.width
        text.rows = height // text.font.attr.height

    def draw(self, text, glyph_id, ch, width, posx, posy, attr) -> None:
        """Blend the glyph for ``ch`` into the cell (``posx``, ``posy``)."""
        if not width:
            return
        glyph = _render_glyph(text, glyph_id, ch, attr)
        fore, back = _colours(attr)
        text.display.fake_blend(
            glyph.buf,
            posx * text.font.attr.width,
            posy * text.font.attr.height,
            *fore, *back,
        )