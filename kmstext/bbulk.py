"""Text backend that collects blend requests and draws them in one go."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from kmstext.bblit import _colours, _render_glyph, _screen_size
from kmstext.drm2d import BlendRequest
from kmstext.text import TextBackend

__all__ = ["BbulkBackend"]


@dataclass
class _BulkState:
    requests: Optional[List[BlendRequest]] = None


class BbulkBackend(TextBackend):
    """Keeps one blend request per cell and pushes them all on render."""

    name = "bbulk"

    def init(self, text) -> None:
        """Attach the request store to ``text.data``."""
        text.data = _BulkState()

    def destroy(self, text) -> None:
        """Drop the request store."""
        text.data = None

    def set(self, text) -> None:
        """Compute the console size and lay out one request per cell."""
        state = text.data
        state.requests = None
        width, height = _screen_size(text.display)
        fw = text.font.attr.width
        fh = text.font.attr.height
        text.cols = width // fw
        text.rows = height // fh
        state.requests = [
            BlendRequest(x=col * fw, y=row * fh)
            for row in range(text.rows)
            for col in range(text.cols)
        ]

    def unset(self, text) -> None:
        """Drop the per-cell requests."""
        text.data.requests = None

    def draw(self, text, glyph_id, ch, width, posx, posy, attr) -> None:
        """Store the glyph and colours for cell (``posx``, ``posy``)."""
        req = text.data.requests[posy * text.cols + posx]
        if not width:
            req.buf = None
            return
        glyph = _render_glyph(text, glyph_id, ch, attr)
        fore, back = _colours(attr)
        req.buf = glyph.buf
        req.fr, req.fg, req.fb = fore
        req.br, req.bg, req.bb = back

    def render(self, text) -> None:
        """Blend every stored request onto the display."""
        text.display.fake_blendv(text.data.requests)