"""Text renderer front-end dispatching to pluggable backends.

A :class:`Text` object draws console cells through one backend, which is
picked by name from a :class:`TextRegistry`. The first backend registered is
the default and the fallback when a requested backend cannot be used.
"""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from kmstext.log import Log, Severity

__all__ = [
    "TextError",
    "ScreenAttr",
    "TextBackend",
    "TextRegistry",
    "Text",
    "draw_cb",
]

_FILE = os.path.basename(__file__)
_LOG = Log()


def _log(severity: Severity, message: str, func: str) -> None:
    _LOG.submit(severity, message, file=_FILE, line=0, func=func,
                subsystem="text")


class TextError(OSError):
    """A text-renderer failure carrying an ``errno`` code."""


@dataclass
class ScreenAttr:
    """Colours and style of one console cell."""

    fr: int = 255
    fg: int = 255
    fb: int = 255
    br: int = 0
    bg: int = 0
    bb: int = 0
    bold: bool = False
    underline: bool = False
    italic: bool = False
    inverse: bool = False
    blink: bool = False
    protect: bool = False


class TextBackend:
    """Base class of renderer backends.

    Every hook except :meth:`draw` is optional and does nothing here.
    Hooks signal failure by raising, preferably :class:`TextError`.
    """

    name: str = ""

    def init(self, text: "Text") -> None:
        """Prepare private state in ``text.data`` for a new renderer."""

    def destroy(self, text: "Text") -> None:
        """Release what :meth:`init` created."""

    def set(self, text: "Text") -> None:
        """Adopt the font and display of ``text`` and set its cols/rows."""

    def unset(self, text: "Text") -> None:
        """Release what :meth:`set` created."""

    def prepare(self, text: "Text") -> None:
        """Start a rendering round."""

    def draw(self, text: "Text", glyph_id, ch, width, posx, posy, attr):
        """Draw one glyph at a console position; subclasses override this."""
        raise TextError(errno.EOPNOTSUPP,
                        f"backend {self.name!r} cannot draw")

    def render(self, text: "Text") -> None:
        """Finish a rendering round."""

    def abort(self, text: "Text") -> None:
        """Abandon a rendering round."""


class TextRegistry:
    """Named text backends in registration order."""

    def __init__(self):
        self._backends: Dict[str, TextBackend] = {}

    def register(self, backend: TextBackend) -> None:
        """Add ``backend`` under its name; the first one is the default."""
        if backend is None:
            raise TextError(errno.EINVAL, "no backend given")
        name = backend.name
        if not isinstance(name, str) or not name:
            raise TextError(errno.EINVAL, "backend has no valid name")
        if name in self._backends:
            _log(Severity.ERROR,
                 f"cannot register text backend {name}: {-errno.EALREADY}",
                 "register")
            raise TextError(errno.EALREADY,
                            f"backend {name!r} already registered")
        self._backends[name] = backend

    def unregister(self, name: str) -> None:
        """Remove the backend called ``name``; unknown names are ignored."""
        self._backends.pop(name, None)

    def find(self, name: str) -> Optional[TextBackend]:
        """Return the backend called ``name`` or ``None``."""
        return self._backends.get(name)

    def first(self) -> Optional[TextBackend]:
        """Return the default (first registered) backend or ``None``."""
        return next(iter(self._backends.values()), None)

    def __len__(self) -> int:
        return len(self._backends)

    def __contains__(self, name) -> bool:
        return name in self._backends


class Text:
    """A text renderer bound to one backend."""

    def __init__(self, registry: TextRegistry, backend: Optional[str] = None):
        self.backend: Optional[TextBackend] = None
        self.data: Any = None
        self.font: Any = None
        self.bold_font: Any = None
        self.display: Any = None
        self.cols = 0
        self.rows = 0
        self.rendering = False
        self._closed = False

        try:
            self._attach(registry, backend)
        except Exception:
            if backend is None:
                raise
            self._attach(registry, None)

    def _attach(self, registry: TextRegistry, name: Optional[str]) -> None:
        self.data = None
        self.font = self.bold_font = self.display = None
        self.cols = self.rows = 0
        self.rendering = False

        label = name if name is not None else "<default>"
        found = registry.find(name) if name is not None else registry.first()
        if found is None:
            _log(Severity.ERROR, f"requested backend '{label}' not found",
                 "new_text")
            raise TextError(errno.ENOENT, f"backend {label!r} not found")
        try:
            found.init(self)
        except Exception:
            _log(Severity.WARNING,
                 f"backend {label} cannot create renderer", "new_text")
            raise
        self.backend = found

    def _check_open(self) -> TextBackend:
        if self._closed or self.backend is None:
            raise TextError(errno.EINVAL, "text renderer is closed")
        return self.backend

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    def close(self) -> None:
        """Unset the renderer and release the backend state."""
        if self._closed:
            return
        self.unset()
        self._closed = True
        if self.backend is not None:
            self.backend.destroy(self)

    def __enter__(self) -> "Text":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def set(self, font, bold_font, display) -> None:
        """Use ``font`` (and ``bold_font``, defaulting to it) on ``display``.

        On failure no font or display stays set.
        """
        backend = self._check_open()
        if font is None or display is None:
            raise TextError(errno.EINVAL, "font and display are required")
        if bold_font is None:
            bold_font = font

        self.unset()
        self.font = font
        self.bold_font = bold_font
        self.display = display
        try:
            backend.set(self)
        except Exception:
            self.font = None
            self.bold_font = None
            self.display = None
            raise

    def unset(self) -> None:
        """Drop the font and display; a no-op when nothing is set."""
        if self.display is None or self.font is None:
            return
        if self.backend is not None:
            self.backend.unset(self)
        self.font = None
        self.bold_font = None
        self.display = None
        self.cols = 0
        self.rows = 0
        self.rendering = False

    def prepare(self) -> None:
        """Start a rendering round."""
        backend = self._check_open()
        if self.font is None or self.display is None:
            raise TextError(errno.EINVAL, "renderer has no font or display")
        self.rendering = True
        try:
            backend.prepare(self)
        except Exception:
            self.rendering = False
            raise

    def draw(self, glyph_id, ch: Sequence[int], width, posx, posy, attr):
        """Draw the codepoints ``ch`` at console cell (``posx``, ``posy``)."""
        if self._closed or self.backend is None or not self.rendering:
            raise TextError(errno.EINVAL, "not rendering")
        if posx >= self.cols or posy >= self.rows or attr is None:
            raise TextError(errno.EINVAL, "invalid cell or attributes")
        return self.backend.draw(self, glyph_id, ch, width, posx, posy, attr)

    def render(self) -> None:
        """Finish a rendering round."""
        if self._closed or self.backend is None or not self.rendering:
            raise TextError(errno.EINVAL, "not rendering")
        try:
            self.backend.render(self)
        finally:
            self.rendering = False

    def abort(self) -> None:
        """Abandon a rendering round, if one is running."""
        if self.backend is None or not self.rendering:
            return
        self.backend.abort(self)
        self.rendering = False


def draw_cb(screen, glyph_id, ch, width, posx, posy, attr, age, text):
    """Screen draw callback forwarding a cell to ``text``."""
    return text.draw(glyph_id, ch, width, posx, posy, attr)