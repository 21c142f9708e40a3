# kmstext

A small pure-Python library for drawing a text console into a framebuffer
held in memory. It has no dependencies outside the standard library.

## What is in it

- `kmstext.text` is the renderer front end. You register backends in a
  `TextRegistry`. A `Text` object uses the backend named when it is created.
  When no name is given, or the named backend is missing or fails in its
  `init`, it uses the first backend registered. Each frame runs as
  `prepare()`, then any number of `draw()` calls, then `render()`; `abort()`
  stops a frame part way. `TextBackend` is the base class for backends, and
  `ScreenAttr` holds the colours and style of one cell. Failures raise
  `TextError`, an `OSError` that carries an `errno` code.
- `kmstext.bblit.BblitBackend` (named `"bblit"`) blends each glyph onto the
  display as soon as it is drawn.
- `kmstext.bbulk.BbulkBackend` (named `"bbulk"`) keeps one `BlendRequest` per
  cell and blends all of them when `render()` is called.
- `kmstext.drm2d.Drm2dDisplay` is a double-buffered XRGB32 framebuffer in
  memory. Drawing goes to the back buffer, and `swap()` exchanges the two
  buffers. It provides:
  - `blit()` for XRGB32 `VideoBuffer`s;
  - `fake_blend()` and `fake_blendv()` for blending greyscale buffers between
    a foreground and a background colour;
  - `fill()` for solid rectangles;
  - `pixel()` for reading a back-buffer pixel.

  Rectangles are clipped to the display. A rectangle that starts outside the
  display raises `TextError`.
- `kmstext.log.Log` is a thread-safe logger. It has per-severity
  `LogConfig`s and runtime `LogFilter`s that match on file, line, function
  and subsystem.
- `kmstext.dlist` provides `DList` and `DListNode`, a circular doubly linked
  list. Nodes may be unlinked while the list is being iterated.
- `kmstext.hook.Hook` is an ordered callback list. Entries may be added or
  removed from inside a callback. Oneshot entries are removed once they
  have been called.
- `kmstext.ring.Ring` is a FIFO of bytes stored in chunks of 512 bytes.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

The backends need a font object. Such an object has an `attr` with
`width`, `height`, `underline` and `italic`, and the methods
`render(glyph_id, ch)`, `render_empty()` and `render_inval()`. Each of these
methods returns an object whose `buf` is a greyscale `VideoBuffer`. The
package has no font of its own, so the example below uses a minimal one that
draws solid blocks:

```python
from dataclasses import dataclass

from kmstext.bbulk import BbulkBackend
from kmstext.drm2d import Drm2dDisplay, PixelFormat, VideoBuffer
from kmstext.text import ScreenAttr, Text, TextRegistry


@dataclass
class FontAttr:
    width: int = 8
    height: int = 16
    underline: bool = False
    italic: bool = False


@dataclass
class Glyph:
    buf: VideoBuffer


class BlockFont:
    def __init__(self):
        self.attr = FontAttr()

    def _glyph(self, level):
        w, h = self.attr.width, self.attr.height
        return Glyph(VideoBuffer(w, h, w, PixelFormat.GREY, bytes([level]) * (w * h)))

    def render(self, glyph_id, ch):
        return self._glyph(255)

    def render_empty(self):
        return self._glyph(0)

    def render_inval(self):
        return self._glyph(128)


registry = TextRegistry()
registry.register(BbulkBackend())

display = Drm2dDisplay(640, 480)
with Text(registry, "bbulk") as text:
    text.set(BlockFont(), None, display)   # 80 x 30 cells
    text.prepare()
    text.draw(1, [ord("A")], 1, 0, 0, ScreenAttr())
    text.render()

assert display.pixel(0, 0) == 0xFFFFFF
```

Calling `draw()` without a preceding `prepare()`, or with a cell outside
`text.cols` x `text.rows`, raises `TextError`.

## Logging

```python
import sys
from kmstext.log import Log, LogConfig, LogFilter, Severity

log = Log(sys.stderr)
log.submit(Severity.NOTICE, "hello", file="main.py", line=1,
           func="main", subsystem="app")
# [0000.000000] NOTICE: app: hello (main() in main.py:1)

# log DEBUG and INFO messages of the "app" subsystem
handle = log.add_filter(LogFilter(subsystem="app"),
                        LogConfig.all(1, 1, 2, 2, 2, 2, 2, 2))
log.remove_filter(handle)
```

Each line begins with the time elapsed since the first message. If the
message does not end in a newline, the function, file and line are
appended. In a `LogConfig`, the value 0 discards a severity, 1 logs it and 2
defers to the filters and then to the global config. By default the global
config discards DEBUG and INFO. `set_file(path)` appends output to a file,
and `set_file(None)` goes back to the stream.

## What it does not do

- It does not use real display hardware. `Drm2dDisplay` is only a buffer in
  memory, and nothing scans it out to a screen.
- It has no font rasteriser. Glyphs come from the font object you pass in.
- It has no OpenGL or other accelerated backends. It has no terminal
  emulator, no input handling and no command-line program.