"""Software rendering into the double-buffered dumb buffers of a display.

A :class:`Drm2dDisplay` keeps two XRGB32 render buffers. Drawing always
goes to the back buffer, the one not being scanned out, and :meth:`swap`
exchanges the two.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Iterable, Optional, Sequence, Tuple

from kmstext.text import TextError

__all__ = [
    "PixelFormat",
    "VideoBuffer",
    "BlendRequest",
    "RenderBuffer",
    "Drm2dDisplay",
]


class PixelFormat(IntFlag):
    """Pixel layouts a video buffer may use."""

    GREY = 1 << 0
    XRGB32 = 1 << 1
    RGB16 = 1 << 2


_BYTES_PER_PIXEL = {
    PixelFormat.GREY: 1,
    PixelFormat.XRGB32: 4,
    PixelFormat.RGB16: 2,
}


@dataclass
class VideoBuffer:
    """A rectangle of pixels; rows start ``stride`` bytes apart."""

    width: int
    height: int
    stride: int
    format: PixelFormat
    data: bytes = b""


@dataclass
class BlendRequest:
    """Blend a greyscale ``buf`` at (``x``, ``y``) between two colours.

    A request without ``buf`` is skipped.
    """

    buf: Optional[VideoBuffer] = None
    x: int = 0
    y: int = 0
    fr: int = 0
    fg: int = 0
    fb: int = 0
    br: int = 0
    bg: int = 0
    bb: int = 0


@dataclass
class RenderBuffer:
    """One XRGB32 frame buffer of a display."""

    stride: int
    data: bytearray = field(default_factory=bytearray)

    @property
    def size(self) -> int:
        """Size of the buffer in bytes."""
        return len(self.data)


def _pack(r: int, g: int, b: int) -> bytes:
    value = ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)
    return value.to_bytes(4, "little")


def _clip(pos: int, extent: int, limit: int) -> int:
    if pos < 0 or extent < 0 or pos >= limit:
        raise TextError(errno.EINVAL, "rectangle lies outside the display")
    return min(extent, limit - pos)


def _check_data(buf: VideoBuffer, width: int, height: int) -> memoryview:
    bpp = _BYTES_PER_PIXEL[PixelFormat(buf.format)]
    data = memoryview(bytes(buf.data))
    if width and height:
        needed = (height - 1) * buf.stride + width * bpp
        if len(data) < needed:
            raise TextError(errno.EINVAL, "buffer holds too little data")
    return data


def _blend_channel(alpha: int, fore: int, back: int) -> int:
    # Division by 255 without dividing: t += 0x80; t = (t + (t >> 8)) >> 8.
    t = fore * alpha + back * (255 - alpha) + 0x80
    return (t + (t >> 8)) >> 8


def _blend_row(alphas: Iterable[int], fg: Tuple[int, int, int],
               bg: Tuple[int, int, int]) -> bytes:
    fore = _pack(*fg)
    back = _pack(*bg)
    pixels = []
    for alpha in alphas:
        if alpha == 0:
            pixels.append(back)
        elif alpha == 255:
            pixels.append(fore)
        else:
            pixels.append(_pack(*(_blend_channel(alpha, f, b)
                                  for f, b in zip(fg, bg))))
    return b"".join(pixels)


class Drm2dDisplay:
    """A display of ``width`` x ``height`` pixels with two render buffers."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError("display size must be positive")
        self.width = width
        self.height = height
        stride = width * 4
        self._buffers = (
            RenderBuffer(stride, bytearray(stride * height)),
            RenderBuffer(stride, bytearray(stride * height)),
        )
        self._current = 0

    def back_buffer(self) -> RenderBuffer:
        """Return the buffer that drawing goes to."""
        return self._buffers[self._current ^ 1]

    def swap(self) -> None:
        """Make the back buffer the front buffer and vice versa."""
        self._current ^= 1

    def blit(self, buf: VideoBuffer, x: int, y: int) -> None:
        """Copy an XRGB32 buffer to (``x``, ``y``), clipped to the display."""
        if buf is None or buf.format != PixelFormat.XRGB32:
            raise TextError(errno.EINVAL, "blit needs an XRGB32 buffer")
        rb = self.back_buffer()
        width = _clip(x, buf.width, self.width)
        height = _clip(y, buf.height, self.height)
        src = _check_data(buf, width, height)
        row_bytes = 4 * width
        for row in range(height):
            dst_off = (y + row) * rb.stride + x * 4
            src_off = row * buf.stride
            rb.data[dst_off:dst_off + row_bytes] = \
                src[src_off:src_off + row_bytes]

    def fake_blend(self, buf: VideoBuffer, x: int, y: int,
                   fr: int, fg: int, fb: int,
                   br: int, bg: int, bb: int) -> None:
        """Blend a single greyscale buffer; see :meth:`fake_blendv`."""
        self.fake_blendv([BlendRequest(buf, x, y, fr, fg, fb, br, bg, bb)])

    def fake_blendv(self, requests: Sequence[BlendRequest]) -> None:
        """Blend each request's greyscale buffer between its two colours.

        Requests are handled in order; one that fails stops the rest.
        """
        if requests is None:
            raise TextError(errno.EINVAL, "no blend requests given")
        rb = self.back_buffer()
        for req in requests:
            buf = req.buf
            if buf is None:
                continue
            if buf.format != PixelFormat.GREY:
                raise TextError(errno.EOPNOTSUPP,
                                "blending needs a greyscale buffer")
            width = _clip(req.x, buf.width, self.width)
            height = _clip(req.y, buf.height, self.height)
            src = _check_data(buf, width, height)
            fore = (req.fr, req.fg, req.fb)
            back = (req.br, req.bg, req.bb)
            for row in range(height):
                src_off = row * buf.stride
                dst_off = (req.y + row) * rb.stride + req.x * 4
                rb.data[dst_off:dst_off + 4 * width] = _blend_row(
                    src[src_off:src_off + width], fore, back)

    def fill(self, r: int, g: int, b: int, x: int, y: int,
             width: int, height: int) -> None:
        """Fill a rectangle with one colour, clipped to the display."""
        rb = self.back_buffer()
        width = _clip(x, width, self.width)
        height = _clip(y, height, self.height)
        row = _pack(r, g, b) * width
        for line in range(y, y + height):
            off = line * rb.stride + x * 4
            rb.data[off:off + len(row)] = row

    def pixel(self, x: int, y: int) -> int:
        """Return the XRGB32 value at (``x``, ``y``) of the back buffer."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError("pixel outside the display")
        rb = self.back_buffer()
        off = y * rb.stride + x * 4
        return int.from_bytes(rb.data[off:off + 4], "little")