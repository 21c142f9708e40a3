"""A byte queue stored in fixed-size chunks."""

from __future__ import annotations

from collections import deque
from typing import Deque

__all__ = ["Ring", "RING_SIZE"]

RING_SIZE = 512


class Ring:
    """FIFO of bytes kept in chunks of at most :data:`RING_SIZE` bytes."""

    def __init__(self):
        self._chunks: Deque[bytearray] = deque()

    def is_empty(self) -> bool:
        """Whether the ring holds no chunks."""
        return not self._chunks

    def write(self, data) -> None:
        """Append ``data`` to the end of the ring."""
        view = memoryview(bytes(data))
        if not view:
            raise ValueError("cannot write empty data")
        while view:
            if not self._chunks or len(self._chunks[-1]) >= RING_SIZE:
                self._chunks.append(bytearray())
            last = self._chunks[-1]
            count = min(RING_SIZE - len(last), len(view))
            last += view[:count]
            view = view[count:]

    def peek(self, offset: int = 0) -> bytes:
        """Return the contiguous bytes of the chunk holding ``offset``.

        The result runs from ``offset`` to the end of that chunk; it is empty
        when ``offset`` lies beyond the stored data.
        """
        if offset < 0:
            raise ValueError("offset must not be negative")
        for chunk in self._chunks:
            if offset < len(chunk):
                return bytes(chunk[offset:])
            offset -= len(chunk)
        return b""

    def drop(self, length: int) -> None:
        """Discard ``length`` bytes from the front of the ring."""
        if length < 0:
            raise ValueError("length must not be negative")
        while length and self._chunks:
            first = self._chunks[0]
            if length >= len(first):
                length -= len(first)
                self._chunks.popleft()
            else:
                del first[:length]
                length = 0

    def flush(self) -> None:
        """Discard everything."""
        self._chunks.clear()