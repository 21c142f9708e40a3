"""Callback lists that may be changed while they are being called."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from kmstext.dlist import DList, DListNode

__all__ = ["Hook"]


@dataclass
class _Entry:
    cb: Callable[[Any, Any, Any], Any]
    data: Any
    oneshot: bool


class Hook:
    """An ordered list of callbacks ``cb(parent, arg, data)``.

    Entries may be added or removed from within a callback. A oneshot entry
    is removed before it is called.
    """

    def __init__(self):
        self._entries = DList()
        self._num = 0
        self._cur: Optional[DListNode] = None
        self._dead = False

    def __len__(self) -> int:
        return self._num

    @property
    def calling(self) -> bool:
        """Whether :meth:`call` is currently running."""
        return self._cur is not None

    @staticmethod
    def _check(cb) -> None:
        if not callable(cb):
            raise TypeError("callback must be callable")

    def add(self, cb, data=None, oneshot=False) -> None:
        """Append a callback."""
        self._check(cb)
        self._entries.push_back(DListNode(_Entry(cb, data, bool(oneshot))))
        self._num += 1

    def add_single(self, cb, data=None, oneshot=False) -> None:
        """Append a callback unless ``cb`` with ``data`` is already present.

        An existing entry is left untouched even if its oneshot flag differs.
        """
        self._check(cb)
        for node in self._entries:
            if self._same(node, cb, data):
                return
        self.add(cb, data, oneshot)

    @staticmethod
    def _same(node: DListNode, cb, data) -> bool:
        entry = node.value
        return entry.cb == cb and entry.data is data

    def _drop(self, node: DListNode) -> None:
        if self._cur is node:
            self._cur = node.next
        node.unlink()
        self._num -= 1

    def remove(self, cb, data=None) -> None:
        """Remove the most recently added matching entry, if any."""
        self._check(cb)
        for node in reversed(self._entries):
            if self._same(node, cb, data):
                self._drop(node)
                return

    def remove_all(self, cb, data=None) -> None:
        """Remove every matching entry."""
        self._check(cb)
        for node in reversed(self._entries):
            if self._same(node, cb, data):
                self._drop(node)

    def call(self, parent=None, arg=None) -> None:
        """Invoke every callback in order; nested calls are ignored."""
        if self._cur is not None:
            return
        head = self._entries._head
        self._cur = head.next
        try:
            while self._cur is not head:
                node = self._cur
                self._cur = node.next
                entry = node.value
                if entry.oneshot:
                    node.unlink()
                try:
                    entry.cb(parent, arg, entry.data)
                finally:
                    if entry.oneshot:
                        self._num -= 1
        finally:
            self._cur = None
        if self._dead:
            self.free()

    def free(self) -> None:
        """Drop all entries; while calling, this happens once the call ends."""
        if self._cur is not None:
            self._dead = True
            return
        for node in reversed(self._entries):
            node.unlink()
        self._num = 0
        self._dead = False