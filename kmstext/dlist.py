"""Circular doubly linked list with a sentinel head.

Nodes are linked and unlinked in constant time and may be removed while
the list is being walked.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

__all__ = ["DListNode", "DList"]


class DListNode:
    """A list node carrying an arbitrary ``value``."""

    __slots__ = ("value", "prev", "next")

    def __init__(self, value: Any = None):
        self.value = value
        self.prev: Optional[DListNode] = None
        self.next: Optional[DListNode] = None

    @property
    def linked(self) -> bool:
        """Whether the node currently sits in a list."""
        return self.next is not None

    def unlink(self) -> None:
        """Remove this node from the list it is in."""
        if self.next is None or self.prev is None:
            raise ValueError("node is not linked")
        self.next.prev = self.prev
        self.prev.next = self.next
        self.prev = None
        self.next = None

    def __repr__(self) -> str:
        return f"DListNode({self.value!r})"


def _link_between(prev: DListNode, nxt: DListNode, node: DListNode) -> None:
    if node.next is not None:
        raise ValueError("node is already linked")
    nxt.prev = node
    node.next = nxt
    node.prev = prev
    prev.next = node


class DList:
    """A circular doubly linked list of :class:`DListNode` objects."""

    def __init__(self):
        self._head = DListNode()
        self._head.next = self._head
        self._head.prev = self._head

    def push_front(self, node: DListNode) -> None:
        """Link ``node`` directly after the head."""
        _link_between(self._head, self._head.next, node)

    def push_back(self, node: DListNode) -> None:
        """Link ``node`` directly before the head, at the tail."""
        _link_between(self._head.prev, self._head, node)

    def is_empty(self) -> bool:
        """Whether the list holds no nodes."""
        return self._head.next is self._head

    def first(self) -> DListNode:
        """Return the first node."""
        if self.is_empty():
            raise IndexError("first() on empty list")
        return self._head.next

    def last(self) -> DListNode:
        """Return the last node."""
        if self.is_empty():
            raise IndexError("last() on empty list")
        return self._head.prev

    def __iter__(self) -> Iterator[DListNode]:
        """Walk front to back; the yielded node may be unlinked."""
        node = self._head.next
        while node is not self._head:
            following = node.next
            yield node
            node = following

    def __reversed__(self) -> Iterator[DListNode]:
        """Walk back to front; the yielded node may be unlinked."""
        node = self._head.prev
        while node is not self._head:
            preceding = node.prev
            yield node
            node = preceding

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def _start(self, start: Optional[DListNode]) -> DListNode:
        if start is None:
            return self._head
        if start.next is None:
            raise ValueError("start node is not linked")
        return start

    def iter_but_one(self, start: Optional[DListNode]) -> Iterator[DListNode]:
        """Walk forwards from after ``start`` round to it, skipping the head.

        With ``start`` of ``None`` this walks the whole list.
        """
        head = self._head
        start = self._start(start)
        node = start.next.next if start.next is head else start.next
        while node is not start:
            yield node
            if node.next is head and start is not head:
                node = node.next.next
            else:
                node = node.next

    def iter_reverse_but_one(
        self, start: Optional[DListNode]
    ) -> Iterator[DListNode]:
        """Walk backwards from before ``start`` round to it, skipping the head.

        With ``start`` of ``None`` this walks the whole list in reverse.
        """
        head = self._head
        start = self._start(start)
        node = start.prev.prev if start.prev is head else start.prev
        while node is not start:
            yield node
            if node.prev is head and start is not head:
                node = node.prev.prev
            else:
                node = node.prev