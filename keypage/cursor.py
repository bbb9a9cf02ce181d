"""
Cursor contract consumed by Pagination, plus an in-memory implementation.

A cursor is a positionable iterator over one ordered key-value range. Every
positioning call returns a (key, value) pair, or (None, None) once the cursor
has moved outside the range. The buffers handed back may be reused by the next
positioning call, so callers that keep them must copy them first.
"""

from bisect import bisect_left
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

Buffer = bytes | bytearray | memoryview
Record = tuple[Buffer, Buffer] | tuple[None, None]

EXHAUSTED: tuple[None, None] = (None, None)


@runtime_checkable
class Cursor(Protocol):
    """
    Positioning primitives of an ordered key-value cursor.

    Keys are ordered by unsigned byte comparison. A cursor may rest one step
    before its first key or one step after its last key: next() from before the
    start returns the first record, prev() from past the end (including after a
    seek beyond every key) returns the last one.
    """

    def first(self) -> Record: ...

    def last(self) -> Record: ...

    def seek(self, key: bytes) -> Record:
        """Moves to key, or to the next key in ascending order if key is absent."""
        ...

    def next(self) -> Record: ...

    def prev(self) -> Record: ...


class MemoryCursor:
    """
    Cursor over an in-memory sorted snapshot of key-value pairs.

    With reuse_buffers=True every positioning call writes the record into the
    same pair of bytearrays, which mimics storage engines that hand out views of
    their internal pages.
    """

    def __init__(
        self, items: Iterable[tuple[bytes, bytes]] = (), reuse_buffers: bool = False
    ) -> None:
        # Later duplicates overwrite earlier ones, as a put would
        merged = dict(items)
        self._keys = sorted(merged)
        self._values = [merged[k] for k in self._keys]
        self._pos = -1
        self._reuse_buffers = reuse_buffers
        self._key_buf = bytearray()
        self._value_buf = bytearray()

    def __len__(self) -> int:
        return len(self._keys)

    def first(self) -> Record:
        self._pos = 0
        return self._current()

    def last(self) -> Record:
        self._pos = len(self._keys) - 1
        return self._current()

    def seek(self, key: bytes) -> Record:
        self._pos = bisect_left(self._keys, bytes(key))
        return self._current()

    def next(self) -> Record:
        if self._pos < len(self._keys):
            self._pos += 1
        return self._current()

    def prev(self) -> Record:
        if self._pos >= 0:
            self._pos -= 1
        return self._current()

    def _current(self) -> Record:
        if not 0 <= self._pos < len(self._keys):
            return EXHAUSTED

        key = self._keys[self._pos]
        value = self._values[self._pos]
        if not self._reuse_buffers:
            return key, value

        self._key_buf[:] = key
        self._value_buf[:] = value
        return self._key_buf, self._value_buf
