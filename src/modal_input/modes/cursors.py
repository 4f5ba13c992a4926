"""Ordered set of cursor handles with a "current" pointer for cycling."""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

CursorT = TypeVar("CursorT")


class CursorSet(Generic[CursorT]):
    """Tracks which of the editing engine's cursors is current.

    Handles are opaque; only their order matters here. ``index`` is a valid
    position whenever the set is non-empty and ``None`` otherwise.
    """

    def __init__(self, cursors: Iterable[CursorT] = ()) -> None:
        self._cursors: List[CursorT] = list(cursors)
        self._index: Optional[int] = 0 if self._cursors else None

    @property
    def index(self) -> Optional[int]:
        return self._index

    def __len__(self) -> int:
        return len(self._cursors)

    def __iter__(self) -> Iterator[CursorT]:
        return iter(tuple(self._cursors))

    def __bool__(self) -> bool:
        return bool(self._cursors)

    def current(self) -> Optional[CursorT]:
        if self._index is None:
            return None
        return self._cursors[self._index]

    def next(self) -> Optional[CursorT]:
        if self._index is None:
            return None
        self._index = (self._index + 1) % len(self._cursors)
        return self._cursors[self._index]

    def add(self, cursor: CursorT) -> None:
        self._cursors.append(cursor)
        if self._index is None:
            self._index = 0

    def remove(self, cursor: CursorT) -> None:
        position = self._cursors.index(cursor)
        del self._cursors[position]
        if not self._cursors:
            self._index = None
            return
        assert self._index is not None
        if position < self._index:
            self._index -= 1
        elif self._index >= len(self._cursors):
            self._index = 0

    def replace(self, cursors: Iterable[CursorT]) -> None:
        self._cursors = list(cursors)
        self._index = 0 if self._cursors else None

    def clear(self) -> None:
        self.replace(())

    def __repr__(self) -> str:
        return f"CursorSet(size={len(self._cursors)}, index={self._index!r})"


__all__ = ["CursorSet"]
