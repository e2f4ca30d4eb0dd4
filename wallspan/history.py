"""
wallspan Preview History

An in-memory, bounded history of photos that have been fetched for preview but not
necessarily applied. It behaves like a browser's back/forward history:

- moving back and forward walks a cursor over the fetched entries
- moving forward past the newest entry asks the caller to fetch a new one
- fetching while the cursor sits in the middle throws away everything after the
  cursor first (the forward branch is overwritten, never merged)
- once the history holds more than 'capacity' entries the oldest is evicted

None of the operations raise. The history is not thread safe; callers serialize access
(the session only touches it from its control thread).
"""

from dataclasses import dataclass
from typing import Optional

from PIL import Image

from wallspan.unsplash_handler import UnsplashPhoto

HISTORY_CAPACITY = 10


@dataclass
class PreviewEntry:
    """A fetched candidate photo and its decoded thumbnail."""

    photo: UnsplashPhoto
    thumbnail: Image.Image


class PreviewHistory:
    """
    Ordered sequence of PreviewEntry, oldest first, plus a cursor. The cursor is None
    exactly when the history is empty; otherwise it always indexes a real entry.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):

        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._entries = []
        self._cursor = None

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    @property
    def at_start(self) -> bool:
        return not self._entries or self._cursor == 0

    @property
    def at_tail(self) -> bool:
        return not self._entries or self._cursor == len(self._entries) - 1

    def current(self) -> Optional[PreviewEntry]:
        """Return the entry under the cursor, or None if nothing has been fetched yet."""

        if self._cursor is None:
            return None

        return self._entries[self._cursor]

    def append(self, entry: PreviewEntry):
        """
        Add a newly fetched entry after the cursor and move the cursor onto it. Entries
        ahead of the cursor are discarded first. If the history is now over capacity the
        oldest entries are dropped and the cursor shifts down with the rest.
        """

        if self._cursor is not None:
            del self._entries[self._cursor + 1 :]

        self._entries.append(entry)

        overflow = len(self._entries) - self.capacity
        if overflow > 0:
            del self._entries[:overflow]

        self._cursor = len(self._entries) - 1

    def move_back(self) -> Optional[PreviewEntry]:
        """
        Step the cursor back one entry and return that entry. At the start (or when
        empty) this is a no-op and returns None.
        """

        if self.at_start:
            return None

        self._cursor -= 1
        return self._entries[self._cursor]

    def move_forward(self) -> Optional[PreviewEntry]:
        """
        Step the cursor forward one entry and return that entry. At the tail this returns
        None, which signals that a new entry has to be fetched and appended. The cursor
        never moves past the known tail on its own.
        """

        if self.at_tail:
            return None

        self._cursor += 1
        return self._entries[self._cursor]

    def clear(self):
        self._entries = []
        self._cursor = None
