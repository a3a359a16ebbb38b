"""
Bounded undo/redo history for the edited raster.

Each history entry holds a PNG snapshot of the edited raster. The decoded
image is cached on the entry the first time it is needed, so moving back
and forth through history decodes every snapshot at most once. Images
handed out are copies; callers never share pixel storage with history.

History is linear: committing while in the middle of the history drops
every entry after the active one. Once the depth limit is exceeded the
oldest entry is evicted.

Classes:
    HistoryEntry: One serialized snapshot with its decoded-image cache
    HistoryManager: Ordered snapshots with a single active index
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from MR_Libs.RasterLib.raster_io import decode_image, encode_png
from MR_Libs.constants import MAX_HISTORY_DEPTH

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """A committed snapshot of the edited raster.

    Attributes:
        snapshot: PNG-encoded raster contents
        cached_image: Decoded RGBA image, filled on first decode
    """
    snapshot: bytes
    cached_image: Optional[Any] = field(default=None, repr=False)

    @classmethod
    def from_image(cls, image: Any) -> "HistoryEntry":
        return cls(snapshot=encode_png(image), cached_image=image.convert("RGBA").copy())

    def to_image(self) -> Any:
        """
        Return a copy of the decoded snapshot.

        Raises:
            ValueError: If the snapshot bytes cannot be decoded
        """
        if self.cached_image is None:
            self.cached_image = decode_image(self.snapshot)
        return self.cached_image.copy()


class HistoryManager:
    """
    Ordered snapshots of the edited raster with one active index.

    Example:
        >>> history = HistoryManager()
        >>> history.commit(first)
        >>> history.commit(second)
        >>> restored = history.undo()    # copy of ``first``
        >>> history.redo()               # copy of ``second``
    """

    def __init__(self, max_depth: int = MAX_HISTORY_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")

        self.max_depth = int(max_depth)
        self._entries: List[HistoryEntry] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        """Active entry index, or -1 when history is empty."""
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._index < len(self._entries) - 1

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1

    def reset(self, image: Any) -> None:
        """Start a new history whose only entry is ``image``."""
        self.clear()
        self.commit(image)

    def commit(self, image: Any) -> None:
        """
        Record ``image`` as the newest entry and make it active.

        Entries after the active index are discarded first, so a commit
        always invalidates redo.
        """
        del self._entries[self._index + 1:]
        self._entries.append(HistoryEntry.from_image(image))
        self._index = len(self._entries) - 1

        if len(self._entries) > self.max_depth:
            self._entries.pop(0)
            self._index -= 1

        logger.debug(f"Committed history entry {self._index + 1}/{len(self._entries)}")

    def current(self) -> Optional[Any]:
        if self._index < 0:
            return None
        return self._entries[self._index].to_image()

    def peek(self, offset: int) -> Optional[Any]:
        """
        Decode the entry ``offset`` steps from the active one without moving.

        Returns:
            Copy of that snapshot, or None if the position is out of range

        Raises:
            ValueError: If the snapshot cannot be decoded
        """
        target = self._index + offset
        if self._index < 0 or not (0 <= target < len(self._entries)):
            return None
        return self._entries[target].to_image()

    def step(self, offset: int) -> bool:
        """Move the active index by ``offset``; False if that leaves the history."""
        target = self._index + offset
        if self._index < 0 or not (0 <= target < len(self._entries)):
            return False

        self._index = target
        logger.debug(f"Moved to history entry {self._index + 1}/{len(self._entries)}")
        return True

    def undo(self) -> Optional[Any]:
        """
        Step back one entry.

        Returns:
            Copy of the now-active snapshot, or None if already at the oldest entry

        Raises:
            ValueError: If the snapshot cannot be decoded (the index stays put)
        """
        image = self.peek(-1)
        if image is not None:
            self.step(-1)
        return image

    def redo(self) -> Optional[Any]:
        """
        Step forward one entry.

        Returns:
            Copy of the now-active snapshot, or None if already at the newest entry

        Raises:
            ValueError: If the snapshot cannot be decoded (the index stays put)
        """
        image = self.peek(1)
        if image is not None:
            self.step(1)
        return image
