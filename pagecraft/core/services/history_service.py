from __future__ import annotations

"""Undo/redo snapshot management for the page list.

This service is UI-agnostic and performs pure in-memory history tracking of
the whole page list. Each committed state is stored as a deep copy and handed
back as a fresh deep copy on undo/redo, so nothing the caller does later can
reach into the stored snapshots.

Design principles
-----------------
- No UI imports and no I/O.
- One linear list of snapshots plus a cursor (``index``). The snapshot at the
  cursor is the current state.
- Committing after an undo discards everything after the cursor.
- History is unbounded by default. An explicit ``max_history`` caps memory
  usage by trimming the oldest snapshots.
"""

import copy
import logging
from typing import List, Optional

from pagecraft.core.models import Page

__all__ = ["HistoryService"]

logger = logging.getLogger(__name__)


class HistoryService:
    """Linear snapshot history over ``List[Page]``.

    Parameters
    ----------
    initial_pages : list of Page
        State recorded as the first snapshot.
    max_history : int, optional
        Maximum number of snapshots to keep. ``None`` (the default) keeps
        every snapshot so any number of commits can be undone. Values below 1
        are coerced to 1.

    Examples
    --------
    >>> history = HistoryService(pages)
    >>> history.commit(edited_pages)
    >>> restored = history.undo()   # deep copy of ``pages``
    >>> history.redo()              # deep copy of ``edited_pages``
    """

    def __init__(self, initial_pages: List[Page], max_history: Optional[int] = None) -> None:
        self._max_history: Optional[int] = None if max_history is None else max(1, int(max_history))
        self._snapshots: List[List[Page]] = [copy.deepcopy(initial_pages)]
        self._index: int = 0

    # --------------------------------------------------------------------- API

    def commit(self, pages: List[Page]) -> None:
        """Record *pages* as the new current state.

        Snapshots after the cursor (undone states) are dropped. When a
        ``max_history`` is set and exceeded, the oldest snapshots are trimmed
        and the cursor shifted with them.
        """
        del self._snapshots[self._index + 1:]
        self._snapshots.append(copy.deepcopy(pages))
        overflow = 0 if self._max_history is None else len(self._snapshots) - self._max_history
        if overflow > 0:
            del self._snapshots[0:overflow]
            logger.debug("History trimmed by %d snapshot(s)", overflow)
        self._index = len(self._snapshots) - 1

    def undo(self) -> Optional[List[Page]]:
        """Step back; return a copy of the now-current snapshot, or None at the start."""
        if not self.can_undo:
            return None
        self._index -= 1
        return copy.deepcopy(self._snapshots[self._index])

    def redo(self) -> Optional[List[Page]]:
        """Step forward; return a copy of the now-current snapshot, or None at the end."""
        if not self.can_redo:
            return None
        self._index += 1
        return copy.deepcopy(self._snapshots[self._index])

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    @property
    def index(self) -> int:
        return self._index

    @property
    def max_history(self) -> Optional[int]:
        return self._max_history

    def __len__(self) -> int:
        return len(self._snapshots)

    def current(self) -> List[Page]:
        """Return a copy of the snapshot at the cursor."""
        return copy.deepcopy(self._snapshots[self._index])

    def reset(self, pages: List[Page]) -> None:
        """Forget all history; *pages* becomes the only snapshot."""
        self._snapshots = [copy.deepcopy(pages)]
        self._index = 0
