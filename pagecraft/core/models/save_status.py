from __future__ import annotations

"""Save-status signal exposed to the host UI.

The tracker is the only piece of session state that crosses the core
boundary: the UI reads it to enable or disable its save affordance.

Transitions
-----------
- any commit (edit, undo, redo) -> ``unsaved_changes``
- ``begin_save``               -> ``saving`` (refused while already saving)
- ``finish_save(ok=True)``     -> ``saved``, or ``unsaved_changes`` when
  edits were committed while the save was in flight
- ``finish_save(ok=False)``    -> ``error``
"""

from enum import Enum
import logging

__all__ = ["SaveStatus", "SaveStatusTracker"]

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"
    UNSAVED_CHANGES = "unsaved_changes"


class SaveStatusTracker:
    """Small state machine over :class:`SaveStatus`."""

    def __init__(self, status: SaveStatus = SaveStatus.IDLE) -> None:
        self._status = status
        self._dirty_during_save = False

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def is_saving(self) -> bool:
        return self._status is SaveStatus.SAVING

    def mark_dirty(self) -> None:
        if self._status is SaveStatus.SAVING:
            self._dirty_during_save = True
            return
        self._status = SaveStatus.UNSAVED_CHANGES

    def mark_loaded(self) -> None:
        self._status = SaveStatus.SAVED
        self._dirty_during_save = False

    def mark_error(self) -> None:
        self._status = SaveStatus.ERROR
        self._dirty_during_save = False

    def reset(self) -> None:
        self._status = SaveStatus.IDLE
        self._dirty_during_save = False

    def begin_save(self) -> bool:
        """Enter ``saving``; return False if a save is already outstanding."""
        if self._status is SaveStatus.SAVING:
            logger.info("Save refused: another save is still in flight")
            return False
        self._status = SaveStatus.SAVING
        self._dirty_during_save = False
        return True

    def finish_save(self, ok: bool) -> SaveStatus:
        if not ok:
            self._status = SaveStatus.ERROR
        elif self._dirty_during_save:
            self._status = SaveStatus.UNSAVED_CHANGES
        else:
            self._status = SaveStatus.SAVED
        self._dirty_during_save = False
        return self._status
