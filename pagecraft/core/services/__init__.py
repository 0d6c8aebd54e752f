from __future__ import annotations

"""Editing services operating on the page composition tree.

Every service here is pure with respect to its inputs: it returns new trees
and leaves the ones it was given untouched.
"""

from .drag_engine import DragEngine, DragSource  # noqa: F401
from .history_service import HistoryService  # noqa: F401
from .path_mutator import PathMutator  # noqa: F401
from .structure_editing_service import OperationResult, StructureEditingService  # noqa: F401

__all__: list[str] = [
    "DragEngine",
    "DragSource",
    "HistoryService",
    "OperationResult",
    "PathMutator",
    "StructureEditingService",
]
