from __future__ import annotations

"""Translate a finished drag gesture into a structural edit.

A drag ends with a *source* (a palette entry or an existing node) and the id
the pointer was released over. The engine decides which editing operation
that means and returns the resulting document; it never mutates its input
and never touches history. The session commits the result when it differs.
"""

from dataclasses import dataclass, replace
import logging
from typing import Optional

from pagecraft.core.models import Document
from pagecraft.core.services.container_resolver import ROOT_CONTAINER_ID
from pagecraft.core.services.structure_editing_service import OperationResult, StructureEditingService

__all__ = ["DragSource", "DragEngine"]

logger = logging.getLogger(__name__)

PALETTE = "palette"
EXISTING = "existing"


@dataclass(frozen=True)
class DragSource:
    """What is being dragged: a new component kind or an existing node."""

    kind: str
    value: str

    @classmethod
    def palette(cls, type_tag: str) -> "DragSource":
        return cls(PALETTE, type_tag)

    @classmethod
    def existing(cls, node_id: str) -> "DragSource":
        return cls(EXISTING, node_id)

    @property
    def is_palette(self) -> bool:
        return self.kind == PALETTE


class DragEngine:
    """Resolve drops against the document through a :class:`StructureEditingService`.

    Parameters
    ----------
    editing_service : StructureEditingService
        Performs the actual insert / move.
    palette_fallback_to_root : bool, default=True
        When a palette drop lands on an id that resolves to nothing, append
        the new node to the root of the active page instead of discarding it.
    """

    def __init__(self, editing_service: StructureEditingService, palette_fallback_to_root: bool = True) -> None:
        self._editing = editing_service
        self._fallback_to_root = bool(palette_fallback_to_root)

    def on_drag_end(
        self,
        document: Document,
        source: DragSource,
        target_id: Optional[str],
        page_index: int = 0,
    ) -> Document:
        """Return the document after the drop, or *document* itself if nothing changed."""
        if not target_id:
            logger.debug("Drop without target discarded (source=%s)", source)
            return document
        if source.is_palette:
            result = self._drop_palette(document, source.value, target_id, page_index)
        else:
            if source.value == target_id:
                logger.debug("Node %s dropped onto itself", target_id)
                return document
            result = self._editing.move(document.pages, source.value, target_id, page_index)

        if not result.success:
            return document
        return replace(document, pages=result.pages)

    def _drop_palette(self, document: Document, type_tag: str, target_id: str, page_index: int) -> OperationResult:
        node = self._editing.create_node(type_tag)
        if node is None:
            return OperationResult(False, f"Unknown component type '{type_tag}'.", {"type": type_tag}, document.pages)

        result = self._editing.insert(document.pages, node, target_id, page_index=page_index)
        if result.success or not self._fallback_to_root or target_id == ROOT_CONTAINER_ID:
            return result
        logger.info("Palette drop target %s not found; appending %s to page root", target_id, type_tag)
        return self._editing.insert(document.pages, node, ROOT_CONTAINER_ID, page_index=page_index)
