from __future__ import annotations

"""Service layer for structural edits on the page composition tree.

This module provides a UI-agnostic, testable service holding the business
logic of the editor's structural gestures: inserting, deleting, duplicating
and moving nodes, plus the page-level operations (add, delete, clear,
rename) and the node-level reset / property edit.

Scope and guarantees:
- Operates purely in-memory on ``List[Page]``, no I/O nor UI imports.
- The given pages are never mutated. Every operation deep-copies them,
  edits the working copy, renumbers ``order`` and returns the copy in
  ``OperationResult.pages``.
- Invalid or stale requests (unknown ids, a drop into one's own subtree...)
  return ``OperationResult(success=False, ...)`` whose ``pages`` is the very
  input object, so callers can detect "nothing changed" by identity. Nothing
  is raised for them.

Examples
--------
Basic usage:

    service = StructureEditingService()
    heading = service.create_node("heading")
    result = service.insert(pages, heading, ROOT_CONTAINER_ID)
    if result.success:
        pages = result.pages

"""

import copy
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Set

from pagecraft.core.models import Node, Page
from pagecraft.core.registry import ComponentRegistry, MULTI_LIST, SINGLE_LIST
from pagecraft.core.services.container_resolver import (
    collect_ids,
    find_container_list,
    find_owning_list,
    is_descendant,
    iter_child_lists,
    iter_lists,
)
from pagecraft.core.utils import IdFactory, generate_id, page_slug, unique_name


__all__ = ["OperationResult", "StructureEditingService", "renumber"]

logger = logging.getLogger(__name__)

DEFAULT_PAGE_BASE_NAME = "New Page"


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation changed the tree.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    pages
        The resulting page list. On failure this is the input list itself.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None
    pages: Optional[List[Page]] = None


def renumber(pages: List[Page]) -> List[Page]:
    """Rewrite ``order`` to the list index in every list of *pages*.

    Mutates and returns *pages*; only ever called on working copies.
    """
    for nodes in iter_lists(pages):
        for index, node in enumerate(nodes):
            if isinstance(node, Node):
                node.order = index
    return pages


class StructureEditingService:
    """Encapsulates structural edit operations on a list of pages.

    Parameters
    ----------
    registry : ComponentRegistry, optional
        Source of default configurations and container shapes. Loaded from
        the packaged configuration when omitted.
    id_factory : callable, optional
        Zero-argument callable returning fresh ids; ``generate_id`` by default.
        Tests inject a counter here to get predictable ids.

    Notes
    -----
    Drop targets are addressed two ways. A *container id* (the page root
    sentinel, a section marker or a column id) receives the node inside that
    list. Any other id is taken as a *sibling*: the node lands right after it.
    Container ids are tried first.
    """

    def __init__(
        self,
        registry: Optional[ComponentRegistry] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._registry = registry if registry is not None else ComponentRegistry()
        self._mint: IdFactory = id_factory or generate_id

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Node factory
    # -------------------------------------------------------------------------

    def create_node(self, type_tag: str) -> Optional[Node]:
        """Return a fresh node of *type_tag* built from registry defaults.

        Returns None for a type the registry does not know.
        """
        if type_tag not in self._registry:
            logger.warning("Unknown component type '%s'", type_tag)
            return None
        node = Node(
            id=self._mint(),
            type=type_tag,
            config=self._registry.get_default_config(type_tag),
            label=self._registry.get_label(type_tag),
        )
        self._registry.ensure_container_shape(node, self._mint)
        self._refresh_container_ids(node)
        return node

    # -------------------------------------------------------------------------
    # Public API: node structure
    # -------------------------------------------------------------------------

    def insert(
        self,
        pages: List[Page],
        node: Node,
        target_id: Optional[str],
        position: Optional[int] = None,
        page_index: int = 0,
    ) -> OperationResult:
        """Insert a copy of *node* at *target_id*.

        - container target: spliced at *position* (default: end)
        - sibling target: spliced right after the sibling
        - unresolved target: no-op

        The inserted subtree gets fresh section markers and column ids; node
        ids that already exist in the document are re-minted.
        """
        try:
            logger.info("Edit: insert type=%s target=%s", getattr(node, "type", None), target_id)
            if node is None or not target_id:
                return self._noop("insert", pages, "Nothing to insert.", {"target_id": target_id})

            working = copy.deepcopy(pages)
            new_node = copy.deepcopy(node)
            self._registry.ensure_container_shape(new_node, self._mint)
            self._refresh_container_ids(new_node)
            self._remint_colliding_ids(new_node, set(collect_ids(working)))

            if not self._place(working, new_node, target_id, position, page_index):
                return self._noop("insert", pages, "Drop target not found.", {"target_id": target_id})

            renumber(working)
            logger.info("Edit OK: insert node=%s target=%s", new_node.id, target_id)
            return OperationResult(True, "Inserted element.", {"node_id": new_node.id, "target_id": target_id}, working)
        except Exception as e:
            logger.error("Edit FAIL: insert error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to insert element.", {"error": str(e)}, pages)

    def delete(self, pages: List[Page], node_id: Optional[str]) -> OperationResult:
        """Remove the node with *node_id* (and its subtree) wherever it sits."""
        try:
            logger.info("Edit: delete node=%s", node_id)
            working = copy.deepcopy(pages)
            removed = 0
            for nodes in iter_lists(working):
                kept = [n for n in nodes if not (isinstance(n, Node) and n.id == node_id)]
                if len(kept) != len(nodes):
                    removed += len(nodes) - len(kept)
                    nodes[:] = kept
            if not removed:
                return self._noop("delete", pages, "Element not found.", {"node_id": node_id})

            renumber(working)
            logger.info("Edit OK: delete node=%s removed=%d", node_id, removed)
            return OperationResult(True, "Deleted element.", {"node_id": node_id, "removed": removed}, working)
        except Exception as e:
            logger.error("Edit FAIL: delete error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to delete element.", {"error": str(e)}, pages)

    def duplicate(self, pages: List[Page], node_id: Optional[str]) -> OperationResult:
        """Clone the node with *node_id* right after itself, with fresh ids throughout."""
        try:
            logger.info("Edit: duplicate node=%s", node_id)
            working = copy.deepcopy(pages)
            owner = find_owning_list(working, node_id)
            if owner is None:
                return self._noop("duplicate", pages, "Element not found.", {"node_id": node_id})

            clone = copy.deepcopy(owner.node)
            self._reassign_ids(clone)
            owner.list.insert(owner.index + 1, clone)

            renumber(working)
            logger.info("Edit OK: duplicate node=%s clone=%s", node_id, clone.id)
            return OperationResult(True, "Duplicated element.", {"node_id": node_id, "new_id": clone.id}, working)
        except Exception as e:
            logger.error("Edit FAIL: duplicate error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to duplicate element.", {"error": str(e)}, pages)

    def move(
        self,
        pages: List[Page],
        node_id: Optional[str],
        target_id: Optional[str],
        page_index: int = 0,
    ) -> OperationResult:
        """Move the node with *node_id* to *target_id*, keeping its ids.

        No-ops: missing ids, ``node_id == target_id``, a target inside the
        moved subtree (its own section marker and column ids included) and a
        target that does not resolve once the node is lifted out.
        """
        try:
            logger.info("Edit: move node=%s target=%s", node_id, target_id)
            if not node_id or not target_id or node_id == target_id:
                return self._noop("move", pages, "Nothing to move.", {"node_id": node_id, "target_id": target_id})

            working = copy.deepcopy(pages)
            owner = find_owning_list(working, node_id)
            if owner is None:
                return self._noop("move", pages, "Element not found.", {"node_id": node_id})
            if is_descendant(owner.node, target_id):
                return self._noop(
                    "move", pages, "Cannot move an element into itself.", {"node_id": node_id, "target_id": target_id}
                )

            moved = owner.list.pop(owner.index)
            if not self._place(working, moved, target_id, None, page_index):
                return self._noop("move", pages, "Drop target not found.", {"target_id": target_id})

            renumber(working)
            logger.info("Edit OK: move node=%s target=%s", node_id, target_id)
            return OperationResult(True, "Moved element.", {"node_id": node_id, "target_id": target_id}, working)
        except Exception as e:
            logger.error("Edit FAIL: move error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to move element.", {"error": str(e)}, pages)

    def reset_node(self, pages: List[Page], node_id: Optional[str]) -> OperationResult:
        """Restore registry defaults on a node.

        The node id is kept, and so are the children and container ids of
        container kinds; only the plain configuration is reset.
        """
        try:
            logger.info("Edit: reset_node node=%s", node_id)
            working = copy.deepcopy(pages)
            owner = find_owning_list(working, node_id)
            if owner is None:
                return self._noop("reset_node", pages, "Element not found.", {"node_id": node_id})
            node = owner.node
            if node.type not in self._registry:
                return self._noop("reset_node", pages, f"No defaults for type '{node.type}'.", {"node_id": node_id})

            config = self._registry.get_default_config(node.type)
            shape = self._registry.container_shape(node.type)
            if shape == SINGLE_LIST:
                for key in ("elements", "id"):
                    if key in node.config:
                        config[key] = node.config[key]
            elif shape == MULTI_LIST and "columns" in node.config:
                config["columns"] = node.config["columns"]
            if config == node.config:
                return self._noop("reset_node", pages, "Element already has its defaults.", {"node_id": node_id})
            node.config = config
            self._registry.ensure_container_shape(node, self._mint)

            renumber(working)
            logger.info("Edit OK: reset_node node=%s", node_id)
            return OperationResult(True, "Reset element to defaults.", {"node_id": node_id}, working)
        except Exception as e:
            logger.error("Edit FAIL: reset_node error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to reset element.", {"error": str(e)}, pages)

    def update_node_property(
        self,
        pages: List[Page],
        node_id: Optional[str],
        path: str,
        value: Any,
        mutator,
    ) -> OperationResult:
        """Write *value* at *path* in the node's configuration via *mutator*.

        *mutator* is a :class:`~pagecraft.core.services.path_mutator.PathMutator`.
        A write that leaves the configuration unchanged is a no-op.
        """
        try:
            logger.info("Edit: update_node_property node=%s path=%s", node_id, path)
            working = copy.deepcopy(pages)
            owner = find_owning_list(working, node_id)
            if owner is None:
                return self._noop("update_node_property", pages, "Element not found.", {"node_id": node_id})
            before = copy.deepcopy(owner.node.config)
            if not mutator.apply(owner.node, path, value):
                return self._noop("update_node_property", pages, "Empty property path.", {"node_id": node_id})
            if owner.node.config == before:
                return self._noop("update_node_property", pages, "Value unchanged.", {"node_id": node_id, "path": path})

            renumber(working)
            logger.info("Edit OK: update_node_property node=%s path=%s", node_id, path)
            return OperationResult(True, "Updated property.", {"node_id": node_id, "path": path}, working)
        except Exception as e:
            logger.error("Edit FAIL: update_node_property error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to update property.", {"error": str(e)}, pages)

    # -------------------------------------------------------------------------
    # Public API: pages
    # -------------------------------------------------------------------------

    def add_page(self, pages: List[Page], base_name: str = DEFAULT_PAGE_BASE_NAME) -> OperationResult:
        """Append an empty page with a name not used by any other page."""
        try:
            logger.info("Edit: add_page")
            working = copy.deepcopy(pages)
            name = unique_name(base_name, (page.name for page in working))
            page = Page(id=self._mint(), name=name, slug=page_slug(name), elements=[])
            working.append(page)
            logger.info("Edit OK: add_page page=%s slug=%s", page.id, page.slug)
            return OperationResult(
                True,
                f"Added page '{name}'.",
                {"page_id": page.id, "page_index": len(working) - 1, "slug": page.slug},
                working,
            )
        except Exception as e:
            logger.error("Edit FAIL: add_page error=%s", e, exc_info=True)
            return OperationResult(False, "Failed to add page.", {"error": str(e)}, pages)

    def delete_page(self, pages: List[Page], page_id: Optional[str]) -> OperationResult:
        """Remove a page; the last remaining page is never deleted."""
        logger.info("Edit: delete_page page=%s", page_id)
        index = self._page_index(pages, page_id)
        if index is None:
            return self._noop("delete_page", pages, "Page not found.", {"page_id": page_id})
        if len(pages) <= 1:
            return self._noop("delete_page", pages, "Cannot delete the last page.", {"page_id": page_id})

        working = copy.deepcopy(pages)
        removed = working.pop(index)
        logger.info("Edit OK: delete_page page=%s slug=%s", page_id, removed.slug)
        return OperationResult(
            True,
            f"Deleted page '{removed.name}'.",
            {"page_id": page_id, "page_index": index, "slug": removed.slug},
            working,
        )

    def clear_page(self, pages: List[Page], page_id: Optional[str]) -> OperationResult:
        """Remove every node from a page."""
        logger.info("Edit: clear_page page=%s", page_id)
        index = self._page_index(pages, page_id)
        if index is None:
            return self._noop("clear_page", pages, "Page not found.", {"page_id": page_id})
        if not pages[index].elements:
            return self._noop("clear_page", pages, "Page is already empty.", {"page_id": page_id})

        working = copy.deepcopy(pages)
        working[index].elements = []
        logger.info("Edit OK: clear_page page=%s", page_id)
        return OperationResult(True, "Cleared page.", {"page_id": page_id, "page_index": index}, working)

    def update_page_details(
        self,
        pages: List[Page],
        page_id: Optional[str],
        name: Optional[str] = None,
        slug: Optional[str] = None,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
    ) -> OperationResult:
        """Change the name, slug or SEO fields of a page. ``None`` leaves a field as is."""
        logger.info("Edit: update_page_details page=%s", page_id)
        index = self._page_index(pages, page_id)
        if index is None:
            return self._noop("update_page_details", pages, "Page not found.", {"page_id": page_id})

        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("slug", slug),
                ("seo_title", seo_title),
                ("seo_description", seo_description),
            )
            if value is not None and getattr(pages[index], key) != value
        }
        if not changes:
            return self._noop("update_page_details", pages, "Page details unchanged.", {"page_id": page_id})

        working = copy.deepcopy(pages)
        for key, value in changes.items():
            setattr(working[index], key, value)
        logger.info("Edit OK: update_page_details page=%s fields=%s", page_id, ",".join(sorted(changes)))
        return OperationResult(True, "Updated page details.", {"page_id": page_id, "fields": sorted(changes)}, working)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _noop(operation: str, pages: List[Page], message: str, details: Dict[str, Any]) -> OperationResult:
        logger.info("Edit noop: %s %s", operation, message)
        return OperationResult(False, message, details, pages)

    @staticmethod
    def _page_index(pages: List[Page], page_id: Optional[str]) -> Optional[int]:
        for index, page in enumerate(pages):
            if page.id == page_id:
                return index
        return None

    @staticmethod
    def _place(
        working: List[Page],
        node: Node,
        target_id: str,
        position: Optional[int],
        page_index: int,
    ) -> bool:
        """Splice *node* into *working* at *target_id*; False if it does not resolve."""
        container = find_container_list(working, target_id, page_index)
        if container is not None:
            index = len(container) if position is None else max(0, min(int(position), len(container)))
            container.insert(index, node)
            return True
        owner = find_owning_list(working, target_id)
        if owner is not None:
            owner.list.insert(owner.index + 1, node)
            return True
        return False

    def _refresh_container_ids(self, node: Node) -> None:
        """Give every section marker and column id in *node*'s subtree a fresh id."""
        config = node.config
        if isinstance(config.get("elements"), list) and (
            "id" in config or self._registry.container_shape(node.type) == SINGLE_LIST
        ):
            config["id"] = self._mint()
        for column in config.get("columns") or []:
            if isinstance(column, dict):
                column["id"] = self._mint()
        for child_list in iter_child_lists(node):
            for child in child_list:
                if isinstance(child, Node):
                    self._refresh_container_ids(child)

    def _reassign_ids(self, node: Node) -> None:
        """Fresh ids for *node*, every descendant, every marker and every column."""
        node.id = self._mint()
        self._refresh_container_ids(node)
        for child_list in iter_child_lists(node):
            for child in child_list:
                if isinstance(child, Node):
                    self._reassign_node_ids(child)

    def _reassign_node_ids(self, node: Node) -> None:
        node.id = self._mint()
        for child_list in iter_child_lists(node):
            for child in child_list:
                if isinstance(child, Node):
                    self._reassign_node_ids(child)

    def _remint_colliding_ids(self, node: Node, taken: Set[str]) -> None:
        if node.id in taken:
            node.id = self._mint()
        taken.add(node.id)
        for child_list in iter_child_lists(node):
            for child in child_list:
                if isinstance(child, Node):
                    self._remint_colliding_ids(child, taken)
