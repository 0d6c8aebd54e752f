from __future__ import annotations

"""Locate the lists that own nodes, and the lists that receive drops.

Two questions are answered here, and they are kept apart on purpose:

- *Where does node X live?* (:func:`find_owning_list`) -- searched by member
  identity across every page.
- *Which list is drop target T?* (:func:`find_container_list`) -- searched by
  container identity: the page root sentinel, a section's ``config["id"]``
  marker, or a column id.

Every function here is read-only over the given pages. Walkers yield the
live lists so that the editing service can mutate its own working copy.
"""

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Set

from pagecraft.core.models import Node, Page

__all__ = [
    "ROOT_CONTAINER_ID",
    "OwningList",
    "iter_child_lists",
    "iter_lists",
    "iter_nodes",
    "find_owning_list",
    "find_container_list",
    "find_node",
    "collect_ids",
    "subtree_ids",
    "is_descendant",
]

ROOT_CONTAINER_ID = "canvas-drop-area"


@dataclass(frozen=True)
class OwningList:
    """Where a node lives: its list, its index in that list, and its page."""

    list: List[Node]
    index: int
    node: Node
    page_index: int


def iter_child_lists(node: Node) -> Iterator[List[Node]]:
    """Yield the child lists of *node*: ``elements`` then each column's ``elements``."""
    config = node.config
    elements = config.get("elements")
    if isinstance(elements, list):
        yield elements
    columns = config.get("columns")
    if isinstance(columns, list):
        for column in columns:
            if isinstance(column, dict) and isinstance(column.get("elements"), list):
                yield column["elements"]


def _walk_lists(nodes: List[Node]) -> Iterator[List[Node]]:
    yield nodes
    for node in nodes:
        if not isinstance(node, Node):
            continue
        for child_list in iter_child_lists(node):
            yield from _walk_lists(child_list)


def iter_lists(pages: List[Page]) -> Iterator[List[Node]]:
    """Yield every node list in the document, root lists included."""
    for page in pages:
        yield from _walk_lists(page.elements)


def iter_nodes(pages: List[Page]) -> Iterator[Node]:
    """Yield every node in the document, depth first."""
    for nodes in iter_lists(pages):
        for node in nodes:
            if isinstance(node, Node):
                yield node


def _find_in(nodes: List[Node], node_id: str) -> Optional[tuple]:
    for index, node in enumerate(nodes):
        if isinstance(node, Node) and node.id == node_id:
            return nodes, index, node
    for node in nodes:
        if not isinstance(node, Node):
            continue
        for child_list in iter_child_lists(node):
            found = _find_in(child_list, node_id)
            if found is not None:
                return found
    return None


def find_owning_list(pages: List[Page], node_id: Optional[str]) -> Optional[OwningList]:
    """Return the list that holds *node_id*, or None when it is not in the tree.

    Callers treat None as "gesture cancelled" rather than as an error.
    """
    if not node_id:
        return None
    for page_index, page in enumerate(pages):
        found = _find_in(page.elements, node_id)
        if found is not None:
            owner, index, node = found
            return OwningList(list=owner, index=index, node=node, page_index=page_index)
    return None


def find_node(pages: List[Page], node_id: Optional[str]) -> Optional[Node]:
    owner = find_owning_list(pages, node_id)
    return owner.node if owner else None


def find_container_list(
    pages: List[Page],
    container_id: Optional[str],
    page_index: int = 0,
) -> Optional[List[Node]]:
    """Resolve a drop target addressed by container identity.

    - ``ROOT_CONTAINER_ID`` -> the root list of ``pages[page_index]``
    - a section marker (``config["id"]`` of a node holding ``elements``)
    - a column id of a multi-list container

    Node ids are *not* containers here; a drop onto a node is a sibling drop
    and is resolved with :func:`find_owning_list` instead.
    """
    if not container_id:
        return None
    if container_id == ROOT_CONTAINER_ID:
        if 0 <= page_index < len(pages):
            return pages[page_index].elements
        return None
    for node in iter_nodes(pages):
        config = node.config
        if config.get("id") == container_id and isinstance(config.get("elements"), list):
            return config["elements"]
        columns = config.get("columns")
        if isinstance(columns, list):
            for column in columns:
                if isinstance(column, dict) and column.get("id") == container_id:
                    if not isinstance(column.get("elements"), list):
                        return None
                    return column["elements"]
    return None


def collect_ids(pages: List[Page]) -> List[str]:
    """Return every identity in the document: node ids, section markers, column ids.

    A list (not a set) so that duplicates remain visible to callers checking
    uniqueness.
    """
    ids: List[str] = []
    for node in iter_nodes(pages):
        ids.append(node.id)
        ids.extend(_container_ids(node))
    return ids


def _container_ids(node: Node) -> List[str]:
    ids = []
    config = node.config
    if isinstance(config.get("elements"), list) and config.get("id"):
        ids.append(str(config["id"]))
    for column in config.get("columns") or []:
        if isinstance(column, dict) and column.get("id"):
            ids.append(str(column["id"]))
    return ids


def subtree_ids(node: Node) -> Set[str]:
    """Node ids and container ids inside *node*'s subtree, *node* included."""
    ids: Set[str] = {node.id}
    ids.update(_container_ids(node))
    for child_list in iter_child_lists(node):
        for child in child_list:
            if isinstance(child, Node):
                ids.update(subtree_ids(child))
    return ids


def is_descendant(ancestor: Node, target_id: Any) -> bool:
    """Return True if *target_id* names *ancestor*, a container in it, or a node below it."""
    return target_id in subtree_ids(ancestor)
