from __future__ import annotations

"""Shared data structures used across the Pagecraft core.

This package exposes the composition tree (``Node``), its owning ``Page`` and
the ``Document`` aggregate. It is intentionally free of UI / I/O code so that
the contained objects can be reused in any context (unit-tests, CLI, a web
session host, etc.).

Wire shape (what persistence round-trips)::

    {"pages": [{"id", "name", "slug", "elements": [node...],
                "seoTitle"?, "seoDescription"?}],
     "globalSettings": {...}}

    node = {"id", "type", "config", "order", "label"?}

Container nodes keep their children inside ``config``: ``config["elements"]``
for single-list containers and ``config["columns"][i]["elements"]`` for
multi-list containers.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pagecraft.core.models.save_status import SaveStatus, SaveStatusTracker
from pagecraft.core.utils import IdFactory, generate_id

__all__ = ["Node", "Page", "Document", "SaveStatus", "SaveStatusTracker"]


def _record_id(data: Dict[str, Any], id_factory: IdFactory) -> str:
    """Return the id of a wire record, accepting the legacy ``_id`` key."""
    raw = data.get("id") or data.get("_id")
    return str(raw) if raw else id_factory()


@dataclass
class Node:
    """One component instance in the composition tree.

    Attributes
    ----------
    id
        Opaque identifier, unique across the whole document.
    type
        Registry tag (``heading``, ``section``, ``columns``...).
    config
        Open configuration bag; container kinds hold their child lists here.
    order
        Position inside the owning list. Rewritten after every structural
        edit, never trusted as input.
    label
        Display name taken from the registry entry.
    """

    id: str
    type: str
    config: Dict[str, Any] = field(default_factory=dict)
    order: int = 0
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], id_factory: Optional[IdFactory] = None) -> "Node":
        """Build a node (and its subtree) from its wire dictionary.

        Records without an id get a freshly minted one, as do columns.
        """
        mint = id_factory or generate_id
        config: Dict[str, Any] = {}
        for key, value in (data.get("config") or {}).items():
            if key == "elements" and isinstance(value, list):
                config[key] = [cls.from_dict(child, mint) for child in value if isinstance(child, dict)]
            elif key == "columns" and isinstance(value, list):
                columns = []
                for column in value:
                    if not isinstance(column, dict):
                        continue
                    col = {k: copy.deepcopy(v) for k, v in column.items() if k not in ("id", "elements")}
                    col["id"] = str(column.get("id") or mint())
                    col["elements"] = [
                        cls.from_dict(child, mint)
                        for child in (column.get("elements") or [])
                        if isinstance(child, dict)
                    ]
                    columns.append(col)
                config[key] = columns
            else:
                config[key] = copy.deepcopy(value)
        return cls(
            id=_record_id(data, mint),
            type=str(data.get("type", "")),
            config=config,
            order=int(data.get("order") or 0),
            label=data.get("label"),
        )

    def to_dict(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        for key, value in self.config.items():
            if key == "elements" and isinstance(value, list):
                config[key] = _nodes_to_dicts(value)
            elif key == "columns" and isinstance(value, list):
                columns = []
                for column in value:
                    col = {k: copy.deepcopy(v) for k, v in column.items() if k != "elements"}
                    col["elements"] = _nodes_to_dicts(column.get("elements") or [])
                    columns.append(col)
                config[key] = columns
            else:
                config[key] = copy.deepcopy(value)
        data: Dict[str, Any] = {"id": self.id, "type": self.type, "config": config, "order": self.order}
        if self.label is not None:
            data["label"] = self.label
        return data


def _nodes_to_dicts(nodes: List[Any]) -> List[Dict[str, Any]]:
    """Serialise a child list, taking ``order`` from the list position."""
    out = []
    for index, node in enumerate(n for n in nodes if isinstance(n, Node)):
        data = node.to_dict()
        data["order"] = index
        out.append(data)
    return out


@dataclass
class Page:
    """A page: a name, a slug and the root node list of its tree."""

    id: str
    name: str
    slug: str
    elements: List[Node] = field(default_factory=list)
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], id_factory: Optional[IdFactory] = None) -> "Page":
        mint = id_factory or generate_id
        return cls(
            id=_record_id(data, mint),
            name=str(data.get("name", "")),
            slug=str(data.get("slug", "")),
            elements=[Node.from_dict(el, mint) for el in (data.get("elements") or []) if isinstance(el, dict)],
            seo_title=data.get("seoTitle"),
            seo_description=data.get("seoDescription"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "elements": _nodes_to_dicts(self.elements),
        }
        if self.seo_title is not None:
            data["seoTitle"] = self.seo_title
        if self.seo_description is not None:
            data["seoDescription"] = self.seo_description
        return data


@dataclass
class Document:
    """The ordered pages of a site plus its document-level settings."""

    pages: List[Page] = field(default_factory=list)
    global_settings: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], id_factory: Optional[IdFactory] = None) -> "Document":
        mint = id_factory or generate_id
        return cls(
            pages=[Page.from_dict(p, mint) for p in (data.get("pages") or []) if isinstance(p, dict)],
            global_settings=copy.deepcopy(data.get("globalSettings") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages": [page.to_dict() for page in self.pages],
            "globalSettings": copy.deepcopy(self.global_settings),
        }
