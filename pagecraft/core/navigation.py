from __future__ import annotations

"""Navigation entities as seen by the editing core.

Navigations are owned by an external collaborator; the session hands the
current list to a :class:`NavigationDirectory` and the path mutator reads it
when a navbar's ``navigationId`` changes. The one write is
:meth:`NavigationDirectory.remove_page_links`, used when a page is deleted;
the session reports the ids it changed so the host can push them back.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Optional

__all__ = [
    "NavigationItem",
    "Navigation",
    "NavigationDirectory",
    "links_from_navigation",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationItem:
    label: str
    url: str
    type: str = "internal"


@dataclass
class Navigation:
    """A named list of navigation links belonging to one site."""

    id: str
    name: str
    items: List[NavigationItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Navigation":
        items = [
            NavigationItem(
                label=str(item.get("label", "")),
                url=str(item.get("url", "")),
                type=str(item.get("type") or "internal"),
            )
            for item in (data.get("items") or [])
            if isinstance(item, dict)
        ]
        return cls(id=str(data.get("id") or data.get("_id") or ""), name=str(data.get("name", "")), items=items)


def links_from_navigation(navigation: Navigation) -> List[Dict[str, str]]:
    """Return the denormalised ``links`` list a navbar keeps for *navigation*."""
    return [{"text": item.label, "href": item.url, "type": item.type or "internal"} for item in navigation.items]


class NavigationDirectory:
    """In-memory lookup of the site's navigations by id."""

    def __init__(self, navigations: Optional[Iterable[Navigation]] = None) -> None:
        self._by_id: Dict[str, Navigation] = {}
        if navigations:
            self.replace_all(navigations)

    def resolve(self, navigation_id: Optional[str]) -> Optional[Navigation]:
        if not navigation_id:
            return None
        return self._by_id.get(navigation_id)

    def all(self) -> List[Navigation]:
        return list(self._by_id.values())

    def replace_all(self, navigations: Iterable[Navigation]) -> None:
        self._by_id = {nav.id: nav for nav in navigations}

    def upsert(self, navigation: Navigation) -> None:
        self._by_id[navigation.id] = navigation

    def remove(self, navigation_id: str) -> bool:
        return self._by_id.pop(navigation_id, None) is not None

    def remove_page_links(self, slug: str) -> List[str]:
        """Drop internal links pointing at *slug*; return ids of changed navigations.

        Used when a page is deleted. The caller is responsible for pushing the
        changed navigations back to their owner.
        """
        changed: List[str] = []
        for nav in self._by_id.values():
            kept = [item for item in nav.items if not (item.type == "internal" and item.url == slug)]
            if len(kept) < len(nav.items):
                nav.items = kept
                changed.append(nav.id)
        if changed:
            logger.info("Removed links to deleted page %s from %d navigation(s)", slug, len(changed))
        return changed
