from __future__ import annotations

"""Path-addressed writes into a node's configuration bag.

One generic property panel edits every component kind by sending
``(path, value)`` pairs such as ``"title"``, ``"items.2.answer"`` or
``"links[0].href"``. This module turns those into writes.

Write policy
------------
- Missing intermediate containers are created: a list when the next segment
  is numeric, a dict otherwise. Lists are padded with ``None`` up to the
  requested index.
- A value in the way that has the wrong kind (e.g. a string where a list is
  needed) is *replaced* by a fresh container of the needed kind. Last write
  wins, structurally; nothing is raised.
- Only non-negative integers are list indices. A segment like ``-1`` is a
  dict key, so ``"items.-1.title"`` replaces an ``items`` list with a dict
  holding key ``"-1"``; there is no from-the-end addressing.
- :func:`set_at_path` writes in place. Callers pass a working copy; this
  module never deep-copies the node it is given.

The navbar special case: writing ``navigationId`` on a ``navbar`` node
re-derives its ``links`` cache from the referenced navigation. The cache is
refreshed on exactly two triggers, a direct edit of ``navigationId`` and
:meth:`PathMutator.refresh_navigation_links` (called when a navigation is
changed or deleted elsewhere).
"""

import copy
import logging
import re
from typing import Any, List, Optional, Union

from pagecraft.core.models import Page
from pagecraft.core.navigation import NavigationDirectory, links_from_navigation
from pagecraft.core.registry import ComponentRegistry
from pagecraft.core.services.container_resolver import iter_nodes

__all__ = ["parse_path", "set_at_path", "get_at_path", "PathMutator"]

logger = logging.getLogger(__name__)

Segment = Union[str, int]

_SEGMENT_RE = re.compile(r"[^.\[\]]+")

NAVBAR_TYPE = "navbar"
NAVIGATION_PATH = "navigationId"


def parse_path(path: str) -> List[Segment]:
    """Split ``"items[2].title"`` / ``"items.2.title"`` into ``["items", 2, "title"]``."""
    segments: List[Segment] = []
    for token in _SEGMENT_RE.findall(path or ""):
        token = token.strip()
        if not token:
            continue
        segments.append(int(token) if token.isdigit() else token)
    return segments


def _get_child(container: Any, segment: Segment) -> Any:
    if isinstance(container, list):
        if isinstance(segment, int) and segment < len(container):
            return container[segment]
        return None
    if isinstance(container, dict):
        return container.get(str(segment))
    return None


def _set_child(container: Any, segment: Segment, value: Any) -> None:
    if isinstance(container, list):
        # Only reached with an int segment: a str segment under a list is
        # replaced by a dict one level up.
        index = int(segment)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        container[str(segment)] = value


def set_at_path(config_root: dict, path: str, value: Any) -> bool:
    """Write *value* at *path* inside *config_root* (in place).

    Returns False only when *path* has no segments; every other path is
    written, creating or replacing containers on the way.
    """
    segments = parse_path(path)
    if not segments:
        return False

    current: Any = config_root
    for position, segment in enumerate(segments[:-1]):
        wants_list = isinstance(segments[position + 1], int)
        child = _get_child(current, segment)
        if (wants_list and not isinstance(child, list)) or (not wants_list and not isinstance(child, dict)):
            if child is not None:
                logger.debug(
                    "Path %s: replacing %s at segment %r with a new %s",
                    path, type(child).__name__, segment, "list" if wants_list else "dict",
                )
            child = [] if wants_list else {}
            _set_child(current, segment, child)
        current = child

    _set_child(current, segments[-1], value)
    return True


def get_at_path(config_root: Any, path: str, default: Any = None) -> Any:
    """Read the value at *path*, or *default* when any segment is missing."""
    segments = parse_path(path)
    if not segments:
        return default
    current = config_root
    for segment in segments:
        if isinstance(current, list):
            if not isinstance(segment, int) or segment >= len(current):
                return default
            current = current[segment]
        elif isinstance(current, dict):
            if str(segment) not in current:
                return default
            current = current[str(segment)]
        else:
            return default
    return current


class PathMutator:
    """Apply property-panel edits to nodes.

    Parameters
    ----------
    registry : ComponentRegistry, optional
        Used to validate paths against a kind's default shape and to reset
        navbar links when a navigation reference is cleared.
    navigation : NavigationDirectory, optional
        Source of navigation items for navbar link derivation.
    """

    def __init__(
        self,
        registry: Optional[ComponentRegistry] = None,
        navigation: Optional[NavigationDirectory] = None,
    ) -> None:
        self._registry = registry
        self._navigation = navigation or NavigationDirectory()

    @property
    def navigation(self) -> NavigationDirectory:
        return self._navigation

    def apply(self, node, path: str, value: Any) -> bool:
        """Write *value* at *path* in ``node.config`` (in place).

        Unknown paths are written anyway; they are only reported.
        """
        if not self.validate_path(node.type, path):
            logger.warning("Path '%s' is not part of the default shape of '%s'", path, node.type)
        if not set_at_path(node.config, path, value):
            return False
        if node.type == NAVBAR_TYPE and parse_path(path) == [NAVIGATION_PATH]:
            self._sync_navbar_links(node, value)
        return True

    def validate_path(self, node_type: str, path: str) -> bool:
        """Check *path* against the registry default config for *node_type*.

        Kinds without a registry entry, and paths that run into an empty
        default list, are accepted.
        """
        if self._registry is None or node_type not in self._registry:
            return True
        template: Any = self._registry.get_default_config(node_type)
        for segment in parse_path(path):
            if isinstance(template, dict):
                key = str(segment)
                if key not in template:
                    return False
                template = template[key]
            elif isinstance(template, list):
                if not isinstance(segment, int):
                    return False
                if not template:
                    return True
                template = template[0]
            else:
                return False
        return True

    def _default_links(self) -> List[Any]:
        if self._registry is None:
            return []
        return self._registry.get_default_config(NAVBAR_TYPE).get("links", [])

    def _sync_navbar_links(self, node, navigation_id: Any) -> None:
        navigation = self._navigation.resolve(navigation_id) if navigation_id else None
        if navigation is not None:
            node.config["links"] = links_from_navigation(navigation)
            logger.debug("Navbar %s links derived from navigation %s", node.id, navigation_id)
        elif not navigation_id:
            node.config["links"] = self._default_links()
            logger.debug("Navbar %s links reset to defaults", node.id)
        else:
            logger.info("Navbar %s references unknown navigation %s; links kept", node.id, navigation_id)

    def refresh_navigation_links(self, pages: List[Page], navigation_id: str) -> List[Page]:
        """Re-derive ``links`` on every navbar that references *navigation_id*.

        When the navigation no longer resolves, the reference is cleared and
        the links fall back to the registry default. Returns a new page list,
        or *pages* itself when no navbar references the navigation.
        """
        working = copy.deepcopy(pages)
        touched = 0
        for node in iter_nodes(working):
            if node.type != NAVBAR_TYPE or node.config.get(NAVIGATION_PATH) != navigation_id:
                continue
            before = copy.deepcopy(node.config)
            if self._navigation.resolve(navigation_id) is None:
                node.config[NAVIGATION_PATH] = None
                node.config["links"] = self._default_links()
            else:
                self._sync_navbar_links(node, navigation_id)
            if node.config != before:
                touched += 1
        if not touched:
            return pages
        logger.info("Refreshed links of %d navbar(s) for navigation %s", touched, navigation_id)
        return working
