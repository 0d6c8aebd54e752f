from __future__ import annotations

"""Component registry: the fixed catalogue of component kinds.

Each entry maps a type tag to a label, a default configuration and an
optional container shape. The registry is the only place that knows which
kinds own child lists; traversal code elsewhere branches on the shape keys
(``elements`` / ``columns``) alone.

Definitions are read from the packaged ``component_registry.yml`` through
:class:`~pagecraft.config.ConfigManager` unless passed explicitly.
"""

import copy
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional

from pagecraft.config import ConfigManager
from pagecraft.core.exceptions import ConfigError
from pagecraft.core.models import Node
from pagecraft.core.utils import IdFactory, generate_id

__all__ = [
    "ComponentDefinition",
    "ComponentRegistry",
    "SINGLE_LIST",
    "MULTI_LIST",
]

logger = logging.getLogger(__name__)

SINGLE_LIST = "elements"
MULTI_LIST = "columns"
_SHAPES = (SINGLE_LIST, MULTI_LIST)


@dataclass(frozen=True)
class ComponentDefinition:
    """Registry entry for one component kind."""

    type: str
    label: str
    description: str = ""
    container: Optional[str] = None
    default_config: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_container(self) -> bool:
        return self.container is not None


class ComponentRegistry:
    """Lookup of component kinds by type tag.

    Parameters
    ----------
    definitions : dict, optional
        Mapping of type tag -> ``{label, description, container, default_config}``.
        When omitted, the ``components`` section of the packaged registry
        configuration is used.

    Raises
    ------
    ConfigError
        If an entry declares an unknown container shape or a non-mapping
        default configuration.
    """

    def __init__(self, definitions: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        if definitions is None:
            definitions = ConfigManager().get_component_registry().get("components", {}) or {}
        self._definitions: Dict[str, ComponentDefinition] = {}
        for type_tag, raw in definitions.items():
            self._definitions[type_tag] = self._parse(type_tag, raw or {})
        logger.debug("Component registry loaded: %d kinds", len(self._definitions))

    @staticmethod
    def _parse(type_tag: str, raw: Dict[str, Any]) -> ComponentDefinition:
        container = raw.get("container")
        if container is not None and container not in _SHAPES:
            raise ConfigError(f"Unknown container shape '{container}'", key=type_tag)
        default_config = raw.get("default_config") or {}
        if not isinstance(default_config, dict):
            raise ConfigError("default_config must be a mapping", key=type_tag)
        return ComponentDefinition(
            type=type_tag,
            label=str(raw.get("label") or type_tag),
            description=str(raw.get("description") or ""),
            container=container,
            default_config=default_config,
        )

    # ------------------------------------------------------------------ lookup

    def get(self, type_tag: str) -> Optional[ComponentDefinition]:
        return self._definitions.get(type_tag)

    def types(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._definitions

    def get_label(self, type_tag: str) -> Optional[str]:
        definition = self._definitions.get(type_tag)
        return definition.label if definition else None

    def get_default_config(self, type_tag: str) -> Dict[str, Any]:
        """Return a private deep copy of the default configuration (``{}`` if unknown)."""
        definition = self._definitions.get(type_tag)
        if definition is None:
            return {}
        return copy.deepcopy(definition.default_config)

    def is_container_kind(self, type_tag: str) -> bool:
        definition = self._definitions.get(type_tag)
        return bool(definition and definition.is_container)

    def container_shape(self, type_tag: str) -> Optional[str]:
        definition = self._definitions.get(type_tag)
        return definition.container if definition else None

    # ---------------------------------------------------------------- shaping

    def ensure_container_shape(self, node: Node, id_factory: Optional[IdFactory] = None) -> Node:
        """Make sure a container-kind node carries its container shape.

        Missing lists become empty lists; a missing section marker or column
        id is minted. Leaf kinds are returned untouched. Mutates *node*.
        """
        mint = id_factory or generate_id
        shape = self.container_shape(node.type)
        if shape == SINGLE_LIST:
            if not isinstance(node.config.get("elements"), list):
                node.config["elements"] = []
            if not node.config.get("id"):
                node.config["id"] = mint()
        elif shape == MULTI_LIST:
            if not isinstance(node.config.get("columns"), list):
                node.config["columns"] = []
            for column in node.config["columns"]:
                if not column.get("id"):
                    column["id"] = mint()
                if not isinstance(column.get("elements"), list):
                    column["elements"] = []
        return node
