import pytest

from pagecraft.core.exceptions import ConfigError
from pagecraft.core.models import Node
from pagecraft.core.registry import ComponentRegistry


def test_packaged_registry_kinds(registry):
    for kind in ("heading", "text", "navbar", "hero", "faq", "section", "columns", "customCode"):
        assert kind in registry
    assert registry.is_container_kind("section")
    assert registry.is_container_kind("columns")
    assert not registry.is_container_kind("heading")
    assert registry.container_shape("section") == "elements"
    assert registry.container_shape("columns") == "columns"
    assert registry.get_label("hero") == "Hero Section"


def test_default_config_is_a_private_copy(registry):
    first = registry.get_default_config("faq")
    first["items"].clear()
    assert len(registry.get_default_config("faq")["items"]) == 2
    assert registry.get_default_config("unknown") == {}


def test_explicit_definitions():
    registry = ComponentRegistry(
        {"box": {"label": "Box", "container": "elements", "default_config": {"elements": []}}, "dot": {}}
    )
    assert registry.types() == ["box", "dot"]
    assert registry.get_label("dot") == "dot"
    assert registry.get("box").is_container


@pytest.mark.parametrize(
    "raw",
    [
        {"container": "grid"},
        {"default_config": ["not", "a", "mapping"]},
    ],
)
def test_invalid_definitions_raise(raw):
    with pytest.raises(ConfigError) as excinfo:
        ComponentRegistry({"broken": raw})
    assert str(excinfo.value).startswith("[broken]")


def test_ensure_container_shape(registry, id_factory):
    section = registry.ensure_container_shape(Node("s", "section", {}), id_factory)
    assert section.config == {"elements": [], "id": "id1"}

    columns = registry.ensure_container_shape(Node("c", "columns", {"columns": [{}, {"id": "keep"}]}), id_factory)
    assert columns.config["columns"] == [{"id": "id2", "elements": []}, {"id": "keep", "elements": []}]

    leaf = registry.ensure_container_shape(Node("h", "heading", {"text": "x"}), id_factory)
    assert leaf.config == {"text": "x"}


def test_user_override_extends_registry(isolated_config):
    (isolated_config / "component_registry.yml").write_text(
        "components:\n  spacer:\n    label: Spacer\n    default_config:\n      height: 8px\n",
        encoding="utf-8",
    )
    registry = ComponentRegistry()
    assert "spacer" in registry
    assert "heading" in registry
