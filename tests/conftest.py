"""Test configuration and shared fixtures for the Pagecraft test-suite.

Every test runs against the packaged configuration only: user overrides are
redirected to an empty temporary directory and the ``ConfigManager``
singleton is dropped before and after each test.
"""

import itertools
import logging
from pathlib import Path
import sys

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pagecraft.config import ConfigManager
from pagecraft.core.models import Node, Page
from pagecraft.core.registry import ComponentRegistry

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class TreeBuilder:
    """Terse constructors for hand-written trees."""

    @staticmethod
    def node(node_id, type_tag="heading", **config):
        return Node(id=node_id, type=type_tag, config=dict(config))

    @staticmethod
    def section(node_id, marker, children=None, **config):
        config = dict(config)
        config["id"] = marker
        config["elements"] = list(children or [])
        return Node(id=node_id, type="section", config=config)

    @staticmethod
    def columns(node_id, columns):
        """*columns* is a list of ``(column_id, [children])`` pairs."""
        return Node(
            id=node_id,
            type="columns",
            config={
                "count": len(columns),
                "columns": [{"id": cid, "elements": list(kids)} for cid, kids in columns],
            },
        )

    @staticmethod
    def page(page_id="p1", elements=None, name="Home", slug="/"):
        return Page(id=page_id, name=name, slug=slug, elements=list(elements or []))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty directory and reload config per test."""
    config_dir = tmp_path / "pagecraft-config"
    config_dir.mkdir()
    monkeypatch.setenv("PAGECRAFT_CONFIG_DIR", str(config_dir))
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def tree():
    return TreeBuilder


@pytest.fixture
def id_factory():
    """Predictable ids: ``id1``, ``id2``..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def registry():
    return ComponentRegistry()


@pytest.fixture
def sample_pages(tree):
    """One page: ``h1``, section ``s1`` (marker ``s1-box``) holding ``t1``, columns ``c1``
    with ``b1`` in column ``col-a`` and an empty column ``col-b``."""
    section = tree.section("s1", "s1-box", [tree.node("t1", "text", htmlContent="<p>x</p>")])
    columns = tree.columns("c1", [("col-a", [tree.node("b1", "button", text="Go")]), ("col-b", [])])
    return [tree.page("p1", [tree.node("h1", text="Title"), section, columns])]


def all_orders_contiguous(pages):
    from pagecraft.core.services.container_resolver import iter_lists

    return all([n.order for n in nodes] == list(range(len(nodes))) for nodes in iter_lists(pages))


@pytest.fixture
def orders_contiguous():
    return all_orders_contiguous
