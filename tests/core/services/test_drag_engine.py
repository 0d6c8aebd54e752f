import pytest

from pagecraft.core.models import Document
from pagecraft.core.services.container_resolver import ROOT_CONTAINER_ID
from pagecraft.core.services.drag_engine import DragEngine, DragSource


@pytest.fixture
def document(sample_pages):
    return Document(pages=sample_pages, global_settings={"theme": "light"})


@pytest.fixture
def engine(service):
    return DragEngine(service)


def test_palette_drop_into_section(engine, document):
    result = engine.on_drag_end(document, DragSource.palette("heading"), "s1-box")
    assert result is not document
    inner = result.pages[0].elements[1].config["elements"]
    assert [n.type for n in inner] == ["text", "heading"]
    assert result.global_settings == {"theme": "light"}
    # Source document untouched
    assert len(document.pages[0].elements[1].config["elements"]) == 1


def test_palette_drop_onto_sibling_lands_after_it(engine, document):
    result = engine.on_drag_end(document, DragSource.palette("divider"), "h1")
    assert [n.type for n in result.pages[0].elements] == ["heading", "divider", "section", "columns"]


def test_palette_drop_unknown_target_falls_back_to_root(engine, document):
    result = engine.on_drag_end(document, DragSource.palette("text"), "not-there")
    assert [n.type for n in result.pages[0].elements][-1] == "text"
    assert [n.order for n in result.pages[0].elements] == [0, 1, 2, 3]


def test_palette_drop_without_fallback_is_discarded(service, document):
    engine = DragEngine(service, palette_fallback_to_root=False)
    assert engine.on_drag_end(document, DragSource.palette("text"), "not-there") is document


def test_unknown_palette_type_is_discarded(engine, document):
    assert engine.on_drag_end(document, DragSource.palette("hologram"), ROOT_CONTAINER_ID) is document


def test_no_target_is_discarded(engine, document):
    assert engine.on_drag_end(document, DragSource.palette("text"), None) is document
    assert engine.on_drag_end(document, DragSource.existing("h1"), "") is document


def test_existing_dropped_onto_itself(engine, document):
    assert engine.on_drag_end(document, DragSource.existing("h1"), "h1") is document


def test_existing_move_into_column(engine, document):
    result = engine.on_drag_end(document, DragSource.existing("t1"), "col-b")
    assert result.pages[0].elements[1].config["elements"] == []
    assert [n.id for n in result.pages[0].elements[2].config["columns"][1]["elements"]] == ["t1"]


def test_existing_move_into_own_subtree_is_discarded(engine, document):
    assert engine.on_drag_end(document, DragSource.existing("c1"), "col-a") is document


def test_palette_drop_on_active_page(engine, document, tree):
    doc = Document(pages=document.pages + [tree.page("p2", [], name="Two", slug="/two")])
    result = engine.on_drag_end(doc, DragSource.palette("heading"), ROOT_CONTAINER_ID, page_index=1)
    assert [n.type for n in result.pages[1].elements] == ["heading"]
    assert len(result.pages[0].elements) == 3
