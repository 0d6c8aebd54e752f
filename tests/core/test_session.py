import pytest

from pagecraft.core.models import SaveStatus
from pagecraft.core.navigation import Navigation, NavigationDirectory, NavigationItem
from pagecraft.core.persistence import InMemoryDocumentStore, SaveResult
from pagecraft.core.services.container_resolver import ROOT_CONTAINER_ID, find_node
from pagecraft.core.services.drag_engine import DragSource
from pagecraft.core.session import EditorSession


SITE = {
    "pages": [
        {
            "id": "home",
            "name": "Home",
            "slug": "/",
            "elements": [
                {"id": "hero1", "type": "hero", "config": {"title": "Welcome to Our Site!"}, "order": 0},
                {"id": "nav1", "type": "navbar", "config": {"navigationId": "main", "links": []}, "order": 1},
            ],
        },
        {"id": "about", "name": "About", "slug": "/about", "elements": []},
    ],
    "globalSettings": {},
}


@pytest.fixture
def store():
    return InMemoryDocumentStore({"site": SITE})


@pytest.fixture
def navigation():
    return NavigationDirectory(
        [Navigation("main", "Main", [NavigationItem("Home", "/"), NavigationItem("About", "/about")])]
    )


@pytest.fixture
def session(store, navigation, id_factory):
    session = EditorSession(store=store, navigation=navigation, id_factory=id_factory)
    assert session.load("site")
    return session


def test_load_installs_document(session):
    assert [p.id for p in session.pages] == ["home", "about"]
    assert session.status is SaveStatus.SAVED
    assert not session.can_undo


def test_load_failure_installs_default_page(store):
    session = EditorSession(store=store)
    assert not session.load("missing")
    assert session.status is SaveStatus.ERROR
    assert [(p.name, p.slug) for p in session.pages] == [("Home", "/")]
    assert session.pages[0].seo_title == "Home Page"

    assert not session.load(None)
    assert session.status is SaveStatus.IDLE


def test_change_property_commits_once(session):
    assert not session.change_property("title", "x")  # nothing selected
    assert session.select("hero1")
    assert session.change_property("title", "Welcome")
    assert session.selected_node().config["title"] == "Welcome"
    assert session.status is SaveStatus.UNSAVED_CHANGES
    assert len(session.history) == 2

    # Same value again: no commit
    assert not session.change_property("title", "Welcome")
    assert len(session.history) == 2


def test_undo_redo_clear_selection(session):
    session.select("hero1")
    session.change_property("title", "Welcome")
    assert session.undo()
    assert session.selected_id is None
    assert find_node(session.pages, "hero1").config["title"] == "Welcome to Our Site!"
    assert session.redo()
    assert find_node(session.pages, "hero1").config["title"] == "Welcome"
    assert not session.redo()
    assert session.status is SaveStatus.UNSAVED_CHANGES


def test_drag_from_palette_and_move(session):
    assert session.drag_end(DragSource.palette("section"), ROOT_CONTAINER_ID)
    section = session.pages[0].elements[-1]
    assert session.drag_end(DragSource.existing("hero1"), section.config["id"])
    assert [n.id for n in session.pages[0].elements] == ["nav1", section.id]
    assert [n.id for n in session.pages[0].elements[1].config["elements"]] == ["hero1"]
    assert len(session.history) == 3

    assert not session.drag_end(DragSource.existing(section.id), section.config["id"])
    assert len(session.history) == 3


def test_drag_uses_active_page(session):
    assert session.set_active_page(1)
    session.drag_end(DragSource.palette("text"), ROOT_CONTAINER_ID)
    assert [n.type for n in session.pages[1].elements] == ["text"]


def test_delete_duplicate_reset_selected(session):
    session.select("hero1")
    assert session.duplicate_selected()
    assert len(session.pages[0].elements) == 3
    session.change_property("title", "Changed")
    assert session.reset_selected()
    assert find_node(session.pages, "hero1").config["title"] == "Welcome to Our Site!"
    assert session.delete_selected()
    assert session.selected_id is None
    assert find_node(session.pages, "hero1") is None
    assert not session.delete_selected()


def test_add_and_delete_pages(session, navigation):
    assert session.add_page()
    assert session.pages[-1].name == "New Page"
    assert session.active_page_index == 2

    assert session.delete_page("about")
    assert [p.id for p in session.pages] == ["home", session.pages[1].id]
    # Internal link to the deleted page is gone and the navbar cache follows
    assert [i.url for i in navigation.resolve("main").items] == ["/"]
    assert find_node(session.pages, "nav1").config["links"] == [{"text": "Home", "href": "/", "type": "internal"}]
    assert session.last_changed_navigations == ["main"]

    assert session.delete_page(session.pages[1].id)
    assert session.last_changed_navigations == []


def test_last_page_cannot_be_deleted(session):
    session.delete_page("about")
    assert not session.delete_page("home")
    assert len(session.pages) == 1


def test_clear_page_and_page_details(session):
    assert session.clear_page("home")
    assert session.pages[0].elements == []
    assert session.change_page_details(name="Start", seo_description="Hello")
    assert (session.pages[0].name, session.pages[0].seo_description) == ("Start", "Hello")


def test_global_setting_not_in_history(session):
    assert session.change_global_setting("fontFamily", "Inter")
    assert session.status is SaveStatus.UNSAVED_CHANGES
    assert len(session.history) == 1
    assert not session.change_global_setting("fontFamily", "Inter")


def test_save_resets_history(session, store):
    session.select("hero1")
    session.change_property("title", "Saved title")
    result = session.save()
    assert result.ok
    assert session.status is SaveStatus.SAVED
    assert not session.can_undo
    saved = store.raw("site")
    assert saved["pages"][0]["elements"][0]["config"]["title"] == "Saved title"
    assert saved == session.content_for_save()


def test_save_failure_sets_error(session, monkeypatch, store):
    monkeypatch.setattr(store, "save", lambda *args: SaveResult(ok=False, error="boom"))
    session.select("hero1")
    session.change_property("title", "x")
    assert not session.save().ok
    assert session.status is SaveStatus.ERROR
    assert session.can_undo


def test_history_keeps_every_edit(session):
    session.select("hero1")
    for i in range(120):
        assert session.change_property("title", f"title {i}")
    while session.undo():
        pass
    assert find_node(session.pages, "hero1").config["title"] == "Welcome to Our Site!"


class RaisingStore(InMemoryDocumentStore):
    def save(self, document_id, pages, global_settings):
        raise ConnectionError("socket closed")


def test_save_survives_raising_store(id_factory):
    store = RaisingStore({"site": SITE})
    session = EditorSession(store=store, id_factory=id_factory)
    session.load("site")
    session.select("hero1")
    session.change_property("title", "x")

    result = session.save()
    assert not result.ok
    assert result.error == "socket closed"
    assert session.status is SaveStatus.ERROR
    assert session.can_undo

    # The tracker is not stuck: a later save is attempted again.
    store.save = lambda *args: SaveResult(ok=True, version_id="v2")
    assert session.save().ok
    assert session.status is SaveStatus.SAVED


def test_load_survives_raising_store(store, monkeypatch):
    def boom(document_id):
        raise ConnectionError("socket closed")

    monkeypatch.setattr(store, "load", boom)
    session = EditorSession(store=store)
    assert not session.load("site")
    assert session.status is SaveStatus.ERROR
    assert [p.name for p in session.pages] == ["Home"]


def test_save_refused_while_saving_or_without_document(session, store):
    session.save_status.begin_save()
    assert session.save().error == "A save is already in progress"

    fresh = EditorSession(store=store)
    assert not fresh.save().ok


def test_content_for_save_renumbers(session):
    session.pages[0].elements[0].order = 5
    content = session.content_for_save()
    assert [el["order"] for el in content["pages"][0]["elements"]] == [0, 1]


def test_navigation_notifications(session, navigation):
    navigation.upsert(Navigation("main", "Main", [NavigationItem("Shop", "/shop")]))
    assert session.on_navigation_changed("main")
    assert find_node(session.pages, "nav1").config["links"] == [{"text": "Shop", "href": "/shop", "type": "internal"}]
    assert not session.on_navigation_changed("main")

    assert session.on_navigation_deleted("main")
    navbar = find_node(session.pages, "nav1")
    assert navbar.config["navigationId"] is None
    assert navbar.config["links"][0]["text"] == "Home"


def test_load_normalises_container_shapes(id_factory):
    store = InMemoryDocumentStore(
        {"bare": {"pages": [{"id": "p", "name": "P", "slug": "/", "elements": [{"id": "s", "type": "section", "config": {}}]}]}}
    )
    session = EditorSession(store=store, id_factory=id_factory)
    assert session.load("bare")
    section = session.pages[0].elements[0]
    assert section.config["elements"] == []
    assert section.config["id"]
    assert session.drag_end(DragSource.palette("heading"), section.config["id"])
    assert session.pages[0].elements[0].config["elements"][0].type == "heading"
