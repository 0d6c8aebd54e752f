from __future__ import annotations

"""Editor session: the one place that holds mutable editor state.

UI intents arrive here (property edits, drops, page management, undo/redo,
save). Each intent calls a pure service, and when the service reports a
change the session swaps in the new tree, commits it to history exactly once
and marks the document dirty. Intents that change nothing commit nothing.

Example
-------
>>> session = EditorSession(store=InMemoryDocumentStore({"site": content}))
>>> session.load("site")
>>> session.drag_end(DragSource.palette("heading"), ROOT_CONTAINER_ID)
>>> session.save()
"""

import copy
from dataclasses import replace
import logging
from typing import Any, Dict, List, Optional

from pagecraft.config import ConfigManager
from pagecraft.core.models import Document, Node, Page, SaveStatus, SaveStatusTracker
from pagecraft.core.navigation import Navigation, NavigationDirectory
from pagecraft.core.persistence import (
    DocumentStore,
    HttpDocumentStore,
    LoadResult,
    SaveResult,
    encode_content,
)
from pagecraft.core.registry import ComponentRegistry
from pagecraft.core.services.container_resolver import find_node, iter_nodes
from pagecraft.core.services.drag_engine import DragEngine, DragSource
from pagecraft.core.services.history_service import HistoryService
from pagecraft.core.services.path_mutator import PathMutator
from pagecraft.core.services.structure_editing_service import (
    DEFAULT_PAGE_BASE_NAME,
    OperationResult,
    StructureEditingService,
)
from pagecraft.core.utils import IdFactory, generate_id

__all__ = ["EditorSession"]

logger = logging.getLogger(__name__)


class EditorSession:
    """Mutable editor state around the pure editing services.

    Parameters
    ----------
    registry : ComponentRegistry, optional
        Component catalogue; the packaged one when omitted.
    store : DocumentStore, optional
        Where documents are loaded from and saved to. An
        :class:`HttpDocumentStore` on the configured backend when omitted.
    navigation : NavigationDirectory, optional
        The site's navigations, used for navbar links.
    config : dict, optional
        Editor settings (the ``editor`` configuration section by default).
    id_factory : callable, optional
        Id minting function handed to the editing service.
    """

    def __init__(
        self,
        registry: Optional[ComponentRegistry] = None,
        store: Optional[DocumentStore] = None,
        navigation: Optional[NavigationDirectory] = None,
        config: Optional[Dict[str, Any]] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._config = config if config is not None else ConfigManager().get_editor_config()
        self._registry = registry if registry is not None else ComponentRegistry()
        self._store = store if store is not None else HttpDocumentStore()
        self.navigation = navigation if navigation is not None else NavigationDirectory()
        self._mint = id_factory or generate_id

        self.editing = StructureEditingService(self._registry, self._mint)
        self.mutator = PathMutator(self._registry, self.navigation)
        drag_settings = self._config.get("drag", {}) or {}
        self.drag = DragEngine(self.editing, bool(drag_settings.get("palette_fallback_to_root", True)))

        history_settings = self._config.get("history", {}) or {}
        self.document = self._default_document()
        max_history = history_settings.get("max_history")
        self.history = HistoryService(self.document.pages, None if max_history is None else int(max_history))
        self.save_status = SaveStatusTracker()
        self.document_id: Optional[str] = None
        self.active_page_index = 0
        self.selected_id: Optional[str] = None
        # Navigation ids edited in place by the last page deletion.
        self.last_changed_navigations: List[str] = []

    # ------------------------------------------------------------------ state

    @property
    def pages(self) -> List[Page]:
        return self.document.pages

    @property
    def active_page(self) -> Optional[Page]:
        if 0 <= self.active_page_index < len(self.document.pages):
            return self.document.pages[self.active_page_index]
        return None

    @property
    def status(self) -> SaveStatus:
        return self.save_status.status

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def _default_document(self) -> Document:
        pages_settings = self._config.get("pages", {}) or {}
        data = dict(pages_settings.get("default_page") or {"name": "Home", "slug": "/"})
        data.setdefault("elements", [])
        return Document(pages=[Page.from_dict(data, self._mint)], global_settings={})

    def _install(self, document: Document) -> None:
        if not document.pages:
            document = replace(document, pages=self._default_document().pages)
        for node in iter_nodes(document.pages):
            self._registry.ensure_container_shape(node, self._mint)
        self.document = document
        self.history.reset(document.pages)
        self.active_page_index = 0
        self.selected_id = None

    def _commit(self, pages: List[Page]) -> None:
        self.document = replace(self.document, pages=pages)
        self.history.commit(pages)
        self.save_status.mark_dirty()
        if self.active_page_index >= len(pages):
            self.active_page_index = max(0, len(pages) - 1)
        if self.selected_id is not None and find_node(pages, self.selected_id) is None:
            self.selected_id = None

    def _apply(self, result: OperationResult) -> bool:
        if not result.success or result.pages is None or result.pages is self.document.pages:
            return False
        self._commit(result.pages)
        return True

    def _page_id(self, page_id: Optional[str]) -> Optional[str]:
        if page_id is not None:
            return page_id
        page = self.active_page
        return page.id if page else None

    # ------------------------------------------------------------ persistence

    def load(self, document_id: Optional[str]) -> bool:
        """Load *document_id* from the store.

        On failure a single default page is installed so the editor stays
        usable, and the status becomes ``error`` (``idle`` when no id given).
        """
        self.document_id = document_id or None
        if not document_id:
            self._install(self._default_document())
            self.save_status.reset()
            return False

        try:
            result = self._store.load(document_id)
        except Exception as e:
            logger.error("Store raised while loading %s", document_id, exc_info=True)
            result = LoadResult(document=None, error=str(e))
        if not result.ok:
            logger.warning("Could not load document %s: %s", document_id, result.error)
            self._install(self._default_document())
            self.save_status.mark_error()
            return False

        self._install(result.document)
        self.save_status.mark_loaded()
        logger.info("Loaded document %s (%d page(s))", document_id, len(self.document.pages))
        return True

    def content_for_save(self) -> Dict[str, Any]:
        """Return the wire payload for the current document, ``order`` renumbered."""
        return encode_content(self.document.pages, self.document.global_settings)

    def save(self) -> SaveResult:
        """Save the current document; refused while another save is in flight."""
        if not self.document_id:
            logger.warning("Save refused: no document id")
            return SaveResult(ok=False, error="No document loaded")
        if not self.save_status.begin_save():
            return SaveResult(ok=False, error="A save is already in progress")

        snapshot = copy.deepcopy(self.document.pages)
        try:
            result = self._store.save(self.document_id, snapshot, copy.deepcopy(self.document.global_settings))
        except Exception as e:
            logger.error("Store raised while saving %s", self.document_id, exc_info=True)
            result = SaveResult(ok=False, error=str(e))
        status = self.save_status.finish_save(result.ok)
        if status is SaveStatus.SAVED:
            self.history.reset(snapshot)
        if not result.ok:
            logger.error("Save of %s failed: %s", self.document_id, result.error)
        return result

    # -------------------------------------------------------------- selection

    def select(self, node_id: Optional[str]) -> bool:
        if node_id is None:
            self.selected_id = None
            return True
        if find_node(self.document.pages, node_id) is None:
            return False
        self.selected_id = node_id
        return True

    def selected_node(self) -> Optional[Node]:
        return find_node(self.document.pages, self.selected_id)

    def set_active_page(self, index: int) -> bool:
        if not 0 <= index < len(self.document.pages):
            return False
        self.active_page_index = index
        self.selected_id = None
        return True

    # ------------------------------------------------------------------ edits

    def change_property(self, path: str, value: Any) -> bool:
        if self.selected_id is None:
            return False
        return self._apply(
            self.editing.update_node_property(self.document.pages, self.selected_id, path, value, self.mutator)
        )

    def change_page_details(
        self,
        page_id: Optional[str] = None,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
    ) -> bool:
        return self._apply(
            self.editing.update_page_details(
                self.document.pages, self._page_id(page_id), name, slug, seo_title, seo_description
            )
        )

    def change_global_setting(self, key: str, value: Any) -> bool:
        """Set a document-level setting. Not recorded in history."""
        if self.document.global_settings.get(key) == value and key in self.document.global_settings:
            return False
        settings = copy.deepcopy(self.document.global_settings)
        settings[key] = value
        self.document = replace(self.document, global_settings=settings)
        self.save_status.mark_dirty()
        return True

    def add_page(self) -> bool:
        pages_settings = self._config.get("pages", {}) or {}
        base_name = pages_settings.get("new_page_base_name") or DEFAULT_PAGE_BASE_NAME
        result = self.editing.add_page(self.document.pages, base_name)
        if not self._apply(result):
            return False
        self.active_page_index = result.details["page_index"]
        self.selected_id = None
        return True

    def delete_page(self, page_id: Optional[str] = None) -> bool:
        """Delete a page and drop internal navigation links to its slug.

        The ids of navigations that lost a link are kept in
        ``last_changed_navigations`` for the host to push back to their owner.
        """
        self.last_changed_navigations = []
        result = self.editing.delete_page(self.document.pages, self._page_id(page_id))
        if not result.success:
            return False
        pages = result.pages
        self.last_changed_navigations = self.navigation.remove_page_links(result.details["slug"])
        for navigation_id in self.last_changed_navigations:
            pages = self.mutator.refresh_navigation_links(pages, navigation_id)
        if self.active_page_index >= result.details["page_index"] and self.active_page_index > 0:
            self.active_page_index -= 1
        self._commit(pages)
        return True

    def clear_page(self, page_id: Optional[str] = None) -> bool:
        return self._apply(self.editing.clear_page(self.document.pages, self._page_id(page_id)))

    def delete_selected(self) -> bool:
        if self.selected_id is None:
            return False
        changed = self._apply(self.editing.delete(self.document.pages, self.selected_id))
        self.selected_id = None
        return changed

    def duplicate_selected(self) -> bool:
        if self.selected_id is None:
            return False
        return self._apply(self.editing.duplicate(self.document.pages, self.selected_id))

    def reset_selected(self) -> bool:
        if self.selected_id is None:
            return False
        return self._apply(self.editing.reset_node(self.document.pages, self.selected_id))

    def drag_end(self, source: DragSource, target_id: Optional[str]) -> bool:
        document = self.drag.on_drag_end(self.document, source, target_id, self.active_page_index)
        if document is self.document:
            return False
        self._commit(document.pages)
        return True

    # ---------------------------------------------------------------- history

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, pages: Optional[List[Page]]) -> bool:
        if pages is None:
            return False
        self.document = replace(self.document, pages=pages)
        self.selected_id = None
        if self.active_page_index >= len(pages):
            self.active_page_index = max(0, len(pages) - 1)
        self.save_status.mark_dirty()
        return True

    # ------------------------------------------------------------- navigation

    def on_navigation_changed(self, navigation_id: str, navigation: Optional[Navigation] = None) -> bool:
        """Re-derive navbar links after a navigation was edited elsewhere."""
        if navigation is not None:
            self.navigation.upsert(navigation)
        pages = self.mutator.refresh_navigation_links(self.document.pages, navigation_id)
        if pages is self.document.pages:
            return False
        self._commit(pages)
        return True

    def on_navigation_deleted(self, navigation_id: str) -> bool:
        """Clear navbar references to a deleted navigation and reset their links."""
        self.navigation.remove(navigation_id)
        return self.on_navigation_changed(navigation_id)
