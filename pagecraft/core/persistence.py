from __future__ import annotations

"""Document stores: where the editor loads pages from and saves them to.

The session only talks to the :class:`DocumentStore` protocol. Two
implementations ship with the core:

- :class:`InMemoryDocumentStore` keeps JSON strings in a dict. Used by tests
  and by sessions that run without a backend.
- :class:`HttpDocumentStore` talks to the site backend over HTTP with
  ``requests``: ``GET``/``POST {base_url}/api/websites/{id}/content``.

Stores never raise to their caller. Transport errors, non-2xx responses and
malformed payloads are returned as ``LoadResult.error`` / ``SaveResult.error``.
"""

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from pagecraft.config import ConfigManager
from pagecraft.core.exceptions import PersistenceError
from pagecraft.core.models import Document, Page

__all__ = [
    "LoadResult",
    "SaveResult",
    "DocumentStore",
    "InMemoryDocumentStore",
    "HttpDocumentStore",
    "encode_content",
    "decode_content",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    document: Optional[Document] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.document is not None and self.error is None


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    error: Optional[str] = None
    version_id: Optional[str] = None


class DocumentStore(Protocol):
    def load(self, document_id: str) -> LoadResult:
        ...

    def save(self, document_id: str, pages: List[Page], global_settings: Dict[str, Any]) -> SaveResult:
        ...


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def encode_content(pages: List[Page], global_settings: Dict[str, Any]) -> Dict[str, Any]:
    """Return the ``{pages, globalSettings}`` request body, ``order`` from list position."""
    return Document(pages=list(pages), global_settings=dict(global_settings or {})).to_dict()


def decode_content(payload: Any) -> Document:
    """Parse a content payload into a :class:`Document`.

    Accepts the bare ``{pages, globalSettings}`` shape or the same wrapped in
    a ``content`` key.

    Raises
    ------
    PersistenceError
        If the payload carries no ``pages`` list.
    """
    if isinstance(payload, dict) and isinstance(payload.get("content"), dict):
        payload = payload["content"]
    if not isinstance(payload, dict) or not isinstance(payload.get("pages"), list):
        raise PersistenceError("Content payload has no 'pages' list")
    return Document.from_dict(payload)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class InMemoryDocumentStore:
    """Dict-backed store holding each document as a JSON string."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self._blobs: Dict[str, str] = {}
        self._versions: Dict[str, int] = {}
        for document_id, content in (documents or {}).items():
            self._blobs[document_id] = json.dumps(content)

    def load(self, document_id: str) -> LoadResult:
        blob = self._blobs.get(document_id)
        if blob is None:
            return LoadResult(error=f"Document '{document_id}' not found")
        try:
            return LoadResult(document=decode_content(json.loads(blob)))
        except (ValueError, PersistenceError) as e:
            logger.error("Stored document %s is unreadable: %s", document_id, e)
            return LoadResult(error=str(e))

    def save(self, document_id: str, pages: List[Page], global_settings: Dict[str, Any]) -> SaveResult:
        try:
            blob = json.dumps(encode_content(pages, global_settings))
        except (TypeError, ValueError) as e:
            logger.error("Document %s is not serialisable: %s", document_id, e)
            return SaveResult(ok=False, error=f"Content is not serialisable: {e}")
        self._blobs[document_id] = blob
        self._versions[document_id] = self._versions.get(document_id, 0) + 1
        return SaveResult(ok=True, version_id=f"{document_id}-v{self._versions[document_id]}")

    def raw(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored wire dict for *document_id* (tests, debugging)."""
        blob = self._blobs.get(document_id)
        return json.loads(blob) if blob is not None else None


class HttpDocumentStore:
    """Store backed by the site's content API.

    Parameters
    ----------
    base_url : str, optional
        Backend root, e.g. ``http://localhost:3000``. Defaults to
        ``persistence.base_url`` from the editor configuration.
    timeout : float, optional
        Request timeout in seconds; ``persistence.timeout`` by default.
    session : requests.Session, optional
        Injected for authentication headers or for tests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = ConfigManager().get_editor_config().get("persistence", {}) or {}
        self.base_url = (base_url or settings.get("base_url") or "").rstrip("/")
        self.timeout = float(timeout if timeout is not None else settings.get("timeout", 10))
        self._session = session or requests.Session()

    def _content_url(self, document_id: str) -> str:
        return f"{self.base_url}/api/websites/{document_id}/content"

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    def load(self, document_id: str) -> LoadResult:
        url = self._content_url(document_id)
        try:
            response = self._session.get(url, timeout=self.timeout)
            if not response.ok:
                raise PersistenceError(self._error_message(response), status_code=response.status_code)
            return LoadResult(document=decode_content(response.json()))
        except requests.exceptions.InvalidJSONError as e:
            logger.error("Load of %s returned invalid JSON: %s", document_id, e)
            return LoadResult(error="Invalid JSON in response")
        except requests.RequestException as e:
            logger.error("Load of %s failed: %s", document_id, e)
            return LoadResult(error=f"Network error: {e}")
        except ValueError as e:
            logger.error("Load of %s returned invalid JSON: %s", document_id, e)
            return LoadResult(error="Invalid JSON in response")
        except PersistenceError as e:
            logger.error("Load of %s failed: %s", document_id, e)
            return LoadResult(error=str(e))

    def save(self, document_id: str, pages: List[Page], global_settings: Dict[str, Any]) -> SaveResult:
        url = self._content_url(document_id)
        try:
            response = self._session.post(url, json=encode_content(pages, global_settings), timeout=self.timeout)
            if not response.ok:
                raise PersistenceError(self._error_message(response), status_code=response.status_code)
            body = response.json()
            if not isinstance(body, dict) or not body.get("success"):
                raise PersistenceError("Unexpected response from save endpoint")
            version_id = body.get("versionId")
            logger.info("Saved %s (version %s)", document_id, version_id)
            return SaveResult(ok=True, version_id=str(version_id) if version_id is not None else None)
        except requests.exceptions.InvalidJSONError as e:
            logger.error("Save of %s returned invalid JSON: %s", document_id, e)
            return SaveResult(ok=False, error="Invalid JSON in response")
        except requests.RequestException as e:
            logger.error("Save of %s failed: %s", document_id, e)
            return SaveResult(ok=False, error=f"Network error: {e}")
        except ValueError as e:
            logger.error("Save of %s returned invalid JSON: %s", document_id, e)
            return SaveResult(ok=False, error="Invalid JSON in response")
        except PersistenceError as e:
            logger.error("Save of %s failed: %s", document_id, e)
            return SaveResult(ok=False, error=str(e))
