from __future__ import annotations

"""Exception classes for the editing core.

Tree edits never raise for stale ids or unresolved targets; these exceptions
cover configuration mistakes and collaborator failures. Stores convert
``PersistenceError`` into result data before it reaches the session.
"""

from typing import Optional


class PagecraftError(Exception):
    """Base exception for all Pagecraft errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigError(PagecraftError):
    """Raised when a registry or editor configuration entry is malformed."""

    def __init__(self, message: str, key: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause)
        self.key = key

    def __str__(self) -> str:
        if self.key:
            return f"[{self.key}] {super().__str__()}"
        return super().__str__()


class PersistenceError(PagecraftError):
    """Raised inside a document store when loading or saving fails."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause)
        self.status_code = status_code
