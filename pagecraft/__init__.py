"""Top-level package for the Pagecraft page-composition editor core.

This package hosts the GUI-agnostic editing engine. Front-ends (a web
session host, a CLI, tests) should only depend on the public API exposed here
and in :mod:`pagecraft.core.session` rather than importing internal modules
directly.
"""

from .core.models import Document, Node, Page  # re-export for convenience

__all__: list[str] = [
    "Document",
    "Node",
    "Page",
]
