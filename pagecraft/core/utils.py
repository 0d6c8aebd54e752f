from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no I/O; they can be used
across all layers of the editor.
"""

from typing import Callable, Iterable
import re
import uuid

__all__ = [
    "IdFactory",
    "generate_id",
    "slugify",
    "page_slug",
    "unique_name",
]

IdFactory = Callable[[], str]


def generate_id() -> str:
    """Return a fresh opaque identifier for a node, page or column."""
    return uuid.uuid4().hex[:16]


def slugify(text: str) -> str:
    """Return a URL-safe slug version of *text*.

    Removes non-alphanumeric chars, converts whitespace/underscores to dashes,
    and lower-cases the result.
    """
    text = re.sub(r"[^\w\s-]", "", text or "").strip().lower()
    return re.sub(r"[\s_-]+", "-", text)


def page_slug(name: str) -> str:
    """Return the page path for a page called *name* (``"About Us"`` -> ``"/about-us"``)."""
    return "/" + slugify(name)


def unique_name(base: str, existing: Iterable[str]) -> str:
    """Return *base*, or ``"<base> N"`` with the first N that is not taken.

    >>> unique_name("New Page", ["Home", "New Page"])
    'New Page 1'
    """
    taken = set(existing)
    candidate = base
    counter = 1
    while candidate in taken:
        candidate = f"{base} {counter}"
        counter += 1
    return candidate
