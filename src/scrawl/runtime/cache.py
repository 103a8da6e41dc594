"""Cache of parsed templates keyed by canonical path.

Each :class:`~scrawl.runtime.ExecutionContext` owns one by default. A single
cache may also be handed to several contexts that render in parallel:
templates are immutable once parsed, so sharing them is safe, and insertion
goes through a lock so concurrent misses on the same path settle on one
entry.

Entries are never evicted.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scrawl.template import Template


class TemplateCache:
    """Thread-safe insert-if-absent map of canonical path → Template."""

    __slots__ = ("_lock", "_templates")

    def __init__(self) -> None:
        self._templates: dict[str, Template] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> Template | None:
        return self._templates.get(path)

    def add_if_absent(self, path: str, template: Template) -> Template:
        """Insert ``template`` unless ``path`` is already cached.

        Returns:
            The cached entry, which is the existing one when another caller
            inserted first.
        """
        with self._lock:
            existing = self._templates.get(path)
            if existing is not None:
                return existing
            self._templates[path] = template
            return template

    def clear(self) -> None:
        with self._lock:
            self._templates.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._templates))

    def __repr__(self) -> str:
        return f"<TemplateCache {len(self._templates)} template(s)>"
