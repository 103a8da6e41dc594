"""Template loaders for the include builtin.

A loader turns the logical name passed to ``include`` into a canonical path,
then turns that path into template text. The path keys the template cache of
the execution context, so two names resolving to the same path share one
parsed template.

Built-in Loaders:
- `DictLoader`: In-memory mapping of name → source (testing/embedded)
- `FileSystemLoader`: Files under one or more root directories
- `FunctionLoader`: Text fetched by a callable
- `ChoiceLoader`: Project templates shadowing library defaults

Custom Loaders:
Implement the TemplateLoader protocol:
    ```python
    class DatabaseLoader:
        def get_path(self, context, span, name):
            return f"db://{name}"

        def load(self, context, span, path):
            row = db.query("SELECT source FROM templates WHERE path = ?", path)
            return row.source if row else None
    ```

Thread-Safety:
Loaders may be shared by contexts rendering in parallel. The built-in
loaders keep no per-render state.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from scrawl.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.runtime import ExecutionContext

logger = logging.getLogger(__name__)


@runtime_checkable
class TemplateLoader(Protocol):
    """Resolve include names and load template text."""

    def get_path(
        self, context: ExecutionContext, span: SourceSpan | None, name: str
    ) -> str | None:
        """Return the canonical path for ``name``."""
        ...

    def load(self, context: ExecutionContext, span: SourceSpan | None, path: str) -> str | None:
        """Return the text stored at ``path``, or None if there is none."""
        ...


class DictLoader:
    """Load templates from an in-memory dictionary.

    The canonical path of a template is its name.

    Example:
            >>> from scrawl import ExecutionContext, ScriptObject, Template
            >>> context = ExecutionContext(loader=DictLoader({"greet": "Hello {{ $0 }}!"}))
            >>> context.push_global(ScriptObject())
            >>> Template.parse('{{ include("greet", "Ada") }}').render_in(context)
            >>> context.output
            'Hello Ada!'

    Raises:
        TemplateNotFoundError: If the name is not in the mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def get_path(
        self, context: ExecutionContext, span: SourceSpan | None, name: str
    ) -> str:
        if name not in self._mapping:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg, span)
        return name

    def load(self, context: ExecutionContext, span: SourceSpan | None, path: str) -> str | None:
        return self._mapping.get(path)

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class FileSystemLoader:
    """Resolve include names to files under one or more root directories.

    Names are relative paths searched under each root in order; the first
    existing file wins. The canonical path is the resolved absolute file
    path, so ``"a.txt"`` and ``"sub/../a.txt"`` share one cache entry.
    Names that resolve outside their root are skipped.

    Example:
        A site whose partials override a shared set:
            ```python
            loader = FileSystemLoader(["site/partials", "shared/partials"])
            ```

    Raises:
        TemplateNotFoundError: If the name is not found under any root

    """

    __slots__ = ("_encoding", "_paths")

    def __init__(
        self,
        paths: str | Path | Sequence[str | Path],
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p).resolve() for p in paths]
        self._encoding = encoding

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def get_path(
        self, context: ExecutionContext, span: SourceSpan | None, name: str
    ) -> str:
        for base in self._paths:
            path = (base / name).resolve()
            if not path.is_relative_to(base):
                logger.debug("Rejected template name %r: escapes %s", name, base)
                continue
            if path.is_file():
                logger.debug("Resolved template %r to %s", name, path)
                return str(path)

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}",
            span,
        )

    def load(self, context: ExecutionContext, span: SourceSpan | None, path: str) -> str | None:
        file = Path(path)
        if not file.is_file():
            return None
        return file.read_text(self._encoding)

    def list_templates(self) -> list[str]:
        """Every file under the roots, as posix paths relative to its root."""
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob("*"):
                    if path.is_file():
                        templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class FunctionLoader:
    """Fetch template text through a callable.

    The canonical path is the name; ``load`` calls the function with it and
    passes its result through (``None`` means no such template).

    Example:
            >>> snippets = {"sig": "-- {{ $0 }}"}
            >>> loader = FunctionLoader(snippets.get)
            >>> loader.load(None, None, "sig")
            '-- {{ $0 }}'

    The callable is invoked once per cache miss, from whichever thread
    renders.
    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], str | None]):
        self._load_func = load_func

    def get_path(
        self, context: ExecutionContext, span: SourceSpan | None, name: str
    ) -> str:
        return name

    def load(self, context: ExecutionContext, span: SourceSpan | None, path: str) -> str | None:
        return self._load_func(path)


class ChoiceLoader:
    """Chain loaders; the first one that resolves a name owns it.

    Lets project templates shadow a library of defaults. The loader that
    resolved a path also loads it.

    Example:
            >>> project = DictLoader({"footer": "(c) Project"})
            >>> library = DictLoader({"footer": "(c) Library", "header": "Header"})
            >>> loader = ChoiceLoader([project, library])
            >>> loader.load(None, None, loader.get_path(None, None, "footer"))
            '(c) Project'

    Raises:
        TemplateNotFoundError: If no loader can resolve the name

    """

    __slots__ = ("_loaders", "_resolved")

    def __init__(self, loaders: Sequence[TemplateLoader]):
        self._loaders = list(loaders)
        self._resolved: dict[str, TemplateLoader] = {}

    def get_path(
        self, context: ExecutionContext, span: SourceSpan | None, name: str
    ) -> str:
        for loader in self._loaders:
            try:
                path = loader.get_path(context, span, name)
            except TemplateNotFoundError:
                continue
            if path:
                self._resolved.setdefault(path, loader)
                return path
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders", span
        )

    def load(self, context: ExecutionContext, span: SourceSpan | None, path: str) -> str | None:
        loader = self._resolved.get(path)
        if loader is not None:
            return loader.load(context, span, path)
        for loader in self._loaders:
            text = loader.load(context, span, path)
            if text is not None:
                return text
        return None
