"""Builtin function registry for execution contexts.

Builtins are the namespace consulted after every scope on the stack. Any
value can be registered; callables become template functions.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.nodes import Node
    from scrawl.runtime import ExecutionContext


@runtime_checkable
class ScriptFunction(Protocol):
    """A builtin that needs the execution context.

    Plain Python callables are called with the evaluated positional
    arguments only. Objects implementing this protocol receive the context,
    the call-site span and the argument list instead, which lets them push
    output, read scopes or keep per-context state in ``context.tags``.
    """

    def invoke(
        self,
        context: ExecutionContext,
        call_span: SourceSpan,
        arguments: list[Any],
        block: Node | None = None,
    ) -> Any: ...


class BuiltinRegistry:
    """Dict-like builtin namespace.

    Supports:
        - registry['name'] = func
        - registry.update({'name': func})
        - func = registry['name']
        - 'name' in registry

    All mutations use copy-on-write, so a registry can be read by several
    contexts while another thread registers new builtins.
    """

    __slots__ = ("_functions",)

    def __init__(self, functions: Mapping[str, Any] | None = None):
        self._functions: dict[str, Any] = dict(functions or {})

    def __getitem__(self, name: str) -> Any:
        return self._functions[name]

    def __setitem__(self, name: str, func: Any) -> None:
        new = self._functions.copy()
        new[name] = func
        self._functions = new

    def __delitem__(self, name: str) -> None:
        new = self._functions.copy()
        del new[name]
        self._functions = new

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def get(self, name: str, default: Any = None) -> Any:
        return self._functions.get(name, default)

    def update(self, mapping: Mapping[str, Any]) -> None:
        """Batch update builtins."""
        new = self._functions.copy()
        new.update(mapping)
        self._functions = new

    def copy(self) -> dict[str, Any]:
        """Return a copy of the underlying dict."""
        return self._functions.copy()

    def keys(self):
        return self._functions.keys()

    def values(self):
        return self._functions.values()

    def items(self):
        return self._functions.items()

    def __repr__(self) -> str:
        return f"<BuiltinRegistry {sorted(self._functions)}>"
