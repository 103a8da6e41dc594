"""Object model used by the evaluator.

Templates see host data through a small set of rules:

- Mappings expose their keys; attribute lookup is only a fallback.
- Other objects expose public attributes. Names starting with ``_`` are
  never reachable from a template.
- ``None`` renders as the empty string, booleans as ``true``/``false`` and
  sequences as ``[a, b]``.

All helpers are pure functions so the evaluator can bind them once.

"""

from __future__ import annotations

import dataclasses
import operator
from collections.abc import Callable, Mapping, Sequence
from typing import Any


class ScriptObject(dict):
    """A scope: mapping from identifier to value.

    Built from a model by importing its entries (for mappings) or its public
    attributes (for other objects).

    Example:
        >>> scope = ScriptObject.from_model({"name": "World"}, count=2)
        >>> scope["name"], scope["count"]
        ('World', 2)

    """

    __slots__ = ()

    @classmethod
    def from_model(cls, model: Any = None, **kwargs: Any) -> ScriptObject:
        scope = cls()
        if model is not None:
            scope.import_object(model)
        scope.update(kwargs)
        return scope

    def import_object(self, model: Any) -> None:
        """Copy the visible members of ``model`` into this scope."""
        if isinstance(model, Mapping):
            self.update(model)
            return
        if dataclasses.is_dataclass(model) and not isinstance(model, type):
            for f in dataclasses.fields(model):
                self[f.name] = getattr(model, f.name)
            return
        try:
            attrs = vars(model)
        except TypeError:
            raise TypeError(
                f"Cannot import {type(model).__name__!r} into a scope: "
                f"expected a mapping, a dataclass or an object with attributes"
            ) from None
        self.update({k: v for k, v in attrs.items() if not k.startswith("_")})

    def __repr__(self) -> str:
        return f"ScriptObject({dict.__repr__(self)})"


def to_display_string(value: Any) -> str:
    """Convert a runtime value to the text written to output."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        items = ", ".join(
            f"{to_display_string(k)}: {to_display_string(v)}" for k, v in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_display_string(item) for item in value) + "]"
    return str(value)


def is_truthy(value: Any) -> bool:
    return bool(value)


def get_member(obj: Any, name: str) -> Any:
    """Member access for ``obj.name``. Missing members yield ``None``."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        return None
    if name.startswith("_"):
        return None
    return getattr(obj, name, None)


def get_item(obj: Any, key: Any) -> Any:
    """Subscript access for ``obj[key]``. Missing keys and indexes yield ``None``."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    if isinstance(obj, (Sequence, str)) and isinstance(key, int) and not isinstance(key, bool):
        try:
            return obj[key]
        except IndexError:
            return None
    if isinstance(key, str):
        return get_member(obj, key)
    raise TypeError(f"'{type(obj).__name__}' object cannot be indexed by {type(key).__name__}")


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return to_display_string(left) + to_display_string(right)
    return left + right


BINARY_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
}

COMPARE_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}
