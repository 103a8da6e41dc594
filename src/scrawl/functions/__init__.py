"""Builtin functions available to every template.

The default registry holds only ``include``. Any Python callable can be
added to ``ExecutionContext.builtins``; objects implementing
:class:`ScriptFunction` also receive the execution context.

"""

from typing import Any

from scrawl.functions.include import PENDING_INCLUDES_TAG, IncludeFunction
from scrawl.functions.registry import BuiltinRegistry, ScriptFunction


def default_builtins() -> dict[str, Any]:
    """Builtins installed on a context created without explicit builtins."""
    return {"include": IncludeFunction()}


__all__ = [
    "PENDING_INCLUDES_TAG",
    "BuiltinRegistry",
    "IncludeFunction",
    "ScriptFunction",
    "default_builtins",
]
