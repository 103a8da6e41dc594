"""Expression evaluation for the execution context.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from scrawl.exceptions import ScriptError, ScriptRuntimeError
from scrawl.functions.registry import ScriptFunction
from scrawl.nodes import Name
from scrawl.runtime.objects import (
    BINARY_OPERATORS,
    COMPARE_OPERATORS,
    get_item,
    get_member,
    is_truthy,
)

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from scrawl._types import SourceSpan
    from scrawl.nodes import (
        ArgumentIndex,
        BinOp,
        BoolOp,
        Compare,
        Const,
        FuncCall,
        Getattr,
        Getitem,
        ListExpr,
        Node,
        UnaryOp,
    )

ARGUMENTS_NAME = "$"


class ExpressionEvaluationMixin:
    """Mixin evaluating expression nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:

        _globals: list[MutableMapping[str, Any]]

        def evaluate(self, node: Node | None) -> Any: ...
        def get_value(self, name: str, span: SourceSpan | None = None) -> Any: ...
        def _locate(self, span: SourceSpan | None) -> SourceSpan | None: ...

    def call(self, span: SourceSpan, func: Any, arguments: list[Any]) -> Any:
        """Invoke ``func`` with already-evaluated arguments.

        ``ScriptFunction`` builtins receive the context; plain callables get
        the positional arguments. Non-script exceptions from plain callables
        are wrapped with the call-site location.
        """
        if isinstance(func, ScriptFunction):
            return func.invoke(self, span, arguments)  # type: ignore[arg-type]
        if not callable(func):
            raise ScriptRuntimeError(
                f"A value of type '{type(func).__name__}' is not a function", self._locate(span)
            )
        try:
            return func(*arguments)
        except ScriptError:
            raise
        except Exception as e:
            name = getattr(func, "__name__", type(func).__name__)
            raise ScriptRuntimeError(
                f"Error while calling `{name}`: {e}", self._locate(span)
            ) from e

    def _eval_Const(self, node: Const) -> Any:
        return node.value

    def _get_arguments(self) -> Any:
        """The nearest ``$`` binding; outside an include there is none, even in strict mode."""
        for scope in reversed(self._globals):
            if ARGUMENTS_NAME in scope:
                return scope[ARGUMENTS_NAME]
        return None

    def _eval_Name(self, node: Name) -> Any:
        if node.name == ARGUMENTS_NAME:
            return self._get_arguments()
        return self.get_value(node.name, node.span)

    def _eval_ArgumentIndex(self, node: ArgumentIndex) -> Any:
        arguments = self._get_arguments()
        if not isinstance(arguments, list) or node.index >= len(arguments):
            return None
        return arguments[node.index]

    def _eval_ListExpr(self, node: ListExpr) -> list[Any]:
        return [self.evaluate(item) for item in node.items]

    def _eval_Getattr(self, node: Getattr) -> Any:
        return get_member(self.evaluate(node.obj), node.attr)

    def _eval_Getitem(self, node: Getitem) -> Any:
        obj = self.evaluate(node.obj)
        key = self.evaluate(node.key)
        try:
            return get_item(obj, key)
        except TypeError as e:
            raise ScriptRuntimeError(str(e), self._locate(node.span)) from e

    def _eval_FuncCall(self, node: FuncCall) -> Any:
        func = self.evaluate(node.func)
        if func is None and isinstance(node.func, Name):
            raise ScriptRuntimeError(
                f"The function `{node.func.name}` was not found", self._locate(node.span)
            )
        arguments = [self.evaluate(arg) for arg in node.args]
        return self.call(node.span, func, arguments)

    def _eval_UnaryOp(self, node: UnaryOp) -> Any:
        operand = self.evaluate(node.operand)
        if node.op == "not":
            return not is_truthy(operand)
        try:
            return -operand
        except TypeError as e:
            raise ScriptRuntimeError(
                f"Cannot negate a value of type '{type(operand).__name__}'",
                self._locate(node.span),
            ) from e

    def _eval_BinOp(self, node: BinOp) -> Any:
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        try:
            return BINARY_OPERATORS[node.op](left, right)
        except (TypeError, ValueError, ZeroDivisionError) as e:
            raise ScriptRuntimeError(
                f"Cannot apply '{node.op}' to '{type(left).__name__}' and "
                f"'{type(right).__name__}': {e}",
                self._locate(node.span),
            ) from e

    def _eval_Compare(self, node: Compare) -> bool:
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        try:
            return bool(COMPARE_OPERATORS[node.op](left, right))
        except TypeError as e:
            raise ScriptRuntimeError(
                f"Cannot compare '{type(left).__name__}' with '{type(right).__name__}' "
                f"using '{node.op}'",
                self._locate(node.span),
            ) from e

    def _eval_BoolOp(self, node: BoolOp) -> bool:
        left = is_truthy(self.evaluate(node.left))
        if node.op == "and":
            return left and is_truthy(self.evaluate(node.right))
        return left or is_truthy(self.evaluate(node.right))
