"""Statement evaluation for the execution context.

A block evaluates its statements in order and writes the value of every
statement but the last; the last value becomes the block's own value. Text
segments are statements whose value is their text, so literal text and
``{{ expr }}`` output go through the same path. The trailing value of a page
is written by :meth:`Template.render_in` or returned by
:meth:`Template.evaluate_in`.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from scrawl.exceptions import ScriptRuntimeError
from scrawl.runtime.objects import is_truthy

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.nodes import (
        Assign,
        Block,
        ExpressionStatement,
        For,
        If,
        Node,
        Page,
        Text,
    )


class StatementEvaluationMixin:
    """Mixin evaluating statement nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:

        def evaluate(self, node: Node | None) -> Any: ...
        def write(self, span: SourceSpan, value: Any) -> None: ...
        def set_value(self, name: str, value: Any, span: SourceSpan | None = None) -> None: ...
        def _locate(self, span: SourceSpan | None) -> SourceSpan | None: ...

    def _write_result(self, node: Node, value: Any) -> None:
        if value is not None:
            self.write(node.span, value)

    def _eval_Page(self, node: Page) -> Any:
        return self.evaluate(node.body)

    def _eval_Block(self, node: Block) -> Any:
        result = None
        last = len(node.body) - 1
        for index, statement in enumerate(node.body):
            result = self.evaluate(statement)
            if index < last:
                self._write_result(statement, result)
        return result

    def _eval_Text(self, node: Text) -> str:
        return node.value

    def _eval_ExpressionStatement(self, node: ExpressionStatement) -> Any:
        return self.evaluate(node.expr)

    def _eval_Assign(self, node: Assign) -> None:
        self.set_value(node.target, self.evaluate(node.value), node.span)

    def _eval_If(self, node: If) -> Any:
        if is_truthy(self.evaluate(node.test)):
            return self.evaluate(node.body)
        return self.evaluate(node.else_)

    def _eval_For(self, node: For) -> None:
        iterable = self.evaluate(node.iter)
        if iterable is None:
            return
        try:
            iterator = iter(iterable)
        except TypeError as e:
            raise ScriptRuntimeError(
                f"Cannot iterate over a value of type '{type(iterable).__name__}'",
                self._locate(node.iter.span),
            ) from e
        for item in iterator:
            self.set_value(node.target, item, node.span)
            self._write_result(node.body, self.evaluate(node.body))
