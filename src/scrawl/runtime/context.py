"""Scrawl ExecutionContext: the mutable state of one rendering session.

The context owns every piece of state evaluation needs, so nothing lives in
module globals and independent contexts never interfere:

- a **scope stack** of mappings, searched top-down, then the builtins;
- an **output stack** of text sinks; writes go to the top sink, and
  ``push_output``/``pop_output`` capture nested output (used by include);
- a **source-file stack** naming the file currently executing;
- a **template cache** of parsed templates keyed by canonical path;
- **tags**, a side channel where builtins keep private per-context state
  under namespaced string keys.

Every push has a matching pop on all exit paths of a top-level call, so a
context can be reused for many renders and keeps sharing its cache.

Thread-Safety:
    A context is single-threaded. Render in parallel with one context per
    thread; the contexts may share a :class:`TemplateCache`.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

from scrawl.exceptions import (
    ConversionError,
    InvalidStateError,
    ScriptError,
    UndefinedVariableError,
)
from scrawl.functions.registry import BuiltinRegistry
from scrawl.lexer import LexerOptions
from scrawl.parser import ParserOptions
from scrawl.runtime.cache import TemplateCache
from scrawl.runtime.expressions import ExpressionEvaluationMixin
from scrawl.runtime.objects import to_display_string
from scrawl.runtime.statements import StatementEvaluationMixin

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.loaders import TemplateLoader
    from scrawl.nodes import Node


class ExecutionContext(ExpressionEvaluationMixin, StatementEvaluationMixin):
    """Runtime state for evaluating and rendering templates.

    Attributes:
        loader: Template loader used by ``include`` (None disables includes)
        builtins: Namespace consulted after the scope stack
        cached_templates: Parsed templates keyed by canonical path
        template_loader_lexer_options: Lexer options for included templates
        template_loader_parser_options: Parser options for included templates
        strict_variables: Raise on unknown identifiers instead of yielding None
        enable_output: When False, writes are discarded
        tags: Per-context state owned by builtins, keyed by namespaced strings

    Example:
        >>> from scrawl import DictLoader, ScriptObject, Template
        >>> context = ExecutionContext(loader=DictLoader({"hi": "Hi {{ $0 }}"}))
        >>> context.push_global(ScriptObject())
        >>> Template.parse('{{ include("hi", "Ada") }}').render_in(context)
        >>> _ = context.pop_global()
        >>> context.output
        'Hi Ada'

    """

    def __init__(
        self,
        *,
        loader: TemplateLoader | None = None,
        builtins: Mapping[str, Any] | None = None,
        cached_templates: TemplateCache | None = None,
        template_loader_lexer_options: LexerOptions | None = None,
        template_loader_parser_options: ParserOptions | None = None,
        strict_variables: bool = False,
        enable_output: bool = True,
    ):
        if builtins is None:
            from scrawl.functions import default_builtins

            builtins = default_builtins()

        self.loader = loader
        self.builtins = BuiltinRegistry(builtins)
        if cached_templates is None:
            cached_templates = TemplateCache()
        self.cached_templates = cached_templates
        self.template_loader_lexer_options = template_loader_lexer_options or LexerOptions()
        self.template_loader_parser_options = template_loader_parser_options or ParserOptions()
        self.strict_variables = strict_variables
        self.enable_output = enable_output
        self.tags: dict[str, Any] = {}

        self._globals: list[MutableMapping[str, Any]] = []
        # Root sink is never popped
        self._outputs: list[list[str]] = [[]]
        self._source_files: list[str] = []
        self._node_dispatch: dict[str, Callable[[Any], Any]] | None = None

    # ─────────────────────────────────────────────────────────────────────────
    # Scope stack
    # ─────────────────────────────────────────────────────────────────────────

    def push_global(self, scope: MutableMapping[str, Any]) -> None:
        """Push a scope; it shadows every scope below it."""
        self._globals.append(scope)

    def pop_global(self) -> MutableMapping[str, Any]:
        """Pop and return the topmost scope."""
        if not self._globals:
            raise InvalidStateError("Unexpected pop_global() without a matching push_global()")
        return self._globals.pop()

    @property
    def global_depth(self) -> int:
        return len(self._globals)

    @property
    def current_global(self) -> MutableMapping[str, Any]:
        """The topmost scope, where assignments land."""
        if not self._globals:
            raise InvalidStateError("No scope has been pushed on this context")
        return self._globals[-1]

    def get_value(self, name: str, span: SourceSpan | None = None) -> Any:
        """Resolve ``name`` through the scope stack, then the builtins."""
        for scope in reversed(self._globals):
            if name in scope:
                return scope[name]
        if name in self.builtins:
            return self.builtins[name]
        if self.strict_variables:
            raise UndefinedVariableError(name, self._locate(span))
        return None

    def set_value(self, name: str, value: Any, span: SourceSpan | None = None) -> None:
        """Bind ``name`` in the topmost scope."""
        if not self._globals:
            raise InvalidStateError(
                f"Cannot set `{name}`: no scope has been pushed on this context",
                self._locate(span),
            )
        self._globals[-1][name] = value

    # ─────────────────────────────────────────────────────────────────────────
    # Output stack
    # ─────────────────────────────────────────────────────────────────────────

    def push_output(self) -> None:
        """Install a fresh capturing sink on top of the output stack."""
        self._outputs.append([])

    def pop_output(self) -> str:
        """Remove the top sink and return everything written to it."""
        if len(self._outputs) == 1:
            raise InvalidStateError("Unexpected pop_output() without a matching push_output()")
        return "".join(self._outputs.pop())

    @property
    def output_depth(self) -> int:
        return len(self._outputs)

    @property
    def output(self) -> str:
        """Text written to the root sink so far."""
        return "".join(self._outputs[0])

    def write(self, span: SourceSpan | None, value: Any) -> None:
        """Append ``value`` as text to the current sink (no-op when output is disabled)."""
        if not self.enable_output:
            return
        text = self.to_string(span, value)
        if text:
            self._outputs[-1].append(text)

    def to_string(self, span: SourceSpan | None, value: Any) -> str:
        """Convert a runtime value to its display text."""
        try:
            return to_display_string(value)
        except ScriptError:
            raise
        except Exception as e:
            raise ConversionError(
                f"Unable to convert a value of type '{type(value).__name__}' to text: {e}",
                self._locate(span),
            ) from e

    # ─────────────────────────────────────────────────────────────────────────
    # Source-file stack
    # ─────────────────────────────────────────────────────────────────────────

    def push_source_file(self, path: str) -> None:
        self._source_files.append(path)

    def pop_source_file(self) -> str:
        if not self._source_files:
            raise InvalidStateError(
                "Unexpected pop_source_file() without a matching push_source_file()"
            )
        return self._source_files.pop()

    @property
    def source_file_depth(self) -> int:
        return len(self._source_files)

    @property
    def current_source_file(self) -> str | None:
        return self._source_files[-1] if self._source_files else None

    def _locate(self, span: SourceSpan | None) -> SourceSpan | None:
        """Attach the executing file to spans parsed without a source path."""
        if span is not None and span.filename is None and self._source_files:
            return span.with_filename(self._source_files[-1])
        return span

    # ─────────────────────────────────────────────────────────────────────────
    # Evaluation
    # ─────────────────────────────────────────────────────────────────────────

    def evaluate(self, node: Node | None) -> Any:
        """Evaluate a node and return its value.

        Complexity: O(1) type dispatch using class name lookup. Nodes without
        a handler are evaluated through their own ``evaluate(context)``.
        """
        if node is None:
            return None
        handler = self._get_node_dispatch().get(type(node).__name__)
        if handler is not None:
            return handler(node)
        evaluate = getattr(node, "evaluate", None)
        if evaluate is None:
            raise TypeError(
                f"Cannot evaluate {type(node).__name__!r}: not a Scrawl node "
                f"and no evaluate(context) method"
            )
        return evaluate(self)

    def _get_node_dispatch(self) -> dict[str, Callable[[Any], Any]]:
        """Get node type dispatch table (built on first call)."""
        if self._node_dispatch is None:
            self._node_dispatch = {
                # Statements
                "Page": self._eval_Page,
                "Block": self._eval_Block,
                "Text": self._eval_Text,
                "ExpressionStatement": self._eval_ExpressionStatement,
                "Assign": self._eval_Assign,
                "If": self._eval_If,
                "For": self._eval_For,
                # Expressions
                "Const": self._eval_Const,
                "Name": self._eval_Name,
                "ArgumentIndex": self._eval_ArgumentIndex,
                "ListExpr": self._eval_ListExpr,
                "Getattr": self._eval_Getattr,
                "Getitem": self._eval_Getitem,
                "FuncCall": self._eval_FuncCall,
                "UnaryOp": self._eval_UnaryOp,
                "BinOp": self._eval_BinOp,
                "Compare": self._eval_Compare,
                "BoolOp": self._eval_BoolOp,
            }
        return self._node_dispatch

    def __repr__(self) -> str:
        return (
            f"<ExecutionContext globals={self.global_depth} outputs={self.output_depth} "
            f"sources={self.source_file_depth} cached={len(self.cached_templates)}>"
        )
