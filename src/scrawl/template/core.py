"""Scrawl Template: a parsed template ready for evaluation.

A Template is created once by :meth:`Template.parse` and evaluated any number
of times, against any number of execution contexts. It never changes after
construction, so one instance can be cached and shared by contexts rendering
in parallel.

Architecture:
    ```
    Template
    ├── _page: Page | None         # AST root, None for empty input
    ├── _source_path: str | None   # For diagnostics and the source-file stack
    ├── _diagnostics: tuple        # Lexer + parser diagnostics, in order
    └── _source: str               # Original text, for source snippets
    ```

Evaluation vs rendering:
- ``evaluate_in(context)`` runs the page with output disabled and returns its
  value.
- ``render_in(context)`` runs the page with output as configured and writes
  the page's trailing value.

A template holding an ``ERROR`` diagnostic refuses both with
:class:`~scrawl.exceptions.TemplateHasErrorsError`.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from scrawl.diagnostics import Diagnostic, has_errors
from scrawl.exceptions import TemplateHasErrorsError
from scrawl.lexer import Lexer, LexerOptions, ScriptMode
from scrawl.parser import Parser, ParserOptions
from scrawl.runtime import ExecutionContext, ScriptObject

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scrawl.nodes import Block, Page

logger = logging.getLogger(__name__)


class Template:
    """Parsed template ready for evaluation.

    Attributes:
        page: AST root, or None when the source was empty
        source_path: Source file path (for error messages)
        diagnostics: Diagnostics produced while lexing and parsing
        has_errors: True if any diagnostic is an error

    Methods:
        render(model, **kwargs): Render with a fresh context
        evaluate(model, **kwargs): Evaluate with a fresh context
        render_in(context): Render into an existing context
        evaluate_in(context): Evaluate in an existing context

    Example:
            >>> t = Template.parse("Hello, {{ name }}!")
            >>> t.render(name="World")
            'Hello, World!'

            >>> t.render({"name": "World"})  # Dict model also works
            'Hello, World!'

            >>> Template.parse("{{ x = 1 }}{{ x + 41 }}").evaluate()
            42

    """

    __slots__ = ("_diagnostics", "_has_errors", "_page", "_source", "_source_path")

    def __init__(
        self,
        page: Page | None,
        source_path: str | None = None,
        diagnostics: Sequence[Diagnostic] = (),
        source: str = "",
    ):
        self._page = page
        self._source_path = source_path
        self._diagnostics = tuple(diagnostics)
        self._has_errors = has_errors(self._diagnostics)
        self._source = source

    @classmethod
    def parse(
        cls,
        text: str | None,
        source_path: str | None = None,
        parser_options: ParserOptions | None = None,
        lexer_options: LexerOptions | None = None,
    ) -> Template:
        """Parse template text.

        Never raises on bad input: syntax problems are collected in
        :attr:`diagnostics`. Empty (or None) text yields a template without
        a page and without diagnostics.
        """
        if not text:
            return cls(None, source_path, (), "")

        lexer = Lexer(text, source_path, lexer_options)
        parser = Parser(lexer, parser_options)
        page = parser.run()
        template = cls(page, source_path, parser.diagnostics, text)
        if template.has_errors:
            logger.debug(
                "Template %s has %d diagnostic(s)",
                source_path or "<template>",
                len(template.diagnostics),
            )
        return template

    @classmethod
    def evaluate_expression(
        cls,
        expression: str,
        model: Any = None,
        *,
        context: ExecutionContext | None = None,
    ) -> Any:
        """Parse ``expression`` as code and return its value.

        Evaluates against ``context`` when given, otherwise against a fresh
        context whose only scope is built from ``model``.

        Example:
            >>> Template.evaluate_expression("a * 2", {"a": 21})
            42
        """
        template = cls.parse(expression, lexer_options=LexerOptions(mode=ScriptMode.SCRIPT_ONLY))
        if context is not None:
            return template.evaluate_in(context)
        return template.evaluate(model)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def page(self) -> Page | None:
        return self._page

    @property
    def source_path(self) -> str | None:
        return self._source_path

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self._diagnostics

    @property
    def has_errors(self) -> bool:
        return self._has_errors

    @property
    def source(self) -> str:
        return self._source

    @property
    def front_matter(self) -> Block | None:
        """Front matter block, when parsed in a front-matter mode."""
        return self._page.front_matter if self._page is not None else None

    # ─────────────────────────────────────────────────────────────────────────
    # Evaluation in a caller-owned context
    # ─────────────────────────────────────────────────────────────────────────

    def evaluate_in(self, context: ExecutionContext) -> Any:
        """Evaluate the page with output disabled and return its value.

        Raises:
            TemplateHasErrorsError: If the template has error diagnostics
        """
        self._check_errors()
        previous = context.enable_output
        context.enable_output = False
        try:
            return self._run(context, self._page)
        finally:
            context.enable_output = previous

    def render_in(self, context: ExecutionContext) -> None:
        """Evaluate the page and write its output to the context.

        Raises:
            TemplateHasErrorsError: If the template has error diagnostics
        """
        self._check_errors()
        result = self._run(context, self._page)
        if result is not None and context.enable_output and self._page is not None:
            context.write(self._page.span, result)

    def evaluate_front_matter(self, context: ExecutionContext) -> Any:
        """Evaluate the front matter block (if any) and return its value."""
        self._check_errors()
        front_matter = self.front_matter
        if front_matter is None:
            return None
        previous = context.enable_output
        context.enable_output = False
        try:
            return self._run(context, front_matter)
        finally:
            context.enable_output = previous

    def _check_errors(self) -> None:
        if self._has_errors:
            raise TemplateHasErrorsError(self._diagnostics, self._source_path)

    def _run(self, context: ExecutionContext, node: Page | Block | None) -> Any:
        if node is None:
            return None
        source_path = self._source_path
        if source_path is not None:
            context.push_source_file(source_path)
        try:
            return context.evaluate(node)
        finally:
            if source_path is not None:
                context.pop_source_file()

    # ─────────────────────────────────────────────────────────────────────────
    # Convenience: fresh context per call
    # ─────────────────────────────────────────────────────────────────────────

    def evaluate(self, model: Any = None, **kwargs: Any) -> Any:
        """Evaluate with a fresh context built from ``model`` and ``kwargs``."""
        context = ExecutionContext()
        context.push_global(ScriptObject.from_model(model, **kwargs))
        try:
            return self.evaluate_in(context)
        finally:
            context.pop_global()

    def render(self, model: Any = None, **kwargs: Any) -> str:
        """Render with a fresh context built from ``model`` and ``kwargs``.

        Args:
            model: Mapping or object whose public attributes become variables
            **kwargs: Extra variables, overriding the model

        Returns:
            Rendered template as string
        """
        context = ExecutionContext()
        context.push_global(ScriptObject.from_model(model, **kwargs))
        try:
            self.render_in(context)
        finally:
            context.pop_global()
        return context.output

    async def render_async(self, model: Any = None, **kwargs: Any) -> str:
        """Async wrapper for synchronous render.

        Runs the synchronous ``render()`` method in a thread pool to avoid
        blocking the event loop.
        """
        import asyncio

        return await asyncio.to_thread(self.render, model, **kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # Diagnostics
    # ─────────────────────────────────────────────────────────────────────────

    def format_diagnostics(self) -> str:
        """All diagnostics, formatted with source snippets."""
        return "\n".join(d.format(self._source) for d in self._diagnostics)

    def __repr__(self) -> str:
        name = self._source_path or "<template>"
        return f"<Template {name!r} errors={self._has_errors}>"
