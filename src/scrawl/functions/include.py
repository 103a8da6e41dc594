"""The ``include`` builtin.

``include("name", arg1, arg2)`` renders another template at the call site and
returns its output as a string:

    {{ include("header", page.title) }}

The name is resolved to a canonical path by the context's loader. Parsed
templates are cached on the context by canonical path, so aliases of the
same file are parsed once. Recursion is guarded by logical name: a template
cannot include itself, directly or through other templates.

Extra arguments are visible to the included template as ``$`` (the list)
and ``$0``, ``$1``, ... (its items).

"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from scrawl.exceptions import (
    ArityError,
    ConfigurationError,
    ConversionError,
    EmptyNameError,
    EmptyPathError,
    IncludeParseError,
    LoadError,
    RecursiveIncludeError,
)
from scrawl.lexer import ScriptMode
from scrawl.runtime.objects import to_display_string

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.nodes import Node
    from scrawl.runtime import ExecutionContext
    from scrawl.template import Template

logger = logging.getLogger(__name__)

# context.tags key holding the set of template names currently being included
PENDING_INCLUDES_TAG = "scrawl.functions.include:pending"

_ARGUMENTS_NAME = "$"
_MISSING = object()


class IncludeFunction:
    """Render a named template into a string, with arguments.

    Stateless: all per-render state lives on the execution context, so one
    instance can be registered in any number of builtin registries.
    """

    __slots__ = ()

    def invoke(
        self,
        context: ExecutionContext,
        call_span: SourceSpan,
        arguments: list[Any],
        block: Node | None = None,
    ) -> str:
        span = context._locate(call_span)
        if not arguments:
            raise ArityError("Expecting at least the name of the template to include", span)

        try:
            name = to_display_string(arguments[0])
        except Exception as e:
            raise ConversionError(
                f"Unable to convert the include name of type "
                f"'{type(arguments[0]).__name__}' to a string: {e}",
                span,
            ) from e
        name = name.strip()
        if not name:
            raise EmptyNameError("Include template name cannot be empty", span)

        loader = context.loader
        if loader is None:
            raise ConfigurationError(
                f"Unable to include <{name}>: no template loader is registered "
                "on the execution context",
                span,
                hint="Pass loader=... to ExecutionContext",
            )

        path = loader.get_path(context, span, name)
        if path is not None:
            path = path.strip()
        if not path:
            raise EmptyPathError(f"Include template path is empty for <{name}>", span)

        scope = context.current_global
        previous = scope.get(_ARGUMENTS_NAME, _MISSING)
        context.set_value(_ARGUMENTS_NAME, list(arguments[1:]), span)
        try:
            template = self._get_template(context, span, name, path)

            pending: set[str] = context.tags.setdefault(PENDING_INCLUDES_TAG, set())
            if name in pending:
                raise RecursiveIncludeError(name, span, pending=sorted(pending))
            pending.add(name)

            context.push_output()
            try:
                template.render_in(context)
            finally:
                result = context.pop_output()
                pending.discard(name)
            return result
        finally:
            if previous is _MISSING:
                scope.pop(_ARGUMENTS_NAME, None)
            else:
                scope[_ARGUMENTS_NAME] = previous

    def _get_template(
        self,
        context: ExecutionContext,
        span: SourceSpan | None,
        name: str,
        path: str,
    ) -> Template:
        """Return the cached template for ``path``, loading and parsing on a miss."""
        template = context.cached_templates.get(path)
        if template is not None:
            logger.debug("include <%s>: cache hit for %s", name, path)
            return template

        text = context.loader.load(context, span, path)  # type: ignore[union-attr]
        if text is None:
            raise LoadError(f"The loader returned no content for <{path}>", span)

        from scrawl.template import Template

        options = context.template_loader_lexer_options
        # Included templates never carry front matter
        mode = ScriptMode.DEFAULT
        if options.mode is ScriptMode.SCRIPT_ONLY:
            mode = ScriptMode.SCRIPT_ONLY
        template = Template.parse(
            text,
            path,
            context.template_loader_parser_options,
            replace(options, mode=mode),
        )
        if template.has_errors:
            raise IncludeParseError(
                f"Error while parsing template <{name}> from <{path}>",
                span,
                template.diagnostics,
            )

        logger.debug("include <%s>: parsed and cached %s", name, path)
        return context.cached_templates.add_if_absent(path, template)

    def __repr__(self) -> str:
        return "<IncludeFunction>"
