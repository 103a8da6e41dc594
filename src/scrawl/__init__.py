"""Scrawl: runtime for a small text-templating language.

Templates mix literal text with ``{{ ... }}`` code blocks. A template is
parsed once into an immutable :class:`Template` and then evaluated against an
:class:`ExecutionContext`, which carries every piece of mutable state: the
scope stack, the output stack, the source-file stack and the cache of
included templates.

Quickstart:
    >>> from scrawl import Template
    >>> Template.parse("Hello, {{ name }}!").render(name="World")
    'Hello, World!'

Includes:
    >>> from scrawl import DictLoader, ExecutionContext, ScriptObject
    >>> loader = DictLoader({"item": "- {{ $0 }}\\n"})
    >>> context = ExecutionContext(loader=loader)
    >>> context.push_global(ScriptObject.from_model(items=["a", "b"]))
    >>> Template.parse('{{ for i in items }}{{ include("item", i) }}{{ end }}').render_in(context)
    >>> context.output
    '- a\\n- b\\n'

Architecture:
Template Source → Lexer → Parser → Scrawl AST → ExecutionContext → output

Pipeline stages:
1. **Lexer**: Tokenizes template source into a token list
2. **Parser**: Builds an immutable AST, collecting diagnostics
3. **Template**: Refuses to run with errors, otherwise evaluates the page
4. **ExecutionContext**: Walks the AST, writing text to the top output sink

Thread-Safety:
- Templates are immutable after parsing
- A context is used by one thread at a time
- Contexts rendering in parallel may share one ``TemplateCache``

Error Reporting:
Parse problems never raise; they are collected as diagnostics:

    >>> t = Template.parse("{{ 1 + }}", "page.txt")
    >>> t.has_errors
    True

Runtime failures raise subclasses of :class:`ScriptError` whose message
starts with the source location, ``page.txt(3,7) : error : ...``.

"""

from scrawl._types import SourcePosition, SourceSpan, Token, TokenType
from scrawl.diagnostics import Diagnostic, Severity, SourceSnippet, build_source_snippet
from scrawl.exceptions import (
    ArityError,
    ConfigurationError,
    ConversionError,
    EmptyNameError,
    EmptyPathError,
    ErrorCode,
    IncludeError,
    IncludeParseError,
    InvalidStateError,
    LoadError,
    RecursiveIncludeError,
    ScriptError,
    ScriptRuntimeError,
    TemplateHasErrorsError,
    TemplateNotFoundError,
    UndefinedVariableError,
)
from scrawl.functions import (
    PENDING_INCLUDES_TAG,
    BuiltinRegistry,
    IncludeFunction,
    ScriptFunction,
    default_builtins,
)
from scrawl.lexer import Lexer, LexerOptions, ScriptMode
from scrawl.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    TemplateLoader,
)
from scrawl.parser import Parser, ParserOptions
from scrawl.runtime import ExecutionContext, ScriptObject, TemplateCache, to_display_string
from scrawl.template import Template

__version__ = "0.1.0"

__all__ = [
    "PENDING_INCLUDES_TAG",
    "ArityError",
    "BuiltinRegistry",
    "ChoiceLoader",
    "ConfigurationError",
    "ConversionError",
    "Diagnostic",
    "DictLoader",
    "EmptyNameError",
    "EmptyPathError",
    "ErrorCode",
    "ExecutionContext",
    "FileSystemLoader",
    "FunctionLoader",
    "IncludeError",
    "IncludeFunction",
    "IncludeParseError",
    "InvalidStateError",
    "Lexer",
    "LexerOptions",
    "LoadError",
    "Parser",
    "ParserOptions",
    "RecursiveIncludeError",
    "ScriptError",
    "ScriptFunction",
    "ScriptMode",
    "ScriptObject",
    "ScriptRuntimeError",
    "Severity",
    "SourcePosition",
    "SourceSnippet",
    "SourceSpan",
    "Template",
    "TemplateCache",
    "TemplateHasErrorsError",
    "TemplateLoader",
    "TemplateNotFoundError",
    "Token",
    "TokenType",
    "UndefinedVariableError",
    "__version__",
    "build_source_snippet",
    "default_builtins",
    "to_display_string",
]
