"""Exceptions for the Scrawl runtime.

Exception Hierarchy:
ScriptError (base)
├── InvalidStateError          # Evaluating a broken template, unbalanced stacks
└── ScriptRuntimeError         # Evaluation-time failure tied to a source span
    ├── UndefinedVariableError # Unknown identifier in strict mode
    ├── ConversionError        # Value could not be converted to text
    ├── TemplateNotFoundError  # Loader could not resolve a name
    └── IncludeError           # Failures raised by the include builtin
        ├── ArityError
        ├── EmptyNameError
        ├── EmptyPathError
        ├── ConfigurationError
        ├── LoadError
        ├── IncludeParseError  # Carries the included template's diagnostics
        └── RecursiveIncludeError

Error Messages:
Runtime errors render as ``file(line,col) : error : message`` so that they
line up with parse diagnostics. ``format_compact()`` adds the error code and
an optional hint.

Example:
    ```
    page.txt(4,3) : error : The include [header] cannot be used recursively
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from scrawl import terminal

if TYPE_CHECKING:
    from scrawl._types import SourceSpan
    from scrawl.diagnostics import Diagnostic


class ErrorCode(Enum):
    """Searchable error codes.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: STA (state), RUN (runtime), INC (include)
    """

    # State errors (S-STA-xxx)
    TEMPLATE_HAS_ERRORS = "S-STA-001"
    UNBALANCED_STACK = "S-STA-002"

    # Runtime errors (S-RUN-xxx)
    RUNTIME_ERROR = "S-RUN-001"
    UNDEFINED_VARIABLE = "S-RUN-002"
    CONVERSION = "S-RUN-003"
    TEMPLATE_NOT_FOUND = "S-RUN-004"

    # Include errors (S-INC-xxx)
    INCLUDE_ARITY = "S-INC-001"
    INCLUDE_EMPTY_NAME = "S-INC-002"
    INCLUDE_EMPTY_PATH = "S-INC-003"
    INCLUDE_NO_LOADER = "S-INC-004"
    INCLUDE_LOAD = "S-INC-005"
    INCLUDE_PARSE = "S-INC-006"
    INCLUDE_RECURSIVE = "S-INC-007"

    @property
    def category(self) -> str:
        """Error category (``state``, ``runtime`` or ``include``)."""
        prefix = self.value.split("-")[1]
        return {
            "STA": "state",
            "RUN": "runtime",
            "INC": "include",
        }.get(prefix, "unknown")


class ScriptError(Exception):
    """Base exception for all Scrawl errors.

    Attributes:
        message: Error description without location.
        span: Source span the error is reported against, if known.
        hint: Optional actionable suggestion.
    """

    code: ErrorCode | None = None

    def __init__(
        self,
        message: str,
        span: SourceSpan | None = None,
        *,
        hint: str | None = None,
    ):
        self.message = message
        self.span = span
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.span} : error : {self.message}"

    def format_compact(self) -> str:
        """Format as a terminal diagnostic with code and hint."""
        parts: list[str] = []
        location = terminal.location(str(self.span)) if self.span else "<template>"
        code = f"{self.code.value}: " if self.code else ""
        parts.append(f"{code}{self.message}")
        parts.append(f"  --> {location}")
        if self.hint:
            parts.append(f"  {terminal.hint('Hint:')} {self.hint}")
        return "\n".join(parts)


class InvalidStateError(ScriptError):
    """The runtime was asked to do something its state does not allow.

    Raised when evaluating a template that has parse errors, or when a stack
    of the execution context is popped more often than it was pushed.
    """

    code: ErrorCode | None = ErrorCode.UNBALANCED_STACK


class TemplateHasErrorsError(InvalidStateError):
    """Evaluation of a template that failed to parse."""

    code: ErrorCode | None = ErrorCode.TEMPLATE_HAS_ERRORS

    def __init__(self, diagnostics: Sequence[Diagnostic], source_path: str | None = None):
        self.diagnostics = tuple(diagnostics)
        self.source_path = source_path
        name = source_path or "<template>"
        lines = [f"Template {name} has errors and cannot be evaluated:"]
        lines.extend(f"  {d}" for d in self.diagnostics if d.is_error)
        super().__init__("\n".join(lines), hint="Check Template.diagnostics for details")


class ScriptRuntimeError(ScriptError):
    """Evaluation-time failure reported against a source span."""

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR


class UndefinedVariableError(ScriptRuntimeError):
    """Unknown identifier read while ``strict_variables`` is enabled."""

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(self, name: str, span: SourceSpan | None = None):
        self.name = name
        super().__init__(
            f"The variable or function `{name}` was not found",
            span,
            hint="Define it before use, or disable strict_variables",
        )


class ConversionError(ScriptRuntimeError):
    """A runtime value could not be converted to text."""

    code: ErrorCode | None = ErrorCode.CONVERSION


class TemplateNotFoundError(ScriptRuntimeError):
    """A loader could not resolve a template name."""

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class IncludeError(ScriptRuntimeError):
    """Base class for failures of the include builtin."""


class ArityError(IncludeError):
    """include called without a template name."""

    code: ErrorCode | None = ErrorCode.INCLUDE_ARITY


class EmptyNameError(IncludeError):
    """The include template name is empty after trimming."""

    code: ErrorCode | None = ErrorCode.INCLUDE_EMPTY_NAME


class EmptyPathError(IncludeError):
    """The loader resolved a name to an empty path."""

    code: ErrorCode | None = ErrorCode.INCLUDE_EMPTY_PATH


class ConfigurationError(IncludeError):
    """No template loader is registered on the execution context."""

    code: ErrorCode | None = ErrorCode.INCLUDE_NO_LOADER


class LoadError(IncludeError):
    """The loader returned no text for a resolved path."""

    code: ErrorCode | None = ErrorCode.INCLUDE_LOAD


class IncludeParseError(IncludeError):
    """An included template failed to parse.

    The nested diagnostics are kept so that reports point at the real cause
    inside the included file, not only at the include call site.
    """

    code: ErrorCode | None = ErrorCode.INCLUDE_PARSE

    def __init__(
        self,
        message: str,
        span: SourceSpan | None,
        diagnostics: Sequence[Diagnostic],
    ):
        self.diagnostics = tuple(diagnostics)
        super().__init__(message, span)

    def _format_message(self) -> str:
        header = super()._format_message()
        if not self.diagnostics:
            return header
        nested = "\n".join(f"  {d}" for d in self.diagnostics)
        return f"{header}\n{nested}"


class RecursiveIncludeError(IncludeError):
    """A template name is already being included further up the call stack."""

    code: ErrorCode | None = ErrorCode.INCLUDE_RECURSIVE

    def __init__(
        self,
        template_name: str,
        span: SourceSpan | None = None,
        pending: Sequence[str] = (),
    ):
        self.template_name = template_name
        self.pending = tuple(pending)
        super().__init__(
            f"The include [{template_name}] cannot be used recursively",
            span,
            hint="Check for circular includes: a -> b -> a",
        )
