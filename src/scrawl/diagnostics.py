"""Diagnostics produced while lexing and parsing templates.

A :class:`Diagnostic` is an immutable (severity, span, text) record. Parsing
never raises on bad input: problems are collected on the resulting
:class:`~scrawl.template.Template`, which refuses to evaluate while it holds
any ``ERROR`` diagnostic.

Format:
    ```
    page.txt(3,7) : error : Expecting an expression
       |
    >  3 | Hello {{ 1 + }}
       |              ^
       |
    ```

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from scrawl import terminal
from scrawl._types import SourceSpan


class Severity(Enum):
    """How serious a diagnostic is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source around a diagnostic line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number being reported.
        column: Optional 0-based column for the caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
            if lineno == self.error_line and self.column is not None:
                # width of the "  N | " gutter
                pointer = " " * (self.column + 1) + "^"
                parts.append(f"{terminal.dim_text('   |')}{terminal.caret(pointer)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 1,
    column: int | None = None,
) -> SourceSnippet:
    """Build a :class:`SourceSnippet` from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for the caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A message attached to a source span."""

    severity: Severity
    span: SourceSpan
    text: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self, source: str | None = None) -> str:
        """Format as ``file(line,col) : severity : text``.

        When ``source`` is given and covers the span, a snippet with a caret
        is appended.
        """
        header = (
            f"{terminal.location(str(self.span))} : "
            f"{terminal.severity(self.severity.value)} : {self.text}"
        )
        if source:
            line = self.span.start.line
            if 0 < line <= len(source.splitlines()):
                snippet = build_source_snippet(source, line, column=self.span.start.column)
                return f"{header}\n{snippet.format()}"
        return header

    def __str__(self) -> str:
        return f"{self.span} : {self.severity.value} : {self.text}"


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    """True if any diagnostic is an error."""
    return any(d.is_error for d in diagnostics)
