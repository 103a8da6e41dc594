"""Parser error handling for Scrawl.

``ParseError`` is raised inside the parser to unwind a broken statement and
is immediately converted into a :class:`~scrawl.diagnostics.Diagnostic`.
It never escapes :meth:`Parser.run`.
"""

from __future__ import annotations

from scrawl._types import SourceSpan, Token
from scrawl.diagnostics import Diagnostic, Severity


class ParseError(Exception):
    """Parser error with source context.

    Displays errors with a source snippet and a caret, matching the layout
    used by the lexer diagnostics.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        filename: str | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.token = token
        self.source = source
        self.filename = filename
        self.suggestion = suggestion
        super().__init__(self._format())

    @property
    def lineno(self) -> int:
        """Line number where the error occurred (1-based)."""
        return self.token.lineno

    @property
    def col_offset(self) -> int:
        """Column offset where the error occurred (0-based)."""
        return self.token.col_offset

    def _format(self) -> str:
        location = self.filename or "<template>"
        header = f"Parse Error: {self.message}\n  --> {location}:{self.lineno}:{self.col_offset}"

        msg = header
        if self.source:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                pointer = " " * self.col_offset + "^"
                msg = f"{header}\n   |\n{self.lineno:>3} | {lines[self.lineno - 1]}\n   | {pointer}"

        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg

    def to_diagnostic(self) -> Diagnostic:
        """Convert to an error diagnostic spanning the offending token."""
        span = SourceSpan(self.filename, self.token.start, self.token.end)
        text = self.message if not self.suggestion else f"{self.message}. {self.suggestion}"
        return Diagnostic(Severity.ERROR, span, text)
