"""Core value types shared by the lexer, parser and runtime.

Positions use 1-based line numbers and 0-based column offsets, matching the
convention of Python's own ``ast`` module.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Token kinds produced by the lexer."""

    # Template structure
    TEXT = "text"
    CODE_ENTER = "code_enter"
    CODE_EXIT = "code_exit"
    FRONT_MATTER_MARKER = "front_matter_marker"

    # Statement separators
    NEWLINE = "newline"
    SEMICOLON = "semicolon"

    # Atoms
    IDENTIFIER = "identifier"
    ARGUMENT = "argument"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"

    # Punctuation
    DOT = "dot"
    COMMA = "comma"
    LPAREN = "lparen"
    RPAREN = "rparen"
    LBRACKET = "lbracket"
    RBRACKET = "rbracket"
    ASSIGN = "assign"

    # Operators
    PLUS = "plus"
    MINUS = "minus"
    STAR = "star"
    SLASH = "slash"
    PERCENT = "percent"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"

    EOF = "eof"


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """A point in template source."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line},{self.column}"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """A range of template source, optionally tied to a file."""

    filename: str | None
    start: SourcePosition
    end: SourcePosition

    @property
    def lineno(self) -> int:
        return self.start.line

    def with_filename(self, filename: str | None) -> SourceSpan:
        """Return a copy pointing at ``filename``."""
        return SourceSpan(filename, self.start, self.end)

    def __str__(self) -> str:
        return f"{self.filename or '<template>'}({self.start})"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token with its source range."""

    type: TokenType
    value: str
    lineno: int
    col_offset: int
    end_lineno: int
    end_col_offset: int

    @property
    def start(self) -> SourcePosition:
        return SourcePosition(self.lineno, self.col_offset)

    @property
    def end(self) -> SourcePosition:
        return SourcePosition(self.end_lineno, self.end_col_offset)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
