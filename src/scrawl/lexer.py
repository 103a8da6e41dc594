"""Lexer for Scrawl templates.

Turns template source into a flat token list. Templates mix literal text
with code blocks delimited by ``{{`` and ``}}``:

    Hello {{ user.name }}!
    {{ for item in items }}- {{ item }}
    {{ end }}

Modes:
- ``DEFAULT``: text with embedded code blocks.
- ``SCRIPT_ONLY``: the whole source is code (used for expressions).
- ``FRONT_MATTER_AND_CONTENT``: a leading code section between two ``+++``
  lines, followed by regular content.
- ``FRONT_MATTER_ONLY``: only the leading front matter is lexed.

Errors never raise. They are recorded as diagnostics and lexing continues,
so the parser can report as many problems as possible in one pass.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from scrawl._types import SourcePosition, SourceSpan, Token, TokenType
from scrawl.diagnostics import Diagnostic, Severity

CODE_START = "{{"
CODE_END = "}}"


class ScriptMode(Enum):
    """How the lexer interprets the source text."""

    DEFAULT = "default"
    FRONT_MATTER_ONLY = "front_matter_only"
    FRONT_MATTER_AND_CONTENT = "front_matter_and_content"
    SCRIPT_ONLY = "script_only"


@dataclass(frozen=True, slots=True)
class LexerOptions:
    """Lexer configuration. Copy with ``dataclasses.replace``."""

    mode: ScriptMode = ScriptMode.DEFAULT
    front_matter_marker: str = "+++"


_OPERATORS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ";": TokenType.SEMICOLON,
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}


class Lexer:
    """Tokenizer for one template source.

    Example:
        >>> lexer = Lexer("Hi {{ name }}")
        >>> [t.type.name for t in lexer.tokenize()]
        ['TEXT', 'CODE_ENTER', 'IDENTIFIER', 'CODE_EXIT', 'EOF']

    """

    __slots__ = (
        "_col",
        "_diagnostics",
        "_line",
        "_options",
        "_pos",
        "_source_path",
        "_text",
        "_tokens",
    )

    # Compiled once at class level (immutable)
    _CODE_RE = re.compile(
        r"""
          (?P<ws>[ \t\r\f]+)
        | (?P<newline>\n)
        | (?P<float>\d+\.\d+)
        | (?P<integer>\d+)
        | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
        | (?P<argument>\$\d*)
        | (?P<identifier>[A-Za-z_][A-Za-z0-9_]*)
        | (?P<operator>==|!=|<=|>=|[-+*/%<>=.,()\[\];])
        """,
        re.VERBOSE,
    )
    _ESCAPE_RE = re.compile(r"\\(.)")

    def __init__(
        self,
        text: str,
        source_path: str | None = None,
        options: LexerOptions | None = None,
    ):
        self._text = text
        self._source_path = source_path
        self._options = options or LexerOptions()
        self._pos = 0
        self._line = 1
        self._col = 0
        self._diagnostics: list[Diagnostic] = []
        self._tokens: list[Token] | None = None

    @property
    def text(self) -> str:
        return self._text

    @property
    def source_path(self) -> str | None:
        return self._source_path

    @property
    def options(self) -> LexerOptions:
        return self._options

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def tokenize(self) -> list[Token]:
        """Lex the whole source. The result always ends with an ``EOF`` token."""
        if self._tokens is not None:
            return self._tokens
        self._tokens = []

        mode = self._options.mode
        if mode is ScriptMode.SCRIPT_ONLY:
            self._lex_code(in_template=False)
        elif mode in (ScriptMode.FRONT_MATTER_ONLY, ScriptMode.FRONT_MATTER_AND_CONTENT):
            self._lex_front_matter()
            if mode is ScriptMode.FRONT_MATTER_AND_CONTENT:
                self._lex_template()
        else:
            self._lex_template()

        self._emit(TokenType.EOF, "", self._line, self._col)
        return self._tokens

    # ─────────────────────────────────────────────────────────────────────────
    # Position tracking
    # ─────────────────────────────────────────────────────────────────────────

    def _advance(self, count: int) -> str:
        chunk = self._text[self._pos : self._pos + count]
        newlines = chunk.count("\n")
        if newlines:
            self._line += newlines
            self._col = len(chunk) - chunk.rfind("\n") - 1
        else:
            self._col += len(chunk)
        self._pos += len(chunk)
        return chunk

    def _emit(self, type: TokenType, value: str, line: int, col: int) -> Token:
        token = Token(type, value, line, col, self._line, self._col)
        assert self._tokens is not None
        self._tokens.append(token)
        return token

    def _error(self, message: str, line: int, col: int) -> None:
        span = SourceSpan(
            self._source_path,
            SourcePosition(line, col),
            SourcePosition(self._line, self._col),
        )
        self._diagnostics.append(Diagnostic(Severity.ERROR, span, message))

    # ─────────────────────────────────────────────────────────────────────────
    # Template text
    # ─────────────────────────────────────────────────────────────────────────

    def _lex_template(self) -> None:
        text = self._text
        while self._pos < len(text):
            index = text.find(CODE_START, self._pos)
            line, col = self._line, self._col
            if index == -1:
                self._emit(TokenType.TEXT, self._advance(len(text) - self._pos), line, col)
                return
            if index > self._pos:
                self._emit(TokenType.TEXT, self._advance(index - self._pos), line, col)
                line, col = self._line, self._col
            self._advance(len(CODE_START))
            self._emit(TokenType.CODE_ENTER, CODE_START, line, col)
            if not self._lex_code(in_template=True):
                self._error(f"Unclosed code block, expecting '{CODE_END}'", line, col)
                return

    def _lex_front_matter(self) -> None:
        line, col = self._line, self._col
        if not self._at_marker():
            marker = self._options.front_matter_marker
            self._error(
                f"Expecting front matter marker '{marker}' at the start of the template", line, col
            )
            return
        self._consume_marker_line()
        if not self._lex_code(in_template=False, front_matter=True):
            self._error("Missing closing front matter marker", line, col)
            return
        self._consume_marker_line()

    def _at_marker(self) -> bool:
        marker = self._options.front_matter_marker
        if self._col != 0 or not self._text.startswith(marker, self._pos):
            return False
        end = self._text.find("\n", self._pos)
        rest = self._text[self._pos + len(marker) : end if end != -1 else len(self._text)]
        return not rest.strip()

    def _consume_marker_line(self) -> None:
        line, col = self._line, self._col
        end = self._text.find("\n", self._pos)
        length = (end + 1 if end != -1 else len(self._text)) - self._pos
        self._advance(length)
        self._emit(TokenType.FRONT_MATTER_MARKER, self._options.front_matter_marker, line, col)

    # ─────────────────────────────────────────────────────────────────────────
    # Code
    # ─────────────────────────────────────────────────────────────────────────

    def _lex_code(self, *, in_template: bool, front_matter: bool = False) -> bool:
        """Lex code until a code exit (or closing marker). False at end of input."""
        text = self._text
        while self._pos < len(text):
            line, col = self._line, self._col

            if in_template and text.startswith(CODE_END, self._pos):
                self._advance(len(CODE_END))
                self._emit(TokenType.CODE_EXIT, CODE_END, line, col)
                return True
            if front_matter and self._at_marker():
                return True

            char = text[self._pos]
            if char == "#":
                self._skip_comment(in_template)
                continue

            match = self._CODE_RE.match(text, self._pos)
            if match is None:
                if char in "\"'":
                    end = text.find("\n", self._pos)
                    self._advance((end if end != -1 else len(text)) - self._pos)
                    self._error("Unterminated string literal", line, col)
                else:
                    self._advance(1)
                    self._error(f"Unexpected character {char!r}", line, col)
                continue

            kind = match.lastgroup
            value = self._advance(len(match.group()))
            if kind == "ws":
                continue
            if kind == "newline":
                self._emit(TokenType.NEWLINE, value, line, col)
            elif kind == "string":
                self._emit(TokenType.STRING, self._unescape(value[1:-1]), line, col)
            elif kind == "argument":
                self._emit(TokenType.ARGUMENT, value[1:], line, col)
            elif kind == "identifier":
                self._emit(TokenType.IDENTIFIER, value, line, col)
            elif kind == "integer":
                self._emit(TokenType.INTEGER, value, line, col)
            elif kind == "float":
                self._emit(TokenType.FLOAT, value, line, col)
            else:
                self._emit(_OPERATORS[value], value, line, col)
        return False

    def _skip_comment(self, in_template: bool) -> None:
        text = self._text
        end = text.find("\n", self._pos)
        if end == -1:
            end = len(text)
        if in_template:
            code_end = text.find(CODE_END, self._pos, end)
            if code_end != -1:
                end = code_end
        self._advance(end - self._pos)

    def _unescape(self, body: str) -> str:
        return self._ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)
