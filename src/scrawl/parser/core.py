"""Scrawl parser: token list → immutable AST.

Recursive descent over the lexer's tokens. Syntax errors are collected as
diagnostics rather than raised; after an error the parser skips to the next
statement boundary and carries on, so one pass reports every broken
statement.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scrawl._types import SourceSpan, Token, TokenType
from scrawl.diagnostics import Diagnostic, has_errors
from scrawl.lexer import Lexer
from scrawl.nodes import Page
from scrawl.parser.errors import ParseError
from scrawl.parser.expressions import ExpressionParsingMixin
from scrawl.parser.statements import StatementParsingMixin

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Parser configuration. Copy with ``dataclasses.replace``.

    Attributes:
        expression_depth_limit: Maximum nesting of sub-expressions before
            the parser reports an error instead of recursing further.
    """

    expression_depth_limit: int = 64


class Parser(StatementParsingMixin, ExpressionParsingMixin):
    """Parse one lexed template into a :class:`~scrawl.nodes.Page`.

    Example:
        >>> parser = Parser(Lexer("{{ 1 + 2 }}"))
        >>> page = parser.run()
        >>> parser.has_errors
        False

    """

    def __init__(self, lexer: Lexer, options: ParserOptions | None = None):
        self._lexer = lexer
        self._tokens = lexer.tokenize()
        self._pos = 0
        self._options = options or ParserOptions()
        self._filename = lexer.source_path
        self._source = lexer.text
        self._errors: list[Diagnostic] = []
        self._depth = 0

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Lexer diagnostics followed by parser diagnostics."""
        return self._lexer.diagnostics + tuple(self._errors)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    def run(self) -> Page:
        page = self._parse_page()
        if self._errors:
            logger.debug(
                "Parsed %s with %d error(s)", self._filename or "<template>", len(self._errors)
            )
        return page

    # ─────────────────────────────────────────────────────────────────────────
    # Token navigation
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _is_keyword(self, token: Token, keyword: str) -> bool:
        return token.type is TokenType.IDENTIFIER and token.value == keyword

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self._current.type is not token_type:
            raise self._error(message)
        return self._advance()

    def _error(
        self,
        message: str,
        token: Token | None = None,
        suggestion: str | None = None,
    ) -> ParseError:
        return ParseError(
            message,
            token or self._current,
            source=self._source,
            filename=self._filename,
            suggestion=suggestion,
        )

    def _report(self, error: ParseError) -> None:
        self._errors.append(error.to_diagnostic())

    def _span(self, start: Token) -> SourceSpan:
        """Span from ``start`` to the last consumed token."""
        end = self._tokens[self._pos - 1] if self._pos > 0 else start
        if (end.lineno, end.col_offset) < (start.lineno, start.col_offset):
            end = start
        return SourceSpan(self._filename, start.start, end.end)
