"""Statement parsing for the Scrawl parser.

Block keywords dispatch through ``_BLOCK_PARSERS`` (keyword → method name),
so adding a statement means adding one entry and one ``_parse_*`` method.
Every block is closed by a single ``end``; ``else if`` chains share the
``end`` of the outermost ``if``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scrawl._types import TokenType
from scrawl.nodes import (
    Assign,
    Block,
    ExpressionStatement,
    For,
    If,
    Node,
    Page,
    Text,
)
from scrawl.parser.errors import ParseError

if TYPE_CHECKING:
    from scrawl._types import SourceSpan, Token
    from scrawl.nodes import Expr

_BLOCK_PARSERS: dict[str, str] = {
    "if": "_parse_if",
    "for": "_parse_for",
}

_CONTINUATION_KEYWORDS: frozenset[str] = frozenset({"else"})
_END_KEYWORDS: frozenset[str] = frozenset({"end"})
_VALID_KEYWORDS: frozenset[str] = frozenset(_BLOCK_PARSERS)

RESERVED_WORDS: frozenset[str] = (
    _VALID_KEYWORDS
    | _CONTINUATION_KEYWORDS
    | _END_KEYWORDS
    | frozenset({"in", "and", "or", "not", "true", "false", "null"})
)

_SEPARATORS = frozenset(
    {TokenType.NEWLINE, TokenType.SEMICOLON, TokenType.CODE_ENTER, TokenType.CODE_EXIT}
)
_STATEMENT_END = frozenset(
    {
        TokenType.NEWLINE,
        TokenType.SEMICOLON,
        TokenType.CODE_EXIT,
        TokenType.EOF,
        TokenType.FRONT_MATTER_MARKER,
    }
)


class StatementParsingMixin:
    """Mixin for parsing statements and blocks.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _tokens: list[Token]

        @property
        def _current(self) -> Token: ...

        def _peek(self, offset: int = 1) -> Token: ...
        def _advance(self) -> Token: ...
        def _is_keyword(self, token: Token, keyword: str) -> bool: ...
        def _expect(self, token_type: TokenType, message: str) -> Token: ...
        def _error(
            self, message: str, token: Token | None = None, suggestion: str | None = None
        ) -> ParseError: ...
        def _report(self, error: ParseError) -> None: ...
        def _span(self, start: Token) -> SourceSpan: ...

        # From ExpressionParsingMixin
        def _parse_expression(self) -> Expr: ...

    def _parse_page(self) -> Page:
        start = self._current
        front_matter = None
        if start.type is TokenType.FRONT_MATTER_MARKER:
            self._advance()
            front_matter = self._parse_top_level()
            if self._current.type is TokenType.FRONT_MATTER_MARKER:
                self._advance()
        body = self._parse_top_level()
        return Page(self._span(start), body=body, front_matter=front_matter)

    def _parse_top_level(self) -> Block:
        """Parse statements up to a front matter marker or end of input."""
        start = self._current
        body: list[Node] = []
        while True:
            body.extend(self._parse_statements())
            token = self._current
            if token.type in (TokenType.EOF, TokenType.FRONT_MATTER_MARKER):
                break
            # A stray 'end' or 'else' with no open block
            self._report(self._error(f"Unexpected '{token.value}' without a matching block", token))
            self._advance()
        return Block(self._span(start), tuple(body))

    def _parse_statements(self) -> list[Node]:
        """Parse statements until end of input or a keyword owned by the caller."""
        body: list[Node] = []
        while True:
            token = self._current
            if token.type in (TokenType.EOF, TokenType.FRONT_MATTER_MARKER):
                return body
            if token.type in _SEPARATORS:
                self._advance()
                continue
            if token.type is TokenType.TEXT:
                self._advance()
                body.append(Text(self._span(token), token.value))
                continue
            if token.type is TokenType.IDENTIFIER and (
                token.value in _END_KEYWORDS or token.value in _CONTINUATION_KEYWORDS
            ):
                return body
            try:
                body.append(self._parse_statement())
            except ParseError as e:
                self._report(e)
                self._recover()

    def _recover(self) -> None:
        """Skip to the next statement boundary."""
        while self._current.type not in _STATEMENT_END:
            self._advance()

    def _parse_body(self) -> Block:
        start = self._current
        statements = self._parse_statements()
        return Block(self._span(start), tuple(statements))

    def _parse_statement(self) -> Node:
        token = self._current
        if token.type is TokenType.IDENTIFIER:
            method_name = _BLOCK_PARSERS.get(token.value)
            if method_name is not None:
                return getattr(self, method_name)()
            if self._peek().type is TokenType.ASSIGN:
                return self._parse_assign()

        expr = self._parse_expression()
        span = self._span(token)
        self._expect_statement_end()
        return ExpressionStatement(span, expr)

    def _expect_statement_end(self) -> None:
        token = self._current
        if token.type not in _STATEMENT_END:
            raise self._error(
                f"Expecting end of statement, got '{token.value}'",
                suggestion="Separate statements with a new line or ';'",
            )
        if token.type in (TokenType.NEWLINE, TokenType.SEMICOLON):
            self._advance()

    def _expect_name(self, what: str) -> Token:
        token = self._expect(TokenType.IDENTIFIER, f"Expecting {what}")
        if token.value in RESERVED_WORDS:
            raise self._error(f"'{token.value}' is a reserved word and cannot be {what}", token)
        return token

    def _consume_end(self, keyword: str, start: Token) -> None:
        if not self._is_keyword(self._current, "end"):
            raise self._error(
                f"Missing 'end' for '{keyword}' started at line {start.lineno}",
                suggestion=f"Close the block with {{{{ end }}}}",
            )
        self._advance()
        self._expect_statement_end()

    def _parse_assign(self) -> Assign:
        start = self._current
        target = self._expect_name("an assignment target").value
        self._advance()  # consume '='
        value = self._parse_expression()
        span = self._span(start)
        self._expect_statement_end()
        return Assign(span, target=target, value=value)

    def _parse_if(self) -> If:
        """Parse if / else if / else / end."""
        start = self._advance()  # consume 'if'
        test = self._parse_expression()
        self._expect_statement_end()
        body = self._parse_body()

        else_: Block | None = None
        if self._is_keyword(self._current, "else"):
            self._advance()
            if self._is_keyword(self._current, "if"):
                # The nested if consumes the 'end' shared by the whole chain
                nested = self._parse_if()
                else_ = Block(nested.span, (nested,))
                return If(self._span(start), test=test, body=body, else_=else_)
            self._expect_statement_end()
            else_ = self._parse_body()

        self._consume_end("if", start)
        return If(self._span(start), test=test, body=body, else_=else_)

    def _parse_for(self) -> For:
        """Parse for <name> in <expr> ... end."""
        start = self._advance()  # consume 'for'
        target = self._expect_name("a loop variable").value
        if not self._is_keyword(self._current, "in"):
            raise self._error("Expecting 'in' after the loop variable")
        self._advance()
        iterable = self._parse_expression()
        self._expect_statement_end()
        body = self._parse_body()
        self._consume_end("for", start)
        return For(self._span(start), target=target, iter=iterable, body=body)
