"""Expression parsing for the Scrawl parser.

Precedence, lowest first:

    or
    and
    not
    == != < <= > >=      (non-associative)
    + -
    * / %
    unary -
    postfix: .name  [index]  (args)

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from scrawl._types import TokenType
from scrawl.nodes import (
    ArgumentIndex,
    BinOp,
    BoolOp,
    Compare,
    Const,
    Expr,
    FuncCall,
    Getattr,
    Getitem,
    ListExpr,
    Name,
    UnaryOp,
)
from scrawl.parser.errors import ParseError
from scrawl.parser.statements import RESERVED_WORDS

if TYPE_CHECKING:
    from scrawl._types import SourceSpan, Token
    from scrawl.parser.core import ParserOptions

_COMPARE_OPS: dict[TokenType, str] = {
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
}
_ADDITIVE_OPS: dict[TokenType, str] = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE_OPS: dict[TokenType, str] = {
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.PERCENT: "%",
}
_LITERAL_KEYWORDS: dict[str, bool | None] = {"true": True, "false": False, "null": None}


class ExpressionParsingMixin:
    """Mixin for parsing expressions.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        _depth: int
        _options: ParserOptions

        @property
        def _current(self) -> Token: ...

        def _advance(self) -> Token: ...
        def _is_keyword(self, token: Token, keyword: str) -> bool: ...
        def _expect(self, token_type: TokenType, message: str) -> Token: ...
        def _error(
            self, message: str, token: Token | None = None, suggestion: str | None = None
        ) -> ParseError: ...
        def _span(self, start: Token) -> SourceSpan: ...

    @contextmanager
    def _descend(self) -> Iterator[None]:
        """Track nesting and refuse to recurse past the configured limit."""
        self._depth += 1
        try:
            if self._depth > self._options.expression_depth_limit:
                raise self._error(
                    "Expression is nested too deeply",
                    suggestion=f"The limit is {self._options.expression_depth_limit} levels",
                )
            yield
        finally:
            self._depth -= 1

    def _parse_expression(self) -> Expr:
        with self._descend():
            return self._parse_or()

    def _parse_or(self) -> Expr:
        start = self._current
        left = self._parse_and()
        while self._is_keyword(self._current, "or"):
            self._advance()
            right = self._parse_and()
            left = BoolOp(self._span(start), "or", left, right)
        return left

    def _parse_and(self) -> Expr:
        start = self._current
        left = self._parse_not()
        while self._is_keyword(self._current, "and"):
            self._advance()
            right = self._parse_not()
            left = BoolOp(self._span(start), "and", left, right)
        return left

    def _parse_not(self) -> Expr:
        start = self._current
        if self._is_keyword(start, "not"):
            self._advance()
            with self._descend():
                operand = self._parse_not()
            return UnaryOp(self._span(start), "not", operand)
        return self._parse_comparison()

    def _parse_comparison(self) -> Expr:
        start = self._current
        left = self._parse_additive()
        op = _COMPARE_OPS.get(self._current.type)
        if op is None:
            return left
        self._advance()
        right = self._parse_additive()
        return Compare(self._span(start), op, left, right)

    def _parse_additive(self) -> Expr:
        start = self._current
        left = self._parse_multiplicative()
        while (op := _ADDITIVE_OPS.get(self._current.type)) is not None:
            self._advance()
            right = self._parse_multiplicative()
            left = BinOp(self._span(start), op, left, right)
        return left

    def _parse_multiplicative(self) -> Expr:
        start = self._current
        left = self._parse_unary()
        while (op := _MULTIPLICATIVE_OPS.get(self._current.type)) is not None:
            self._advance()
            right = self._parse_unary()
            left = BinOp(self._span(start), op, left, right)
        return left

    def _parse_unary(self) -> Expr:
        start = self._current
        if start.type is TokenType.MINUS:
            self._advance()
            with self._descend():
                operand = self._parse_unary()
            return UnaryOp(self._span(start), "-", operand)
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        start = self._current
        expr = self._parse_primary()
        while True:
            token_type = self._current.type
            if token_type is TokenType.DOT:
                self._advance()
                attr = self._expect(TokenType.IDENTIFIER, "Expecting a member name after '.'")
                expr = Getattr(self._span(start), expr, attr.value)
            elif token_type is TokenType.LBRACKET:
                self._advance()
                key = self._parse_expression()
                self._expect(TokenType.RBRACKET, "Expecting ']'")
                expr = Getitem(self._span(start), expr, key)
            elif token_type is TokenType.LPAREN:
                self._advance()
                args = self._parse_sequence(TokenType.RPAREN, "')'")
                expr = FuncCall(self._span(start), expr, tuple(args))
            else:
                return expr

    def _parse_primary(self) -> Expr:
        token = self._current
        token_type = token.type

        if token_type is TokenType.INTEGER:
            self._advance()
            return Const(self._span(token), int(token.value))
        if token_type is TokenType.FLOAT:
            self._advance()
            return Const(self._span(token), float(token.value))
        if token_type is TokenType.STRING:
            self._advance()
            return Const(self._span(token), token.value)
        if token_type is TokenType.ARGUMENT:
            self._advance()
            if not token.value:
                return Name(self._span(token), "$")
            return ArgumentIndex(self._span(token), int(token.value))
        if token_type is TokenType.IDENTIFIER:
            if token.value in _LITERAL_KEYWORDS:
                self._advance()
                return Const(self._span(token), _LITERAL_KEYWORDS[token.value])
            if token.value in RESERVED_WORDS:
                raise self._error(f"Unexpected keyword '{token.value}' in expression")
            self._advance()
            return Name(self._span(token), token.value)
        if token_type is TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expecting ')'")
            return expr
        if token_type is TokenType.LBRACKET:
            self._advance()
            items = self._parse_sequence(TokenType.RBRACKET, "']'")
            return ListExpr(self._span(token), tuple(items))

        if token_type in (TokenType.CODE_EXIT, TokenType.EOF, TokenType.NEWLINE):
            raise self._error("Expecting an expression, got the end of the statement")
        raise self._error(f"Unexpected '{token.value}', expecting an expression")

    def _parse_sequence(self, closing: TokenType, closing_text: str) -> list[Expr]:
        """Parse comma-separated expressions up to and including ``closing``."""
        items: list[Expr] = []
        if self._current.type is closing:
            self._advance()
            return items
        while True:
            items.append(self._parse_expression())
            if self._current.type is TokenType.COMMA:
                self._advance()
                continue
            self._expect(closing, f"Expecting ',' or {closing_text}")
            return items
