"""Scrawl parser package.

The parser is organized into logical modules:
- core: Parser class, options and token navigation
- statements: statements and blocks (if, for, assignment)
- expressions: expressions and operator precedence
- errors: ParseError, converted into diagnostics

"""

from scrawl.parser.core import Parser, ParserOptions
from scrawl.parser.errors import ParseError

__all__ = ["ParseError", "Parser", "ParserOptions"]
