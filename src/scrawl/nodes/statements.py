"""Statement nodes for the Scrawl AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from scrawl.nodes.base import Node
from scrawl.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class Block(Node):
    """Sequence of statements. Evaluates to the value of the last one."""

    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Page(Node):
    """Root node of a parsed template."""

    body: Block
    front_matter: Block | None = None


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Raw text between code blocks."""

    value: str


@dataclass(frozen=True, slots=True)
class ExpressionStatement(Node):
    """Expression used as a statement: {{ name }}"""

    expr: Expr


@dataclass(frozen=True, slots=True)
class Assign(Node):
    """Variable assignment: {{ x = 1 }}"""

    target: str
    value: Expr


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: {{ if x }}...{{ else if y }}...{{ else }}...{{ end }}"""

    test: Expr
    body: Block
    else_: Block | None = None


@dataclass(frozen=True, slots=True)
class For(Node):
    """Loop: {{ for item in items }}...{{ end }}"""

    target: str
    iter: Expr
    body: Block
