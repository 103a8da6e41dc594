"""Expression nodes for the Scrawl AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from scrawl.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Constant value: string, number, boolean, null."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Name(Expr):
    """Variable reference: {{ user }} or {{ $ }}"""

    name: str


@dataclass(frozen=True, slots=True)
class ArgumentIndex(Expr):
    """Positional include argument: {{ $0 }}"""

    index: int


@dataclass(frozen=True, slots=True)
class ListExpr(Expr):
    """List literal: [a, b, c]"""

    items: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Getattr(Expr):
    """Member access: obj.attr"""

    obj: Expr
    attr: str


@dataclass(frozen=True, slots=True)
class Getitem(Expr):
    """Subscript access: obj[key]"""

    obj: Expr
    key: Expr


@dataclass(frozen=True, slots=True)
class FuncCall(Expr):
    """Function call: func(a, b)"""

    func: Expr
    args: Sequence[Expr] = ()


@dataclass(frozen=True, slots=True)
class UnaryOp(Expr):
    """Unary operation: -x, not x"""

    op: Literal["-", "not"]
    operand: Expr


@dataclass(frozen=True, slots=True)
class BinOp(Expr):
    """Arithmetic: a + b, a * b"""

    op: Literal["+", "-", "*", "/", "%"]
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Comparison: a == b, a < b"""

    op: Literal["==", "!=", "<", "<=", ">", ">="]
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class BoolOp(Expr):
    """Short-circuit boolean: a and b, a or b"""

    op: Literal["and", "or"]
    left: Expr
    right: Expr
