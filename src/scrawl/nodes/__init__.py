"""Scrawl AST nodes.

Frozen dataclasses produced by the parser and consumed by the evaluator in
:mod:`scrawl.runtime`. Any other object with an ``evaluate(context)`` method
can be placed in a tree as a custom node.

"""

from scrawl.nodes.base import Node
from scrawl.nodes.expressions import (
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
from scrawl.nodes.statements import (
    Assign,
    Block,
    ExpressionStatement,
    For,
    If,
    Page,
    Text,
)

__all__ = [
    "ArgumentIndex",
    "Assign",
    "BinOp",
    "Block",
    "BoolOp",
    "Compare",
    "Const",
    "Expr",
    "ExpressionStatement",
    "For",
    "FuncCall",
    "Getattr",
    "Getitem",
    "If",
    "ListExpr",
    "Name",
    "Node",
    "Page",
    "Text",
    "UnaryOp",
]
