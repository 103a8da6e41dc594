"""Base node class for the Scrawl AST."""

from __future__ import annotations

from dataclasses import dataclass

from scrawl._types import SourceSpan


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    All nodes carry their source span for error reporting.
    Nodes are immutable, so a parsed tree can be shared between renders.

    """

    span: SourceSpan

    @property
    def lineno(self) -> int:
        return self.span.start.line
