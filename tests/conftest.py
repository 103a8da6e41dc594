"""Pytest configuration and fixtures for Scrawl tests."""

from __future__ import annotations

import pytest

from scrawl import DictLoader, ExecutionContext, ScriptObject, TemplateNotFoundError


class CountingLoader:
    """DictLoader variant that records loads and supports path aliases.

    ``aliases`` maps extra logical names onto an existing template name, so
    several names share one canonical path.
    """

    def __init__(self, mapping: dict[str, str], aliases: dict[str, str] | None = None):
        self.mapping = mapping
        self.aliases = aliases or {}
        self.loads: list[str] = []
        self.resolved: list[str] = []

    def get_path(self, context, span, name):
        self.resolved.append(name)
        path = self.aliases.get(name, name)
        if path not in self.mapping:
            raise TemplateNotFoundError(f"Template '{name}' not found", span)
        return path

    def load(self, context, span, path):
        self.loads.append(path)
        return self.mapping.get(path)


@pytest.fixture
def templates() -> dict[str, str]:
    """Templates shared by include tests."""
    return {
        "x": "X",
        "hello": "Hello {{ $0 }}!",
        "args": "{{ $0 }}-{{ $1 }}-{{ $ }}",
        "self": '{{ include("self") }}',
        "ping": 'ping {{ include("pong") }}',
        "pong": 'pong {{ include("ping") }}',
        "bad": "{{ 1 + }}",
        "empty": "",
        "nested": '[{{ include("hello", "inner") }}]',
        "boom": "before {{ 1 / 0 }} after",
        "restore": '{{ include("hello", "in") }}/{{ $0 }}',
    }


@pytest.fixture
def loader(templates: dict[str, str]) -> CountingLoader:
    """Counting loader over ``templates``; ``alias-x`` resolves to ``x``."""
    return CountingLoader(templates, aliases={"alias-x": "x", "other-x": "x"})


@pytest.fixture
def context(loader: CountingLoader) -> ExecutionContext:
    """Execution context with the counting loader and one empty scope."""
    ctx = ExecutionContext(loader=loader)
    ctx.push_global(ScriptObject())
    return ctx


@pytest.fixture
def dict_context() -> ExecutionContext:
    """Execution context with a plain DictLoader and one empty scope."""
    ctx = ExecutionContext(loader=DictLoader({"greet": "Hi {{ $0 }}"}))
    ctx.push_global(ScriptObject())
    return ctx


def assert_balanced(context: ExecutionContext, *, globals_depth: int = 1) -> None:
    """Assert every stack of ``context`` is back at its resting depth."""
    from scrawl.functions.include import PENDING_INCLUDES_TAG

    assert context.global_depth == globals_depth
    assert context.output_depth == 1
    assert context.source_file_depth == 0
    assert not context.tags.get(PENDING_INCLUDES_TAG)
