"""Property-based tests for lexing, parsing and rendering.

Uses hypothesis to verify invariants that must hold for *all* inputs:

- Text without code blocks renders unchanged
- Arbitrary input never crashes the lexer or parser
- Loops and includes preserve the order of their inputs
- A reused context is balanced after every render
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import assert_balanced
from scrawl import (
    DictLoader,
    ExecutionContext,
    Lexer,
    LexerOptions,
    ScriptMode,
    ScriptObject,
    Template,
    TokenType,
)
from strategies import (
    arbitrary_source,
    code_fragment,
    identifier,
    literal_text,
    plain_text,
    small_int,
    value_text,
)


class TestSourceProperties:
    """Lexer and parser invariants."""

    @given(source=plain_text)
    @settings(max_examples=200)
    def test_plain_text_roundtrip(self, source: str) -> None:
        """Text without code blocks renders exactly as written."""
        template = Template.parse(source)
        assert not template.has_errors
        assert template.render() == source

    @given(source=arbitrary_source, mode=st.sampled_from(list(ScriptMode)))
    @settings(max_examples=300)
    def test_lexer_always_ends_with_eof(self, source: str, mode: ScriptMode) -> None:
        """The lexer never raises and always terminates the token stream."""
        tokens = Lexer(source, options=LexerOptions(mode=mode)).tokenize()
        assert tokens[-1].type is TokenType.EOF
        assert all(token.type is not TokenType.EOF for token in tokens[:-1])

    @given(source=st.one_of(arbitrary_source, code_fragment))
    @settings(max_examples=300)
    def test_parse_never_raises(self, source: str) -> None:
        """Malformed input becomes diagnostics, never exceptions."""
        template = Template.parse(source)
        assert template.has_errors == any(d.is_error for d in template.diagnostics)
        if not source:
            assert template.page is None

    @given(source=code_fragment)
    @settings(max_examples=200)
    def test_token_positions_are_ordered(self, source: str) -> None:
        """Each token starts at or after the end of the previous one."""
        tokens = Lexer(source).tokenize()
        for previous, token in zip(tokens, tokens[1:], strict=False):
            assert (previous.end_lineno, previous.end_col_offset) <= (
                token.lineno,
                token.col_offset,
            )


class TestRenderProperties:
    """Rendering invariants over generated data."""

    @given(items=st.lists(value_text, max_size=10))
    def test_for_loop_preserves_order(self, items: list[str]) -> None:
        template = Template.parse("{{ for item in items }}{{ item }}|{{ end }}")
        assert template.render(items=items) == "".join(f"{item}|" for item in items)

    @given(name=identifier, value=value_text)
    def test_assignment_then_read(self, name: str, value: str) -> None:
        template = Template.parse(f"{{{{ {name} = v }}}}{{{{ {name} }}}}")
        assert template.render(v=value) == value

    @given(a=small_int, b=small_int, c=small_int)
    def test_arithmetic_matches_python(self, a: int, b: int, c: int) -> None:
        assert Template.evaluate_expression(f"{a} + {b} * {c}") == a + b * c
        assert Template.evaluate_expression(f"({a} - {b}) * {c}") == (a - b) * c

    @given(a=small_int, b=small_int)
    def test_comparison_matches_python(self, a: int, b: int) -> None:
        assert Template.evaluate_expression(f"{a} < {b}") is (a < b)
        assert Template.evaluate_expression(f"{a} == {b}") is (a == b)

    @given(args=st.lists(literal_text, max_size=6))
    def test_include_passes_arguments_in_order(self, args: list[str]) -> None:
        loader = DictLoader({"echo": "{{ for a in $ }}{{ a }},{{ end }}"})
        context = ExecutionContext(loader=loader)
        context.push_global(ScriptObject())
        call_args = "".join(f', "{arg}"' for arg in args)
        Template.parse(f'{{{{ include("echo"{call_args}) }}}}').render_in(context)
        assert context.output == "".join(f"{arg}," for arg in args)
        assert_balanced(context)

    @given(values=st.lists(value_text, min_size=1, max_size=5))
    def test_reused_context_stays_balanced(self, values: list[str]) -> None:
        context = ExecutionContext(loader=DictLoader({"show": "<{{ $0 }}>"}))
        context.push_global(ScriptObject())
        template = Template.parse('{{ include("show", v) }}')
        for value in values:
            context.set_value("v", value)
            template.render_in(context)
            assert_balanced(context)
        assert context.output == "".join(f"<{value}>" for value in values)
        assert len(context.cached_templates) == 1

    @given(source=plain_text)
    def test_render_is_deterministic(self, source: str) -> None:
        template = Template.parse(source)
        assert template.render() == template.render()
