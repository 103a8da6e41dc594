"""Tests for Template: parsing, evaluation, rendering and diagnostics."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from scrawl import (
    ExecutionContext,
    InvalidStateError,
    LexerOptions,
    ScriptMode,
    ScriptObject,
    ScriptRuntimeError,
    Severity,
    Template,
    TemplateHasErrorsError,
    terminal,
)


class TestParse:
    """Template.parse never raises on bad input."""

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input(self, text):
        template = Template.parse(text)
        assert template.page is None
        assert template.diagnostics == ()
        assert not template.has_errors
        assert template.render() == ""
        assert template.evaluate() is None

    def test_source_path_and_source_are_kept(self):
        template = Template.parse("Hi {{ name }}", "page.txt")
        assert template.source_path == "page.txt"
        assert template.source == "Hi {{ name }}"
        assert template.page is not None

    def test_syntax_error_becomes_diagnostic(self):
        template = Template.parse("{{ 1 + }}", "page.txt")
        assert template.has_errors
        [diagnostic] = template.diagnostics
        assert diagnostic.severity is Severity.ERROR
        assert str(diagnostic).startswith("page.txt(1,7) : error :")

    def test_lexer_diagnostics_come_first(self):
        template = Template.parse("{{ @ }}{{ 1 + }}")
        messages = [d.text for d in template.diagnostics]
        assert messages[0].startswith("Unexpected character '@'")
        assert len(messages) == 2

    def test_unclosed_code_block(self):
        template = Template.parse("Hello {{ name")
        assert template.has_errors
        assert "Unclosed code block" in template.diagnostics[0].text

    def test_parser_recovers_after_error(self):
        template = Template.parse("{{ 1 + }}\n{{ if }}\n{{ end }}")
        assert len(template.diagnostics) >= 2

    def test_template_is_immutable(self):
        template = Template.parse("x")
        with pytest.raises(AttributeError):
            template.page = None  # type: ignore[misc]


class TestEvaluate:
    """evaluate_in / evaluate return the page value with output disabled."""

    def test_evaluate_returns_last_value(self):
        assert Template.parse("{{ x = 1 }}{{ x + 41 }}").evaluate() == 42

    def test_evaluate_writes_nothing(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        result = Template.parse("text {{ 1 }} more {{ 2 }}").evaluate_in(context)
        assert result == 2
        assert context.output == ""

    def test_evaluate_restores_enable_output(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        Template.parse("{{ 1 }}").evaluate_in(context)
        assert context.enable_output is True

    def test_evaluate_restores_enable_output_on_failure(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        with pytest.raises(ScriptRuntimeError):
            Template.parse("{{ 1 / 0 }}").evaluate_in(context)
        assert context.enable_output is True

    def test_evaluate_with_errors_raises(self):
        template = Template.parse("{{ 1 + }}", "broken.txt")
        with pytest.raises(TemplateHasErrorsError) as exc_info:
            template.evaluate()
        assert isinstance(exc_info.value, InvalidStateError)
        assert "broken.txt(1,7)" in str(exc_info.value)
        assert exc_info.value.diagnostics == template.diagnostics

    def test_evaluate_with_model_object(self):
        @dataclass
        class Point:
            x: int
            y: int

        assert Template.parse("{{ x * y }}").evaluate(Point(3, 4)) == 12

    def test_keyword_arguments_override_model(self):
        assert Template.parse("{{ a }}").evaluate({"a": 1}, a=2) == 2

    def test_evaluate_expression(self):
        assert Template.evaluate_expression("a * 2", {"a": 21}) == 42

    def test_evaluate_expression_in_context(self):
        context = ExecutionContext()
        context.push_global(ScriptObject(items=[1, 2, 3]))
        assert Template.evaluate_expression("items[1] + 10", context=context) == 12
        assert context.global_depth == 1

    def test_evaluate_expression_treats_braces_as_code(self):
        with pytest.raises(TemplateHasErrorsError):
            Template.evaluate_expression("{{ 1 }}")


class TestRender:
    """render_in / render write output."""

    def test_render_text_and_expressions(self):
        assert Template.parse("Hello, {{ name }}!").render(name="World") == "Hello, World!"

    def test_render_with_dict_model(self):
        assert Template.parse("Hello, {{ name }}!").render({"name": "World"}) == "Hello, World!"

    def test_render_is_deterministic(self):
        template = Template.parse("{{ for i in items }}{{ i * 2 }},{{ end }}")
        results = {template.render(items=[1, 2, 3]) for _ in range(5)}
        assert results == {"2,4,6,"}

    def test_render_writes_trailing_value(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        Template.parse("{{ 40 + 2 }}").render_in(context)
        assert context.output == "42"

    def test_render_in_empty_template_writes_nothing(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        Template.parse("").render_in(context)
        assert context.output == ""
        assert context.source_file_depth == 0

    def test_render_respects_disabled_output(self):
        context = ExecutionContext(enable_output=False)
        context.push_global(ScriptObject())
        Template.parse("text {{ 42 }}").render_in(context)
        assert context.output == ""

    def test_render_in_keeps_scope_changes(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        Template.parse("{{ total = 5 }}").render_in(context)
        assert context.current_global["total"] == 5

    def test_render_pushes_source_file(self):
        seen = []
        context = ExecutionContext(
            builtins={"where": lambda: seen.append(context.current_source_file)}
        )
        context.push_global(ScriptObject())
        Template.parse("{{ where() }}", "page.txt").render_in(context)
        assert seen == ["page.txt"]
        assert context.source_file_depth == 0

    def test_runtime_error_location(self):
        with pytest.raises(ScriptRuntimeError) as exc_info:
            Template.parse("line one\n{{ 1 / 0 }}", "page.txt").render()
        assert str(exc_info.value).startswith("page.txt(2,3) : error :")

    def test_failure_leaves_context_balanced(self):
        context = ExecutionContext()
        context.push_global(ScriptObject())
        with pytest.raises(ScriptRuntimeError):
            Template.parse("a{{ missing() }}", "page.txt").render_in(context)
        assert context.global_depth == 1
        assert context.output_depth == 1
        assert context.source_file_depth == 0
        assert context.output == "a"

    def test_render_async(self):
        template = Template.parse("Hello, {{ name }}!")
        assert asyncio.run(template.render_async(name="async")) == "Hello, async!"

    def test_render_async_concurrent_calls(self):
        template = Template.parse("{{ n }}")

        async def main():
            return await asyncio.gather(*(template.render_async(n=i) for i in range(5)))

        assert asyncio.run(main()) == ["0", "1", "2", "3", "4"]


class TestFrontMatter:
    """Front matter is parsed only in front-matter modes."""

    SOURCE = "+++\ntitle = 'Home'\n+++\n# {{ title }}"

    def test_front_matter_is_separate_from_body(self):
        options = LexerOptions(mode=ScriptMode.FRONT_MATTER_AND_CONTENT)
        template = Template.parse(self.SOURCE, "page.md", lexer_options=options)
        assert not template.has_errors
        assert template.front_matter is not None

        context = ExecutionContext()
        context.push_global(ScriptObject())
        template.evaluate_front_matter(context)
        assert context.current_global["title"] == "Home"
        template.render_in(context)
        assert context.output == "# Home"

    def test_front_matter_only(self):
        options = LexerOptions(mode=ScriptMode.FRONT_MATTER_ONLY)
        template = Template.parse(self.SOURCE, lexer_options=options)
        assert template.front_matter is not None
        assert template.render() == ""

    def test_default_mode_treats_front_matter_as_text(self):
        template = Template.parse(self.SOURCE)
        assert template.front_matter is None
        assert template.render(title="T") == "+++\ntitle = 'Home'\n+++\n# T"

    def test_missing_marker_is_reported(self):
        options = LexerOptions(mode=ScriptMode.FRONT_MATTER_AND_CONTENT)
        template = Template.parse("no marker", lexer_options=options)
        assert template.has_errors

    def test_no_front_matter_evaluates_to_none(self):
        context = ExecutionContext()
        assert Template.parse("x").evaluate_front_matter(context) is None


class TestDiagnosticsFormatting:
    """format_diagnostics renders snippets with carets."""

    def test_format_diagnostics_includes_snippet(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        template = Template.parse("ok\n{{ 1 + }}", "page.txt")
        formatted = template.format_diagnostics()
        assert "page.txt(2,7) : error :" in formatted
        assert ">  2 | {{ 1 + }}" in formatted
        assert "^" in formatted

    def test_format_diagnostics_empty_when_clean(self):
        assert Template.parse("fine").format_diagnostics() == ""

    def test_colors_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        formatted = Template.parse("{{ 1 + }}").format_diagnostics()
        assert "\033[" in formatted
        assert "error" in terminal.strip_colors(formatted)
