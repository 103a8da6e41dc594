"""Tests for error codes, error formatting and terminal colors."""

from __future__ import annotations

import pytest

from scrawl import (
    ArityError,
    ErrorCode,
    IncludeError,
    IncludeParseError,
    InvalidStateError,
    RecursiveIncludeError,
    ScriptError,
    ScriptRuntimeError,
    SourcePosition,
    SourceSpan,
    Template,
    TemplateHasErrorsError,
    terminal,
)
from scrawl.exceptions import LoadError

SPAN = SourceSpan("page.txt", SourcePosition(4, 3), SourcePosition(4, 9))


class TestErrorCodes:
    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.TEMPLATE_HAS_ERRORS, "state"),
            (ErrorCode.UNBALANCED_STACK, "state"),
            (ErrorCode.UNDEFINED_VARIABLE, "runtime"),
            (ErrorCode.INCLUDE_RECURSIVE, "include"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category

    def test_codes_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_every_include_error_has_a_code(self):
        for cls in IncludeError.__subclasses__():
            assert cls.code is not None, cls.__name__
            assert cls.code.category == "include"


class TestMessages:
    def test_message_with_span(self):
        error = ScriptRuntimeError("Something failed", SPAN)
        assert str(error) == "page.txt(4,3) : error : Something failed"
        assert error.message == "Something failed"

    def test_message_without_span(self):
        assert str(ScriptError("plain")) == "plain"

    def test_recursive_include_message(self):
        error = RecursiveIncludeError("header", SPAN, pending=["header", "page"])
        assert str(error).endswith("The include [header] cannot be used recursively")
        assert error.pending == ("header", "page")
        assert error.code is ErrorCode.INCLUDE_RECURSIVE

    def test_include_parse_error_lists_nested_diagnostics(self):
        diagnostics = Template.parse("{{ 1 + }}", "inner.txt").diagnostics
        error = IncludeParseError("Unable to parse <inner>", SPAN, diagnostics)
        first, nested = str(error).split("\n", 1)
        assert first == "page.txt(4,3) : error : Unable to parse <inner>"
        assert nested.strip().startswith("inner.txt(1,7) : error :")

    def test_template_has_errors_lists_errors(self):
        template = Template.parse("{{ 1 + }}", "page.txt")
        error = TemplateHasErrorsError(template.diagnostics, template.source_path)
        assert "Template page.txt has errors" in str(error)
        assert "page.txt(1,7)" in str(error)
        assert isinstance(error, InvalidStateError)

    def test_hierarchy(self):
        assert issubclass(ArityError, IncludeError)
        assert issubclass(LoadError, ScriptRuntimeError)
        assert issubclass(IncludeError, ScriptError)


class TestFormatCompact:
    def test_includes_code_location_and_hint(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        error = RecursiveIncludeError("header", SPAN)
        lines = error.format_compact().splitlines()
        assert lines[0] == "S-INC-007: The include [header] cannot be used recursively"
        assert lines[1] == "  --> page.txt(4,3)"
        assert lines[2].startswith("  Hint: Check for circular includes")

    def test_without_span_or_code(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert ScriptError("plain").format_compact() == "plain\n  --> <template>"

    def test_colored_location(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        output = ScriptRuntimeError("boom", SPAN).format_compact()
        assert "\033[36m" in output
        assert terminal.strip_colors(output).splitlines()[1] == "  --> page.txt(4,3)"


class TestTerminalColors:
    def test_colorize_returns_plain_when_disabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.colorize("Error", "bright_red", "bold") == "Error"
        assert not terminal.supports_color()

    def test_colorize_adds_codes_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.colorize("Error", "bright_red", "bold")
        assert result == "\033[91m\033[1mError\033[0m"

    def test_severity_colors(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert "\033[91m" in terminal.severity("error")
        assert "\033[93m" in terminal.severity("warning")
        assert "\033[2m" in terminal.severity("info")

    def test_strip_colors(self):
        assert terminal.strip_colors("\033[31m\033[1mError\033[0m") == "Error"

    @pytest.mark.parametrize(
        ("env", "expected"),
        [
            ({"FORCE_COLOR": "1", "NO_COLOR": "1"}, True),
            ({"NO_COLOR": "1"}, False),
        ],
    )
    def test_detection_respects_environment(self, monkeypatch, env, expected):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.delenv("NO_COLOR", raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        assert terminal._detect_colors() is expected
