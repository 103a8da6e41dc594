"""Tests for the runtime object model: scopes, display text and operators."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from scrawl import ScriptObject, ScriptRuntimeError, Template, to_display_string
from scrawl.runtime.objects import get_item, get_member


@dataclass
class Page:
    title: str
    tags: list[str]


class Plain:
    def __init__(self):
        self.visible = 1
        self._hidden = 2


class TestScriptObject:
    """Building scopes from models."""

    def test_from_mapping(self):
        assert ScriptObject.from_model({"a": 1}) == {"a": 1}

    def test_from_dataclass(self):
        scope = ScriptObject.from_model(Page("Home", ["x"]))
        assert scope == {"title": "Home", "tags": ["x"]}

    def test_from_object_skips_private_attributes(self):
        assert ScriptObject.from_model(Plain()) == {"visible": 1}

    def test_keywords_override_model(self):
        scope = ScriptObject.from_model({"a": 1, "b": 2}, b=3)
        assert scope == {"a": 1, "b": 3}

    def test_none_model_is_empty(self):
        assert ScriptObject.from_model() == {}

    def test_rejects_values_without_members(self):
        with pytest.raises(TypeError, match="Cannot import 'int'"):
            ScriptObject.from_model(42)

    def test_repr(self):
        assert repr(ScriptObject(a=1)) == "ScriptObject({'a': 1})"


class TestDisplayString:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("text", "text"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (2.5, "2.5"),
            ([1, None, "a"], "[1, , a]"),
            ((True,), "[true]"),
            ({"k": [1]}, "{k: [1]}"),
        ],
    )
    def test_conversion(self, value, expected):
        assert to_display_string(value) == expected


class TestMemberAccess:
    def test_mapping_keys(self):
        assert get_member({"a": 1}, "a") == 1
        assert get_member({"a": 1}, "b") is None

    def test_object_attributes(self):
        assert get_member(Plain(), "visible") == 1
        assert get_member(Plain(), "missing") is None

    def test_private_names_are_hidden(self):
        assert get_member(Plain(), "_hidden") is None
        assert get_member(Plain(), "__class__") is None

    def test_none_propagates(self):
        assert get_member(None, "anything") is None
        assert get_item(None, 0) is None

    def test_sequence_indexing(self):
        assert get_item([1, 2], 1) == 2
        assert get_item([1, 2], -1) == 2
        assert get_item([1, 2], 5) is None
        assert get_item("ab", 0) == "a"

    def test_string_key_falls_back_to_member(self):
        assert get_item(Plain(), "visible") == 1

    def test_invalid_index_type(self):
        with pytest.raises(TypeError):
            get_item(5, 0)

    def test_chained_access_in_template(self):
        model = {"page": Page("Home", ["a", "b"])}
        assert Template.parse("{{ page.title }}:{{ page.tags[1] }}").render(model) == "Home:b"

    def test_invalid_index_in_template(self):
        with pytest.raises(ScriptRuntimeError, match="cannot be indexed"):
            Template.parse("{{ n[0] }}").render({"n": 5})


class TestOperators:
    """Arithmetic, comparison and boolean operators."""

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("1 + 2 * 3", 7),
            ("(1 + 2) * 3", 9),
            ("7 % 3", 1),
            ("7 / 2", 3.5),
            ("-(2 - 5)", 3),
            ('"a" + 1', "a1"),
            ('1 + "a"', "1a"),
            ('"x" + true', "xtrue"),
            ("[1] + [2]", [1, 2]),
            ("1 < 2", True),
            ("2 <= 1", False),
            ('"a" == "a"', True),
            ("null == null", True),
            ("1 != 1", False),
            ("true and false", False),
            ("false or 3", True),
            ("not null", True),
            ('not ""', True),
        ],
    )
    def test_evaluate(self, expression, expected):
        assert Template.evaluate_expression(expression) == expected

    def test_division_by_zero(self):
        with pytest.raises(ScriptRuntimeError, match="Cannot apply '/'"):
            Template.evaluate_expression("1 / 0")

    def test_incompatible_operands(self):
        with pytest.raises(ScriptRuntimeError) as exc_info:
            Template.evaluate_expression("[1] - 1")
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_ordering_incompatible_types(self):
        with pytest.raises(ScriptRuntimeError, match="Cannot compare"):
            Template.evaluate_expression('1 < "a"')

    def test_negating_a_string(self):
        with pytest.raises(ScriptRuntimeError, match="Cannot negate"):
            Template.evaluate_expression('-"a"')

    def test_and_short_circuits(self):
        assert Template.evaluate_expression("false and missing()") is False

    def test_or_short_circuits(self):
        assert Template.evaluate_expression("true or missing()") is True


class TestControlFlow:
    def test_if_truthiness(self):
        template = Template.parse("{{ if items }}some{{ else }}none{{ end }}")
        assert template.render(items=[1]) == "some"
        assert template.render(items=[]) == "none"
        assert template.render() == "none"

    def test_else_if(self):
        template = Template.parse(
            "{{ if n > 1 }}many{{ else if n == 1 }}one{{ else }}zero{{ end }}"
        )
        assert [template.render(n=n) for n in (0, 1, 5)] == ["zero", "one", "many"]

    def test_for_over_list(self):
        assert Template.parse("{{ for x in xs }}<{{ x }}>{{ end }}").render(xs=[1, 2]) == "<1><2>"

    def test_for_over_none_renders_nothing(self):
        assert Template.parse("a{{ for x in xs }}{{ x }}{{ end }}b").render() == "ab"

    def test_for_over_non_iterable(self):
        with pytest.raises(ScriptRuntimeError, match="Cannot iterate"):
            Template.parse("{{ for x in n }}{{ end }}").render(n=3)

    def test_loop_variable_outlives_the_loop(self):
        source = "{{ for x in xs }}{{ end }}{{ x }}"
        assert Template.parse(source).render(xs=["a", "b"]) == "b"
