"""Tests for SelectControl option handling, rendering and validation."""

from __future__ import annotations

import re

import pytest
from markupsafe import Markup

from formwork.forms.context import DictTranslator, FormContext, MappingInput
from formwork.forms.controls import SelectControl, SelectOption


def _option_values(html: str) -> list[str]:
    return re.findall(r'<option value="([^"]*)"', html)


def _option_labels(html: str) -> list[str]:
    return re.findall(r"<option [^>]*>([^<]*)</option>", html)


def _selected(html: str) -> list[str]:
    return re.findall(r'<option value="([^"]*)" selected="selected">', html)


class Person:
    def __init__(self, id, first, last):
        self.id = id
        self.first = first
        self.last = last

    def full_name(self):
        return f"{self.first} {self.last}"


# ---------------------------------------------------------------------------
# Populating options
# ---------------------------------------------------------------------------


class TestOptions:
    def test_from_pairs_keeps_order(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({"b": "Beta", "a": "Alpha"})
        assert control.options == [SelectOption("b", "Beta"), SelectOption("a", "Alpha")]

    def test_from_pairs_accepts_tuples_and_stringifies(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs([(1, "One"), (2, "Two")])
        assert [o.value for o in control.options] == ["1", "2"]

    def test_from_objects_reads_properties(self, make_context):
        people = [Person(1, "Ada", "Lovelace"), Person(2, "Alan", "Turing")]
        control = SelectControl("s", context=make_context())
        control.set_options_from_objects(people, "id", "first")
        assert control.options == [SelectOption("1", "Ada"), SelectOption("2", "Alan")]

    def test_from_objects_calls_accessor(self, make_context):
        people = [Person(1, "Ada", "Lovelace")]
        control = SelectControl("s", context=make_context())
        control.set_options_from_objects(people, "id", "full_name()")
        assert control.options == [SelectOption("1", "Ada Lovelace")]

    def test_from_objects_reads_mappings(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_objects([{"value": "x", "text": "Ex"}])
        assert control.options == [SelectOption("x", "Ex")]

    def test_missing_property_is_logged_and_empty(self, make_context, caplog):
        control = SelectControl("s", context=make_context())
        control.set_options_from_objects([Person(1, "Ada", "Lovelace")], "id", "nickname")
        assert control.options == [SelectOption("1", "")]
        assert any("nickname" in message for message in caplog.messages)


# ---------------------------------------------------------------------------
# Empty option
# ---------------------------------------------------------------------------


class TestPrependEmpty:
    @pytest.mark.parametrize("prepend_first", [True, False])
    def test_empty_option_is_always_first(self, make_context, prepend_first):
        control = SelectControl("s", context=make_context())
        if prepend_first:
            control.prepend_empty("None").set_options_from_pairs({"a": "Alpha", "b": "Beta"})
        else:
            control.set_options_from_pairs({"a": "Alpha", "b": "Beta"}).prepend_empty("None")

        html = control.render()
        assert _option_values(html) == ["", "a", "b"]
        assert _option_labels(html) == ["None", "Alpha", "Beta"]

    def test_prepending_again_replaces(self, make_context):
        control = SelectControl("s", context=make_context())
        control.prepend_empty("One").prepend_empty("Two")
        assert control.all_options == [SelectOption("", "Two")]

    def test_default_label_is_translated(self):
        context = FormContext(translator=DictTranslator({"SELECT_NULL_VALUE": "Nessuno"}))
        control = SelectControl("s", context=context).prepend_empty()
        assert control.all_options[0].text == "Nessuno"

    def test_default_label_from_default_strings(self, make_context):
        control = SelectControl("s", context=make_context()).prepend_empty()
        assert control.all_options[0].text == "- Select -"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_markup(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({"a": "Alpha"}).set_value("a").set_required()
        assert control.render() == Markup(
            '<select name="s" required><option value="a" selected="selected">Alpha</option></select>'
        )

    def test_multiple(self, make_context):
        control = SelectControl("s[]", context=make_context()).set_multiple()
        assert control.render().startswith('<select name="s[]" multiple>')

    def test_matching_value_selects_exactly_one(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({"a": "Alpha", "b": "Beta"}).prepend_empty("None")
        control.set_value("b")
        assert _selected(control.render()) == ["b"]

    def test_unknown_value_selects_nothing(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({"a": "Alpha", "b": "Beta"}).set_value("z")
        assert _selected(control.render()) == []

    def test_loose_comparison(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({1: "One", 2: "Two"}).set_value(2)
        assert _selected(control.render()) == ["2"]

    def test_collection_value_selects_members(self, make_context):
        control = SelectControl("s", context=make_context()).set_multiple()
        control.set_options_from_pairs({"a": "A", "b": "B", "c": "C"}).set_value(["a", "c"])
        assert _selected(control.render()) == ["a", "c"]

    def test_no_value_selects_empty_option(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({"a": "Alpha"}).prepend_empty("None")
        assert _selected(control.render()) == [""]

    def test_labels_are_escaped(self, make_context):
        control = SelectControl("s", context=make_context())
        control.set_options_from_pairs({'"x"': "<b>"})
        html = control.render()
        assert '<option value="&#34;x&#34;">&lt;b&gt;</option>' in html


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _select(values):
    context = FormContext(input=MappingInput(values))
    control = SelectControl("s", context=context)
    return control.set_options_from_pairs({"a": "Alpha", "b": "Beta"})


class TestValidate:
    def test_value_in_list(self):
        assert _select({"s": "a"}).validate() is True

    def test_value_not_in_list(self, caplog):
        assert _select({"s": "z"}).validate() is False
        assert 'Control validation on field "s" has failed (value "z" is not in list)' in caplog.messages

    def test_required_and_empty(self, caplog):
        control = _select({}).set_required()
        assert control.validate() is False
        assert caplog.messages == ['Control validation on field "s" has failed (required)']

    def test_empty_without_empty_option_is_not_in_list(self):
        assert _select({}).validate() is False

    def test_empty_with_empty_option_passes(self):
        assert _select({}).prepend_empty("None").validate() is True

    def test_no_options_is_unconstrained(self):
        control = SelectControl("s", context=FormContext(input=MappingInput({"s": "anything"})))
        assert control.validate() is True

    def test_multiple_checks_every_value(self, caplog):
        assert _select({"s": ["a", "b"]}).set_multiple().validate() is True
        assert _select({"s": ["a", "z", "y"]}).set_multiple().validate() is False
        assert caplog.messages == [
            'Control validation on field "s" has failed (value "z" is not in list)',
            'Control validation on field "s" has failed (value "y" is not in list)',
        ]

    def test_multiple_required_without_selection(self):
        assert _select({"s": []}).set_multiple().set_required().validate() is False

    def test_multiple_optional_without_selection(self):
        assert _select({}).set_multiple().validate() is True

    def test_array_name_reads_bracketed_values(self, caplog):
        context = FormContext(input=MappingInput({"s[]": ["a", "zzz"]}))
        control = SelectControl("s[]", context=context).set_multiple()
        control.set_options_from_pairs({"a": "Alpha", "b": "Beta"})
        assert control.validate() is False
        assert caplog.messages == [
            'Control validation on field "s" has failed (value "zzz" is not in list)'
        ]

    def test_required_array_name_with_selection(self):
        context = FormContext(input=MappingInput({"s[]": ["a"]}))
        control = SelectControl("s[]", context=context).set_required()
        control.set_options_from_pairs({"a": "Alpha", "b": "Beta"})
        assert control.validate() is True
