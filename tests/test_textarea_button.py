"""Tests for TextareaControl and ButtonControl."""

from __future__ import annotations

import pytest
from markupsafe import Markup

from formwork.forms.controls import ButtonControl, ButtonKind, TextareaControl


# ---------------------------------------------------------------------------
# Textarea
# ---------------------------------------------------------------------------


class TestTextarea:
    def test_defaults(self, make_context):
        control = TextareaControl("bio", context=make_context()).set_value("a & b")
        assert control.render() == Markup(
            '<textarea name="bio" rows="2" cols="20">a &amp; b</textarea>'
        )

    def test_rows_cols_and_attributes(self, make_context):
        control = TextareaControl("bio", {"data-x": "1"}, context=make_context())
        control.set_rows(5).set_cols(40).set_required().add_class("wide")
        assert control.render() == Markup(
            '<textarea name="bio" rows="5" cols="40" required class="wide" data-x="1"></textarea>'
        )

    def test_required(self, make_context, caplog):
        control = TextareaControl("bio", context=make_context()).set_required()
        assert control.validate() is False
        assert caplog.messages == ['Control validation on field "bio" has failed (required)']

    @pytest.mark.parametrize("value,expected", [("ab", False), ("abc", True), ("", True), ("abcdefg", False)])
    def test_lengths(self, make_context, value, expected):
        control = TextareaControl("bio", context=make_context({"bio": value}))
        control.set_min_length(3).set_max_length(6)
        assert control.validate() is expected


# ---------------------------------------------------------------------------
# Button
# ---------------------------------------------------------------------------


class TestButton:
    def test_default_submit(self, make_context):
        control = ButtonControl("save", context=make_context()).set_value("  Save  ")
        assert control.render() == Markup('<button type="submit" name="save">Save</button>')

    def test_icon_and_kind(self, make_context):
        control = ButtonControl("save", context=make_context())
        control.set_value("Save").set_kind("button").set_icon("fa-save")
        assert control.render() == Markup(
            '<button type="button" name="save"><i class="fa fa-save"></i> Save</button>'
        )

    def test_nameless(self, make_context):
        control = ButtonControl(None, context=make_context()).set_kind(ButtonKind.RESET)
        control.set_value("Reset").set_id("reset-btn")
        assert control.render() == Markup('<button type="reset" id="reset-btn">Reset</button>')

    def test_label_is_escaped(self, make_context):
        control = ButtonControl(None, context=make_context()).set_value("<Go>")
        assert "&lt;Go&gt;</button>" in control.render()

    def test_unknown_kind_falls_back_to_submit(self, make_context, caplog):
        control = ButtonControl("b", context=make_context()).set_kind("explode")
        assert control.kind is ButtonKind.SUBMIT
        assert "Unknown button kind 'explode' on control b" in caplog.messages

    @pytest.mark.parametrize("configure", [
        lambda b: b,
        lambda b: b.set_required(),
        lambda b: b.set_required().set_disabled().set_readonly(),
        lambda b: b.set_required().set_min_length(10).set_max_length(1),
    ])
    def test_always_valid(self, make_context, configure):
        control = configure(ButtonControl("go", context=make_context({"go": "x" * 20})))
        assert control.validate() is True
