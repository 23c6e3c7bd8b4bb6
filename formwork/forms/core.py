"""Form: a registry of named controls with whole-form rendering and validation."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, TypeVar

from markupsafe import Markup

from formwork.forms.binding import get_record_properties
from formwork.forms.context import FormContext
from formwork.forms.controls import (
    ButtonControl,
    ButtonKind,
    FormControl,
    InputControl,
    InputKind,
    SelectControl,
    TextareaControl,
    strip_array_suffix,
)

C = TypeVar("C", bound=FormControl)


class Form:
    """Named controls built through factory methods, rendered and validated as a set.

    Usage:
        form = Form(FormContext.from_settings(input=await request_input(request)))
        form.add_input("title").set_required().set_max_length(200)
        form.add_select("status").set_options_from_pairs(STATUSES).prepend_empty()
        form.set_values_by_object(page)

        # In the template
        {{ form.render_control("title") }}

        # In the POST handler
        if form.is_valid():
            ...

    Submitted values are never cached on the form; each validation reads
    them from the context's input source.
    """

    def __init__(self, context: FormContext | None = None):
        self.context = context or FormContext.from_settings()
        self._controls: dict[str, FormControl] = {}
        self.control_classes: list[str] = []

    # -- Factories --

    def add_input(self, name: str, attributes: Mapping[str, Any] | None = None) -> InputControl:
        """Add a text input. Change its kind with ``set_kind``."""
        return self._add_control(InputControl(name, attributes, context=self.context))

    def add_select(self, name: str, attributes: Mapping[str, Any] | None = None) -> SelectControl:
        return self._add_control(SelectControl(name, attributes, context=self.context))

    def add_textarea(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> TextareaControl:
        return self._add_control(TextareaControl(name, attributes, context=self.context))

    def add_button(self, name: str, attributes: Mapping[str, Any] | None = None) -> ButtonControl:
        return self._add_control(ButtonControl(name, attributes, context=self.context))

    def _add_control(self, control: C) -> C:
        # Same name replaces the previous control
        self._controls[control.name] = control
        return control

    # -- Lookup --

    def get_control(self, name: str) -> FormControl | None:
        """Return the control registered as *name* (``[]`` suffix ignored), or None."""
        name, _ = strip_array_suffix(name)
        control = self._controls.get(name)
        if control is None:
            self.context.logger.error('Field control "%s" has not been defined in Form object', name)
        return control

    def control_exists(self, name: str) -> bool:
        name, _ = strip_array_suffix(name)
        return name in self._controls

    @property
    def controls(self) -> dict[str, FormControl]:
        return dict(self._controls)

    def __iter__(self) -> Iterator[FormControl]:
        return iter(list(self._controls.values()))

    def __len__(self) -> int:
        return len(self._controls)

    def __contains__(self, name: str) -> bool:
        return self.control_exists(name)

    # -- Binding --

    def set_values_by_object(self, record: Any) -> None:
        """Copy every property of a persistent record into the control of the same name.

        Records are SQLAlchemy-mapped instances or ``Bindable`` objects; any
        other object is ignored.
        """
        properties = get_record_properties(record)
        if properties is None:
            self.context.logger.debug(
                "Not binding %s: not a persistent record", type(record).__name__
            )
            return

        for name, value in properties.items():
            control = self._controls.get(name)
            if control is not None:
                control.set_value(value)

    # -- Rendering --

    def add_control_class(self, css_class: str) -> Form:
        """Add a CSS class applied to every control rendered through this form."""
        self.control_classes.append(css_class)
        return self

    def render_control(self, name: str) -> Markup:
        control = self.get_control(name)
        if control is None:
            return Markup("")

        if self.control_classes:
            control.add_class(self.control_classes)

        return control.render()

    # -- Validation --

    def is_valid(self) -> bool:
        """Validate every control and return True only if all of them pass.

        All controls are checked even after a failure so every problem is logged.
        """
        results = [control.validate() for control in self._controls.values()]
        return all(results)

    # -- One-shot builders --

    @staticmethod
    def build_select(
        name: str,
        items: Iterable[Any],
        value_field: str = "value",
        text_field: str = "text",
        value: Any = None,
        attributes: Mapping[str, Any] | None = None,
        prepend_empty: str | bool | None = None,
        *,
        context: FormContext | None = None,
    ) -> Markup:
        """Render a select whose options come from a list of objects."""
        attributes, css_class = _split_class(attributes)
        control = SelectControl(name, attributes, context=context)
        control.set_options_from_objects(items, value_field, text_field).set_value(value)
        _apply_prepend_empty(control, prepend_empty)
        if css_class:
            control.add_class(css_class)
        return control.render()

    @staticmethod
    def build_select_from_array(
        name: str,
        pairs: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
        value: Any = None,
        attributes: Mapping[str, Any] | None = None,
        prepend_empty: str | bool | None = None,
        *,
        context: FormContext | None = None,
    ) -> Markup:
        """Render a select whose options come from a value -> text mapping.

        ``prepend_empty`` works as in build_select: a label, True for the
        translated default label, or None to render no empty option.
        """
        attributes, css_class = _split_class(attributes)
        control = SelectControl(name, attributes, context=context)
        control.set_options_from_pairs(pairs).set_value(value)
        _apply_prepend_empty(control, prepend_empty)
        if css_class:
            control.add_class(css_class)
        return control.render()

    @staticmethod
    def build_input(
        name: str,
        value: Any = None,
        kind: InputKind | str = InputKind.TEXT,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ) -> Markup:
        attributes, css_class = _split_class(attributes)
        control = InputControl(name, attributes, context=context)
        control.set_kind(kind).set_value(value)
        if css_class:
            control.add_class(css_class)
        return control.render()

    @staticmethod
    def build_textarea(
        name: str,
        rows: int,
        cols: int,
        value: Any = None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ) -> Markup:
        attributes, css_class = _split_class(attributes)
        control = TextareaControl(name, attributes, context=context)
        control.set_rows(rows).set_cols(cols).set_value(value)
        if css_class:
            control.add_class(css_class)
        return control.render()

    @staticmethod
    def build_button(
        label: str,
        kind: ButtonKind | str = ButtonKind.SUBMIT,
        name: str | None = None,
        attributes: Mapping[str, Any] | None = None,
        icon: str | None = None,
        *,
        context: FormContext | None = None,
    ) -> Markup:
        """Render a button, optionally with a Font Awesome icon before the label."""
        attributes, css_class = _split_class(attributes)
        control = ButtonControl(name, attributes, context=context)
        control.set_value(label).set_kind(kind).set_icon(icon)
        if css_class:
            control.add_class(css_class)
        return control.render()


# -- Utilities --


def _split_class(attributes: Mapping[str, Any] | None) -> tuple[dict[str, Any], Any]:
    """Separate the ``class`` entry so it goes through add_class instead of raw attributes."""
    remaining = dict(attributes or {})
    css_class = remaining.pop("class", None)
    return remaining, css_class


def _apply_prepend_empty(control: SelectControl, prepend_empty: str | bool | None) -> None:
    if prepend_empty is True:
        control.prepend_empty()
    elif prepend_empty:
        control.prepend_empty(prepend_empty)
