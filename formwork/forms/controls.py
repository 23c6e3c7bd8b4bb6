"""Form controls: the shared base and the input, select, textarea and button variants.

Every control keeps its own configuration, renders itself to markup and
validates the value submitted under its name. Setters return the control so
configuration reads as a chain:

    form.add_input("email").set_kind("email").set_required().set_max_length(120)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from markupsafe import Markup, escape

from formwork.forms.context import FormContext
from formwork.forms.validators import is_email, is_numeric, is_url

ARRAY_SUFFIX = "[]"
ADDRESS_AUTOCOMPLETE_CLASS = "googlePlacesAutocomplete"
SELECT_NULL_VALUE = "SELECT_NULL_VALUE"

# Characters HTML forbids in attribute names, plus whitespace
INVALID_ATTRIBUTE_NAME = re.compile(r"[\s\"'>/=\x00-\x1f]")


class InputKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    URL = "url"
    COLOR = "color"
    PASSWORD = "password"
    NUMBER = "number"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"
    FILE = "file"
    ADDRESS = "address"
    HIDDEN = "hidden"


class ButtonKind(str, Enum):
    SUBMIT = "submit"
    BUTTON = "button"
    RESET = "reset"


@dataclass
class SelectOption:
    value: str
    text: str


def strip_array_suffix(name: str) -> tuple[str, bool]:
    """Split ``tags[]`` into ``("tags", True)``."""
    if name.endswith(ARRAY_SUFFIX):
        return name[: -len(ARRAY_SUFFIX)], True
    return name, False


def as_text(value: Any) -> str:
    """Text form of a bound value, the way it appears in markup."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def format_number(value: Any) -> str:
    """Render a number with a dot decimal separator, whatever the process locale."""
    if isinstance(value, bool):
        return as_text(value)
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return as_text(value)


class FormControl(ABC):
    """State and markup fragments shared by every control."""

    def __init__(
        self,
        name: str | None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ):
        self.name, self.is_array_name = strip_array_suffix(name or "")
        self.id: str | None = None
        self.value: Any = None
        self.required = False
        self.disabled = False
        self.readonly = False
        self.placeholder: str | None = None
        self.min_length: int | None = None
        self.max_length: int | None = None
        self.classes: list[str] = []
        self.context = context or FormContext.from_settings()
        self.attributes: dict[str, str] = {}
        for key, val in (attributes or {}).items():
            key = str(key)
            if not key or INVALID_ATTRIBUTE_NAME.search(key):
                self.context.logger.error("Invalid attribute name %r on control %s", key, self.name)
                continue
            self.attributes[key] = as_text(val)

    # -- Configuration --

    def set_value(self, value: Any):
        self.value = value
        return self

    def set_id(self, id: str):
        self.id = id
        return self

    def set_required(self):
        """Mark the control required, client side and in validate()."""
        self.required = True
        return self

    def set_disabled(self):
        self.disabled = True
        return self

    def set_readonly(self):
        self.readonly = True
        return self

    def set_array_name(self):
        """Submit this control as a list; renders the name with ``[]``."""
        self.is_array_name = True
        return self

    def set_placeholder(self, text: str):
        self.placeholder = text
        return self

    def set_min_length(self, length: int):
        self.min_length = int(length)
        return self

    def set_max_length(self, length: int):
        self.max_length = int(length)
        return self

    def add_class(self, classes: str | Iterable[str]):
        """Add one class, a space separated list or an iterable of classes.

        Classes already present are skipped, insertion order is kept.
        """
        if isinstance(classes, str):
            classes = classes.split()
        for token in classes:
            for css_class in str(token).split():
                if css_class not in self.classes:
                    self.classes.append(css_class)
        return self

    # -- Rendering --

    @abstractmethod
    def render(self) -> Markup: ...

    def name_attribute(self) -> Markup:
        suffix = ARRAY_SUFFIX if self.is_array_name else ""
        return Markup(f'name="{escape(self.name + suffix)}"')

    def id_attribute(self) -> Markup:
        if not self.id:
            return Markup("")
        return Markup(f' id="{escape(self.id)}"')

    def common_attributes(self) -> Markup:
        """Flags, placeholder, classes and extra attributes, each with a leading space."""
        html = ""

        if self.required and self.renders_required():
            html += " required"

        if self.disabled:
            html += " disabled"

        if self.readonly:
            html += " readonly"

        if self.placeholder:
            html += f' placeholder="{escape(self.placeholder)}"'

        if self.classes:
            html += f' class="{escape(" ".join(self.classes))}"'

        for attr, val in self.attributes.items():
            html += f' {attr}="{escape(val)}"'

        return Markup(html)

    def renders_required(self) -> bool:
        return True

    def __html__(self) -> str:
        return str(self.render())

    def __str__(self) -> str:
        return str(self.render())

    # -- Validation --

    @abstractmethod
    def validate(self) -> bool: ...

    def submitted_values(self) -> list[str]:
        """Every live value posted for this control.

        Array-name controls are posted as ``name[]``; the bare name is read
        when nothing arrived under the bracketed one.
        """
        source = self.context.input
        if self.is_array_name:
            values = source.getall(self.name + ARRAY_SUFFIX)
            if values:
                return values
        return source.getall(self.name)

    def submitted_value(self) -> str:
        """The first live value posted under this control's name."""
        values = self.submitted_values()
        return values[0] if values else ""

    def length_failures(self, value: str) -> Iterator[str]:
        if self.min_length and value != "" and len(value) < self.min_length:
            yield f"minLength={self.min_length}"

        if self.max_length and len(value) > self.max_length:
            yield f"maxLength={self.max_length}"

    def report(self, failures: Iterable[str]) -> bool:
        """Log each failure reason and return whether there were none."""
        valid = True
        for reason in failures:
            self.context.log_validation_failure(
                'Control validation on field "%s" has failed (%s)', self.name, reason
            )
            valid = False
        return valid

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, value={self.value!r})"


class InputControl(FormControl):
    """An ``<input>`` element of any supported kind; text by default."""

    def __init__(
        self,
        name: str | None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ):
        super().__init__(name, attributes, context=context)
        self.kind = InputKind.TEXT
        self.accept: str | None = None
        self.step: str | None = None
        self.date_format = self.context.config.date_format
        self.datetime_format = self.context.config.datetime_format

    def set_kind(self, kind: InputKind | str):
        """Change the input kind. Unknown kinds are logged and render as text."""
        try:
            self.kind = InputKind(kind)
        except ValueError:
            self.context.logger.error("Unknown input kind %r on control %s", kind, self.name)
            self.kind = InputKind.TEXT
        return self

    def set_accept(self, file_type: str):
        """Accepted file types for file inputs: ``.pdf``, ``image/*``, a media type..."""
        self.accept = file_type
        return self

    def set_date_format(self, format: str):
        self.date_format = format
        return self

    def set_datetime_format(self, format: str):
        self.datetime_format = format
        return self

    def set_step(self, step: str | int | float | Decimal):
        self.step = format_number(step)
        return self

    def set_value(self, value: Any):
        """Bind a value. Dates and datetimes are stored formatted for this kind.

        With ``utc_dates`` configured, datetimes are moved into the acting
        user's timezone first; naive datetimes count as UTC.
        """
        if isinstance(value, (datetime, date)):
            if isinstance(value, datetime) and self.context.config.utc_dates:
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                value = value.astimezone(self.context.user_timezone)

            format = self.date_format if self.kind is InputKind.DATE else self.datetime_format
            value = value.strftime(format)

        self.value = value
        return self

    def renders_required(self) -> bool:
        return self.kind is not InputKind.BOOL

    def render(self) -> Markup:
        html = f"<input {self.name_attribute()}{self.id_attribute()}"
        kind = self.kind
        value = escape(as_text(self.value))

        if kind is InputKind.NUMBER:
            html += f' type="number" value="{escape(format_number(self.value))}"'

        elif kind is InputKind.BOOL:
            html += ' type="checkbox" value="1"'
            if self.value:
                html += ' checked="checked"'

        elif kind is InputKind.FILE:
            html += ' type="file"'

        elif kind is InputKind.ADDRESS:
            html += f' type="text" value="{value}" size="50" autocomplete="on" placeholder=""'
            self.add_class(ADDRESS_AUTOCOMPLETE_CLASS)

        else:
            # text, email, tel, url, color, password, date, datetime, hidden
            html += f' type="{kind.value}" value="{value}"'

        if self.min_length:
            html += f' minlength="{self.min_length}"'

        if self.max_length:
            html += f' maxlength="{self.max_length}"'

        if self.accept:
            html += f' accept="{escape(self.accept)}"'

        if self.step:
            html += f' step="{escape(self.step)}"'

        html += f"{self.common_attributes()} />"
        return Markup(html)

    def validate(self) -> bool:
        value = self.submitted_value()
        failures = []

        if self.required:
            reason = self.required_failure(value)
            if reason:
                failures.append(reason)

        failures.extend(self.length_failures(value))
        return self.report(failures)

    def required_failure(self, value: str) -> str | None:
        """Reason a required value is unacceptable for this kind, if any."""
        if self.kind is InputKind.BOOL:
            return None
        if self.kind is InputKind.EMAIL:
            return None if is_email(value) else "email required"
        if self.kind is InputKind.URL:
            return None if is_url(value) else "url required"
        if self.kind is InputKind.NUMBER:
            return None if is_numeric(value) else "number required"
        return "required" if value == "" else None


class SelectControl(FormControl):
    """A ``<select>`` with an ordered option list and an optional empty first option."""

    def __init__(
        self,
        name: str | None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ):
        super().__init__(name, attributes, context=context)
        self.options: list[SelectOption] = []
        self.empty_option: SelectOption | None = None
        self.multiple = False

    @property
    def all_options(self) -> list[SelectOption]:
        """Options in render order, the empty option first when present."""
        if self.empty_option is None:
            return list(self.options)
        return [self.empty_option, *self.options]

    def set_options_from_pairs(self, pairs: Mapping[Any, Any] | Iterable[tuple[Any, Any]]):
        """Append options from a value -> text mapping or an iterable of pairs."""
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        for value, text in items:
            self.options.append(SelectOption(as_text(value), as_text(text)))
        return self

    def set_options_from_objects(
        self,
        items: Iterable[Any],
        value_field: str = "value",
        text_field: str = "text",
    ):
        """Append one option per object, reading its value and text fields.

        A ``text_field`` ending in ``()`` names a method that is called with
        no arguments to get the label, e.g. ``"full_name()"``. Mappings are
        read by key.
        """
        is_call = text_field.endswith("()")
        text_name = text_field[:-2] if is_call else text_field

        for item in items:
            value = self._read_field(item, value_field)
            text = self._read_field(item, text_name)
            if is_call and callable(text):
                text = text()
            self.options.append(SelectOption(as_text(value), as_text(text)))

        return self

    def _read_field(self, item: Any, field_name: str) -> Any:
        try:
            if isinstance(item, Mapping):
                return item[field_name]
            return getattr(item, field_name)
        except (KeyError, AttributeError):
            self.context.logger.error(
                'Property "%s" doesn\'t exist for object %s', field_name, type(item).__name__
            )
            return None

    def prepend_empty(self, text: str | None = None):
        """Put an empty-value option first. Calling again replaces it."""
        if text is None:
            text = self.context.translator.translate(SELECT_NULL_VALUE)
        self.empty_option = SelectOption("", text)
        return self

    def set_multiple(self):
        self.multiple = True
        return self

    def selected_values(self) -> set[str]:
        if isinstance(self.value, (list, tuple, set, frozenset)):
            return {as_text(v) for v in self.value}
        return {as_text(self.value)}

    def render(self) -> Markup:
        html = f"<select {self.name_attribute()}{self.id_attribute()}"

        if self.multiple:
            html += " multiple"

        html += f"{self.common_attributes()}>"

        selected_values = self.selected_values()
        for option in self.all_options:
            selected = ' selected="selected"' if option.value in selected_values else ""
            html += (
                f'<option value="{escape(option.value)}"{selected}>'
                f"{escape(option.text)}</option>"
            )

        html += "</select>"
        return Markup(html)

    def validate(self) -> bool:
        allowed = {option.value for option in self.all_options}

        if self.multiple or self.is_array_name:
            values = [v for v in self.submitted_values() if v != ""]
            if self.required and not values:
                return self.report(["required"])
            if not allowed:
                return True
            return self.report(
                f'value "{value}" is not in list' for value in values if value not in allowed
            )

        value = self.submitted_value()
        if self.required and value == "":
            return self.report(["required"])

        # An empty option list leaves the value unconstrained
        if allowed and value not in allowed:
            return self.report([f'value "{value}" is not in list'])

        return True


class TextareaControl(FormControl):
    def __init__(
        self,
        name: str | None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ):
        super().__init__(name, attributes, context=context)
        self.rows = 2
        self.cols = 20

    def set_rows(self, rows: int):
        self.rows = int(rows)
        return self

    def set_cols(self, cols: int):
        self.cols = int(cols)
        return self

    def render(self) -> Markup:
        return Markup(
            f"<textarea {self.name_attribute()}{self.id_attribute()}"
            f' rows="{self.rows}" cols="{self.cols}"{self.common_attributes()}>'
            f"{escape(as_text(self.value))}</textarea>"
        )

    def validate(self) -> bool:
        value = self.submitted_value()
        failures = []

        if self.required and value == "":
            failures.append("required")

        failures.extend(self.length_failures(value))
        return self.report(failures)


class ButtonControl(FormControl):
    """A ``<button>``; its value is the label. The name is optional."""

    def __init__(
        self,
        name: str | None = None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: FormContext | None = None,
    ):
        super().__init__(name, attributes, context=context)
        self.kind = ButtonKind.SUBMIT
        self.icon: str | None = None

    def set_kind(self, kind: ButtonKind | str):
        try:
            self.kind = ButtonKind(kind)
        except ValueError:
            self.context.logger.error("Unknown button kind %r on control %s", kind, self.name)
            self.kind = ButtonKind.SUBMIT
        return self

    def set_icon(self, icon: str | None):
        """Font Awesome icon class shown before the label, e.g. ``fa-save``."""
        self.icon = icon
        return self

    def render(self) -> Markup:
        html = f'<button type="{self.kind.value}"{self.id_attribute()}'

        if self.name:
            html += f" {self.name_attribute()}"

        html += f"{self.common_attributes()}>"

        if self.icon:
            html += f'<i class="fa {escape(self.icon)}"></i> '

        html += f"{escape(as_text(self.value).strip())}</button>"
        return Markup(html)

    def validate(self) -> bool:
        # Buttons submit no value worth checking
        return True
