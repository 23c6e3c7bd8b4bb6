"""formwork form system - declarative controls, markup rendering and server-side validation."""

from formwork.forms.context import (
    Bindable,
    DictTranslator,
    EmptyInput,
    FormContext,
    InputSource,
    MappingInput,
    request_input,
)
from formwork.forms.controls import (
    ButtonControl,
    ButtonKind,
    FormControl,
    InputControl,
    InputKind,
    SelectControl,
    SelectOption,
    TextareaControl,
)
from formwork.forms.core import Form

__all__ = [
    "Bindable",
    "ButtonControl",
    "ButtonKind",
    "DictTranslator",
    "EmptyInput",
    "Form",
    "FormContext",
    "FormControl",
    "InputControl",
    "InputKind",
    "InputSource",
    "MappingInput",
    "SelectControl",
    "SelectOption",
    "TextareaControl",
    "request_input",
]
