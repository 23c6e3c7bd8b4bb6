"""Value checks used by control validation."""

from __future__ import annotations

import re

from pydantic import AnyUrl, EmailStr, TypeAdapter, ValidationError

# Optional sign, integer or decimal part, optional exponent; whitespace around is tolerated
NUMERIC_PATTERN = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(AnyUrl)


def _validated(adapter: TypeAdapter, value: str) -> object | None:
    if not value:
        return None
    try:
        return adapter.validate_python(value)
    except ValidationError:
        return None


def is_email(value: str) -> bool:
    """True for a bare address; the ``Name <address>`` form is rejected."""
    address = _validated(_email_adapter, value)
    return address is not None and address.lower() == value.lower()


def is_url(value: str) -> bool:
    """True for an absolute URL with a scheme (http, ftp, mailto, ...)."""
    return _validated(_url_adapter, value) is not None


def is_numeric(value: str) -> bool:
    return NUMERIC_PATTERN.fullmatch(value) is not None
