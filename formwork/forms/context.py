"""Collaborators consumed by forms and controls.

Forms never reach for process-wide singletons. Everything a control needs
at render or validation time (submitted values, the logger, the translator,
the acting user and the form settings) travels in a FormContext that is
handed to the Form and passed on to every control it creates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from formwork.config import FormsConfig, get_settings

if TYPE_CHECKING:
    from litestar import Request

    from formwork.config import Settings

FORMS_LOGGER_NAME = "formwork.forms"


# -- Input sources --


@runtime_checkable
class InputSource(Protocol):
    """Read access to submitted values by field name."""

    def get(self, name: str) -> str: ...

    def getall(self, name: str) -> list[str]: ...


class MappingInput:
    """Input source over a dict or a multidict of submitted values.

    Multidicts (Litestar's ``FormMultiDict``, ``MultiDict``) expose every value
    submitted for a name through ``getall``; plain dicts may hold a list for
    array-name fields.
    """

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data = data if data is not None else {}

    def get(self, name: str) -> str:
        """Submitted value for *name*, or an empty string when absent."""
        values = self.getall(name)
        if not values:
            return ""
        return values[0]

    def getall(self, name: str) -> list[str]:
        if hasattr(self._data, "getall"):
            values = self._data.getall(name, [])
        else:
            values = self._data.get(name, [])
            if not isinstance(values, (list, tuple)):
                values = [values]
        return [_as_text(v) for v in values if v is not None]

    def __repr__(self) -> str:
        return f"MappingInput({self._data!r})"


class EmptyInput(MappingInput):
    """Input source for a request that submitted nothing."""

    def __init__(self):
        super().__init__({})


def _as_text(value: Any) -> str:
    # Uploaded files are not text values; a file input only checks presence
    if isinstance(value, str):
        return value
    filename = getattr(value, "filename", None)
    if filename is not None:
        return str(filename)
    return str(value)


async def request_input(request: Request) -> MappingInput:
    """Build an input source from a Litestar request.

    GET and HEAD requests read the query string, everything else the parsed
    form body.
    """
    if request.method in ("GET", "HEAD"):
        return MappingInput(request.query_params)
    return MappingInput(await request.form())


# -- Translation --


class Translator(Protocol):
    def translate(self, key: str) -> str: ...


class DictTranslator:
    """Translator backed by a flat key -> text mapping. Unknown keys pass through."""

    def __init__(self, strings: Mapping[str, str] | None = None):
        self.strings = dict(strings or {})

    def translate(self, key: str) -> str:
        return self.strings.get(key, key)


# -- Users and records --


class CurrentUser(Protocol):
    """The acting user. ``timezone`` is a tzinfo or an IANA zone name."""

    timezone: tzinfo | str | None


@runtime_checkable
class Bindable(Protocol):
    """A record that can expose its persistent properties for form binding."""

    def get_all_properties(self) -> Mapping[str, Any]: ...


def resolve_timezone(value: tzinfo | str | None, default: str = "UTC") -> tzinfo:
    """Turn a tzinfo, zone name or None into a tzinfo."""
    if isinstance(value, tzinfo):
        return value
    name = value or default
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


# -- Context --


@dataclass
class FormContext:
    """Everything a form needs from the request it is serving."""

    input: InputSource = field(default_factory=EmptyInput)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(FORMS_LOGGER_NAME))
    translator: Translator = field(
        default_factory=lambda: DictTranslator(FormsConfig().translations)
    )
    user: CurrentUser | None = None
    config: FormsConfig = field(default_factory=FormsConfig)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        input: InputSource | None = None,
        user: CurrentUser | None = None,
        logger: logging.Logger | None = None,
        translator: Translator | None = None,
    ) -> FormContext:
        """Build a context whose formats and strings come from configuration."""
        settings = settings or get_settings()
        return cls(
            input=input if input is not None else EmptyInput(),
            logger=logger or logging.getLogger(FORMS_LOGGER_NAME),
            translator=translator or DictTranslator(settings.forms.translations),
            user=user,
            config=settings.forms,
        )

    @property
    def user_timezone(self) -> tzinfo:
        """Timezone of the acting user, falling back to the configured default."""
        user_tz = getattr(self.user, "timezone", None) if self.user is not None else None
        default = self.config.default_timezone

        candidates = (user_tz, None) if user_tz else (None,)
        for candidate in candidates:
            try:
                return resolve_timezone(candidate, default)
            except (ZoneInfoNotFoundError, ValueError):
                self.logger.error("Unknown timezone %r, falling back", candidate or default)

        return timezone.utc

    def log_validation_failure(self, message: str, *args: Any) -> None:
        self.logger.warning(message, *args)
