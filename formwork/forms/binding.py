"""Reading bindable properties off persistent records."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState

from formwork.forms.context import Bindable


def get_record_properties(record: Any) -> dict[str, Any] | None:
    """Return the persistent properties of *record*, or None if it isn't a record.

    Records are SQLAlchemy-mapped instances (their column attributes) or
    objects implementing ``Bindable.get_all_properties()``.
    """
    if record is None or isinstance(record, type):
        return None

    if isinstance(record, Bindable):
        return dict(record.get_all_properties())

    state = inspect(record, raiseerr=False)
    if not isinstance(state, InstanceState):
        return None

    return {attr.key: getattr(record, attr.key) for attr in state.mapper.column_attrs}
