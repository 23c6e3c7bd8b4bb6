"""Shared pytest fixtures."""

from unittest.mock import MagicMock

import pytest

from formwork.config import FormsConfig, get_settings
from formwork.forms.context import FormContext, MappingInput


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch, tmp_path):
    """Isolate every test from a real app.yaml and from cached settings."""
    monkeypatch.setenv("FORMWORK_CONFIG", str(tmp_path / "missing-app.yaml"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_context():
    """Factory fixture building a FormContext over a dict of submitted values."""
    def _make(values=None, user=None, **config):
        return FormContext(
            input=MappingInput(values or {}),
            user=user,
            config=FormsConfig(**config),
        )
    return _make


@pytest.fixture
def mock_request_factory():
    """Factory fixture that returns mock Litestar requests."""
    def _make(method="POST", query_params=None, form_data=None):
        request = MagicMock()
        request.method = method
        request.query_params = query_params if query_params is not None else {}

        async def _form():
            return form_data if form_data is not None else {}

        request.form = _form
        return request
    return _make
