"""Shared fixtures for the converter and client tests."""

import pytest

from confluence_markdown_converter.models import Page
from confluence_markdown_converter.models import PageRef


@pytest.fixture
def make_page():
    """Build a Page with sensible defaults; keyword arguments override them."""

    def _make_page(body: str = "", **fields) -> Page:
        defaults = {
            "id": "12345",
            "title": "Test Page",
            "space_key": "DOC",
            "url": "https://example.atlassian.net/wiki/spaces/DOC/pages/12345",
        }
        defaults.update(fields)
        return Page(body=body, **defaults)

    return _make_page


@pytest.fixture
def child_refs():
    return [PageRef(id="2", title="First Child"), PageRef(id="3", title="Second Child")]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from CONFLUENCE_* variables and any local .env file."""
    for name in ("BASE_URL", "USERNAME", "API_TOKEN", "TYPE", "TIMEOUT"):
        monkeypatch.delenv(f"CONFLUENCE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
