"""
Global fixtures for all tests.

Points the PDF cache at a per-test temporary database and keeps the
Browserless token out of the environment so no test reaches a real
service or the user's cache directory.
"""

import os

import pytest

# Set before any imports that build settings at module load
os.environ.pop("BROWSERLESS_TOKEN", None)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Isolate configuration per test and reset cached settings."""
    from pdf_service.config import get_settings as get_service_settings
    from url_to_pdf.config import get_settings as get_client_settings

    monkeypatch.setenv("PDF_CACHE_DB_PATH", str(tmp_path / "pdf_cache.db"))
    monkeypatch.setenv("PDF_SERVICE_URL", "http://pdf-service.test")
    monkeypatch.delenv("BROWSERLESS_TOKEN", raising=False)

    get_client_settings.cache_clear()
    get_service_settings.cache_clear()
    yield
    get_client_settings.cache_clear()
    get_service_settings.cache_clear()


@pytest.fixture
def cache_db_path(tmp_path):
    """Path of the temporary cache database used by the current test."""
    return tmp_path / "pdf_cache.db"


@pytest.fixture
def sample_pdf():
    """Minimal bytes that look like a PDF to the render client."""
    return b"%PDF-1.4\n% fake pdf content\n%%EOF"
