"""
Unit tests for PDF service endpoints.

Tests health check and the /api/pdf URL render endpoint. Playwright is
mocked; no browser or Browserless connection is made.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch, MagicMock, AsyncMock

from pdf_service.config import PDFServiceSettings, get_settings


def _settings(token="test-token"):
    return PDFServiceSettings(browserless_token=token)


@pytest.fixture
def client():
    """Create test client with a Browserless token configured."""
    from pdf_service.app import app

    app.dependency_overrides[get_settings] = lambda: _settings()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client_without_token():
    """Create test client with the Browserless token missing."""
    from pdf_service.app import app

    app.dependency_overrides[get_settings] = lambda: _settings(token=None)
    yield TestClient(app)
    app.dependency_overrides.clear()


def build_playwright_mock(mock_playwright, pdf_bytes=b"%PDF-1.4 fake pdf content"):
    """Wire a patched async_playwright to a fake browser and page."""
    mock_page = MagicMock()
    mock_page.goto = AsyncMock()
    mock_page.evaluate = AsyncMock(return_value=None)
    mock_page.pdf = AsyncMock(return_value=pdf_bytes)

    mock_browser = MagicMock()
    mock_browser.new_page = AsyncMock(return_value=mock_page)
    mock_browser.close = AsyncMock()

    mock_pw = MagicMock()
    mock_pw.chromium.connect_over_cdp = AsyncMock(return_value=mock_browser)
    mock_playwright.return_value.__aenter__ = AsyncMock(return_value=mock_pw)
    return mock_pw, mock_browser, mock_page


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_check_returns_200(self, client):
        """Test that health check returns 200 OK when the token is configured."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_returns_correct_structure(self, client):
        """Test that health check returns expected fields."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["browserless_configured"] is True
        assert isinstance(data["active_renders"], int)
        assert isinstance(data["max_concurrent"], int)
        assert 0 <= data["active_renders"] <= data["max_concurrent"]

    def test_health_check_returns_503_without_token(self, client_without_token):
        """Test that health check returns 503 when the token is missing."""
        response = client_without_token.get("/health")
        assert response.status_code == 503
        data = response.json()["detail"]
        assert data["status"] == "unhealthy"
        assert data["browserless_configured"] is False


class TestURLToPDFValidation:
    """Input validation for /api/pdf."""

    def test_requires_url(self, client):
        response = client.post("/api/pdf", json={})
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid request")

    def test_rejects_malformed_url(self, client):
        response = client.post("/api/pdf", json={"url": "not-a-url", "pageSize": "a4"})
        assert response.status_code == 400
        assert "url" in response.json()["detail"]

    def test_rejects_unknown_page_size(self, client):
        response = client.post("/api/pdf", json={"url": "https://example.com", "pageSize": "xlarge"})
        assert response.status_code == 400
        assert "pageSize" in response.json()["detail"]

    def test_rejects_unknown_fields(self, client):
        response = client.post(
            "/api/pdf",
            json={"url": "https://example.com", "pageSize": "a4", "scale": 2}
        )
        assert response.status_code == 400

    @patch("playwright.async_api.async_playwright")
    def test_validation_runs_before_configuration_check(self, mock_playwright, client_without_token):
        """Malformed input is a 400 even when the server is misconfigured."""
        response = client_without_token.post("/api/pdf", json={"url": "not-a-url"})
        assert response.status_code == 400
        mock_playwright.assert_not_called()


class TestURLToPDFConfiguration:
    """Missing Browserless token."""

    @patch("playwright.async_api.async_playwright")
    def test_missing_token_returns_500(self, mock_playwright, client_without_token):
        response = client_without_token.post("/api/pdf", json={"url": "https://example.com"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Server configuration error: Browserless token not found"
        mock_playwright.assert_not_called()


class TestURLToPDFRendering:
    """Successful and failing renders."""

    @patch("playwright.async_api.async_playwright")
    def test_render_success(self, mock_playwright, client):
        """Test successful PDF rendering."""
        build_playwright_mock(mock_playwright)

        response = client.post("/api/pdf", json={"url": "https://www.example.com/page", "pageSize": "a4"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == b"%PDF-1.4 fake pdf content"
        assert 'filename="example.com-page.pdf"' in response.headers["content-disposition"]

    @patch("playwright.async_api.async_playwright")
    def test_connects_to_browserless_with_token(self, mock_playwright, client):
        mock_pw, _, _ = build_playwright_mock(mock_playwright)

        client.post("/api/pdf", json={"url": "https://example.com/page"})

        endpoint = mock_pw.chromium.connect_over_cdp.call_args.args[0]
        assert endpoint == "wss://production-sfo.browserless.io?token=test-token"

    @patch("playwright.async_api.async_playwright")
    def test_waits_for_dom_and_images_before_printing(self, mock_playwright, client):
        _, _, mock_page = build_playwright_mock(mock_playwright)

        client.post("/api/pdf", json={"url": "https://example.com/page"})

        mock_page.goto.assert_awaited_once_with("https://example.com/page", wait_until="domcontentloaded")
        mock_page.evaluate.assert_awaited_once()
        assert "img" in mock_page.evaluate.call_args.args[0]
        mock_page.pdf.assert_awaited_once()

    @patch("playwright.async_api.async_playwright")
    def test_a4_defaults_and_margins(self, mock_playwright, client):
        _, mock_browser, mock_page = build_playwright_mock(mock_playwright)

        client.post("/api/pdf", json={"url": "https://example.com/page"})

        mock_browser.new_page.assert_awaited_once_with(viewport={"width": 794, "height": 1122})
        pdf_kwargs = mock_page.pdf.call_args.kwargs
        assert pdf_kwargs["format"] == "A4"
        assert pdf_kwargs["print_background"] is True
        assert pdf_kwargs["margin"] == {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"}

    @patch("playwright.async_api.async_playwright")
    def test_letter_page_size(self, mock_playwright, client):
        _, mock_browser, mock_page = build_playwright_mock(mock_playwright)

        response = client.post("/api/pdf", json={"url": "https://example.com/page", "pageSize": "letter"})

        assert response.status_code == 200
        mock_browser.new_page.assert_awaited_once_with(viewport={"width": 816, "height": 1056})
        assert mock_page.pdf.call_args.kwargs["format"] == "Letter"

    @patch("playwright.async_api.async_playwright")
    def test_custom_page_size_uses_explicit_dimensions(self, mock_playwright, client):
        _, _, mock_page = build_playwright_mock(mock_playwright)

        response = client.post("/api/pdf", json={"url": "https://example.com/page", "pageSize": "custom"})

        assert response.status_code == 200
        pdf_kwargs = mock_page.pdf.call_args.kwargs
        assert "format" not in pdf_kwargs
        assert pdf_kwargs["width"] == "8.27in"
        assert pdf_kwargs["height"] == "11.69in"

    @patch("playwright.async_api.async_playwright")
    def test_render_handles_timeout(self, mock_playwright, client):
        """Test that /api/pdf handles timeouts."""
        _, mock_browser, mock_page = build_playwright_mock(mock_playwright)
        mock_page.pdf = AsyncMock(side_effect=asyncio.TimeoutError())

        response = client.post("/api/pdf", json={"url": "https://example.com/page"})

        assert response.status_code == 500
        assert "timed out" in response.json()["detail"].lower()
        mock_browser.close.assert_awaited_once()

    @patch("playwright.async_api.async_playwright")
    def test_navigation_failure_returns_500_with_message(self, mock_playwright, client):
        _, mock_browser, mock_page = build_playwright_mock(mock_playwright)
        mock_page.goto = AsyncMock(side_effect=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))

        response = client.post("/api/pdf", json={"url": "https://does-not-exist.invalid/"})

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail.startswith("Failed to generate PDF")
        assert "ERR_NAME_NOT_RESOLVED" in detail
        mock_browser.close.assert_awaited_once()
        mock_page.pdf.assert_not_called()

    @patch("playwright.async_api.async_playwright")
    def test_connection_failure_returns_500(self, mock_playwright, client):
        mock_pw, _, _ = build_playwright_mock(mock_playwright)
        mock_pw.chromium.connect_over_cdp = AsyncMock(side_effect=RuntimeError("401 Unauthorized"))

        response = client.post("/api/pdf", json={"url": "https://example.com/page"})

        assert response.status_code == 500
        assert "401 Unauthorized" in response.json()["detail"]


class TestURLToPDFCapacity:
    """Concurrency limit."""

    @patch("playwright.async_api.async_playwright")
    def test_rejects_when_at_capacity(self, mock_playwright, client):
        import pdf_service.app as app_module

        with patch.object(app_module, "_pdf_semaphore", asyncio.Semaphore(0)):
            response = client.post("/api/pdf", json={"url": "https://example.com/page"})

        assert response.status_code == 503
        assert "overloaded" in response.json()["detail"].lower()
        mock_playwright.assert_not_called()
