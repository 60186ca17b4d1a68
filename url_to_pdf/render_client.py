"""
HTTP client for the PDF service.

Sends one POST /api/pdf per cache miss and maps the service's responses
onto the conversion error types. No retries: a failed render is reported
to the caller, who may resubmit.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

import httpx

from url_to_pdf.cache_store import PageSize
from url_to_pdf.errors import InvalidInput, RenderFailed, ServerConfigError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
SERVER_CONFIG_ERROR_PREFIX = "Server configuration error"


class PdfRenderer(ABC):
    """Anything that can turn (url, page size) into complete PDF bytes."""

    @abstractmethod
    async def render(self, url: str, page_size: PageSize) -> bytes:
        """Render the page. Raises RenderFailed, ServerConfigError or InvalidInput."""
        pass


def _error_detail(response: httpx.Response) -> str:
    """Pull the error message out of a failed service response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return f"HTTP {response.status_code}"


class PdfServiceClient(PdfRenderer):
    """
    Render client backed by the PDF service's POST /api/pdf endpoint.

    Args:
        base_url: PDF service base URL (e.g. "http://localhost:8001")
        timeout: Whole-request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def render(self, url: str, page_size: Union[PageSize, str]) -> bytes:
        page_size = PageSize(page_size)
        endpoint = f"{self.base_url}/api/pdf"
        logger.info(f"Requesting PDF render: {url[:100]} (pageSize={page_size.value})")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as http_client:
                response = await http_client.post(
                    endpoint,
                    json={"url": url, "pageSize": page_size.value},
                )
        except httpx.TimeoutException as e:
            logger.error(f"PDF service timed out for {url}")
            raise RenderFailed(
                "PDF generation timed out. The site may be slow or blocking automation.",
                cause=e,
            )
        except httpx.RequestError as e:
            logger.error(f"PDF service connection failed: {str(e)}")
            raise RenderFailed(f"PDF service unavailable: {str(e)}", cause=e)

        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error(f"PDF service returned error {response.status_code}: {detail}")
            if response.status_code == 400:
                raise InvalidInput(detail)
            if response.status_code >= 500 and detail.startswith(SERVER_CONFIG_ERROR_PREFIX):
                raise ServerConfigError(detail)
            raise RenderFailed(detail)

        pdf_bytes = response.content
        if not pdf_bytes.startswith(PDF_MAGIC):
            content_type = response.headers.get("content-type", "unknown")
            raise RenderFailed(
                f"PDF service returned a non-PDF response (content-type: {content_type})"
            )

        logger.info(f"Received {len(pdf_bytes)} byte PDF for {url[:100]}")
        return pdf_bytes
