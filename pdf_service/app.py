"""
PDF Service - FastAPI application for URL to PDF conversion.

Proxies render requests to a hosted headless browser (Browserless) through
Playwright and streams the generated PDF back to the caller.
"""

import asyncio
import logging
from datetime import datetime
from io import BytesIO
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field

from pdf_service.config import PDFServiceSettings, get_settings
from pdf_service.pdf_helpers import (
    WAIT_FOR_IMAGES_SCRIPT,
    build_browserless_endpoint,
    pdf_options_for_page_size,
    viewport_for_page_size,
)
from url_to_pdf.filenames import generate_filename_from_url
from version import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF Service",
    version=__version__,
    description="URL to PDF conversion using a hosted headless browser"
)

MAX_CONCURRENT_PDFS = get_settings().max_concurrent_pdfs

# Semaphore for rate limiting
_pdf_semaphore = asyncio.Semaphore(MAX_CONCURRENT_PDFS)

SERVER_CONFIG_ERROR = "Server configuration error: Browserless token not found"


# ============================================================================
# Startup Event - Report Configuration
# ============================================================================

@app.on_event("startup")
async def log_configuration_on_startup():
    """Log whether the Browserless token is present (never the token itself)."""
    settings = get_settings()
    logger.info("PDF Service starting")
    logger.info(f"  browserless_endpoint={settings.browserless_endpoint}")
    logger.info(f"  playwright_timeout={settings.playwright_timeout}ms")
    logger.info(f"  max_concurrent_pdfs={MAX_CONCURRENT_PDFS}")
    if not settings.browserless_configured:
        logger.error("Browserless token is missing from environment variables")


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    active_renders: int
    max_concurrent: int
    browserless_configured: bool = True


class URLToPDFRequest(BaseModel):
    """URL to PDF request."""
    model_config = ConfigDict(extra="forbid")

    url: AnyHttpUrl = Field(..., description="Absolute URL of the page to render")
    pageSize: Literal["a4", "letter", "custom"] = Field(
        "a4", description="Page size: 'a4', 'letter' or 'custom'"
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first validation problem as a 400 with a readable message."""
    errors = exc.errors()
    if errors:
        error = errors[0]
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        if location:
            message = f"{location}: {message}"
    else:
        message = "malformed request body"
    return JSONResponse(status_code=400, content={"detail": f"Invalid request: {message}"})


def _active_renders() -> int:
    return MAX_CONCURRENT_PDFS - _pdf_semaphore._value


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check(settings: PDFServiceSettings = Depends(get_settings)) -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns HTTP 503 if the Browserless token is not configured.
    """
    if not settings.browserless_configured:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.utcnow().isoformat(),
                "active_renders": _active_renders(),
                "max_concurrent": MAX_CONCURRENT_PDFS,
                "browserless_configured": False,
                "message": "PDF service is unhealthy - Browserless token not configured"
            }
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        active_renders=_active_renders(),
        max_concurrent=MAX_CONCURRENT_PDFS,
        browserless_configured=True,
    )


# ============================================================================
# PDF Generation Endpoint
# ============================================================================

async def render_url_to_pdf(url: str, page_size: str, settings: PDFServiceSettings) -> bytes:
    """
    Render a URL to PDF on the hosted browser.

    Waits for DOMContentLoaded and for every <img> to load or error
    before printing, so the document is complete when returned.
    """
    # Import here to avoid loading Playwright on startup
    from playwright.async_api import async_playwright

    endpoint = build_browserless_endpoint(settings.browserless_endpoint, settings.browserless_token)
    timeout_seconds = settings.playwright_timeout / 1000

    async with async_playwright() as p:
        browser = await p.chromium.connect_over_cdp(endpoint, timeout=settings.playwright_timeout)
        try:
            page = await browser.new_page(viewport=viewport_for_page_size(page_size))
            page.set_default_timeout(settings.playwright_timeout)

            await page.goto(url, wait_until="domcontentloaded")
            await asyncio.wait_for(page.evaluate(WAIT_FOR_IMAGES_SCRIPT), timeout=timeout_seconds)

            return await page.pdf(**pdf_options_for_page_size(page_size))
        finally:
            await browser.close()


@app.post("/api/pdf")
async def url_to_pdf(
    request: URLToPDFRequest,
    settings: PDFServiceSettings = Depends(get_settings),
):
    """
    Convert a web page to PDF.

    Args:
        request: URL and page size

    Returns:
        StreamingResponse with PDF binary data

    Raises:
        HTTPException: 400 for invalid input, 500 for missing configuration
            or rendering failures, 503 for overload
    """
    url = str(request.url)
    page_size = request.pageSize

    if not settings.browserless_configured:
        logger.error("Browserless token is missing from environment variables")
        raise HTTPException(status_code=500, detail=SERVER_CONFIG_ERROR)

    # Check capacity
    if _pdf_semaphore._value <= 0:
        logger.warning("PDF service overloaded, rejecting request")
        raise HTTPException(
            status_code=503,
            detail="Service overloaded. Too many concurrent PDF operations."
        )

    async with _pdf_semaphore:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            logger.info(f"Starting URL render: {url[:100]} (pageSize={page_size})")
            pdf_bytes = await render_url_to_pdf(url, page_size, settings)
        except (asyncio.TimeoutError, PlaywrightTimeoutError):
            logger.error(f"PDF rendering timed out: {url[:100]}")
            raise HTTPException(
                status_code=500,
                detail=f"Rendering timed out after {settings.playwright_timeout}ms"
            )
        except Exception as e:
            logger.error(f"PDF generation error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=f"Failed to generate PDF: {str(e)}"
            )

    filename = f"{generate_filename_from_url(url)}.pdf"
    logger.info(f"URL render completed: {filename} ({len(pdf_bytes)} bytes)")

    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8001")), log_level="info")
