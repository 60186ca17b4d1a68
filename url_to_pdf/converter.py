"""
Conversion orchestrator.

Decides between the local cache and the render service for one
(url, page size) request:

    validate -> cache lookup -> (hit: return) | (miss: render -> cache write -> return)

The phases run strictly in that order. Store failures degrade: a failed read
counts as a miss and a failed write is logged and dropped, so the caller
still gets the PDF. Concurrent misses for the same key each render and the
later write wins.
"""

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Literal, Optional, Union
from urllib.parse import urlparse

from url_to_pdf.cache_store import (
    CacheEntry,
    PageSize,
    PdfCacheStore,
    PdfCacheStoreInterface,
    generate_cache_key,
)
from url_to_pdf.config import ClientSettings, get_settings
from url_to_pdf.errors import ConversionError, InvalidInput, RenderFailed, StoreError
from url_to_pdf.filenames import generate_filename_from_url
from url_to_pdf.render_client import PdfRenderer, PdfServiceClient

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")
HOSTNAME_PATTERN = re.compile(r"^[a-z0-9.-]+$")


@dataclass
class ConversionResult:
    """PDF bytes plus where they came from."""
    pdf_bytes: bytes
    source: Literal["cache", "network"]
    url: str
    page_size: PageSize
    cache_key: str

    @property
    def cache_hit(self) -> bool:
        return self.source == "cache"

    @property
    def filename(self) -> str:
        return f"{generate_filename_from_url(self.url)}.pdf"


def _is_valid_hostname(hostname: str) -> bool:
    """DNS-style name or IPv4, or a bracketed IPv6 literal (urlparse strips the brackets)."""
    if HOSTNAME_PATTERN.match(hostname):
        return not hostname.startswith((".", "-"))
    try:
        ipaddress.IPv6Address(hostname)
    except ValueError:
        return False
    return True


def validate_request(url: str, page_size: Union[PageSize, str]) -> PageSize:
    """
    Reject malformed input before any store or network access.

    Returns:
        The page size as a PageSize

    Raises:
        InvalidInput: url is not an absolute http(s) URL or page_size is unknown
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("Invalid request: URL is required")
    # "|" separates url and page size in cache keys
    if any(ch.isspace() for ch in url) or "|" in url:
        raise InvalidInput(f"Invalid request: Invalid url: {url!r}")

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        parsed.port  # raises ValueError for non-numeric or out-of-range ports
    except ValueError:
        raise InvalidInput(f"Invalid request: Invalid url: {url!r}")
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
        raise InvalidInput(f"Invalid request: Invalid url: {url!r}")
    if not _is_valid_hostname(hostname):
        raise InvalidInput(f"Invalid request: Invalid host in url: {url!r}")

    try:
        return PageSize(page_size)
    except ValueError:
        allowed = ", ".join(f"'{size.value}'" for size in PageSize)
        raise InvalidInput(
            f"Invalid request: pageSize must be one of {allowed}, got {page_size!r}"
        )


class ConversionOrchestrator:
    """
    Coordinates the cache store and the render client for one conversion.

    Args:
        store: PDF cache store
        renderer: Render collaborator, called only on a cache miss
    """

    def __init__(self, store: PdfCacheStoreInterface, renderer: PdfRenderer):
        self.store = store
        self.renderer = renderer

    async def _lookup(self, cache_key: str):
        try:
            await self.store.open()
            return await self.store.get(cache_key)
        except StoreError as e:
            logger.warning(f"Cache lookup failed, treating as miss: {e}")
            return None

    async def _save(self, entry: CacheEntry) -> None:
        try:
            await self.store.open()
            await self.store.put(entry)
        except StoreError as e:
            logger.error(f"Error saving to cache: {e}")

    async def convert(self, url: str, page_size: Union[PageSize, str] = PageSize.A4) -> ConversionResult:
        """
        Return the PDF for (url, page_size), from the cache when possible.

        Raises:
            InvalidInput: malformed url or page size
            ServerConfigError: the PDF service is missing its Browserless token
            RenderFailed: the render failed (network, provider or timeout)
        """
        page_size = validate_request(url, page_size)
        cache_key = generate_cache_key(url, page_size)

        cached = await self._lookup(cache_key)
        if cached is not None:
            logger.info(f"Cache hit: {cache_key[:100]}")
            return ConversionResult(
                pdf_bytes=cached.payload,
                source="cache",
                url=url,
                page_size=page_size,
                cache_key=cache_key,
            )

        logger.info(f"Cache miss: {cache_key[:100]}")
        try:
            pdf_bytes = await self.renderer.render(url, page_size)
        except ConversionError:
            raise
        except Exception as e:
            raise RenderFailed(f"Failed to generate PDF: {str(e)}", cause=e)

        await self._save(CacheEntry(url=url, page_size=page_size, payload=pdf_bytes))

        return ConversionResult(
            pdf_bytes=pdf_bytes,
            source="network",
            url=url,
            page_size=page_size,
            cache_key=cache_key,
        )


async def convert_url(
    url: str,
    page_size: Union[PageSize, str] = PageSize.A4,
    settings: Optional[ClientSettings] = None,
) -> ConversionResult:
    """
    Convenience function: convert one URL with the configured cache and PDF service.

    Opens the cache for the duration of the call and closes it afterwards.
    """
    settings = settings or get_settings()
    renderer = PdfServiceClient(
        settings.pdf_service_url, timeout=settings.render_timeout_seconds
    )
    store = PdfCacheStore(settings.pdf_cache_db_path)
    try:
        return await ConversionOrchestrator(store, renderer).convert(url, page_size)
    finally:
        await store.close()
