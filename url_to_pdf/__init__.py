"""
URL to PDF - convert web pages to PDF through a hosted headless browser.

Generated PDFs are cached locally by (url, page size) so repeat requests
skip the render service.
"""

from url_to_pdf.cache_store import CacheEntry, PageSize, PdfCacheStore, generate_cache_key
from url_to_pdf.converter import ConversionOrchestrator, ConversionResult, validate_request
from url_to_pdf.errors import (
    ConversionError,
    InvalidInput,
    RenderFailed,
    ServerConfigError,
    StoreError,
    StoreReadError,
    StoreUnavailable,
    StoreWriteError,
)
from url_to_pdf.filenames import generate_filename_from_url
from url_to_pdf.render_client import PdfRenderer, PdfServiceClient

from version import __version__

__all__ = [
    # Cache
    "CacheEntry",
    "PageSize",
    "PdfCacheStore",
    "generate_cache_key",
    # Conversion
    "ConversionOrchestrator",
    "ConversionResult",
    "validate_request",
    "PdfRenderer",
    "PdfServiceClient",
    "generate_filename_from_url",
    # Errors
    "ConversionError",
    "InvalidInput",
    "RenderFailed",
    "ServerConfigError",
    "StoreError",
    "StoreReadError",
    "StoreUnavailable",
    "StoreWriteError",
]
