"""
Error types raised by the URL to PDF conversion flow.

Input, configuration and render errors end the request. Store errors are
raised by the cache store but the orchestrator degrades on them instead of
failing the conversion.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for every error surfaced to a caller of convert()."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class InvalidInput(ConversionError):
    """Malformed URL or unrecognized page size. User-correctable."""


class ServerConfigError(ConversionError):
    """Required server-side configuration (the Browserless token) is missing."""


class RenderFailed(ConversionError):
    """The rendering service could not produce a PDF."""


class StoreError(ConversionError):
    """Base class for local cache persistence failures."""


class StoreUnavailable(StoreError):
    """The cache database could not be opened or initialized."""


class StoreReadError(StoreError):
    """A cache lookup failed at the I/O level."""


class StoreWriteError(StoreError):
    """A cache write failed at the I/O level."""
