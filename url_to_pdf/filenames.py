"""Download filename derivation for converted pages."""

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

FALLBACK_FILENAME = "page"
MAX_FILENAME_LENGTH = 100


def generate_filename_from_url(url: str) -> str:
    """
    Derive a readable filename (without extension) from a page URL.

    The hostname loses a leading "www." and keeps its dots; the path is
    appended with slashes turned into hyphens and every other character
    outside [A-Za-z0-9-] replaced by a hyphen. Hyphen runs collapse and the
    result is capped at 100 characters.

    Example:
        >>> generate_filename_from_url("https://www.Example.com/foo/bar/")
        'example.com-foo-bar'
        >>> generate_filename_from_url("not a url")
        'page'
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        if not parsed.scheme or not hostname:
            raise ValueError(f"Not an absolute URL: {url!r}")

        if hostname.startswith("www."):
            hostname = hostname[len("www."):]

        filename = re.sub(r"[^a-z0-9.-]", "-", hostname)
        path = parsed.path
        if path and path != "/":
            clean_path = re.sub(r"^/|/$", "", path).replace("/", "-")
            filename += "-" + re.sub(r"[^a-zA-Z0-9-]", "-", clean_path)

        filename = re.sub(r"-+", "-", filename)
        filename = filename.strip("-.")[:MAX_FILENAME_LENGTH]
        return filename or FALLBACK_FILENAME
    except Exception as e:
        logger.warning(f"Error generating filename from {url!r}: {e}")
        return FALLBACK_FILENAME
