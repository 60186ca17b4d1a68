"""
Helper functions for rendering web pages to PDF via Browserless.

These functions build the connection endpoint, the page viewport and the
Playwright PDF options for each supported page size.
"""

from typing import Dict
from urllib.parse import urlencode

# Page dimensions in inches. "custom" currently renders at A4 dimensions.
PAGE_SIZES: Dict[str, Dict[str, float]] = {
    "a4": {"width": 8.27, "height": 11.69},
    "letter": {"width": 8.5, "height": 11},
    "custom": {"width": 8.27, "height": 11.69},
}

CSS_PIXELS_PER_INCH = 96

PDF_MARGIN = {
    "top": "20px",
    "right": "20px",
    "bottom": "20px",
    "left": "20px",
}

# Resolves once every <img> has loaded or errored. Already-complete images
# resolve immediately, so the wait is bounded by the slowest image request.
WAIT_FOR_IMAGES_SCRIPT = """
async () => {
    const images = Array.from(document.getElementsByTagName('img'));
    await Promise.all(
        images.map((img) => {
            if (img.complete) return Promise.resolve();
            return new Promise((resolve) => {
                img.addEventListener('load', resolve);
                img.addEventListener('error', resolve);
            });
        })
    );
}
"""


def build_browserless_endpoint(endpoint: str, token: str) -> str:
    """
    Build the Browserless CDP WebSocket URL.

    Args:
        endpoint: Base WebSocket URL (e.g. "wss://production-sfo.browserless.io")
        token: Browserless access token

    Returns:
        Endpoint with the token as a query parameter

    Example:
        >>> build_browserless_endpoint("wss://production-sfo.browserless.io", "abc")
        'wss://production-sfo.browserless.io?token=abc'
    """
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{urlencode({'token': token})}"


def viewport_for_page_size(page_size: str) -> Dict[str, int]:
    """Viewport in CSS pixels matching the paper dimensions at 96 DPI."""
    size = PAGE_SIZES[page_size]
    return {
        "width": round(size["width"] * CSS_PIXELS_PER_INCH),
        "height": round(size["height"] * CSS_PIXELS_PER_INCH),
    }


def pdf_options_for_page_size(page_size: str) -> Dict:
    """
    Keyword arguments for Playwright's page.pdf().

    a4 and letter use the named paper formats; custom passes explicit
    dimensions since Chromium has no "custom" format.
    """
    options = {
        "print_background": True,
        "margin": dict(PDF_MARGIN),
    }
    if page_size == "a4":
        options["format"] = "A4"
    elif page_size == "letter":
        options["format"] = "Letter"
    else:
        size = PAGE_SIZES[page_size]
        options["width"] = f"{size['width']}in"
        options["height"] = f"{size['height']}in"
    return options
