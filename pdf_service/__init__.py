"""
PDF Service - Dedicated service for URL to PDF conversion.

Connects to a hosted headless browser (Browserless) with Playwright,
renders the requested page and streams the PDF back to the caller.
"""

from version import __version__
