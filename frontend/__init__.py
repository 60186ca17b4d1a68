"""
URL to PDF UI - Flask frontend for converting web pages to PDF.

Provides a single form with URL and page-size inputs, the conversion
counter, and the cache hit/miss status of the last conversion.
"""
