"""
Version information for the URL to PDF application.

This file is the single source of truth for version numbers.
The frontend and the PDF service report it.
"""

__version__ = "0.1.0"
__version_info__ = (0, 1, 0)
