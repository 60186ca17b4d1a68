"""
Command-line entry point: convert a URL to a PDF file.

Usage:
    url-to-pdf https://example.com
    url-to-pdf https://example.com --page-size letter --output example.pdf
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from url_to_pdf.cache_store import PageSize
from url_to_pdf.config import get_settings
from url_to_pdf.converter import ConversionResult, convert_url
from url_to_pdf.counter import ConversionCounter
from url_to_pdf.errors import ConversionError

logger = logging.getLogger(__name__)


async def run_conversion(url: str, page_size: str) -> ConversionResult:
    """Convert one URL with the configured cache and PDF service."""
    settings = get_settings()
    result = await convert_url(url, page_size, settings=settings)
    await ConversionCounter(settings.pdf_cache_db_path).increment()
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url-to-pdf",
        description="Convert a web page to PDF (cached locally by URL and page size)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    url-to-pdf https://example.com
    url-to-pdf https://example.com/docs --page-size letter -o docs.pdf
        """
    )
    parser.add_argument("url", help="Absolute http(s) URL of the page to convert")
    parser.add_argument(
        "--page-size",
        choices=[size.value for size in PageSize],
        default=PageSize.A4.value,
        help="Paper size (default: a4)"
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        metavar="PATH",
        help="Where to write the PDF (default: ./<name derived from URL>.pdf)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    try:
        result = asyncio.run(run_conversion(args.url, args.page_size))
    except ConversionError as e:
        print(f"Error ({type(e).__name__}): {e.message}", file=sys.stderr)
        return 1

    output = args.output or Path(result.filename)
    output.write_bytes(result.pdf_bytes)

    status = "hit: PDF loaded from local cache" if result.cache_hit else "miss: PDF generated from server"
    print(f"Cache {status}")
    print(f"Saved {len(result.pdf_bytes):,} bytes to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
