"""
Flask application for the URL to PDF UI.

Provides a single form (URL + page size) that converts the page to PDF and
downloads it. Conversions go through the local PDF cache first; only cache
misses reach the PDF service.

Stack: Flask + Tailwind CSS (CDN)
"""

import asyncio
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template, request, send_file
from io import BytesIO

from url_to_pdf.cache_store import PageSize
from url_to_pdf.config import get_settings
from url_to_pdf.converter import convert_url
from url_to_pdf.counter import ConversionCounter
from url_to_pdf.errors import (
    ConversionError,
    InvalidInput,
    RenderFailed,
    ServerConfigError,
    StoreUnavailable,
)

# Load environment variables
load_dotenv()

app = Flask(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


PAGE_SIZES = [size.value for size in PageSize]

ERROR_STATUS_CODES = {
    InvalidInput: 400,
    RenderFailed: 502,
    ServerConfigError: 500,
    StoreUnavailable: 500,
}


def _status_for(error: ConversionError) -> int:
    for error_type, status in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status
    return 500


def _get_counter() -> ConversionCounter:
    return ConversionCounter(get_settings().pdf_cache_db_path)


def _render_form(status: int = 200, **context):
    context.setdefault("url", "")
    context.setdefault("page_size", PageSize.A4.value)
    context.setdefault("error", None)
    conversion_count = asyncio.run(_get_counter().get())
    return render_template(
        "index.html",
        page_sizes=PAGE_SIZES,
        conversion_count=conversion_count,
        **context,
    ), status


@app.route("/")
def index():
    """Render the conversion form."""
    return _render_form()


@app.route("/convert", methods=["POST"])
def convert():
    """
    Convert the submitted URL to PDF and return it as a download.

    The response carries X-Cache-Status: hit|miss. Errors re-render the form
    with the message, or answer with JSON for requests sent by the page script.
    """
    wants_json = request.headers.get("X-Requested-With") == "fetch"

    url = request.form.get("url", "").strip()
    page_size = request.form.get("pageSize", PageSize.A4.value)

    if not url:
        if wants_json:
            return jsonify({"error": "URL is required"}), 400
        return _render_form(400, error="URL is required", page_size=page_size)

    try:
        result = asyncio.run(convert_url(url, page_size))
    except ConversionError as e:
        logger.error(f"Conversion failed for {url[:100]}: {e.message}")
        if wants_json:
            return jsonify({"error": e.message, "type": type(e).__name__}), _status_for(e)
        return _render_form(_status_for(e), url=url, page_size=page_size, error=e.message)

    conversion_count = asyncio.run(_get_counter().increment())

    cache_status = "hit" if result.cache_hit else "miss"
    logger.info(f"Conversion complete ({cache_status}): {result.filename}")

    response = send_file(
        BytesIO(result.pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=result.filename
    )
    response.headers["X-Cache-Status"] = cache_status
    response.headers["X-Conversion-Count"] = str(conversion_count)
    return response


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG") == "1")
