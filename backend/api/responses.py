"""
Hi-Pot Test Log - Response Helpers
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-19): PDF responses with a header-safe Content-Disposition
"""

import re
import unicodedata
from urllib.parse import quote

from fastapi.responses import Response

from services.certificate_renderer import PDF_MIME_TYPE

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """
    Content-Disposition value for an arbitrary (possibly non-ASCII) filename.

    Headers go out as latin-1, so the plain filename parameter carries an
    ASCII-only fallback and filename* carries the exact name (RFC 5987).
    """
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", ascii_name).strip("_") or "certificate.pdf"
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type=PDF_MIME_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )
