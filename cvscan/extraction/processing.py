"""Upload helpers: file validation and document preparation before model calls."""

import io
from typing import Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image

from cvscan.core.config import Settings

PDF_MIME = "application/pdf"
PNG_MIME = "image/png"
JPEG_MIME = "image/jpeg"
ALLOWED_MIME = {PNG_MIME, JPEG_MIME, PDF_MIME}
EXT_TO_MIME = {"png": PNG_MIME, "jpg": JPEG_MIME, "jpeg": JPEG_MIME, "pdf": PDF_MIME}


def extension_from_filename(filename: str) -> str:
    return filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''


def resolve_mime(filename: Optional[str], content_type: Optional[str]) -> Optional[str]:
    """Prefer the declared content type; fall back to the filename extension."""
    if content_type in ALLOWED_MIME:
        return content_type
    if content_type and content_type not in ("application/octet-stream", ""):
        return None
    return EXT_TO_MIME.get(extension_from_filename(filename or ""))


def validate_upload(filename: Optional[str], content_type: Optional[str], data: bytes, settings: Settings) -> Tuple[str, bytes]:
    """Validate raw upload bytes and type.

    Raises ValueError with concise error code strings that map directly to
    user-facing error.detail in API responses.
    """
    if not data:
        raise ValueError("empty_file")
    mime = resolve_mime(filename, content_type)
    if mime is None:
        raise ValueError("unsupported_file_type")
    if len(data) > settings.max_file_bytes:
        raise ValueError("file_too_large")
    return mime, data


def ensure_image_format(data: bytes) -> bytes:
    """Normalize an image blob to PNG (RGB) to reduce model variability."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            out = io.BytesIO()
            im.convert("RGB").save(out, format="PNG")
            return out.getvalue()
    except OSError as exc:  # UnidentifiedImageError, truncated data
        raise ValueError("invalid_image") from exc


def count_pdf_pages(data: bytes) -> int:
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            return doc.page_count
    except (RuntimeError, ValueError) as exc:  # fitz.FileDataError subclasses RuntimeError
        raise ValueError("invalid_pdf") from exc


def prepare_document(mime: str, data: bytes, settings: Settings) -> Tuple[str, bytes]:
    """Return the (mime, bytes) pair actually sent upstream.

    Images are re-encoded as PNG; PDFs are passed through after checking they
    open and stay within MAX_PDF_PAGES.
    """
    if mime == PDF_MIME:
        pages = count_pdf_pages(data)
        if pages == 0:
            raise ValueError("invalid_pdf")
        if pages > settings.MAX_PDF_PAGES:
            raise ValueError("too_many_pages")
        return PDF_MIME, data
    return PNG_MIME, ensure_image_format(data)
