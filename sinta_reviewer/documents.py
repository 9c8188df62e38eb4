import base64
import logging
import re
from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF

from .error_handling import InputValidationError

logger = logging.getLogger(__name__)


def _read_bytes(path: Union[str, Path]) -> bytes:
    path = Path(path)
    if not path.is_file():
        raise InputValidationError(f"File not found: {path}")
    data = path.read_bytes()
    if not data:
        raise InputValidationError(f"File is empty: {path}")
    return data


def _open_pdf(data: bytes, source: str) -> fitz.Document:
    if b"%PDF-" not in data[:1024]:
        raise InputValidationError(f"Not a PDF file: {source}")
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:  # FileDataError is a RuntimeError
        raise InputValidationError(f"Not a readable PDF: {source}") from e
    if doc.page_count == 0:
        doc.close()
        raise InputValidationError(f"PDF has no pages: {source}")
    return doc


def read_pdf_base64(path: Union[str, Path]) -> str:
    """Read a whole PDF into base64 after checking that it actually is one"""
    data = _read_bytes(path)
    doc = _open_pdf(data, str(path))
    logger.info(f"Loaded PDF {path} ({doc.page_count} pages, {len(data)} bytes)")
    doc.close()
    return base64.b64encode(data).decode("ascii")


def extract_pdf_text(path: Union[str, Path], max_chars: Optional[int] = None) -> str:
    """Plain text of every page, used for text-only checks like the checklist"""
    data = _read_bytes(path)
    doc = _open_pdf(data, str(path))
    try:
        pages = [doc.load_page(i).get_text("text") for i in range(doc.page_count)]
    finally:
        doc.close()

    text = "\n\n".join(page.strip() for page in pages if page.strip())
    text = re.sub(r'\n{3,}', '\n\n', text)
    if max_chars is not None:
        text = text[:max_chars]
    return text


def encode_image(source: Union[bytes, str, Path]) -> str:
    """Base64 for raw image bytes or an image file on disk"""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        if not data:
            raise InputValidationError("Image data is empty")
    else:
        data = _read_bytes(source)
    return base64.b64encode(data).decode("ascii")
