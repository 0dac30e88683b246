"""
PDF -> page images.

Every page of an uploaded resume is rendered at a fixed upscale and
encoded as a base64 JPEG so it can be sent to the model inline.
"""

import asyncio
import base64
import io
import logging
from typing import Optional

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError

from employee_sorter.config import IMAGE_MIME_TYPE, RENDER_SCALE
from employee_sorter.errors import (
    CorruptDocument,
    EnvironmentUnavailable,
    SorterError,
    UnsupportedDocument,
)
from employee_sorter.models import PageImage

logger = logging.getLogger(__name__)

PDF_POINTS_PER_INCH = 72


def _load_render_backend():
    """Page rasterization lives in pdfplumber.display (pypdfium2 + Pillow)."""
    try:
        import pypdfium2.raw as pdfium_c
        from PIL import Image  # noqa: F401
        from pdfplumber import display  # noqa: F401
    except ImportError as exc:
        raise EnvironmentUnavailable() from exc
    return pdfium_c


def _is_password_error(exc: BaseException, password_code: Optional[int] = None) -> bool:
    """Walks the exception chain looking for an encryption / password failure."""
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, PDFEncryptionError):
            return True
        if password_code is not None and getattr(current, "err_code", None) == password_code:
            return True

        pending.append(current.__cause__)
        pending.append(current.__context__)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
    return False


def _encode_jpeg(page_image) -> str:
    buffer = io.BytesIO()
    original = page_image.original
    try:
        original.convert("RGB").save(buffer, format="JPEG")
    finally:
        original.close()
    return base64.b64encode(buffer.getvalue()).decode()


def render_pdf_pages(data: bytes, scale: float = RENDER_SCALE) -> list[PageImage]:
    """
    Renders every page of a PDF (in order) into a JPEG PageImage.

    Raises:
        EnvironmentUnavailable: the rendering backend cannot be loaded
        UnsupportedDocument: the PDF is password-protected
        CorruptDocument: any other parse / render failure
    """
    pdfium_c = _load_render_backend()

    if not data:
        raise CorruptDocument()

    resolution = PDF_POINTS_PER_INCH * scale
    images = []

    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                try:
                    page_image = page.to_image(resolution=resolution)
                    images.append(PageImage(mime_type=IMAGE_MIME_TYPE, data=_encode_jpeg(page_image)))
                finally:
                    page.close()
    except SorterError:
        raise
    except Exception as exc:
        if _is_password_error(exc, pdfium_c.FPDF_ERR_PASSWORD):
            logger.info("Rejected password-protected PDF")
            raise UnsupportedDocument() from exc
        logger.exception("Error processing PDF")
        raise CorruptDocument() from exc

    logger.info("Rendered %d PDF page(s) at %.1fx", len(images), scale)
    return images


async def arender_pdf_pages(data: bytes, scale: float = RENDER_SCALE) -> list[PageImage]:
    """render_pdf_pages off the event loop."""
    return await asyncio.to_thread(render_pdf_pages, data, scale)


def page_count(data: bytes) -> Optional[int]:
    """Page count for the upload caption, or None if unreadable."""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            return len(pdf.pages)
    except Exception:
        return None
