"""
rasterize.py - PDF page to pixel raster using PyMuPDF.

Fast in-memory rendering straight from the input byte buffer.
"""

import logging

import numpy as np
try:
    import fitz  # pip install pymupdf
except ImportError:
    import pymupdf as fitz  # apt install python3-pymupdf

from .errors import DocumentOpenFailure, PageOutOfRange, RasterContextFailure

logger = logging.getLogger(__name__)


def open_document(data: bytes, label: str = "document") -> "fitz.Document":
    """
    Open a PDF held in memory.

    The returned document should be used as a context manager so it is
    closed as soon as its pages are rasterized.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentOpenFailure(f"Could not open {label}: {e}") from e

    if doc.needs_pass:
        doc.close()
        raise DocumentOpenFailure(f"Could not open {label}: document is encrypted")

    logger.debug(f"Opened {label}: {doc.page_count} pages, {len(data):,} bytes")
    return doc


def rasterize_page(doc: "fitz.Document", page_number: int, scale: float) -> np.ndarray:
    """
    Rasterize a single PDF page to an RGB image.

    Args:
        doc: Open PyMuPDF document
        page_number: 1-based page number
        scale: Zoom applied to both axes (1.0 = 72 DPI)

    Returns:
        RGB numpy array of shape (height, width, 3)
    """
    if not 1 <= page_number <= doc.page_count:
        raise PageOutOfRange(
            f"Page {page_number} requested from a {doc.page_count}-page document"
        )

    try:
        page = doc[page_number - 1]
        matrix = fitz.Matrix(scale, scale)

        # Render to pixmap (in-memory)
        pixmap = page.get_pixmap(matrix=matrix, alpha=False)

        # Samples may be row-padded, so reshape via stride
        image = np.frombuffer(pixmap.samples, dtype=np.uint8).reshape(
            pixmap.height, pixmap.stride
        )[:, :pixmap.width * pixmap.n].reshape(
            pixmap.height, pixmap.width, pixmap.n
        ).copy()  # Copy to own the memory
    except Exception as e:
        raise RasterContextFailure(f"Could not render page {page_number}: {e}") from e

    logger.debug(
        f"Rasterized page {page_number}: {pixmap.width}x{pixmap.height} @ x{scale:g}"
    )

    return image
