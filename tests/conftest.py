import sys
from pathlib import Path

import fitz
import numpy as np
import pytest

# Add repo root to sys.path so we can import pdf_imposer and impose_pdf
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from pdf_imposer.config import RenderGeometry  # noqa: E402

A4_PORTRAIT = (595.28, 841.89)

RED = (1, 0, 0)
GREEN = (0, 1, 0)
BLUE = (0, 0, 1)
BLACK = (0, 0, 0)
WHITE = (1, 1, 1)


@pytest.fixture
def geometry():
    """Reduced render scale so sheets stay small."""
    return RenderGeometry(scale=0.5)


@pytest.fixture
def make_pdf():
    """
    Return a factory building an in-memory PDF.

    Each page is given as (width_pts, height_pts) or
    (width_pts, height_pts, rgb_fill) with fill components in 0..1.
    """
    def _make(*pages) -> bytes:
        doc = fitz.open()
        for page_def in pages:
            width, height = page_def[0], page_def[1]
            fill = page_def[2] if len(page_def) > 2 else WHITE
            page = doc.new_page(width=width, height=height)
            page.draw_rect(page.rect, color=fill, fill=fill)
        data = doc.tobytes()
        doc.close()
        return data
    return _make


@pytest.fixture
def render_pixel():
    """Return a helper sampling the RGB value at a relative page position."""
    def _render(pdf_bytes: bytes, page_index: int, rel_x: float = 0.5, rel_y: float = 0.5):
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            pix = doc[page_index].get_pixmap(alpha=False)
            image = np.frombuffer(pix.samples, dtype=np.uint8).reshape(
                pix.height, pix.stride
            )[:, :pix.width * 3].reshape(pix.height, pix.width, 3)
            x = min(pix.width - 1, int(pix.width * rel_x))
            y = min(pix.height - 1, int(pix.height * rel_y))
            return tuple(int(c) for c in image[y, x])
    return _render


@pytest.fixture
def page_sizes():
    """Return a helper listing (width, height) in points for every output page."""
    def _sizes(pdf_bytes: bytes):
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            return [(page.rect.width, page.rect.height) for page in doc]
    return _sizes
