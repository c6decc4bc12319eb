"""
pdf_writer.py - PDF assembly from compressed sheets.

Each page is exactly one JPEG image (DCTDecode) scaled to fill the page.
No text layers, no masks, no layering.
"""

import io
import logging

import pikepdf
from pikepdf import Pdf, Stream, Dictionary, Name

from .compression import CompressedSheet
from .errors import EncodingFailure

logger = logging.getLogger(__name__)


class PDFWriter:
    """
    Accumulates sheets into one output document.

    One writer is owned per merge group and discarded after serialization.
    """

    def __init__(self):
        self.pdf = Pdf.new()
        self.sheet_count = 0

    def embed_image(self, compressed: CompressedSheet) -> Stream:
        """Create an image XObject from JPEG data."""
        colorspace = Name.DeviceRGB if compressed.is_color else Name.DeviceGray

        image_dict = Dictionary({
            '/Type': Name.XObject,
            '/Subtype': Name.Image,
            '/Width': compressed.width,
            '/Height': compressed.height,
            '/ColorSpace': colorspace,
            '/BitsPerComponent': 8,
            '/Filter': Name.DCTDecode,
        })
        return self.pdf.make_indirect(Stream(self.pdf, compressed.image_data, image_dict))

    def add_page(self, width_pts: float, height_pts: float) -> pikepdf.Page:
        """Append a blank page of the given size in points."""
        self.pdf.add_blank_page(page_size=(width_pts, height_pts))
        return self.pdf.pages[-1]

    def draw_image(
        self,
        page: pikepdf.Page,
        image: Stream,
        x: float,
        y: float,
        width: float,
        height: float
    ):
        """Make image the page content, placed at (x, y) with the given size."""
        xobjects = Dictionary({})
        xobjects['/Im0'] = image
        page.Resources = Dictionary({'/XObject': xobjects})

        content = f"""
q
{width:.4f} 0 0 {height:.4f} {x:.4f} {y:.4f} cm
/Im0 Do
Q
"""
        page.Contents = self.pdf.make_indirect(
            Stream(self.pdf, content.strip().encode("ascii"))
        )

    def add_sheet(self, compressed: CompressedSheet):
        """Add a sheet as a full-page image."""
        image = self.embed_image(compressed)
        page = self.add_page(compressed.page_width_pts, compressed.page_height_pts)
        self.draw_image(
            page, image, 0, 0, compressed.page_width_pts, compressed.page_height_pts
        )

        self.sheet_count += 1

        mode = "color" if compressed.is_color else "gray"
        logger.debug(
            f"Added sheet {compressed.sheet_num}: "
            f"{compressed.total_size:,} bytes ({mode})"
        )

    def to_bytes(self) -> bytes:
        """Serialize the document."""
        buffer = io.BytesIO()
        try:
            self.pdf.save(
                buffer,
                compress_streams=True,
                object_stream_mode=pikepdf.ObjectStreamMode.generate
            )
        except (pikepdf.PdfError, OSError) as e:
            raise EncodingFailure(f"PDF serialization failed: {e}") from e

        data = buffer.getvalue()
        logger.info(f"Serialized {self.sheet_count} sheets ({len(data):,} bytes)")
        return data

    def close(self):
        self.pdf.close()
