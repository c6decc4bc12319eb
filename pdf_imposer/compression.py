"""
compression.py - Sheet compression for PDF embedding.

Every sheet is stored as a single JPEG at a fixed high quality.
Sheets with no color at all are stored as 8-bit grayscale.
"""

import io
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from .errors import EncodingFailure

logger = logging.getLogger(__name__)

# Fixed JPEG quality for all sheets
JPEG_QUALITY = 95


@dataclass
class CompressedSheet:
    """Compressed sheet data ready for PDF embedding."""
    sheet_num: int
    image_data: bytes
    width: int
    height: int
    page_width_pts: float
    page_height_pts: float
    is_color: bool

    @property
    def total_size(self) -> int:
        return len(self.image_data)


def is_grayscale_image(image: np.ndarray) -> bool:
    """
    Check if image carries no color information.

    True only when R, G and B are identical everywhere, e.g. after a
    grayscale step. Nearly-gray color pages stay color.
    """
    if len(image.shape) != 3:
        return True  # Already single channel

    red = image[..., 0]
    return bool(np.array_equal(red, image[..., 1]) and np.array_equal(red, image[..., 2]))


def compress_jpeg(image: np.ndarray, quality: int = JPEG_QUALITY) -> Tuple[bytes, int, int, bool]:
    """
    Compress image as JPEG.

    Args:
        image: RGB, RGBA or grayscale numpy array
        quality: JPEG quality (1-100)

    Returns:
        (jpeg_bytes, width, height, is_color)
    """
    height, width = image.shape[:2]
    is_color = not is_grayscale_image(image)

    try:
        if len(image.shape) == 2:
            img = Image.fromarray(image)
        elif not is_color:
            # Channels are identical, any one of them is the gray plane
            gray = np.ascontiguousarray(image[..., 0])
            img = Image.fromarray(gray)
        else:
            img = Image.fromarray(np.ascontiguousarray(image[..., :3]))

        buffer = io.BytesIO()
        img.save(
            buffer,
            format="JPEG",
            quality=quality,
            optimize=True,
        )
    except (OSError, ValueError) as e:
        raise EncodingFailure(f"JPEG encoding of {width}x{height} image failed: {e}") from e

    return buffer.getvalue(), width, height, is_color


def compress_sheet(
    sheet: np.ndarray,
    sheet_num: int,
    page_width_pts: float,
    page_height_pts: float,
    quality: int = JPEG_QUALITY
) -> CompressedSheet:
    """
    Compress a composited sheet.

    Args:
        sheet: Sheet raster (RGB numpy array)
        sheet_num: Sheet number within its output document
        page_width_pts: Output page width in PDF points
        page_height_pts: Output page height in PDF points
        quality: JPEG quality

    Returns:
        CompressedSheet with image data
    """
    jpeg_data, width, height, is_color = compress_jpeg(sheet, quality=quality)

    logger.info(
        f"Sheet {sheet_num}: {len(jpeg_data):,} bytes | "
        f"{width}x{height} | color={is_color} | q={quality}"
    )

    return CompressedSheet(
        sheet_num=sheet_num,
        image_data=jpeg_data,
        width=width,
        height=height,
        page_width_pts=page_width_pts,
        page_height_pts=page_height_pts,
        is_color=is_color,
    )
