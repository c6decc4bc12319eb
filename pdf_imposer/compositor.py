"""
compositor.py - Draw a chunk of page rasters onto one sheet.

The sheet is an RGB numpy array on a white background. Pages are resized
with OpenCV into the rectangles computed by the sheet plan.
"""

import logging
from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .config import Flow
from .errors import RasterContextFailure
from .layout import PlacedRect, SheetPlan

logger = logging.getLogger(__name__)

# Outline color for page borders (RGB)
BORDER_COLOR = (0x18, 0x18, 0x1B)


def new_sheet(width: int, height: int) -> np.ndarray:
    """Allocate an opaque white RGB sheet."""
    try:
        return np.full((height, width, 3), 255, dtype=np.uint8)
    except (MemoryError, ValueError) as e:
        raise RasterContextFailure(f"Could not allocate {width}x{height} sheet: {e}") from e


def _pixel_box(rect: PlacedRect, sheet_width: int, sheet_height: int) -> Tuple[int, int, int, int]:
    """Round a placed rect to pixel bounds (x0, y0, x1, y1) clipped to the sheet."""
    x0 = max(0, int(round(rect.x)))
    y0 = max(0, int(round(rect.y)))
    x1 = min(sheet_width, x0 + max(1, int(round(rect.width))))
    y1 = min(sheet_height, y0 + max(1, int(round(rect.height))))
    return x0, y0, x1, y1


def draw_page(sheet: np.ndarray, page: np.ndarray, rect: PlacedRect):
    """Resize page into rect and paste it onto the sheet."""
    sheet_height, sheet_width = sheet.shape[:2]
    x0, y0, x1, y1 = _pixel_box(rect, sheet_width, sheet_height)
    if x1 <= x0 or y1 <= y0:
        return

    # Alpha is treated as opaque
    rgb = np.ascontiguousarray(page[..., :3])
    target_w, target_h = x1 - x0, y1 - y0
    shrinking = target_w < rgb.shape[1] or target_h < rgb.shape[0]
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR

    try:
        resized = cv2.resize(rgb, (target_w, target_h), interpolation=interpolation)
    except cv2.error as e:
        raise RasterContextFailure(f"Could not scale page to {target_w}x{target_h}: {e}") from e

    sheet[y0:y1, x0:x1] = resized


def composite(
    chunk: Sequence[np.ndarray],
    plan: SheetPlan,
    flow: Flow
) -> Tuple[np.ndarray, List[PlacedRect]]:
    """
    Lay out a chunk of pages on a fresh sheet.

    Args:
        chunk: Page rasters, at most one per grid cell
        plan: Sheet size, grid and spacing
        flow: Row-major or column-major cell order

    Returns:
        Tuple of (sheet raster, placed rect per page in chunk order)
    """
    sheet = new_sheet(plan.width, plan.height)
    rects = []

    for idx, page in enumerate(chunk):
        page_height, page_width = page.shape[:2]
        rect = plan.place(idx, page_width, page_height, flow)
        draw_page(sheet, page, rect)
        rects.append(rect)

    logger.debug(
        f"Composited {len(chunk)} page(s) on {plan.width}x{plan.height} sheet "
        f"({plan.grid.cols}x{plan.grid.rows}, {flow.value})"
    )
    return sheet, rects


def draw_borders(sheet: np.ndarray, rects: Sequence[PlacedRect], width: int) -> np.ndarray:
    """Stroke an outline around each placed rect."""
    sheet_height, sheet_width = sheet.shape[:2]
    for rect in rects:
        x0, y0, x1, y1 = _pixel_box(rect, sheet_width, sheet_height)
        cv2.rectangle(sheet, (x0, y0), (x1 - 1, y1 - 1), BORDER_COLOR, thickness=width)
    return sheet
