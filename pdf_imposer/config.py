"""
config.py - Render geometry and layout settings.

All unit conversions go through a RenderGeometry value so the planner and
compositor can be exercised at any scale.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .errors import InvalidConfiguration

# Pages-per-sheet values offered for imposition
SUPPORTED_PAGES_PER_SHEET = (1, 2, 4, 6, 8, 10)

MIN_SPACING_MM = 1.0
DEFAULT_SPACING_MM = 7.0


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SMART = "smart"


class Flow(str, Enum):
    ROW = "row"
    COLUMN = "column"


@dataclass(frozen=True)
class RenderGeometry:
    """
    Sheet size and unit conversions.

    Pixel quantities are A4 points multiplied by ``scale``. A scale of 3
    renders a 72 DPI page at roughly 216 DPI.
    """
    a4_width_pts: float = 595.28
    a4_height_pts: float = 841.89
    scale: float = 3.0
    pts_per_mm: float = 72 / 25.4

    def __post_init__(self):
        if self.scale <= 0:
            raise InvalidConfiguration(f"Render scale must be positive, got {self.scale}")

    def sheet_pts(self, is_landscape: bool) -> Tuple[float, float]:
        """Output page size in PDF points as (width, height)."""
        if is_landscape:
            return self.a4_height_pts, self.a4_width_pts
        return self.a4_width_pts, self.a4_height_pts

    def sheet_px(self, is_landscape: bool) -> Tuple[int, int]:
        """Sheet raster size in pixels as (width, height), truncated."""
        width_pts, height_pts = self.sheet_pts(is_landscape)
        return int(width_pts * self.scale), int(height_pts * self.scale)

    def mm_to_px(self, mm: float) -> float:
        return mm * self.pts_per_mm * self.scale

    @property
    def border_width_px(self) -> int:
        # Half-up rounding: 4.5 px at scale 3 becomes 5
        return max(1, math.floor(1.5 * self.scale + 0.5))


DEFAULT_GEOMETRY = RenderGeometry()


@dataclass(frozen=True)
class LayoutConfig:
    """Imposition settings, snapshotted once per batch."""
    pages_per_sheet: int = 1
    orientation: Orientation = Orientation.SMART
    flow: Flow = Flow.ROW
    show_borders: bool = False
    spacing_mm: float = DEFAULT_SPACING_MM
    merge_files: bool = False

    def __post_init__(self):
        if self.pages_per_sheet not in SUPPORTED_PAGES_PER_SHEET:
            raise InvalidConfiguration(
                f"pages_per_sheet must be one of {SUPPORTED_PAGES_PER_SHEET}, "
                f"got {self.pages_per_sheet}"
            )
        if self.spacing_mm < MIN_SPACING_MM:
            raise InvalidConfiguration(
                f"spacing_mm must be at least {MIN_SPACING_MM}, got {self.spacing_mm}"
            )
        # Accept plain strings such as "smart" or "column"
        try:
            object.__setattr__(self, "orientation", Orientation(self.orientation))
            object.__setattr__(self, "flow", Flow(self.flow))
        except ValueError as e:
            raise InvalidConfiguration(str(e)) from e
