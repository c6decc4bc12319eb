"""
layout.py - Sheet geometry for N-up imposition.

Pure functions of page sizes, layout settings and render geometry:
grid lookup, slot and margin sizes, aspect-fit placement and the
"smart" orientation choice. Nothing here touches pixels.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import Flow, LayoutConfig, Orientation, RenderGeometry
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

# pages_per_sheet -> (cols, rows) on a portrait sheet
PORTRAIT_GRIDS = {
    1: (1, 1),
    2: (1, 2),
    4: (2, 2),
    6: (2, 3),
    8: (2, 4),
    10: (2, 5),
}

# pages_per_sheet -> (cols, rows) on a landscape sheet
LANDSCAPE_GRIDS = {
    1: (1, 1),
    2: (2, 1),
    4: (2, 2),
    6: (3, 2),
    8: (4, 2),
    10: (5, 2),
}


@dataclass(frozen=True)
class GridShape:
    cols: int
    rows: int


@dataclass(frozen=True)
class PlacedRect:
    """Drawn position of one page, in sheet pixels."""
    x: float
    y: float
    width: float
    height: float


def grid_for(pages_per_sheet: int, is_landscape: bool) -> GridShape:
    """Grid for a sheet; unlisted counts fall back to a single column."""
    table = LANDSCAPE_GRIDS if is_landscape else PORTRAIT_GRIDS
    cols, rows = table.get(pages_per_sheet, (1, pages_per_sheet))
    return GridShape(cols=cols, rows=rows)


def fit_size(
    page_width: float,
    page_height: float,
    avail_width: float,
    avail_height: float
) -> Tuple[float, float]:
    """
    Largest (width, height) with the page's aspect ratio inside the box.

    Fits by width when the page is relatively wider than the box,
    by height otherwise.
    """
    page_ratio = page_width / page_height
    avail_ratio = avail_width / avail_height
    if page_ratio > avail_ratio:
        return avail_width, avail_width / page_ratio
    return avail_height * page_ratio, avail_height


def cell_for(idx: int, grid: GridShape, flow: Flow) -> Tuple[int, int]:
    """(col, row) of the idx-th page of a chunk."""
    if flow == Flow.ROW:
        return idx % grid.cols, idx // grid.cols
    return idx // grid.rows, idx % grid.rows


@dataclass(frozen=True)
class SheetPlan:
    """Geometry of one sheet: size, grid and per-cell drawing area."""
    is_landscape: bool
    grid: GridShape
    width: int
    height: int
    spacing_px: float

    @property
    def slot_width(self) -> float:
        return self.width / self.grid.cols

    @property
    def slot_height(self) -> float:
        return self.height / self.grid.rows

    @property
    def available_width(self) -> float:
        return self.slot_width - 2 * self.spacing_px

    @property
    def available_height(self) -> float:
        return self.slot_height - 2 * self.spacing_px

    def place(self, idx: int, page_width: int, page_height: int, flow: Flow) -> PlacedRect:
        """Aspect-fit and center page idx inside its margin-reduced cell."""
        col, row = cell_for(idx, self.grid, flow)
        draw_w, draw_h = fit_size(
            page_width, page_height, self.available_width, self.available_height
        )
        x = col * self.slot_width + self.spacing_px + (self.available_width - draw_w) / 2
        y = row * self.slot_height + self.spacing_px + (self.available_height - draw_h) / 2
        return PlacedRect(x=x, y=y, width=draw_w, height=draw_h)

    def fitted_area(self, page_sizes: Sequence[Tuple[int, int]]) -> float:
        """Total drawn area of the given (width, height) pages."""
        total = 0.0
        for page_width, page_height in page_sizes:
            draw_w, draw_h = fit_size(
                page_width, page_height, self.available_width, self.available_height
            )
            total += draw_w * draw_h
        return total


def plan_sheet(
    layout: LayoutConfig,
    is_landscape: bool,
    geometry: RenderGeometry
) -> SheetPlan:
    """Build the sheet plan for one orientation."""
    width, height = geometry.sheet_px(is_landscape)
    plan = SheetPlan(
        is_landscape=is_landscape,
        grid=grid_for(layout.pages_per_sheet, is_landscape),
        width=width,
        height=height,
        spacing_px=geometry.mm_to_px(layout.spacing_mm),
    )
    if plan.available_width <= 0 or plan.available_height <= 0:
        raise InvalidConfiguration(
            f"Spacing of {layout.spacing_mm} mm leaves no room for "
            f"{layout.pages_per_sheet} pages per sheet"
        )
    return plan


def resolve_orientation(
    layout: LayoutConfig,
    page_sizes: Sequence[Tuple[int, int]],
    geometry: RenderGeometry
) -> bool:
    """
    Decide whether a chunk goes on a landscape sheet.

    Smart orientation follows a single page's own shape, and otherwise
    picks the orientation that draws the chunk larger. Equal areas stay
    portrait.
    """
    if layout.orientation == Orientation.LANDSCAPE:
        return True
    if layout.orientation == Orientation.PORTRAIT:
        return False

    if layout.pages_per_sheet == 1:
        page_width, page_height = page_sizes[0]
        return page_width > page_height

    landscape_area = plan_sheet(layout, True, geometry).fitted_area(page_sizes)
    portrait_area = plan_sheet(layout, False, geometry).fitted_area(page_sizes)
    logger.debug(
        f"Smart orientation: landscape={landscape_area:,.0f}px "
        f"portrait={portrait_area:,.0f}px"
    )
    return landscape_area > portrait_area
