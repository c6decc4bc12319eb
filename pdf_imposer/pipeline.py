"""
pipeline.py - Batch imposition pipeline.

Pipeline per merge group:
1. Rasterize every page of every contributing document, in order
2. Apply pre-layout steps to each page of a chunk
3. Pick sheet orientation and composite the chunk onto an A4 sheet
4. Apply post-layout steps to the sheet, then stroke borders
5. Compress as JPEG and append to the group's output PDF

Everything runs sequentially. The first failure aborts the whole batch.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from .compositor import composite, draw_borders
from .compression import compress_sheet
from .config import DEFAULT_GEOMETRY, LayoutConfig, RenderGeometry
from .errors import InvalidConfiguration
from .layout import plan_sheet, resolve_orientation
from .pdf_writer import PDFWriter
from .rasterize import open_document, rasterize_page
from .steps import TransformationStep, apply_steps, default_pipeline, split_pipeline

logger = logging.getLogger(__name__)


class BatchState(str, Enum):
    IDLE = "idle"
    RASTERIZING = "rasterizing"
    COMPOSITING = "compositing"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BatchStats:
    """Statistics for a batch run."""
    input_count: int = 0
    page_count: int = 0
    sheet_count: int = 0
    output_count: int = 0

    input_size: int = 0
    output_size: int = 0
    total_time: float = 0.0

    @property
    def pages_per_sheet_actual(self) -> float:
        if self.sheet_count == 0:
            return 0
        return self.page_count / self.sheet_count

    def summary(self) -> str:
        return (
            f"Inputs:  {self.input_count} file(s) ({self.input_size:,} bytes)\n"
            f"Outputs: {self.output_count} file(s) ({self.output_size:,} bytes)\n"
            f"Pages: {self.page_count} -> {self.sheet_count} sheet(s) "
            f"({self.pages_per_sheet_actual:.1f} per sheet)\n"
            f"Time: {self.total_time:.1f}s"
        )


class BatchRun:
    """
    One imposition run over an ordered list of PDF buffers.

    A run is single-use: create a new one for each batch.
    """

    def __init__(
        self,
        steps: Optional[Sequence[TransformationStep]] = None,
        layout: Optional[LayoutConfig] = None,
        geometry: RenderGeometry = DEFAULT_GEOMETRY,
        progress_callback: Optional[Callable[[int, int], None]] = None
    ):
        self.layout = layout if layout is not None else LayoutConfig()
        self.geometry = geometry
        self.split = split_pipeline(steps if steps is not None else default_pipeline())
        self.progress_callback = progress_callback

        self.state = BatchState.IDLE
        self.stats = BatchStats()

    def run(self, inputs: Sequence[bytes]) -> List[bytes]:
        """
        Process all inputs.

        Returns:
            One PDF buffer when merging, otherwise one per input in order
        """
        if self.state != BatchState.IDLE:
            raise RuntimeError(f"Batch run already used (state: {self.state.value})")

        start_time = time.time()
        self.stats.input_count = len(inputs)
        self.stats.input_size = sum(len(data) for data in inputs)

        logger.info(
            f"Processing {len(inputs)} document(s): "
            f"{self.layout.pages_per_sheet} per sheet, "
            f"{self.layout.orientation.value}, merge={self.layout.merge_files}"
        )

        try:
            if not inputs:
                raise InvalidConfiguration("No input documents")

            # Fail on impossible spacing before any rendering
            plan_sheet(self.layout, False, self.geometry)
            plan_sheet(self.layout, True, self.geometry)

            if self.layout.merge_files:
                pages = []
                for i, data in enumerate(inputs):
                    pages.extend(self._rasterize_document(data, i))
                    self._report(i + 1, len(inputs))
                outputs = [self._process_group(pages, "merged document")]
            else:
                outputs = []
                for i, data in enumerate(inputs):
                    pages = self._rasterize_document(data, i)
                    outputs.append(self._process_group(pages, f"document {i + 1}"))
                    self._report(i + 1, len(inputs))
        except Exception as e:
            self.state = BatchState.FAILED
            logger.error(f"Batch failed: {e}")
            raise

        self.state = BatchState.DONE
        self.stats.output_count = len(outputs)
        self.stats.output_size = sum(len(data) for data in outputs)
        self.stats.total_time = time.time() - start_time

        logger.info(f"\n{self.stats.summary()}")
        return outputs

    def _report(self, current: int, total: int):
        if self.progress_callback:
            self.progress_callback(current, total)

    def _rasterize_document(self, data: bytes, index: int) -> List[np.ndarray]:
        """Rasterize every page of one input, in page order."""
        self.state = BatchState.RASTERIZING
        label = f"document {index + 1}"

        with open_document(data, label) as doc:
            pages = [
                rasterize_page(doc, page_number, self.geometry.scale)
                for page_number in range(1, doc.page_count + 1)
            ]

        self.stats.page_count += len(pages)
        logger.info(f"Rasterized {label}: {len(pages)} pages")
        return pages

    def _process_group(self, pages: List[np.ndarray], label: str) -> bytes:
        """
        Impose one merge group and serialize it.

        Consumes pages: each chunk is removed from the list before it
        is transformed and drawn.
        """
        pages_per_sheet = self.layout.pages_per_sheet
        if not pages:
            logger.warning(f"{label} has no pages; writing an empty PDF")

        writer = PDFWriter()
        try:
            sheet_num = 0
            while pages:
                chunk = pages[:pages_per_sheet]
                del pages[:pages_per_sheet]
                sheet_num += 1
                compressed = self._build_sheet(chunk, sheet_num)
                writer.add_sheet(compressed)

            self.state = BatchState.ENCODING
            data = writer.to_bytes()
        finally:
            writer.close()

        self.stats.sheet_count += sheet_num
        logger.info(f"Finished {label}: {sheet_num} sheet(s), {len(data):,} bytes")
        return data

    def _build_sheet(self, chunk: List[np.ndarray], sheet_num: int):
        self.state = BatchState.COMPOSITING
        chunk = [apply_steps(page, self.split.pre) for page in chunk]

        page_sizes = [(page.shape[1], page.shape[0]) for page in chunk]
        is_landscape = resolve_orientation(self.layout, page_sizes, self.geometry)
        plan = plan_sheet(self.layout, is_landscape, self.geometry)

        sheet, rects = composite(chunk, plan, self.layout.flow)
        sheet = apply_steps(sheet, self.split.post)
        if self.layout.show_borders:
            draw_borders(sheet, rects, self.geometry.border_width_px)

        self.state = BatchState.ENCODING
        width_pts, height_pts = self.geometry.sheet_pts(plan.is_landscape)
        return compress_sheet(sheet, sheet_num, width_pts, height_pts)


def process_pdfs(
    inputs: Sequence[bytes],
    steps: Optional[Sequence[TransformationStep]] = None,
    layout: Optional[LayoutConfig] = None,
    geometry: RenderGeometry = DEFAULT_GEOMETRY,
    progress_callback: Optional[Callable[[int, int], None]] = None
) -> List[bytes]:
    """
    Transform and impose a batch of PDFs.

    Args:
        inputs: PDF byte buffers in user order
        steps: Ordered transformation steps (default: layout only)
        layout: Imposition settings
        geometry: Sheet size and render scale
        progress_callback: Optional callback(current, total) per input document

    Returns:
        Output PDF buffers: one when merging, otherwise one per input
    """
    run = BatchRun(steps, layout, geometry, progress_callback)
    return run.run(inputs)
