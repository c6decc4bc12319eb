"""
PDF Imposer - raster-based PDF transformation and N-up imposition.

Pages are rasterized, optionally inverted or converted to grayscale,
placed several-per-sheet on A4, and written back out as image-only PDFs.
"""

__version__ = "1.0.0"
__author__ = "PDF Imposer"

from .config import DEFAULT_GEOMETRY, Flow, LayoutConfig, Orientation, RenderGeometry
from .errors import (
    DocumentOpenFailure,
    EncodingFailure,
    ImpositionError,
    InvalidConfiguration,
    PageOutOfRange,
    RasterContextFailure,
)
from .pipeline import BatchRun, BatchState, process_pdfs
from .steps import StepKind, TransformationStep, default_pipeline, parse_pipeline

__all__ = [
    "DEFAULT_GEOMETRY",
    "BatchRun",
    "BatchState",
    "DocumentOpenFailure",
    "EncodingFailure",
    "Flow",
    "ImpositionError",
    "InvalidConfiguration",
    "LayoutConfig",
    "Orientation",
    "PageOutOfRange",
    "RasterContextFailure",
    "RenderGeometry",
    "StepKind",
    "TransformationStep",
    "default_pipeline",
    "parse_pipeline",
    "process_pdfs",
]
