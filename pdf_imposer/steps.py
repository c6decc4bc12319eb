"""
steps.py - Ordered transformation steps and the layout split.

The user-ordered step list is split once per run around the first LAYOUT
step: pixel steps before it run on every page, steps after it run on the
composited sheet.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .errors import InvalidConfiguration
from .transforms import grayscale, invert

logger = logging.getLogger(__name__)


class StepKind(str, Enum):
    INVERT = "invert"
    GRAYSCALE = "grayscale"
    LAYOUT = "layout"


_PIXEL_TRANSFORMS = {
    StepKind.INVERT: invert,
    StepKind.GRAYSCALE: grayscale,
}


@dataclass(frozen=True)
class TransformationStep:
    """One entry of the user-ordered pipeline."""
    id: str
    kind: StepKind
    enabled: bool = True


@dataclass(frozen=True)
class SplitPipeline:
    """Enabled pixel steps before and after the layout pivot."""
    pre: Tuple[TransformationStep, ...] = ()
    post: Tuple[TransformationStep, ...] = ()


def split_pipeline(steps: Sequence[TransformationStep]) -> SplitPipeline:
    """
    Partition steps around the first LAYOUT step.

    The pivot counts even when disabled, since layout is always applied.
    With no LAYOUT step everything enabled runs before layout. LAYOUT
    steps after the pivot are ignored.
    """
    layout_idx = next(
        (i for i, step in enumerate(steps) if step.kind == StepKind.LAYOUT),
        None,
    )
    if layout_idx is None:
        before, after = list(steps), []
    else:
        before, after = list(steps[:layout_idx]), list(steps[layout_idx + 1:])

    extra = [step for step in after if step.kind == StepKind.LAYOUT]
    if extra:
        logger.warning(
            f"Ignoring {len(extra)} extra layout step(s); "
            f"only the first one splits the pipeline"
        )

    split = SplitPipeline(
        pre=tuple(s for s in before if s.enabled),
        post=tuple(s for s in after if s.enabled and s.kind != StepKind.LAYOUT),
    )
    logger.debug(
        f"Pipeline split: pre={[s.kind.value for s in split.pre]} "
        f"post={[s.kind.value for s in split.post]}"
    )
    return split


def apply_steps(raster: np.ndarray, steps: Iterable[TransformationStep]) -> np.ndarray:
    """Apply enabled pixel steps to raster in order."""
    for step in steps:
        if not step.enabled:
            continue
        transform = _PIXEL_TRANSFORMS.get(step.kind)
        if transform is not None:
            raster = transform(raster)
    return raster


def default_pipeline() -> List[TransformationStep]:
    """Invert and grayscale present but off, followed by layout."""
    return [
        TransformationStep("1", StepKind.INVERT, enabled=False),
        TransformationStep("2", StepKind.GRAYSCALE, enabled=False),
        TransformationStep("3", StepKind.LAYOUT, enabled=True),
    ]


def parse_pipeline(text: str) -> List[TransformationStep]:
    """
    Build an enabled step list from e.g. ``"grayscale,layout,invert"``.

    Blank entries are skipped. Unknown names raise InvalidConfiguration.
    """
    steps = []
    for name in text.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            kind = StepKind(name)
        except ValueError:
            valid = ", ".join(k.value for k in StepKind)
            raise InvalidConfiguration(
                f"Unknown pipeline step '{name}' (expected one of: {valid})"
            ) from None
        steps.append(TransformationStep(str(len(steps) + 1), kind))
    return steps
