"""
transforms.py - Per-pixel color transforms.

Both transforms work on the RGB channels of an (H, W, 3|4) uint8 array
in place and return the same array. Alpha, when present, is left alone.
"""

import numpy as np

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def invert(raster: np.ndarray) -> np.ndarray:
    """Replace every RGB channel value c with 255 - c."""
    raster[..., :3] = 255 - raster[..., :3]
    return raster


def grayscale(raster: np.ndarray) -> np.ndarray:
    """Set R, G and B to the rounded BT.601 luma of the pixel."""
    rgb = raster[..., :3].astype(np.float64)
    luma = (
        rgb[..., 0] * LUMA_WEIGHTS[0]
        + rgb[..., 1] * LUMA_WEIGHTS[1]
        + rgb[..., 2] * LUMA_WEIGHTS[2]
    )
    gray = np.clip(np.rint(luma), 0, 255).astype(np.uint8)
    raster[..., :3] = gray[..., np.newaxis]
    return raster
