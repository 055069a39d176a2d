"""Whole-raster intensity and resampling operations."""

import numpy as np

from qyoofinder.domain.transform import AffineTransform


def contrast_stretch(raster: np.ndarray) -> np.ndarray:
    """Stretch intensities so the darkest pixel is 0 and the brightest 255.

    A uniform raster is returned unchanged (as a copy).
    """
    lo = int(raster.min())
    hi = int(raster.max())
    if hi == lo:
        return raster.astype(np.uint8, copy=True)
    scale = 256.0 / (hi - lo)
    stretched = ((raster.astype(np.float64) - lo) * scale).astype(np.int64)
    return np.clip(stretched, 0, 255).astype(np.uint8)


def resample_affine(
    source: np.ndarray,
    to_source: AffineTransform,
    width: int,
    height: int,
) -> np.ndarray:
    """Build a raster by sampling ``source`` through a transform.

    Args:
        source: Raster indexed ``[y, x]``
        to_source: Maps output pixel coordinates to source coordinates
        width: Output width
        height: Output height

    Returns:
        Output raster of ``source.dtype``; nearest-pixel sampling with
        coordinates clamped to the source edges
    """
    ys, xs = np.mgrid[0:height, 0:width]
    grid = np.stack([xs.ravel(), ys.ravel()], axis=1).astype(np.float64)
    mapped = to_source.apply_many(grid)
    sx = np.clip(np.floor(mapped[:, 0] + 0.5), 0, source.shape[1] - 1).astype(np.intp)
    sy = np.clip(np.floor(mapped[:, 1] + 0.5), 0, source.shape[0] - 1).astype(np.intp)
    return source[sy, sx].reshape(height, width)
