"""Orientation sample encoding and raster validation.

Orientation rasters are ``uint8`` arrays. The low bits hold the quantized
gradient bin; ``THIN_FLAG`` marks a pixel that survived non-max
suppression. THIN is only ever set together with a non-EMPTY bin.
"""

from enum import IntEnum

import numpy as np

from qyoofinder.exceptions import InvalidRasterError

THIN_FLAG = 0x80
BIN_MASK = 0x7F


class Orientation(IntEnum):
    """Quantized gradient orientation of a pixel.

    The angle is the gradient direction reduced modulo 180 degrees, so
    DEG_0 marks a vertical edge (gradient along x) and DEG_90 a
    horizontal edge (gradient along y).
    """

    EMPTY = 0
    DEG_0 = 1
    DEG_45 = 2
    DEG_90 = 3
    DEG_135 = 4


def orientation_bin(sample: int) -> Orientation:
    """Return the orientation bin of a sample with the THIN flag removed."""
    return Orientation(sample & BIN_MASK)


def is_thin(sample: int) -> bool:
    """Return True if the sample carries the THIN flag."""
    return bool(sample & THIN_FLAG)


def validate_raster(raster: np.ndarray, min_size: int = 1) -> tuple[int, int]:
    """Check that an array is a usable 2D raster.

    Args:
        raster: Array indexed ``[y, x]``
        min_size: Minimum accepted width and height

    Returns:
        Tuple of (width, height)

    Raises:
        InvalidRasterError: If the array is not 2D or too small
    """
    if raster.ndim != 2:
        shape = raster.shape + (0, 0)
        raise InvalidRasterError(
            int(shape[1]), int(shape[0]), f"expected 2 dimensions, got {raster.ndim}"
        )
    height, width = raster.shape
    if width <= 0 or height <= 0:
        raise InvalidRasterError(width, height, "dimensions must be positive")
    if width < min_size or height < min_size:
        raise InvalidRasterError(width, height, f"smaller than {min_size}x{min_size}")
    return width, height
