"""Gradient extraction and non-maximum suppression.

The gradient stage produces an int32 magnitude raster and a uint8
orientation raster. Non-max suppression then thins the orientation raster
in place: weak pixels become EMPTY and local maxima across the edge gain
the THIN flag.
"""

import numpy as np

from qyoofinder.core.kernels import convolve, sobel_x, sobel_y
from qyoofinder.domain.raster import BIN_MASK, THIN_FLAG, Orientation, validate_raster

# Neighbour pair compared across the edge, per orientation bin
SUPPRESSION_NEIGHBOURS: dict[Orientation, tuple[tuple[int, int], tuple[int, int]]] = {
    Orientation.DEG_0: ((1, 0), (-1, 0)),
    Orientation.DEG_45: ((1, 1), (-1, -1)),
    Orientation.DEG_90: ((0, 1), (0, -1)),
    Orientation.DEG_135: ((-1, 1), (1, -1)),
}

_BIN_EDGES = (22.5, 67.5, 112.5, 157.5)
_BIN_LOOKUP = np.array(
    [Orientation.DEG_0, Orientation.DEG_45, Orientation.DEG_90, Orientation.DEG_135, Orientation.DEG_0],
    dtype=np.uint8,
)


def quantize_angle(angle: np.ndarray) -> np.ndarray:
    """Map angles in degrees (any range) to orientation bins.

    Angles are reduced modulo 180 first; [157.5, 180) wraps to DEG_0.
    """
    reduced = np.mod(angle, 180.0)
    return _BIN_LOOKUP[np.digitize(reduced, _BIN_EDGES)]


def gradient_and_orientation(smoothed: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Compute L1 gradient magnitude and quantized orientation.

    Args:
        smoothed: 8-bit grayscale raster indexed ``[y, x]``

    Returns:
        Tuple of (magnitude int32, orientation uint8). The one pixel
        border has zero magnitude and EMPTY orientation; a pixel is EMPTY
        exactly when its magnitude is zero.

    Raises:
        InvalidRasterError: If the raster is smaller than 3x3
    """
    validate_raster(smoothed, min_size=3)
    gx = convolve(smoothed, sobel_x())
    gy = convolve(smoothed, sobel_y())
    magnitude = (np.abs(gx) + np.abs(gy)).astype(np.int32)

    orientation = np.zeros(smoothed.shape, dtype=np.uint8)
    edge = magnitude > 0
    angle = np.degrees(np.arctan2(gy[edge], gx[edge]))
    orientation[edge] = quantize_angle(angle)
    return magnitude, orientation


def non_max_suppress(magnitude: np.ndarray, orientation: np.ndarray, threshold: int) -> np.ndarray:
    """Thin edges in place on the orientation raster.

    Interior pixels below ``threshold`` become EMPTY. The others get the
    THIN flag when their magnitude is strictly greater than both
    neighbours across the edge, and lose it otherwise. Running twice with
    the same threshold changes nothing.

    Args:
        magnitude: Gradient magnitude raster
        orientation: Orientation raster, modified in place
        threshold: Minimum magnitude kept

    Returns:
        The orientation raster
    """
    height, width = magnitude.shape
    if height < 3 or width < 3:
        return orientation

    mag = magnitude[1:-1, 1:-1]
    inner = orientation[1:-1, 1:-1]
    bins = inner & BIN_MASK
    thin = np.zeros(mag.shape, dtype=bool)

    for orient, ((ax, ay), (bx, by)) in SUPPRESSION_NEIGHBOURS.items():
        first = magnitude[1 + ay : height - 1 + ay, 1 + ax : width - 1 + ax]
        second = magnitude[1 + by : height - 1 + by, 1 + bx : width - 1 + bx]
        thin |= (bins == orient) & (mag > first) & (mag > second)

    weak = mag < threshold
    inner[...] = np.where(weak, Orientation.EMPTY, np.where(thin, bins | THIN_FLAG, bins))
    return orientation
