"""Domain models for qyoofinder.

This module contains the types passed between pipeline stages:

- Point: A pixel coordinate
- Contour: A traced edge chain with its fitted geometry and code
- AffineTransform: 3x3 homogeneous transform
- MarkerModel: Canonical marker geometry and code space
- Orientation: Quantized gradient bin stored in orientation rasters
"""

from qyoofinder.domain.contour import Contour, Point, RejectionStage
from qyoofinder.domain.marker import ALPHABET, MarkerModel
from qyoofinder.domain.raster import (
    BIN_MASK,
    THIN_FLAG,
    Orientation,
    is_thin,
    orientation_bin,
    validate_raster,
)
from qyoofinder.domain.transform import AffineTransform

__all__: list[str] = [
    "ALPHABET",
    "BIN_MASK",
    "THIN_FLAG",
    "AffineTransform",
    "Contour",
    "MarkerModel",
    "Orientation",
    "Point",
    "RejectionStage",
    "is_thin",
    "orientation_bin",
    "validate_raster",
]
