"""Core detection algorithms for qyoofinder.

This module contains the pipeline stages:

- Kernels and integer convolution (Gaussian, Sobel, disc masks)
- Gradient magnitude, orientation and non-maximum suppression
- Contour tracing over thinned edges
- Geometric validation and affine fitting of marker outlines
- Dot grid decoding

All stages are single-threaded and keep no state between images.

Key functions:
- gradient_and_orientation: Sobel gradient and quantized orientation
- non_max_suppress: Thin edges in place
- decimate: Simplify a pixel chain
- proper_atan: Direction of a vector in degrees

Key classes:
- ContourTracer: Follows thin edges into contours
- ContourAnalyzer: Validates contours and fits the marker transform
- DotDecoder: Reads the dot grid of a validated marker
- MarkerProcessor: Runs the full pipeline on rasters and image files
"""

from qyoofinder.core.analyzer import ContourAnalyzer, decimate
from qyoofinder.core.decoder import DotDecoder, DotReading
from qyoofinder.core.edges import gradient_and_orientation, non_max_suppress
from qyoofinder.core.geometry import (
    dist2_to_line,
    dist2_to_segment,
    line_intersection,
    proper_atan,
)
from qyoofinder.core.processor import (
    DetectionResult,
    EdgeMaps,
    MarkerProcessor,
    ScanResult,
)
from qyoofinder.core.tracer import ContourTracer, TraceResult, is_crowded

__all__ = [
    "ContourAnalyzer",
    "ContourTracer",
    "DetectionResult",
    "DotDecoder",
    "DotReading",
    "EdgeMaps",
    "MarkerProcessor",
    "ScanResult",
    "TraceResult",
    "decimate",
    "dist2_to_line",
    "dist2_to_segment",
    "gradient_and_orientation",
    "is_crowded",
    "line_intersection",
    "non_max_suppress",
    "proper_atan",
]
