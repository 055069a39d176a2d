"""Image I/O layer for qyoofinder.

This module handles reading photographs and writing debug images using
Pillow. It keeps file formats out of the detection core, which only sees
numpy rasters.

Key classes:
- ImageReader: Load images as grayscale rasters, rotate and downscale them
- ImageWriter: Save intermediate rasters and detection overlays
"""

from qyoofinder.io.reader import ImageReader
from qyoofinder.io.writer import ImageWriter

__all__ = [
    "ImageReader",
    "ImageWriter",
]
