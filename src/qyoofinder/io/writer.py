"""Debug image writer.

This module provides the ImageWriter class for saving intermediate rasters
(edge maps, resampled dot cells) and detection overlays as PNG files next
to a chosen output directory.
"""

import math
from collections.abc import Iterable
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from qyoofinder.domain.contour import Contour
from qyoofinder.exceptions import ImageSaveError

TRACE_COLOR = (255, 64, 64)
OUTLINE_COLOR = (64, 200, 64)
CORNER_COLOR = (64, 64, 255)

# Samples along the canonical outline when drawing a fitted marker
_OUTLINE_STEPS = 48


class ImageWriter:
    """Writes debug images for one input image.

    Example:
        writer = ImageWriter(Path("debug"), Path("photo.jpg"))
        writer.save_raster(maps.smoothed, "smoothed")
        writer.save_overlay(gray, result.contours)
    """

    def __init__(self, output_dir: Path, input_path: Path) -> None:
        """Initialize the writer.

        Args:
            output_dir: Directory receiving the images (created on first save)
            input_path: Image the debug output belongs to, used for naming
        """
        self._output_dir = output_dir
        self._input_path = input_path

    def get_debug_path(self, label: str) -> Path:
        """Output path for a debug image.

        Converts: photo.jpg + "edges" -> <output_dir>/photo-edges.png
        """
        return self._output_dir / f"{self._input_path.stem}-{label}.png"

    def _save(self, image: Image.Image, label: str) -> Path:
        path = self.get_debug_path(label)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            image.save(path, format="PNG")
        except OSError as e:
            raise ImageSaveError(str(path), str(e)) from e
        return path

    def save_raster(self, raster: np.ndarray, label: str) -> Path:
        """Save a raster, scaling its range to 8 bits when needed.

        Returns:
            Path of the written file

        Raises:
            ImageSaveError: If the file cannot be written
        """
        data = np.asarray(raster)
        if data.dtype != np.uint8:
            peak = float(np.abs(data).max()) or 1.0
            data = (np.abs(data) * (255.0 / peak)).astype(np.uint8)
        return self._save(Image.fromarray(data), label)

    @staticmethod
    def render_overlay(raster: np.ndarray, contours: Iterable[Contour]) -> Image.Image:
        """Draw traced points, fitted outlines and corners over a raster."""
        image = Image.fromarray(np.asarray(raster, dtype=np.uint8)).convert("RGB")
        draw = ImageDraw.Draw(image)
        for contour in contours:
            for p in contour.orig_points or contour.points:
                draw.point((p.x, p.y), fill=TRACE_COLOR)
            if not contour.valid or contour.transform is None:
                continue
            draw.line(_outline(contour), fill=OUTLINE_COLOR, width=1)
            cx, cy = contour.corner
            draw.ellipse((cx - 3, cy - 3, cx + 3, cy + 3), outline=CORNER_COLOR)
            if contour.dot_str is not None:
                draw.text((cx + 4, cy + 4), contour.dot_str, fill=CORNER_COLOR)
        return image

    def save_overlay(self, raster: np.ndarray, contours: Iterable[Contour], label: str = "overlay") -> Path:
        """Render and save a detection overlay.

        Raises:
            ImageSaveError: If the file cannot be written
        """
        return self._save(self.render_overlay(raster, contours), label)


def _outline(contour: Contour) -> list[tuple[float, float]]:
    """Canonical marker outline mapped into image coordinates."""
    canonical = [(0.0, 0.5), (0.0, 0.0), (0.5, 0.0)]
    for i in range(_OUTLINE_STEPS + 1):
        ang = math.radians(-90.0 + 270.0 * i / _OUTLINE_STEPS)
        canonical.append((0.5 + 0.5 * math.cos(ang), 0.5 + 0.5 * math.sin(ang)))
    return [contour.transform.apply(x, y) for x, y in canonical]
