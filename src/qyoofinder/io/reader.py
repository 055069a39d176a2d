"""Image reader for loading photographs as grayscale rasters.

This module provides the ImageReader class, which loads any image format
Pillow understands and hands out 8-bit grayscale numpy rasters, optionally
downscaled or rotated.
"""

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from qyoofinder.exceptions import ImageLoadError


class ImageReader:
    """Loads images and converts them to grayscale rasters.

    Example:
        with ImageReader(Path("photo.jpg")) as reader:
            raster = reader.raster
            print(reader.width, reader.height)
    """

    def __init__(self, image_path: Path) -> None:
        """Initialize the image reader.

        Args:
            image_path: Path to the image file
        """
        self._image_path = image_path
        self._image: Image.Image | None = None

    def load(self) -> None:
        """Load the image file and convert it to 8-bit grayscale.

        Raises:
            FileNotFoundError: If the image file does not exist
            ImageLoadError: If the file is not a readable image
        """
        if not self._image_path.exists():
            raise FileNotFoundError(f"Image file not found: {self._image_path}")

        try:
            with Image.open(self._image_path) as img:
                self._image = img.convert("L")
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(str(self._image_path), str(e)) from e

    def _require(self) -> Image.Image:
        if self._image is None:
            raise RuntimeError("Image not loaded. Call load() first.")
        return self._image

    @property
    def width(self) -> int:
        return self._require().width

    @property
    def height(self) -> int:
        return self._require().height

    @property
    def raster(self) -> np.ndarray:
        """Grayscale raster indexed ``[y, x]``.

        Raises:
            RuntimeError: If the image has not been loaded yet
        """
        return np.asarray(self._require(), dtype=np.uint8).copy()

    def rotated(self, degrees: float) -> np.ndarray:
        """Raster rotated counter-clockwise, canvas expanded and filled white.

        Raises:
            RuntimeError: If the image has not been loaded yet
        """
        image = self._require()
        if degrees % 360 == 0:
            return self.raster
        turned = image.rotate(
            degrees,
            resample=Image.Resampling.BILINEAR,
            expand=True,
            fillcolor=255,
        )
        return np.asarray(turned, dtype=np.uint8).copy()

    @staticmethod
    def fit(raster: np.ndarray, max_size: int | None) -> np.ndarray:
        """Downscale a raster so its longest side is at most ``max_size``.

        Rasters already small enough, or a ``max_size`` of None, are
        returned unchanged.
        """
        height, width = raster.shape
        if max_size is None or max(width, height) <= max_size:
            return raster
        scale = max_size / max(width, height)
        size = (max(1, round(width * scale)), max(1, round(height * scale)))
        resized = Image.fromarray(raster).resize(size, Image.Resampling.BILINEAR)
        return np.asarray(resized, dtype=np.uint8).copy()

    def close(self) -> None:
        """Release the decoded image."""
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> "ImageReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
