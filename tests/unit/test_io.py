"""Unit tests for the image I/O layer.

Tests for ImageReader and ImageWriter.
"""

from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from qyoofinder.domain import AffineTransform, Contour, Point
from qyoofinder.exceptions import ImageLoadError, ImageSaveError
from qyoofinder.io.reader import ImageReader
from qyoofinder.io.writer import ImageWriter


@pytest.fixture
def rgb_image(tmp_path) -> Path:
    path = tmp_path / "photo.png"
    data = np.zeros((20, 30, 3), dtype=np.uint8)
    data[:, 15:] = (255, 255, 255)
    Image.fromarray(data).save(path)
    return path


class TestImageReader:
    """Tests for ImageReader class."""

    def test_init(self):
        """Test ImageReader initialization."""
        path = Path("test.png")
        reader = ImageReader(path)
        assert reader._image_path == path
        assert reader._image is None

    def test_load_nonexistent_file(self):
        """Test loading a nonexistent file raises FileNotFoundError."""
        reader = ImageReader(Path("nonexistent.png"))
        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_load_not_an_image(self, tmp_path):
        """Test a file Pillow cannot identify raises ImageLoadError."""
        path = tmp_path / "notes.png"
        path.write_text("not an image")
        reader = ImageReader(path)
        with pytest.raises(ImageLoadError) as exc_info:
            reader.load()
        assert exc_info.value.path == str(path)

    def test_raster_before_load(self):
        """Test accessing raster before loading raises RuntimeError."""
        reader = ImageReader(Path("test.png"))
        with pytest.raises(RuntimeError, match="Image not loaded"):
            _ = reader.raster

    def test_size_before_load(self):
        """Test accessing width before loading raises RuntimeError."""
        reader = ImageReader(Path("test.png"))
        with pytest.raises(RuntimeError, match="Image not loaded"):
            _ = reader.width

    def test_load_converts_to_grayscale(self, rgb_image):
        """Test color images are converted to 8-bit grayscale."""
        with ImageReader(rgb_image) as reader:
            raster = reader.raster
            assert (reader.width, reader.height) == (30, 20)
        assert raster.shape == (20, 30)
        assert raster.dtype == np.uint8
        assert raster[0, 0] == 0
        assert raster[0, 29] == 255

    def test_close_releases_image(self, rgb_image):
        """Test the context manager closes the image."""
        with ImageReader(rgb_image) as reader:
            pass
        with pytest.raises(RuntimeError):
            _ = reader.raster

    def test_rotated_zero_is_copy(self, rgb_image):
        """Test a full turn returns the raster unchanged."""
        with ImageReader(rgb_image) as reader:
            assert np.array_equal(reader.rotated(360), reader.raster)

    def test_rotated_expands_canvas(self, rgb_image):
        """Test rotation expands the canvas."""
        with ImageReader(rgb_image) as reader:
            assert reader.rotated(90).shape == (30, 20)
            assert reader.rotated(45).shape[0] > 20

    def test_rotated_fills_white(self, rgb_image):
        """Test uncovered corners are filled white."""
        with ImageReader(rgb_image) as reader:
            turned = reader.rotated(30)
        assert turned[0, 0] == 255

    def test_fit(self):
        """Test downscaling keeps the aspect ratio."""
        raster = np.zeros((100, 200), dtype=np.uint8)
        assert ImageReader.fit(raster, 50).shape == (25, 50)
        assert ImageReader.fit(raster, None) is raster
        assert ImageReader.fit(raster, 400) is raster


class TestImageWriter:
    """Tests for ImageWriter class."""

    def test_debug_path(self, tmp_path):
        """Test debug file naming."""
        writer = ImageWriter(tmp_path / "debug", Path("/photos/shot.jpg"))
        assert writer.get_debug_path("edges") == tmp_path / "debug" / "shot-edges.png"

    def test_save_raster_creates_directory(self, tmp_path):
        """Test saving creates the output directory."""
        writer = ImageWriter(tmp_path / "out", Path("shot.jpg"))
        path = writer.save_raster(np.full((8, 8), 77, dtype=np.uint8), "gray")
        assert path.exists()
        with Image.open(path) as img:
            assert img.size == (8, 8)
            assert img.getpixel((0, 0)) == 77

    def test_save_raster_scales_wide_values(self, tmp_path):
        """Test non-8-bit rasters are scaled to the full range."""
        writer = ImageWriter(tmp_path, Path("shot.jpg"))
        magnitude = np.zeros((4, 4), dtype=np.int32)
        magnitude[1, 1] = 1000
        path = writer.save_raster(magnitude, "magnitude")
        with Image.open(path) as img:
            assert img.getpixel((1, 1)) == 255
            assert img.getpixel((0, 0)) == 0

    def test_save_error(self, tmp_path):
        """Test OS errors are wrapped in ImageSaveError."""
        writer = ImageWriter(tmp_path, Path("shot.jpg"))
        with patch("PIL.Image.Image.save", side_effect=OSError("disk full")):
            with pytest.raises(ImageSaveError, match="disk full"):
                writer.save_raster(np.zeros((4, 4), dtype=np.uint8), "x")

    def test_render_overlay(self):
        """Test overlay draws traced points and fitted outlines."""
        marker = Contour(contour_id=1)
        marker.orig_points = [Point(5, 5), Point(6, 5)]
        marker.transform = AffineTransform.translation(10, 10) @ AffineTransform.scaling(20, 20)
        marker.corner = (10.0, 10.0)
        marker.dot_str = "42"
        rejected = Contour(contour_id=2, valid=False)
        rejected.add_point_end(Point(40, 40))

        image = ImageWriter.render_overlay(np.zeros((50, 50), dtype=np.uint8), [marker, rejected])

        assert image.mode == "RGB"
        assert image.getpixel((5, 5)) == (255, 64, 64)
        assert image.getpixel((40, 40)) == (255, 64, 64)

    def test_save_overlay(self, tmp_path):
        """Test overlay file is written."""
        writer = ImageWriter(tmp_path, Path("shot.jpg"))
        path = writer.save_overlay(np.zeros((10, 10), dtype=np.uint8), [])
        assert path.name == "shot-overlay.png"
        assert path.exists()
