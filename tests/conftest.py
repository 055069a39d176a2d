"""Shared fixtures: synthetic marker images."""

from collections.abc import Callable, Iterable

import numpy as np
import pytest

from qyoofinder.domain import AffineTransform, MarkerModel

DARK = 30
LIGHT = 230


def marker_transform(origin: tuple[float, float], scale: float, rotation: float = 0.0) -> AffineTransform:
    """Canonical marker space to pixel index coordinates."""
    return (
        AffineTransform.translation(*origin)
        @ AffineTransform.rotation(rotation)
        @ AffineTransform.scaling(scale, scale)
    )


def draw_marker(
    size: tuple[int, int],
    origin: tuple[float, float],
    scale: float,
    rows: Iterable[int] = (),
    rotation: float = 0.0,
    invert: bool = False,
    model: MarkerModel | None = None,
) -> np.ndarray:
    """Render a marker with light dots on a dark body over a light page.

    Args:
        size: Image (width, height)
        origin: Pixel position of the square corner
        scale: Marker side length in pixels
        rows: Row bytes, row 0 first; bit ``col`` draws the dot at ``col``
        rotation: Marker rotation in degrees
        invert: Swap dark and light
        model: Marker geometry (default 6x6)
    """
    model = model or MarkerModel()
    width, height = size
    to_canonical = marker_transform(origin, scale, rotation).inverse()

    ys, xs = np.mgrid[0:height, 0:width]
    grid = np.stack([xs.ravel(), ys.ravel()], axis=1).astype(np.float64)
    uv = to_canonical.apply_many(grid)
    u = uv[:, 0].reshape(height, width)
    v = uv[:, 1].reshape(height, width)

    disc = (u - 0.5) ** 2 + (v - 0.5) ** 2 <= 0.25
    square = (u >= 0) & (u <= 0.5) & (v >= 0) & (v <= 0.5)
    body = disc | square

    dots = np.zeros_like(body)
    dot_r2 = (0.9 * model.dot_radius) ** 2
    for row, value in enumerate(rows):
        for col in range(model.cols):
            if value & (1 << col):
                cx, cy = model.dot_location(row, col)
                dots |= (u - cx) ** 2 + (v - cy) ** 2 <= dot_r2

    dark_value, light_value = (LIGHT, DARK) if invert else (DARK, LIGHT)
    image = np.full((height, width), light_value, dtype=np.uint8)
    image[body & ~dots] = dark_value
    return image


@pytest.fixture
def render_marker() -> Callable[..., np.ndarray]:
    """Factory rendering synthetic marker images."""
    return draw_marker


@pytest.fixture
def verified_rows() -> list[int]:
    """Row bytes that pass the parity pattern of a 6x6 marker."""
    return [0, 0x01, 0x20, 0x01, 0x20, 0]
