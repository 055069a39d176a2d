"""Convolution kernels and integer raster convolution.

Kernels are applied as a direct correlation (no flip). Sums are divided by
the kernel's ``factor`` with truncation toward zero, so the integer
results are exact and reproducible.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Kernel:
    """An odd-sized square integer kernel with its divisor.

    Attributes:
        weights: Square integer array
        factor: Divisor applied to every weighted sum
    """

    weights: np.ndarray
    factor: int = 1

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.int64)
        if weights.ndim != 2 or weights.shape[0] != weights.shape[1] or weights.shape[0] % 2 == 0:
            raise ValueError(f"Kernel must be odd and square, got shape {weights.shape}")
        if self.factor == 0:
            raise ValueError("Kernel factor must be non-zero")
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)

    @property
    def size(self) -> int:
        return int(self.weights.shape[0])

    @property
    def half(self) -> int:
        return self.size // 2

    def sample(self, raster: np.ndarray, px: int, py: int) -> np.ndarray:
        """Raster values under the non-zero cells centred at ``(px, py)``.

        Cells falling outside the raster are skipped.
        """
        h = self.half
        height, width = raster.shape
        ys, xs = np.nonzero(self.weights)
        ys = ys + py - h
        xs = xs + px - h
        inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
        return raster[ys[inside], xs[inside]]


def gaussian_1_4() -> Kernel:
    """Tuned 5x5 Gaussian with divisor 115.

    The divisor is below the weight sum (159), which brightens the result;
    callers clamp to 255.
    """
    return Kernel(
        np.array(
            [
                [2, 4, 5, 4, 2],
                [4, 9, 12, 9, 4],
                [5, 12, 15, 12, 5],
                [4, 9, 12, 9, 4],
                [2, 4, 5, 4, 2],
            ]
        ),
        115,
    )


def gaussian(size: int, sigma: float) -> Kernel:
    """Integer Gaussian whose smallest weight is about 10."""
    if size < 1 or size % 2 == 0:
        raise ValueError(f"Gaussian size must be odd and positive, got {size}")
    if sigma <= 0:
        raise ValueError(f"Gaussian sigma must be positive, got {sigma}")
    h = size // 2
    offsets = np.arange(-h, h + 1)
    d2 = offsets[None, :] ** 2 + offsets[:, None] ** 2
    values = np.exp(-d2 / (2.0 * sigma * sigma))
    weights = np.rint(values * (10.0 / values.min())).astype(np.int64)
    return Kernel(weights, int(weights.sum()))


def sobel_x() -> Kernel:
    return Kernel(np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]))


def sobel_y() -> Kernel:
    return Kernel(np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]]))


def radius_mask(size: int, radius: float) -> Kernel:
    """Disc of ones where ``dx^2 + dy^2 < radius^2``; divisor is the count."""
    if size < 1 or size % 2 == 0:
        raise ValueError(f"Mask size must be odd and positive, got {size}")
    h = size // 2
    offsets = np.arange(-h, h + 1)
    d2 = offsets[None, :] ** 2 + offsets[:, None] ** 2
    weights = (d2 < radius * radius).astype(np.int64)
    count = int(weights.sum())
    if count == 0:
        raise ValueError(f"Radius {radius} selects no cells")
    return Kernel(weights, count)


def identity() -> Kernel:
    return Kernel(np.array([[0, 0, 0], [0, 1, 0], [0, 0, 0]]))


def convolve(raster: np.ndarray, kernel: Kernel) -> np.ndarray:
    """Correlate a raster with a kernel.

    Args:
        raster: 2D array indexed ``[y, x]``
        kernel: Kernel to apply

    Returns:
        int64 array of the same shape; the ``kernel.half`` pixel border is 0
    """
    height, width = raster.shape
    h = kernel.half
    out = np.zeros((height, width), dtype=np.int64)
    if height <= 2 * h or width <= 2 * h:
        return out

    src = raster.astype(np.int64)
    acc = out[h : height - h, h : width - h]
    for ky in range(kernel.size):
        for kx in range(kernel.size):
            w = int(kernel.weights[ky, kx])
            if w:
                acc += w * src[ky : ky + height - 2 * h, kx : kx + width - 2 * h]

    if kernel.factor != 1:
        acc[...] = np.sign(acc) * (np.abs(acc) // abs(kernel.factor)) * np.sign(kernel.factor)
    return out


def smooth(raster: np.ndarray, kernel: Kernel) -> np.ndarray:
    """Blur with edge-replicated padding, clamped to 8-bit.

    A uniform raster stays uniform, so no edge appears at the border.
    """
    h = kernel.half
    padded = np.pad(raster, h, mode="edge")
    out = convolve(padded, kernel)[h : h + raster.shape[0], h : h + raster.shape[1]]
    return np.clip(out, 0, 255).astype(np.uint8)
