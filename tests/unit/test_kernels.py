"""Unit tests for convolution kernels."""

import numpy as np
import pytest

from qyoofinder.core.kernels import (
    Kernel,
    convolve,
    gaussian,
    gaussian_1_4,
    identity,
    radius_mask,
    smooth,
    sobel_x,
)


class TestKernel:
    """Tests for Kernel construction and sampling."""

    def test_even_kernel_rejected(self):
        """Test even-sized weights raise ValueError."""
        with pytest.raises(ValueError, match="odd and square"):
            Kernel(np.ones((4, 4)))

    def test_zero_factor_rejected(self):
        """Test a zero factor raises ValueError."""
        with pytest.raises(ValueError, match="non-zero"):
            Kernel(np.ones((3, 3)), 0)

    def test_weights_are_read_only(self):
        """Test kernel weights cannot be modified."""
        kernel = identity()
        with pytest.raises(ValueError):
            kernel.weights[1, 1] = 5

    def test_sample_skips_cells_outside_raster(self):
        """Test sampling near the edge ignores outside cells."""
        raster = np.arange(121, dtype=np.uint8).reshape(11, 11)
        mask = radius_mask(11, 5)
        assert mask.sample(raster, 5, 5).size == mask.factor
        assert mask.sample(raster, 0, 0).size == 22

    def test_sample_reads_centre(self):
        """Test sampling reads the centre weight."""
        raster = np.zeros((5, 5), dtype=np.uint8)
        raster[2, 3] = 7
        assert identity().sample(raster, 3, 2).tolist() == [7]


class TestKernelFactories:
    """Tests for the stock kernels."""

    def test_gaussian_1_4_brightens(self):
        """Test the stock smoothing kernel size, weights and factor."""
        kernel = gaussian_1_4()
        assert kernel.size == 5
        assert int(kernel.weights.sum()) == 159
        assert kernel.factor == 115

    def test_radius_mask_count(self):
        """Test the radius mask selects the expected cells."""
        mask = radius_mask(11, 5)
        assert mask.factor == 69
        assert mask.weights[5, 5] == 1
        assert mask.weights[5, 0] == 0

    def test_radius_mask_empty(self):
        """Test a mask selecting nothing raises ValueError."""
        with pytest.raises(ValueError, match="selects no cells"):
            radius_mask(3, 0)

    def test_gaussian_symmetric(self):
        """Test a generated gaussian is symmetric."""
        kernel = gaussian(5, 1.0)
        w = kernel.weights
        assert np.array_equal(w, w.T)
        assert np.array_equal(w, w[::-1, ::-1])
        assert w.min() == 10
        assert kernel.factor == int(w.sum())

    def test_gaussian_invalid(self):
        """Test invalid gaussian sizes raise ValueError."""
        with pytest.raises(ValueError):
            gaussian(4, 1.0)
        with pytest.raises(ValueError):
            gaussian(5, 0.0)


class TestConvolve:
    """Tests for convolve and smooth."""

    def test_identity_keeps_interior(self):
        """Test the identity kernel keeps interior pixels."""
        raster = np.arange(25, dtype=np.uint8).reshape(5, 5)
        out = convolve(raster, identity())
        assert np.array_equal(out[1:-1, 1:-1], raster[1:-1, 1:-1])
        assert not out[0].any()
        assert not out[:, -1].any()

    def test_division_truncates_toward_zero(self):
        """Test division by the factor truncates toward zero."""
        halve = Kernel(np.array([[0, 0, 0], [0, 1, 0], [0, 0, 0]]), 2)
        raster = np.zeros((3, 3), dtype=np.int64)
        raster[1, 1] = -3
        assert convolve(raster, halve)[1, 1] == -1
        raster[1, 1] = 3
        assert convolve(raster, halve)[1, 1] == 1

    def test_sobel_on_ramp(self):
        """Test Sobel responds evenly to a linear ramp."""
        raster = np.tile(np.arange(6, dtype=np.int64) * 10, (6, 1))
        out = convolve(raster, sobel_x())
        assert np.all(out[1:-1, 1:-1] == 80)

    def test_tiny_raster_all_zero(self):
        """Test rasters smaller than the kernel give zeros."""
        out = convolve(np.ones((2, 2)), identity())
        assert not out.any()

    def test_smooth_uniform_stays_uniform(self):
        """Test smoothing a uniform interior keeps it uniform."""
        raster = np.full((12, 9), 100, dtype=np.uint8)
        out = smooth(raster, gaussian_1_4())
        assert out.dtype == np.uint8
        assert out.shape == raster.shape
        assert np.all(out == 138)

    def test_smooth_clamps(self):
        """Test smoothed values are clamped to 8 bits."""
        raster = np.full((8, 8), 200, dtype=np.uint8)
        assert np.all(smooth(raster, gaussian_1_4()) == 255)
