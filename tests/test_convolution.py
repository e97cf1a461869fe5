"""Tests for square-kernel convolution and kernel generators."""

import numpy as np
import pytest

from pixel_adjust.processing.convolution import (
    UNSHARP_KERNEL,
    apply_convolution,
    box_kernel,
    cap_box_size,
    cap_gaussian_radius,
    clarity_kernel,
    gaussian_kernel,
    sharpen_kernel,
    sharpen_passes,
    texture_kernel,
)
from pixel_adjust.processing.raster import Raster


class TestKernels:
    """Tests for the kernel generators."""

    @pytest.mark.parametrize("size", [1, 3, 5, 9, 15])
    def test_box_kernel_sums_to_one(self, size):
        kernel = box_kernel(size)
        assert kernel.size == size * size
        assert abs(kernel.sum() - 1.0) <= 1e-9

    @pytest.mark.parametrize("radius", [1, 2, 5, 10])
    def test_gaussian_kernel_normalised_and_symmetric(self, radius):
        side = 2 * radius + 1
        kernel = gaussian_kernel(radius).reshape(side, side)
        assert abs(kernel.sum() - 1.0) <= 1e-9
        assert np.allclose(kernel, kernel.T)
        assert np.allclose(kernel, kernel[::-1, ::-1])
        assert kernel[radius, radius] == kernel.max()

    def test_gaussian_radius_zero_is_identity(self):
        assert gaussian_kernel(0).tolist() == [1.0]

    def test_sharpen_amount_one_is_unsharp_kernel(self):
        assert sharpen_kernel(1.0).tolist() == list(UNSHARP_KERNEL)

    def test_sharpen_kernel_scales_weights(self):
        kernel = sharpen_kernel(0.5)
        assert kernel[4] == pytest.approx(3.0)
        assert kernel[1] == pytest.approx(-0.5)
        assert kernel[0] == 0.0
        assert kernel.sum() == pytest.approx(1.0)

    def test_texture_and_clarity_scale_center(self):
        assert texture_kernel(100)[4] == pytest.approx(10.0)
        assert clarity_kernel(100)[4] == pytest.approx(13.0)
        assert texture_kernel(100)[1] == -1.0


class TestCaps:
    """Size caps keep kernel cost bounded."""

    @pytest.mark.parametrize("blur, expected", [
        (0, 0), (1, 1), (2, 3), (3, 3), (4, 5), (2.5, 3), (14, 15), (15, 15), (40, 15),
    ])
    def test_box_size(self, blur, expected):
        assert cap_box_size(blur) == expected

    def test_box_size_is_always_odd(self):
        for blur in range(1, 30):
            assert cap_box_size(blur) % 2 == 1

    def test_gaussian_radius_cap(self):
        assert cap_gaussian_radius(3) == 3
        assert cap_gaussian_radius(25) == 10
        assert cap_gaussian_radius(-2) == 0

    @pytest.mark.parametrize("sharpen, passes", [(0, 0), (0.3, 1), (1, 1), (1.5, 2), (2.2, 3), (9, 3)])
    def test_sharpen_passes(self, sharpen, passes):
        assert sharpen_passes(sharpen) == passes


class TestApplyConvolution:
    """Tests for apply_convolution."""

    def test_identity_kernel_is_noop(self, noisy_raster):
        before = noisy_raster.clone()
        apply_convolution(noisy_raster, [1.0], 1)
        assert noisy_raster == before

    def test_even_kernel_rejected(self, flat_raster):
        with pytest.raises(ValueError):
            apply_convolution(flat_raster, box_kernel(2), 2)

    def test_wrong_weight_count_rejected(self, flat_raster):
        with pytest.raises(ValueError):
            apply_convolution(flat_raster, [0.5, 0.5], 3)

    @pytest.mark.parametrize("size", [3, 5, 15])
    def test_flat_raster_interior_unchanged_by_box_blur(self, flat_raster, size):
        before = flat_raster.clone()
        apply_convolution(flat_raster, box_kernel(size), size)
        m = size // 2
        assert np.array_equal(flat_raster.pixels[m:-m, m:-m], before.pixels[m:-m, m:-m])

    @pytest.mark.parametrize("radius", [1, 3, 10])
    def test_flat_raster_interior_unchanged_by_gaussian_blur(self, flat_raster, radius):
        before = flat_raster.clone()
        apply_convolution(flat_raster, gaussian_kernel(radius), 2 * radius + 1)
        m = radius
        assert np.array_equal(flat_raster.pixels[m:-m, m:-m], before.pixels[m:-m, m:-m])

    def test_out_of_bounds_samples_are_skipped(self):
        """A corner pixel of a 3x3 box blur only sees 4 of its 9 samples."""
        raster = Raster.blank(5, 5, (90, 90, 90, 255))
        apply_convolution(raster, box_kernel(3), 3)
        corner = raster.pixels[0, 0]
        assert corner[0] == 40          # 90 * 4 / 9
        assert corner[3] == 113         # 255 * 4 / 9 = 113.33
        edge = raster.pixels[0, 2]
        assert edge[0] == 60            # 90 * 6 / 9

    def test_correlation_without_flip(self, gradient_raster):
        """A single weight right of centre reads the right-hand neighbour."""
        src = gradient_raster.clone()
        kernel = [0, 0, 0,
                  0, 0, 1,
                  0, 0, 0]
        apply_convolution(gradient_raster, kernel, 3)
        assert np.array_equal(gradient_raster.pixels[:, :-1], src.pixels[:, 1:])

    def test_alpha_falls_back_when_weighted_alpha_is_zero(self, flat_raster):
        """A zero-sum kernel zeroes colour in the interior but keeps the source alpha."""
        laplacian = [0, 1, 0,
                     1, -4, 1,
                     0, 1, 0]
        apply_convolution(flat_raster, laplacian, 3)
        interior = flat_raster.pixels[1:-1, 1:-1]
        assert np.all(interior[..., :3] == 0)
        assert np.all(interior[..., 3] == 255)

    def test_results_are_clamped(self):
        raster = Raster.blank(5, 5, (250, 5, 128, 255))
        apply_convolution(raster, sharpen_kernel(3.0), 3)
        assert raster.pixels.dtype == np.uint8
        # interior is flat so sharpening leaves it alone; borders overshoot and clamp
        assert tuple(raster.pixels[2, 2]) == (250, 5, 128, 255)
        assert raster.pixels[0, 0, 0] == 255
