import pytest
import numpy as np

from pixel_adjust.processing.raster import Raster


@pytest.fixture
def sample_raster():
    """Returns a 40x40 opaque RGBA raster with four coloured quadrants."""
    img = np.zeros((40, 40, 4), dtype=np.uint8)
    img[:20, :20] = [255, 0, 0, 255]      # Red quadrant
    img[:20, 20:] = [0, 255, 0, 255]      # Green quadrant
    img[20:, :20] = [0, 0, 255, 255]      # Blue quadrant
    img[20:, 20:] = [255, 255, 0, 255]    # Yellow quadrant
    return Raster(img)


@pytest.fixture
def gradient_raster():
    """Returns a 32x64 raster: horizontal gray ramp, vertical colour variation."""
    h, w = 32, 64
    x = np.linspace(0, 255, w).astype(np.uint8)
    y = np.linspace(0, 255, h).astype(np.uint8)
    img = np.empty((h, w, 4), dtype=np.uint8)
    img[..., 0] = x[np.newaxis, :]
    img[..., 1] = y[:, np.newaxis]
    img[..., 2] = 255 - x[np.newaxis, :]
    img[..., 3] = 255
    return Raster(img)


@pytest.fixture
def noisy_raster():
    """Returns a 24x24 raster of seeded random pixels with varied alpha."""
    rng = np.random.default_rng(1234)
    img = rng.integers(0, 256, size=(24, 24, 4), dtype=np.uint8)
    return Raster(img)


@pytest.fixture
def flat_raster():
    """Returns a 30x30 raster of one colour."""
    return Raster.blank(30, 30, (120, 80, 200, 255))


@pytest.fixture
def identity_curve():
    """Returns identity curve points."""
    return [[0, 0], [255, 255]]


@pytest.fixture
def sample_curve():
    """Returns a simple S-curve."""
    return [[0, 0], [64, 48], [128, 128], [192, 207], [255, 255]]
