# Per-channel histograms for display
from dataclasses import dataclass

import numpy as np

BINS = 256


@dataclass(frozen=True)
class Histogram:
    """256-bin counts per colour channel. Alpha is ignored."""
    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray

    def as_lists(self):
        """Plain int lists (red, green, blue), e.g. for JSON."""
        return self.red.tolist(), self.green.tolist(), self.blue.tolist()

    @property
    def total(self) -> int:
        return int(self.red.sum())

    def peak(self) -> int:
        """Largest bin across all channels, ignoring the 0 bin (background-heavy images)."""
        return int(max(self.red[1:].max(), self.green[1:].max(), self.blue[1:].max()))


def compute_histogram(raster) -> Histogram:
    """Count R, G and B values of every pixel into 256 bins each."""
    pixels = raster.pixels
    counts = [
        np.bincount(pixels[..., channel].ravel(), minlength=BINS).astype(np.int64)
        for channel in range(3)
    ]
    return Histogram(*counts)
