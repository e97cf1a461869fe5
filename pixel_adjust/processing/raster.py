# RGBA raster buffer
"""
Raster: a width x height RGBA byte buffer.

Pixels are stored as a numpy uint8 array of shape (height, width, 4), channel
order R, G, B, A, non-premultiplied alpha. A raster has exactly one owner at a
time; stages that need a private copy call clone().
"""

from typing import Tuple

import numpy as np

from ..utils.errors import DimensionMismatch


class Raster:
    """Width x height RGBA buffer backed by a numpy array."""

    __slots__ = ("pixels",)

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray):
            raise TypeError(f"Raster pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster pixels must have shape (height, width, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster pixels must be uint8, got {pixels.dtype}")
        self.pixels = pixels

    # --- Construction ---

    @classmethod
    def blank(cls, width: int, height: int, rgba: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> "Raster":
        """Create a raster filled with a single RGBA color."""
        if width < 0 or height < 0:
            raise ValueError(f"Invalid raster size {width}x{height}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = np.asarray(rgba, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def from_bytes(cls, width: int, height: int, data) -> "Raster":
        """Create a raster from a flat RGBA byte buffer (copied)."""
        buffer = np.frombuffer(bytes(data), dtype=np.uint8)
        expected = width * height * 4
        if buffer.size != expected:
            raise ValueError(f"Expected {expected} bytes for a {width}x{height} RGBA raster, got {buffer.size}")
        return cls(buffer.reshape(height, width, 4).copy())

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Raster":
        """
        Create a raster from an RGB or RGBA uint8 array (copied).

        RGB input gets an opaque alpha channel.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (h, w, 3) or (h, w, 4) array, got {array.shape}")
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        return cls(np.ascontiguousarray(array).copy())

    # --- Properties ---

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        """View of the colour channels (no copy)."""
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        """View of the alpha channel (no copy)."""
        return self.pixels[..., 3]

    @property
    def writeable(self) -> bool:
        return bool(self.pixels.flags.writeable)

    # --- Copies ---

    def clone(self) -> "Raster":
        """Deep copy with its own writeable buffer."""
        return Raster(self.pixels.copy())

    def read_only(self) -> "Raster":
        """Deep copy whose buffer refuses writes."""
        pixels = self.pixels.copy()
        pixels.flags.writeable = False
        return Raster(pixels)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    # --- Comparison ---

    def same_size(self, other: "Raster") -> bool:
        return self.size == other.size

    def ensure_same_size(self, other: "Raster") -> None:
        """Raise DimensionMismatch unless other has this raster's size."""
        if not self.same_size(other):
            raise DimensionMismatch(self.size, other.size)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.same_size(other) and np.array_equal(self.pixels, other.pixels)

    __hash__ = None  # mutable buffer

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"
