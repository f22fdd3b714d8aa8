"""
HeightField – the quantized single-channel depth grid handed from the
depth extractor to the mesh generator.

Samples live in one flat, row-major, read-only uint8 buffer
(index = row * width + col); all access goes through bounds-checked
accessors instead of manual stride arithmetic.
"""

import numpy as np
from PIL import Image


class HeightField:
    """
    Immutable 2-D grid of 8-bit depth samples.

    Parameters
    ----------
    width, height : int   grid size, both >= 1
    samples       : array-like of width*height values in [0, 255], either
                    flat (row-major) or shaped (height, width)
    """

    __slots__ = ("width", "height", "_data")

    def __init__(self, width: int, height: int, samples):
        width, height = int(width), int(height)
        if width < 1 or height < 1:
            raise ValueError(f"[heightfield] Size must be at least 1x1 (got {width}x{height})")

        data = np.asarray(samples)
        if data.size != width * height:
            raise ValueError(
                f"[heightfield] Expected {width * height} samples for {width}x{height}, got {data.size}"
            )
        if data.dtype != np.uint8:
            if data.size and (data.min() < 0 or data.max() > 255):
                raise ValueError("[heightfield] Samples must lie in [0, 255]")
            data = data.astype(np.uint8)

        data = np.array(data.reshape(-1), dtype=np.uint8, copy=True)
        data.setflags(write=False)

        self.width = width
        self.height = height
        self._data = data

    @classmethod
    def from_array(cls, array) -> "HeightField":
        """Build from a (height, width) array."""
        a = np.asarray(array)
        if a.ndim != 2:
            raise ValueError(f"[heightfield] Expected a 2-D array, got shape {a.shape}")
        h, w = a.shape
        return cls(w, h, a)

    @classmethod
    def from_image(cls, image: Image.Image) -> "HeightField":
        """Build from a grayscale PIL image (converted to mode L if needed)."""
        if image.mode != "L":
            image = image.convert("L")
        return cls.from_array(np.asarray(image, dtype=np.uint8))

    # ── access ─────────────────────────────────────────────────────────────

    @property
    def shape(self) -> tuple:
        return self.height, self.width

    @property
    def samples(self) -> np.ndarray:
        """Flat read-only view of the backing buffer."""
        return self._data

    def _index(self, col: int, row: int) -> int:
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(
                f"[heightfield] Sample (col={col}, row={row}) outside {self.width}x{self.height}"
            )
        return row * self.width + col

    def at(self, col: int, row: int) -> int:
        return int(self._data[self._index(col, row)])

    def __getitem__(self, key) -> int:
        row, col = key
        return self.at(col, row)

    def row(self, row: int) -> np.ndarray:
        """Read-only view of one row."""
        start = self._index(0, row)
        return self._data[start:start + self.width]

    def to_array(self) -> np.ndarray:
        """Writable (height, width) copy."""
        return self._data.reshape(self.height, self.width).copy()

    # ── depth-map image output ─────────────────────────────────────────────

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_array())

    def save(self, path) -> None:
        """Write a lossless 8-bit grayscale PNG whose pixels equal the samples."""
        self.to_image().save(path, format="PNG")

    def __eq__(self, other):
        if not isinstance(other, HeightField):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) and \
            np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self):
        return f"HeightField({self.width}x{self.height})"
