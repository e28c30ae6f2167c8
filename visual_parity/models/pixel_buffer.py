"""Raw RGBA pixel buffer exchanged between capture and comparison."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from PIL import Image

from visual_parity.errors import DimensionError

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA bytes, 4 bytes per pixel."""

    width: int
    height: int
    data: bytes = field(repr=False)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.area == 0

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def validate(self) -> None:
        """Raise DimensionError unless len(data) == width * height * 4."""
        if self.width < 0 or self.height < 0:
            raise DimensionError(f"Negative dimensions: {self.width}x{self.height}")
        expected = self.area * BYTES_PER_PIXEL
        if len(self.data) != expected:
            raise DimensionError(
                f"Buffer length {len(self.data)} does not match "
                f"{self.width}x{self.height}x{BYTES_PER_PIXEL} = {expected}"
            )

    def to_array(self) -> np.ndarray:
        """Return a read-only (height, width, 4) uint8 view of the pixels."""
        self.validate()
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, BYTES_PER_PIXEL)

    def to_image(self) -> Image.Image:
        self.validate()
        return Image.frombytes("RGBA", self.size, self.data)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        if array.ndim != 3 or array.shape[2] != BYTES_PER_PIXEL:
            raise DimensionError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width=width, height=height, data=np.ascontiguousarray(array, dtype=np.uint8).tobytes())

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width=width, height=height, data=image.tobytes())

    @classmethod
    def solid(cls, width: int, height: int, rgba: tuple[int, int, int, int] = (0, 0, 0, 0)) -> "PixelBuffer":
        return cls(width=width, height=height, data=bytes(rgba) * (width * height))
