"""Buffer construction helpers shared by the tests."""

from pathlib import Path

import numpy as np

from visual_parity.models.pixel_buffer import PixelBuffer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def paint(buffer: PixelBuffer, x: int, y: int, width: int, height: int, rgba) -> PixelBuffer:
    """Return a copy of ``buffer`` with a filled rectangle."""
    array = buffer.to_array().copy()
    array[y:y + height, x:x + width] = rgba
    return PixelBuffer.from_array(array)


def noise(width: int, height: int, seed: int) -> PixelBuffer:
    """Opaque random RGB noise, reproducible per seed."""
    rng = np.random.default_rng(seed)
    array = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    array[..., 3] = 255
    return PixelBuffer.from_array(array)


def save_png(buffer: PixelBuffer, path: Path) -> Path:
    buffer.to_image().save(path, "PNG")
    return path
