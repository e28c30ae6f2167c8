"""Pixel buffer normalization onto one sampling grid."""

from __future__ import annotations

import logging
from typing import Literal

import numpy as np
from PIL import Image

from visual_parity.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

NormalizeMode = Literal["resize", "pad"]


def target_size(a: PixelBuffer, b: PixelBuffer) -> tuple[int, int]:
    """The common size: the larger of each dimension."""
    return max(a.width, b.width), max(a.height, b.height)


def normalize_pair(
    a: PixelBuffer,
    b: PixelBuffer,
    mode: NormalizeMode = "resize",
) -> tuple[PixelBuffer, PixelBuffer]:
    """Return both buffers at identical dimensions.

    Sizes grow to the larger width and the larger height so no captured
    content is cropped away. ``resize`` resamples bilinearly; ``pad`` anchors
    the image top-left on a transparent canvas. Buffers already at the target
    size come back untouched.
    """
    a.validate()
    b.validate()
    width, height = target_size(a, b)
    if a.size != b.size:
        logger.debug("Normalizing %dx%d and %dx%d to %dx%d (%s)",
                     a.width, a.height, b.width, b.height, width, height, mode)
    return _fit(a, width, height, mode), _fit(b, width, height, mode)


def _fit(buffer: PixelBuffer, width: int, height: int, mode: NormalizeMode) -> PixelBuffer:
    if buffer.size == (width, height):
        return buffer
    if buffer.is_empty or width == 0 or height == 0:
        return PixelBuffer.solid(width, height)
    if mode == "pad":
        return _pad(buffer, width, height)
    resized = buffer.to_image().resize((width, height), Image.Resampling.BILINEAR)
    return PixelBuffer.from_image(resized)


def _pad(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[: buffer.height, : buffer.width] = buffer.to_array()
    return PixelBuffer.from_array(canvas)
