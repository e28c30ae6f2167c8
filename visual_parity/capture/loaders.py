"""File loaders for pre-captured images and style records."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from PIL import Image

from visual_parity.models.pixel_buffer import PixelBuffer
from visual_parity.models.property_record import PropertyRecord

logger = logging.getLogger(__name__)


def load_image(path: str | Path) -> PixelBuffer:
    """Decode a PNG/JPEG (or anything Pillow reads) into an RGBA buffer."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    with Image.open(path) as image:
        buffer = PixelBuffer.from_image(image)
    logger.debug("Loaded %s (%dx%d)", path, buffer.width, buffer.height)
    return buffer


def load_records(path: str | Path) -> list[PropertyRecord]:
    """Load a JSON list of records, or an object with a "records" list."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Records file not found: {path}")
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("records", [])
    return [PropertyRecord(**item) for item in data]
