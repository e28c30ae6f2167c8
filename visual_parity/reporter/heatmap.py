"""Heat map output: renders a difference mask to PNG."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from visual_parity.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def render_heatmap(mask: PixelBuffer, background: Optional[PixelBuffer] = None) -> Image.Image:
    """Composite the mask over a dimmed copy of ``background`` when given."""
    overlay = mask.to_image()
    if background is None:
        return overlay
    base = background.to_image().convert("RGB").point(lambda p: p // 2).convert("RGBA")
    if base.size != overlay.size:
        # The mask is at the normalized size
        base = base.resize(overlay.size, Image.Resampling.BILINEAR)
    return Image.alpha_composite(base, overlay)


def save_heatmap(
    mask: PixelBuffer,
    output_path: Path,
    background: Optional[PixelBuffer] = None,
) -> Path:
    """Write the heat map PNG and return its path."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    render_heatmap(mask, background).save(output_path, "PNG")
    logger.debug("Saved heat map to %s", output_path)
    return output_path
