"""Dominant color palette extraction and tolerance-based palette diffing."""

from __future__ import annotations

import logging

import numpy as np

from visual_parity.models.pixel_buffer import PixelBuffer
from visual_parity.models.result import ColorSample, PaletteChange, PaletteDiff, PaletteMatch

logger = logging.getLogger(__name__)

OPAQUE_ALPHA = 128  # alpha >= 50%
PALETTE_SIZE = 10


def to_hex(rgb: tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def extract_palette(buffer: PixelBuffer, limit: int = PALETTE_SIZE) -> list[ColorSample]:
    """Return the ``limit`` most frequent opaque colors, most frequent first.

    Percentages are relative to every pixel in the image, transparent ones
    included. Equal counts are ordered by RGB value.
    """
    if buffer.is_empty:
        return []
    pixels = buffer.to_array().reshape(-1, 4)
    opaque = pixels[pixels[:, 3] >= OPAQUE_ALPHA]
    if len(opaque) == 0:
        return []

    rgb = opaque[:, :3].astype(np.uint32)
    keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
    values, counts = np.unique(keys, return_counts=True)
    order = np.lexsort((values, -counts))[:limit]

    palette = []
    for idx in order:
        key = int(values[idx])
        color = ((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)
        count = int(counts[idx])
        palette.append(ColorSample(
            rgb=color,
            hex=to_hex(color),
            count=count,
            percentage=round(count / buffer.area * 100, 2),
        ))
    return palette


def color_distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    """Sum of absolute per-channel differences."""
    return sum(abs(x - y) for x, y in zip(a, b))


def _find_match(color: ColorSample, palette: list[ColorSample], tolerance: float) -> ColorSample | None:
    for candidate in palette:
        if color_distance(color.rgb, candidate.rgb) <= tolerance:
            return candidate
    return None


def diff_palettes(
    palette_a: list[ColorSample],
    palette_b: list[ColorSample],
    color_delta: float,
) -> PaletteDiff:
    """Match colors across two palettes within ``color_delta``.

    Each color in A is paired with the first color in B within tolerance;
    unpaired A colors are "removed" and B colors with no counterpart in A are
    "added".
    """
    matches: list[PaletteMatch] = []
    changes: list[PaletteChange] = []

    for color_a in palette_a:
        match = _find_match(color_a, palette_b, color_delta)
        if match is not None:
            matches.append(PaletteMatch(
                color_a=color_a.hex,
                color_b=match.hex,
                percentage_a=color_a.percentage,
                percentage_b=match.percentage,
                percentage_delta=round(match.percentage - color_a.percentage, 2),
            ))
        else:
            changes.append(PaletteChange(
                action="removed", color=color_a.hex, rgb=color_a.rgb, percentage=color_a.percentage,
            ))

    for color_b in palette_b:
        if _find_match(color_b, palette_a, color_delta) is None:
            changes.append(PaletteChange(
                action="added", color=color_b.hex, rgb=color_b.rgb, percentage=color_b.percentage,
            ))

    if not changes:
        recommendation = "Colors match"
    elif len(changes) < 3:
        recommendation = "Minor color differences"
    else:
        recommendation = "Significant color changes detected"

    if changes:
        logger.debug("Palette diff: %d matched, %d changed", len(matches), len(changes))
    return PaletteDiff(
        palette_a=palette_a,
        palette_b=palette_b,
        matches=matches,
        changes=changes,
        dominant_a=palette_a[0].hex if palette_a else None,
        dominant_b=palette_b[0].hex if palette_b else None,
        major_change=len(changes) > 3,
        recommendation=recommendation,
    )


def compare_palettes(
    a: PixelBuffer,
    b: PixelBuffer,
    color_delta: float,
    limit: int = PALETTE_SIZE,
) -> PaletteDiff:
    """Extract both palettes and diff them."""
    return diff_palettes(extract_palette(a, limit), extract_palette(b, limit), color_delta)
