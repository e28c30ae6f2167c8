"""Pixel difference engine — perceptual per-pixel comparison and heat map.

Pixels are compared in YIQ space after blending alpha onto white, and a
differing pixel that sits on an anti-aliased edge in either image is not
counted unless ``include_aa`` is set. The anti-aliasing test follows the
well-known pixelmatch heuristic: a pixel is an AA artifact when its 3x3
neighbourhood has both darker and brighter neighbours, at most two identical
ones, and the darkest or brightest neighbour sits inside a flat region in
both images.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from visual_parity.errors import DimensionError
from visual_parity.models.config import PixelDiffOptions
from visual_parity.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Largest possible YIQ delta between two colors
MAX_YIQ_DELTA = 35215

# Neighbour offsets (dx, dy), x-major so ties resolve in a fixed order
_OFFSETS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]
_DX = np.array([o[0] for o in _OFFSETS])
_DY = np.array([o[1] for o in _OFFSETS])


@dataclass(frozen=True)
class PixelDiff:
    count: int
    percent: float
    antialiased: int
    mask: PixelBuffer = field(repr=False)


def _yiq(array: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rgba = array.astype(np.float64)
    alpha = rgba[..., 3:4] / 255.0
    rgb = 255.0 + (rgba[..., :3] - 255.0) * alpha
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = r * 0.29889531 + g * 0.58662247 + b * 0.11448223
    i = r * 0.59597799 - g * 0.27417610 - b * 0.32180189
    q = r * 0.21147017 - g * 0.52261711 + b * 0.31114694
    return y, i, q


def _packed(array: np.ndarray) -> np.ndarray:
    h, w = array.shape[:2]
    return np.ascontiguousarray(array).view(np.uint32).reshape(h, w)


def _neighbour(ys: np.ndarray, xs: np.ndarray, dx: int, dy: int, h: int, w: int):
    ny, nx = ys + dy, xs + dx
    valid = (ny >= 0) & (ny < h) & (nx >= 0) & (nx < w)
    return np.clip(ny, 0, h - 1), np.clip(nx, 0, w - 1), valid


def _on_edge(ys: np.ndarray, xs: np.ndarray, h: int, w: int) -> np.ndarray:
    return (xs == 0) | (xs == w - 1) | (ys == 0) | (ys == h - 1)


def _many_siblings(packed: np.ndarray, ys: np.ndarray, xs: np.ndarray) -> np.ndarray:
    """True where more than two neighbours share the exact RGBA value."""
    h, w = packed.shape
    count = _on_edge(ys, xs, h, w).astype(np.int64)
    center = packed[ys, xs]
    for dx, dy in _OFFSETS:
        ny, nx, valid = _neighbour(ys, xs, dx, dy, h, w)
        count += valid & (packed[ny, nx] == center)
    return count > 2


def _antialiased(
    luma: np.ndarray,
    packed: np.ndarray,
    other_packed: np.ndarray,
    ys: np.ndarray,
    xs: np.ndarray,
) -> np.ndarray:
    h, w = luma.shape
    zeroes = _on_edge(ys, xs, h, w).astype(np.int64)
    center = luma[ys, xs]
    deltas = np.empty((len(_OFFSETS), len(ys)), dtype=np.float64)
    valid = np.empty((len(_OFFSETS), len(ys)), dtype=bool)
    for k, (dx, dy) in enumerate(_OFFSETS):
        ny, nx, ok = _neighbour(ys, xs, dx, dy, h, w)
        deltas[k] = center - luma[ny, nx]
        valid[k] = ok
        zeroes += ok & (deltas[k] == 0)

    lowest = np.where(valid, deltas, np.inf)
    highest = np.where(valid, deltas, -np.inf)
    k_min = lowest.argmin(axis=0)
    k_max = highest.argmax(axis=0)
    cols = np.arange(len(ys))
    has_min = lowest[k_min, cols] < 0
    has_max = highest[k_max, cols] > 0

    min_y, min_x = np.clip(ys + _DY[k_min], 0, h - 1), np.clip(xs + _DX[k_min], 0, w - 1)
    max_y, max_x = np.clip(ys + _DY[k_max], 0, h - 1), np.clip(xs + _DX[k_max], 0, w - 1)
    flat_min = _many_siblings(packed, min_y, min_x) & _many_siblings(other_packed, min_y, min_x)
    flat_max = _many_siblings(packed, max_y, max_x) & _many_siblings(other_packed, max_y, max_x)

    return (zeroes <= 2) & has_min & has_max & (flat_min | flat_max)


def diff_pixels(a: PixelBuffer, b: PixelBuffer, options: PixelDiffOptions | None = None) -> PixelDiff:
    """Count perceptually different pixels and build the difference mask.

    Differing pixels are painted opaque ``diff_color`` in the mask; matching
    pixels stay fully transparent.
    """
    options = options or PixelDiffOptions()
    if a.size != b.size:
        raise DimensionError(f"Pixel diff needs equal sizes, got {a.size} and {b.size}")
    h, w = a.height, a.width
    if a.is_empty:
        return PixelDiff(count=0, percent=0.0, antialiased=0, mask=PixelBuffer.solid(w, h))

    arr_a, arr_b = a.to_array(), b.to_array()
    y1, i1, q1 = _yiq(arr_a)
    y2, i2, q2 = _yiq(arr_b)
    dy, di, dq = y1 - y2, i1 - i2, q1 - q2
    delta = 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq
    max_delta = MAX_YIQ_DELTA * options.threshold * options.threshold

    different = delta > max_delta
    aa = np.zeros((h, w), dtype=bool)
    if not options.include_aa and different.any():
        ys, xs = np.nonzero(different)
        packed_a, packed_b = _packed(arr_a), _packed(arr_b)
        is_aa = (_antialiased(y1, packed_a, packed_b, ys, xs)
                 | _antialiased(y2, packed_b, packed_a, ys, xs))
        aa[ys[is_aa], xs[is_aa]] = True
        different[ys[is_aa], xs[is_aa]] = False

    mask = np.zeros((h, w, 4), dtype=np.uint8)
    mask[different] = (*options.diff_color, 255)
    if options.aa_color is not None:
        mask[aa] = (*options.aa_color, 255)

    count = int(different.sum())
    antialiased = int(aa.sum())
    logger.debug("Pixel diff: %d differing, %d anti-aliased of %d", count, antialiased, a.area)
    return PixelDiff(
        count=count,
        percent=count / a.area * 100,
        antialiased=antialiased,
        mask=PixelBuffer.from_array(mask),
    )


def color_difference(a: PixelBuffer, b: PixelBuffer, noise: int = 30) -> tuple[float, int]:
    """Share of pixels whose summed |dR|+|dG|+|dB| exceeds ``noise``, and the max sum.

    Returns (percent, max_delta).
    """
    if a.size != b.size:
        raise DimensionError(f"Color difference needs equal sizes, got {a.size} and {b.size}")
    if a.is_empty:
        return 0.0, 0
    rgb_a = a.to_array()[..., :3].astype(np.int32)
    rgb_b = b.to_array()[..., :3].astype(np.int32)
    total = np.abs(rgb_a - rgb_b).sum(axis=2)
    over = int((total > noise).sum())
    return over / a.area * 100, int(total.max())


def pixel_diff_label(percent: float) -> str:
    if percent < 1:
        return "Acceptable"
    if percent < 5:
        return "Minor Issues"
    return "Significant Differences"
