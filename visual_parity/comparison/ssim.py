"""Structural similarity (SSIM) over non-overlapping 8x8 luminance windows."""

from __future__ import annotations

import numpy as np

from visual_parity.errors import DimensionError
from visual_parity.models.pixel_buffer import PixelBuffer

WINDOW_SIZE = 8
K1 = 0.01
K2 = 0.03
C1 = (K1 * 255) ** 2
C2 = (K2 * 255) ** 2


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Rec. 601 luma per pixel as a (height, width) float64 array."""
    rgb = buffer.to_array()[..., :3].astype(np.float64)
    return rgb[..., 0] * 0.299 + rgb[..., 1] * 0.587 + rgb[..., 2] * 0.114


def _windows(luma: np.ndarray, rows: int, cols: int) -> np.ndarray:
    # Drop the trailing partial windows, then view as (rows, cols, 64)
    cropped = luma[: rows * WINDOW_SIZE, : cols * WINDOW_SIZE]
    blocks = cropped.reshape(rows, WINDOW_SIZE, cols, WINDOW_SIZE).swapaxes(1, 2)
    return blocks.reshape(rows, cols, WINDOW_SIZE * WINDOW_SIZE)


def calculate_ssim(a: PixelBuffer, b: PixelBuffer) -> float:
    """Mean SSIM across all full 8x8 windows, clamped to [0, 1].

    Windows that would run past the right or bottom edge are skipped rather
    than padded. Images smaller than one window score 0.
    """
    if a.size != b.size:
        raise DimensionError(f"SSIM needs equal sizes, got {a.size} and {b.size}")
    rows, cols = a.height // WINDOW_SIZE, a.width // WINDOW_SIZE
    if rows == 0 or cols == 0:
        return 0.0

    w1 = _windows(luminance(a), rows, cols)
    w2 = _windows(luminance(b), rows, cols)

    mean1 = w1.mean(axis=2)
    mean2 = w2.mean(axis=2)
    # Same expression for variance and covariance keeps SSIM(A, A) exactly 1
    variance1 = (w1 * w1).mean(axis=2) - mean1 * mean1
    variance2 = (w2 * w2).mean(axis=2) - mean2 * mean2
    covariance = (w1 * w2).mean(axis=2) - mean1 * mean2

    numerator = (2 * (mean1 * mean2) + C1) * (2 * covariance + C2)
    denominator = (mean1 * mean1 + mean2 * mean2 + C1) * (variance1 + variance2 + C2)
    score = float((numerator / denominator).mean())
    return min(1.0, max(0.0, score))


def ssim_label(score: float) -> str:
    if score > 0.95:
        return "Very High"
    if score > 0.85:
        return "High"
    if score > 0.7:
        return "Medium"
    return "Low"
