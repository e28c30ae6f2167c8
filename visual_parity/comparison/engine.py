"""Comparison engine — runs the analyses for one call and assembles the result."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from visual_parity.comparison.normalizer import normalize_pair
from visual_parity.comparison.palette import compare_palettes
from visual_parity.comparison.pixel_diff import color_difference, diff_pixels, pixel_diff_label
from visual_parity.comparison.properties import compare_records
from visual_parity.comparison.scorer import aggregate, component_scores
from visual_parity.comparison.ssim import calculate_ssim, ssim_label
from visual_parity.errors import EmptyInputError
from visual_parity.models.config import ComparisonConfig
from visual_parity.models.pixel_buffer import PixelBuffer
from visual_parity.models.property_record import PropertyRecord
from visual_parity.models.result import ComparisonResult

logger = logging.getLogger(__name__)

EMPTY_RECOMMENDATION = "No comparable elements"


def compare(
    reference: Optional[PixelBuffer] = None,
    actual: Optional[PixelBuffer] = None,
    records_a: Optional[Sequence[PropertyRecord]] = None,
    records_b: Optional[Sequence[PropertyRecord]] = None,
    config: Optional[ComparisonConfig] = None,
) -> ComparisonResult:
    """Compare a reference against an actual rendering.

    Images and record sequences are both optional, but images come in pairs
    and so do records. Either the full result is returned or an error is
    raised; nothing is partially filled. When nothing comparable is left
    (zero-area images, no records) the result is marked ``empty``.
    """
    config = config or ComparisonConfig()
    if (reference is None) != (actual is None):
        raise EmptyInputError("Image comparison needs both a reference and an actual buffer")
    if (records_a is None) != (records_b is None):
        raise EmptyInputError("Property comparison needs records for both sides")

    result = ComparisonResult()
    critical = 0
    ssim = pixel_percent = color_percent = success_rate = None

    if reference is not None:
        norm_ref, norm_act = normalize_pair(reference, actual, config.normalize_mode)
        result.reference_size = reference.size
        result.actual_size = actual.size
        if not norm_ref.is_empty:
            ssim = calculate_ssim(norm_ref, norm_act)
            pixels = diff_pixels(norm_ref, norm_act, config.pixel)
            color_percent, max_color = color_difference(norm_ref, norm_act, config.color_noise_threshold)
            pixel_percent = pixels.percent

            result.width, result.height = norm_ref.size
            result.total_pixels = norm_ref.area
            result.ssim = ssim
            result.similarity = ssim_label(ssim)
            result.pixel_difference_count = pixels.count
            result.pixel_difference_percent = pixels.percent
            result.antialiased_pixels = pixels.antialiased
            result.color_difference_percent = color_percent
            result.max_color_difference = max_color
            result.pixel_recommendation = pixel_diff_label(pixels.percent)
            result.palette = compare_palettes(
                norm_ref, norm_act, config.tolerances.color_delta, config.palette_size,
            )
            result.diff_mask = pixels.mask

    if records_a is not None:
        properties = compare_records(records_a, records_b, config.tolerances)
        if not properties.empty:
            result.differences = properties.differences
            result.property_summary = properties.summary()
            success_rate = properties.success_rate
            critical = properties.critical_count

    components = component_scores(config.weights, ssim, pixel_percent, color_percent, success_rate)
    if not components:
        result.empty = True
        result.recommendation = EMPTY_RECOMMENDATION
        logger.info("Nothing comparable supplied; returning empty result")
        return result

    score = aggregate(components, critical_issues=critical)
    result.score = score
    result.bucket = score.bucket
    result.recommendation = score.recommendation
    images_identical = result.pixel_difference_count in (None, 0)
    result.identical = images_identical and not result.differences
    result.within_threshold = (
        result.pixel_difference_percent is None
        or result.pixel_difference_percent <= config.threshold * 100
    )
    logger.info("Comparison complete: score %.2f (%s)", score.score, score.bucket)
    return result
