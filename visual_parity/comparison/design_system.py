"""Design system compliance — checks element styles against allowed tokens.

Unlike the property comparator there is no second rendering: each record is
matched on its own against the design system's allowed colors, font sizes,
spacing and border radii, within the design system's tolerances.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from visual_parity.comparison.palette import color_distance, to_hex
from visual_parity.errors import EmptyInputError
from visual_parity.models.config import DesignSystem
from visual_parity.models.property_record import PropertyRecord
from visual_parity.models.result import ComplianceCheck, ComplianceReport

logger = logging.getLogger(__name__)

# A violation on at least this share of elements gets its own recommendation
FREQUENT_SHARE = 0.3
# Below this rate, suggest revisiting tolerances or the tokens themselves
LOW_COMPLIANCE = 70

COLOR_PROPERTIES = [
    ("color", "color"),
    ("backgroundColor", "background_color"),
    ("borderColor", "border_color"),
]
SIDES = ("top", "right", "bottom", "left")


def _hex_rgb(hex_color: str) -> tuple[int, int, int]:
    return int(hex_color[1:3], 16), int(hex_color[3:5], 16), int(hex_color[5:7], 16)


def match_color(
    rgb: tuple[int, int, int],
    allowed: Sequence[str],
    tolerance: float,
) -> tuple[Optional[str], Optional[int]]:
    """First allowed color within ``tolerance`` and its distance, or (None, None)."""
    for hex_color in allowed:
        distance = color_distance(rgb, _hex_rgb(hex_color))
        if distance <= tolerance:
            return hex_color, distance
    return None, None


def match_size(value: float, allowed: Sequence[float], tolerance: float) -> Optional[float]:
    """First allowed size within ``tolerance`` of ``value``, or None."""
    for size in allowed:
        if abs(value - size) <= tolerance:
            return size
    return None


def _size_check(index, record, category, name, value, allowed, tolerance) -> ComplianceCheck:
    matched = match_size(value, allowed, tolerance)
    return ComplianceCheck(
        element_index=index,
        element=record.element,
        category=category,
        property_name=name,
        actual=value,
        valid=matched is not None,
        matched=matched,
        delta=abs(value - matched) if matched is not None else None,
    )


def _checks_for(index: int, record: PropertyRecord, ds: DesignSystem) -> list[ComplianceCheck]:
    checks = []

    if ds.colors:
        for name, attr in COLOR_PROPERTIES:
            color = getattr(record.colors, attr)
            if color.a == 0:
                # Fully transparent; nothing is painted
                continue
            rgb = (color.r, color.g, color.b)
            matched, delta = match_color(rgb, ds.colors, ds.color_tolerance)
            checks.append(ComplianceCheck(
                element_index=index, element=record.element, category="color",
                property_name=name, actual=to_hex(rgb),
                valid=matched is not None, matched=matched, delta=delta,
            ))

    if ds.font_sizes:
        checks.append(_size_check(index, record, "typography", "fontSize",
                                  record.typography.font_size, ds.font_sizes, ds.size_tolerance))

    if ds.spacing:
        for group in ("padding", "margin"):
            box = getattr(record.styling, group)
            for side in SIDES:
                value = getattr(box, side)
                if value > 0:
                    checks.append(_size_check(index, record, "spacing", f"{group}{side.capitalize()}",
                                              value, ds.spacing, ds.size_tolerance))

    if ds.border_radius and record.styling.border_radius > 0:
        checks.append(_size_check(index, record, "styling", "borderRadius",
                                  record.styling.border_radius, ds.border_radius, ds.size_tolerance))

    return checks


def _compliance_level(rate: float) -> str:
    if rate >= 95:
        return "Excellent"
    if rate >= 85:
        return "Good"
    if rate >= 70:
        return "Acceptable"
    if rate >= 50:
        return "Poor"
    return "Critical"


def validate_design_system(records: Sequence[PropertyRecord], design_system: DesignSystem) -> ComplianceReport:
    """Check every record's colors, font size, spacing and radius against the tokens.

    Zero-valued spacing and radius are not checked. A run with no applicable
    checks is fully compliant.
    """
    if not records:
        raise EmptyInputError("No elements to validate against the design system")

    checks = [check for index, record in enumerate(records) for check in _checks_for(index, record, design_system)]
    passed = sum(1 for c in checks if c.valid)
    rate = round(passed / len(checks) * 100, 2) if checks else 100.0

    violations = Counter(f"{c.category}.{c.property_name}" for c in checks if not c.valid)
    recommendations = [
        f"High frequency of {key} violations ({count} occurrences) - "
        f"consider reviewing design system constraints or implementation"
        for key, count in violations.most_common()
        if count >= len(records) * FREQUENT_SHARE
    ]
    if rate < LOW_COMPLIANCE:
        recommendations.append("Consider increasing tolerances or updating design system specifications")

    logger.debug("Design system check: %d/%d passed over %d elements", passed, len(checks), len(records))
    return ComplianceReport(
        design_system=design_system,
        total_elements=len(records),
        total_checks=len(checks),
        passed_checks=passed,
        failed_checks=len(checks) - passed,
        compliance_rate=rate,
        compliance_level=_compliance_level(rate),
        checks=checks,
        most_common_violations=dict(violations.most_common()),
        recommendations=recommendations,
    )
