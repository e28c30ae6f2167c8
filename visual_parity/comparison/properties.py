"""Property tolerance comparator — element-by-element computed style checks."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence

from visual_parity.models.config import ToleranceConfig
from visual_parity.models.property_record import RGBA, PropertyRecord
from visual_parity.models.result import (
    DifferenceEntry,
    ElementCheckSummary,
    PropertyComparison,
    ToleranceReport,
)

logger = logging.getLogger(__name__)

# Breaches beyond this multiple of the tolerance are critical for geometry and color
CRITICAL_FACTOR = 3
# A path failing on at least this share of elements gets a tolerance suggestion
SUGGESTION_SHARE = 0.5


@dataclass(frozen=True)
class PropertyCheck:
    path: str
    kind: Literal["numeric", "color", "string"]
    getter: Callable[[PropertyRecord], object]
    tolerance: Optional[str] = None  # ToleranceConfig attribute
    geometric: bool = False  # geometry/color checks can escalate to critical


def _numeric(path: str, getter, tolerance: str, geometric: bool = False) -> PropertyCheck:
    return PropertyCheck(path, "numeric", getter, tolerance, geometric)


def _sides(group: str) -> list[PropertyCheck]:
    return [
        _numeric(f"styling.{group}.{side}",
                 lambda r, g=group, s=side: getattr(getattr(r.styling, g), s),
                 "size_tolerance", geometric=True)
        for side in ("top", "right", "bottom", "left")
    ]


CHECKS: list[PropertyCheck] = [
    _numeric("position.x", lambda r: r.position.x, "position_tolerance", geometric=True),
    _numeric("position.y", lambda r: r.position.y, "position_tolerance", geometric=True),
    _numeric("position.width", lambda r: r.position.width, "size_tolerance", geometric=True),
    _numeric("position.height", lambda r: r.position.height, "size_tolerance", geometric=True),
    PropertyCheck("colors.color", "color", lambda r: r.colors.color, "color_delta", True),
    PropertyCheck("colors.backgroundColor", "color", lambda r: r.colors.background_color, "color_delta", True),
    PropertyCheck("colors.borderColor", "color", lambda r: r.colors.border_color, "color_delta", True),
    _numeric("typography.fontSize", lambda r: r.typography.font_size, "font_size_tolerance"),
    _numeric("typography.lineHeight", lambda r: r.typography.line_height, "font_size_tolerance"),
    PropertyCheck("typography.fontWeight", "string", lambda r: r.typography.font_weight),
    PropertyCheck("typography.fontFamily", "string", lambda r: r.typography.font_family),
    _numeric("styling.opacity", lambda r: r.styling.opacity, "opacity_tolerance"),
    _numeric("styling.borderRadius", lambda r: r.styling.border_radius, "size_tolerance", geometric=True),
    *_sides("padding"),
    *_sides("margin"),
    *_sides("border"),
]


def color_delta(a: RGBA, b: RGBA) -> float:
    """Summed channel delta; alpha is scaled to the 0-255 range."""
    return abs(a.r - b.r) + abs(a.g - b.g) + abs(a.b - b.b) + abs(a.a - b.a) * 255


def _evaluate(
    check: PropertyCheck,
    index: int,
    record_a: PropertyRecord,
    record_b: PropertyRecord,
    tolerances: ToleranceConfig,
) -> DifferenceEntry | None:
    value_a, value_b = check.getter(record_a), check.getter(record_b)

    if check.kind == "string":
        if value_a == value_b:
            return None
        return DifferenceEntry(
            element_index=index, property_path=check.path, kind="string",
            value_a=value_a, value_b=value_b,
        )

    tolerance = getattr(tolerances, check.tolerance)
    if check.kind == "color":
        delta = color_delta(value_a, value_b)
        signed = None
        value_a, value_b = value_a.css(), value_b.css()
    else:
        delta = abs(value_a - value_b)
        signed = value_b - value_a

    if delta <= tolerance:
        return None
    critical = check.geometric and delta > CRITICAL_FACTOR * tolerance
    return DifferenceEntry(
        element_index=index,
        property_path=check.path,
        kind=check.kind,
        value_a=value_a,
        value_b=value_b,
        delta=delta,
        signed_delta=signed,
        tolerance=tolerance,
        severity="critical" if critical else "warning",
    )


def _success_recommendation(rate: float) -> str:
    if rate >= 95:
        return "Excellent match within tolerances"
    if rate >= 85:
        return "Good match with minor differences"
    if rate >= 70:
        return "Acceptable with some differences"
    if rate >= 50:
        return "Significant differences detected"
    return "Major differences - review tolerances or design"


def _tolerance_report(
    differences: list[DifferenceEntry],
    element_count: int,
    tolerances: ToleranceConfig,
) -> ToleranceReport:
    failures = Counter(d.property_path for d in differences)
    tolerance_for = {c.path: c.tolerance for c in CHECKS}
    suggestions = {}
    for path, count in failures.items():
        name = tolerance_for.get(path)
        if name and count >= element_count * SUGGESTION_SHARE:
            suggestions[path] = (
                f"Consider increasing {name} (currently {getattr(tolerances, name):g}); "
                f"{path} fails on {count} of {element_count} elements"
            )
    return ToleranceReport(
        applied_tolerances=tolerances,
        most_common_failures=dict(failures.most_common()),
        suggested_adjustments=suggestions,
    )


def compare_records(
    records_a: Sequence[PropertyRecord],
    records_b: Sequence[PropertyRecord],
    tolerances: ToleranceConfig | None = None,
) -> PropertyComparison:
    """Compare two index-aligned record sequences under ``tolerances``.

    Each out-of-tolerance property yields one DifferenceEntry. An index present
    on one side only yields a single critical "existence" entry and nothing
    else. Two empty sequences produce an empty comparison, not an error.
    """
    tolerances = tolerances or ToleranceConfig()
    if not records_a and not records_b:
        return PropertyComparison(empty=True, tolerance_report=ToleranceReport(applied_tolerances=tolerances))

    differences: list[DifferenceEntry] = []
    elements: list[ElementCheckSummary] = []

    for index in range(max(len(records_a), len(records_b))):
        record_a = records_a[index] if index < len(records_a) else None
        record_b = records_b[index] if index < len(records_b) else None
        label = (record_a if record_a is not None else record_b).element

        if record_a is None or record_b is None:
            differences.append(DifferenceEntry(
                element_index=index,
                property_path="existence",
                kind="existence",
                value_a=record_a is not None,
                value_b=record_b is not None,
                severity="critical",
            ))
            elements.append(ElementCheckSummary(
                index=index, element=label,
                exists_a=record_a is not None, exists_b=record_b is not None,
                total=1, failed=1,
            ))
            continue

        found = [e for e in (_evaluate(c, index, record_a, record_b, tolerances) for c in CHECKS) if e is not None]
        differences.extend(found)
        elements.append(ElementCheckSummary(
            index=index, element=label,
            total=len(CHECKS), passed=len(CHECKS) - len(found), failed=len(found),
        ))

    total = sum(e.total for e in elements)
    passed = sum(e.passed for e in elements)
    rate = round(passed / total * 100, 2)
    critical = sum(1 for d in differences if d.severity == "critical")
    logger.debug("Compared %d element pairs: %d/%d checks passed, %d critical",
                 len(elements), passed, total, critical)

    return PropertyComparison(
        elements_a=len(records_a),
        elements_b=len(records_b),
        elements=elements,
        total_checks=total,
        passed_checks=passed,
        failed_checks=total - passed,
        critical_count=critical,
        success_rate=rate,
        recommendation=_success_recommendation(rate),
        tolerance_report=_tolerance_report(differences, len(elements), tolerances),
        differences=differences,
    )
