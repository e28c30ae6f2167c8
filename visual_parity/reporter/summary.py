"""Human-readable comparison summary."""

from __future__ import annotations

from visual_parity.models.result import ComparisonResult


def build_summary(result: ComparisonResult, max_differences: int = 10) -> str:
    """Generate a plain-text summary of a comparison result."""
    if result.empty:
        return f"Comparison: {result.recommendation or 'No comparable elements'}"

    lines = []
    if result.score is not None:
        lines.append(f"Overall score: {result.score.score:.2f} ({result.bucket})")
        lines.append(f"  {result.recommendation}")
    if result.ssim is not None:
        lines.append(f"  Size: {result.width}x{result.height}")
        lines.append(f"  SSIM: {result.ssim:.4f} ({result.similarity})")
        lines.append(
            f"  Pixel difference: {result.pixel_difference_count} px "
            f"({result.pixel_difference_percent:.2f}%) - {result.pixel_recommendation}"
        )
        lines.append(f"  Color difference: {result.color_difference_percent:.2f}%")
    if result.palette is not None and result.palette.changes:
        for change in result.palette.changes:
            lines.append(f"  Color {change.action}: {change.color} ({change.percentage:.2f}%)")
    if result.property_summary is not None:
        summary = result.property_summary
        lines.append(
            f"  Property checks: {summary.passed_checks}/{summary.total_checks} passed "
            f"({summary.success_rate:.2f}%)"
        )
    for entry in result.differences[:max_differences]:
        if entry.kind == "existence":
            side = "reference" if entry.value_a else "actual"
            lines.append(f"  [{entry.severity}] element {entry.element_index} only in {side}")
        else:
            lines.append(
                f"  [{entry.severity}] element {entry.element_index} {entry.property_path}: "
                f"{entry.value_a} -> {entry.value_b}"
            )
    remaining = len(result.differences) - max_differences
    if remaining > 0:
        lines.append(f"  ... {remaining} more differences")
    if result.score is not None and result.score.critical_issues:
        lines.append(f"  Critical issues: {result.score.critical_issues}")
    return "\n".join(lines)
