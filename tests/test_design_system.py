"""Tests for design system compliance checks."""

import pytest

from visual_parity.comparison.design_system import match_color, match_size, validate_design_system
from visual_parity.errors import EmptyInputError
from visual_parity.models.config import DesignSystem
from visual_parity.models.property_record import RGBA, BoxSides, PropertyRecord


def _with(record: PropertyRecord, section: str, **changes) -> PropertyRecord:
    part = getattr(record, section).model_copy(update=changes)
    return record.model_copy(update={section: part})


@pytest.fixture
def tokens() -> DesignSystem:
    """Tokens the button fixture fully complies with."""
    return DesignSystem(
        colors=["#ffffff", "#0066cc", "#0052a3"],
        font_sizes=[12, 16, 20],
        spacing=[4, 8, 16],
        border_radius=[4, 8],
    )


class TestMatchColor:
    """Tests for match_color."""

    def test_exact(self):
        assert match_color((0, 102, 204), ["#ffffff", "#0066cc"], 0) == ("#0066cc", 0)

    def test_within_tolerance(self):
        assert match_color((5, 100, 204), ["#0066cc"], 15) == ("#0066cc", 7)

    def test_first_match_wins(self):
        assert match_color((10, 10, 10), ["#000000", "#0a0a0a"], 30) == ("#000000", 30)

    def test_no_match(self):
        assert match_color((255, 0, 0), ["#0066cc"], 15) == (None, None)


class TestMatchSize:
    """Tests for match_size."""

    def test_within_tolerance(self):
        assert match_size(15, [12, 16], 2) == 16

    def test_boundary_is_inclusive(self):
        assert match_size(14, [16], 2) == 16

    def test_no_match(self):
        assert match_size(30, [12, 16], 2) is None


class TestValidateDesignSystem:
    """Tests for validate_design_system."""

    def test_fully_compliant(self, button_record, tokens):
        report = validate_design_system([button_record], tokens)
        # 3 colors, font size, 4 padding sides, radius; zero margins skipped
        assert report.total_checks == 9
        assert report.passed_checks == 9
        assert report.compliance_rate == 100.0
        assert report.compliance_level == "Excellent"
        assert report.violations == []
        assert report.recommendations == []

    def test_color_violation_reports_hex(self, button_record, tokens):
        record = _with(button_record, "colors", background_color=RGBA(r=255, g=0, b=0))
        report = validate_design_system([record], tokens)

        [violation] = report.violations
        assert violation.category == "color"
        assert violation.property_name == "backgroundColor"
        assert violation.actual == "#ff0000"
        assert violation.matched is None
        assert report.most_common_violations == {"color.backgroundColor": 1}

    def test_near_color_matches_with_delta(self, button_record, tokens):
        record = _with(button_record, "colors", background_color=RGBA(r=3, g=100, b=204))
        report = validate_design_system([record], tokens)
        check = next(c for c in report.checks if c.property_name == "backgroundColor")
        assert check.valid
        assert check.matched == "#0066cc"
        assert check.delta == 5

    def test_transparent_colors_skipped(self, button_record, tokens):
        record = _with(button_record, "colors", border_color=RGBA(r=0, g=0, b=0, a=0))
        report = validate_design_system([record], tokens)
        assert "borderColor" not in {c.property_name for c in report.checks}
        assert report.compliance_rate == 100.0

    def test_zero_spacing_and_radius_skipped(self, button_record, tokens):
        record = _with(button_record, "styling", padding=BoxSides(), border_radius=0)
        report = validate_design_system([record], tokens)
        assert {c.category for c in report.checks} == {"color", "typography"}

    def test_margins_checked_when_set(self, button_record, tokens):
        record = _with(button_record, "styling", margin=BoxSides(top=12))
        report = validate_design_system([record], tokens)
        [violation] = report.violations
        assert violation.property_name == "marginTop"
        assert violation.actual == 12

    def test_empty_token_lists_are_unconstrained(self, button_record):
        report = validate_design_system([button_record], DesignSystem())
        assert report.total_checks == 0
        assert report.compliance_rate == 100.0

    def test_size_tolerance_from_design_system(self, button_record):
        record = _with(button_record, "typography", font_size=17)
        strict = validate_design_system([record], DesignSystem(font_sizes=[16], size_tolerance=0))
        loose = validate_design_system([record], DesignSystem(font_sizes=[16], size_tolerance=1))
        assert strict.failed_checks == 1
        assert loose.failed_checks == 0

    @pytest.mark.parametrize("font_sizes, level", [
        ([16], "Excellent"),
        ([99], "Critical"),
    ])
    def test_levels(self, button_record, font_sizes, level):
        report = validate_design_system([button_record], DesignSystem(font_sizes=font_sizes))
        assert report.compliance_level == level

    def test_rate_and_level_bands(self, button_record, tokens):
        # 1 failure in 9 checks
        record = _with(button_record, "typography", font_size=40)
        report = validate_design_system([record], tokens)
        assert report.compliance_rate == 88.89
        assert report.compliance_level == "Good"

    def test_frequent_violation_recommendation(self, button_record, tokens):
        off_size = _with(button_record, "typography", font_size=40)
        records = [off_size, off_size, button_record]
        report = validate_design_system(records, tokens)
        assert report.most_common_violations == {"typography.fontSize": 2}
        assert report.recommendations == [
            "High frequency of typography.fontSize violations (2 occurrences) - "
            "consider reviewing design system constraints or implementation"
        ]

    def test_low_compliance_recommendation(self, button_record):
        report = validate_design_system([button_record], DesignSystem(colors=["#123456"]))
        assert report.compliance_rate == 0.0
        assert report.recommendations[-1] == (
            "Consider increasing tolerances or updating design system specifications"
        )

    def test_checks_carry_element_index(self, button_record, tokens):
        second = _with(button_record, "typography", font_size=40).model_copy(update={"element": "button[1]"})
        report = validate_design_system([button_record, second], tokens)
        [violation] = report.violations
        assert violation.element_index == 1
        assert violation.element == "button[1]"

    def test_no_records_raises(self, tokens):
        with pytest.raises(EmptyInputError):
            validate_design_system([], tokens)
