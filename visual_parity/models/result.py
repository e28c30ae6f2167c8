"""Result data structures produced by the comparison engine."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from visual_parity.models.config import DesignSystem, ToleranceConfig
from visual_parity.models.pixel_buffer import PixelBuffer

Value = Union[float, str, bool, None]


class ColorSample(BaseModel):
    rgb: tuple[int, int, int]
    hex: str
    count: int
    percentage: float  # of all pixels in the image, 2 decimals


class PaletteMatch(BaseModel):
    color_a: str  # hex
    color_b: str
    percentage_a: float
    percentage_b: float
    percentage_delta: float  # percentage points, b - a


class PaletteChange(BaseModel):
    action: Literal["added", "removed"]
    color: str  # hex
    rgb: tuple[int, int, int]
    percentage: float


class PaletteDiff(BaseModel):
    palette_a: list[ColorSample] = Field(default_factory=list)
    palette_b: list[ColorSample] = Field(default_factory=list)
    matches: list[PaletteMatch] = Field(default_factory=list)
    changes: list[PaletteChange] = Field(default_factory=list)
    dominant_a: Optional[str] = None
    dominant_b: Optional[str] = None
    major_change: bool = False
    recommendation: str = ""

    @property
    def added(self) -> list[PaletteChange]:
        return [c for c in self.changes if c.action == "added"]

    @property
    def removed(self) -> list[PaletteChange]:
        return [c for c in self.changes if c.action == "removed"]


class DifferenceEntry(BaseModel):
    """One tolerance breach for one property of one element pair."""
    element_index: int
    property_path: str  # e.g. "typography.fontSize", or "existence"
    kind: Literal["numeric", "color", "string", "existence"]
    value_a: Value = None
    value_b: Value = None
    delta: Optional[float] = None  # always |a - b|
    signed_delta: Optional[float] = None  # b - a, numeric checks only
    tolerance: Optional[float] = None
    within_tolerance: bool = False
    severity: Literal["critical", "warning"] = "warning"


class ElementCheckSummary(BaseModel):
    index: int
    element: str = ""
    exists_a: bool = True
    exists_b: bool = True
    total: int = 0
    passed: int = 0
    failed: int = 0


class ToleranceReport(BaseModel):
    applied_tolerances: ToleranceConfig = Field(default_factory=ToleranceConfig)
    most_common_failures: dict[str, int] = Field(default_factory=dict)
    suggested_adjustments: dict[str, str] = Field(default_factory=dict)


class PropertySummary(BaseModel):
    empty: bool = False
    elements_a: int = 0
    elements_b: int = 0
    elements: list[ElementCheckSummary] = Field(default_factory=list)
    total_checks: int = 0
    passed_checks: int = 0
    failed_checks: int = 0
    critical_count: int = 0
    success_rate: Optional[float] = None  # percent, None when nothing was checked
    recommendation: str = ""
    tolerance_report: ToleranceReport = Field(default_factory=ToleranceReport)


class PropertyComparison(PropertySummary):
    differences: list[DifferenceEntry] = Field(default_factory=list)

    def summary(self) -> PropertySummary:
        return PropertySummary(**self.model_dump(exclude={"differences"}))


class ComponentScore(BaseModel):
    name: Literal["ssim", "pixel", "color", "properties"]
    raw: float  # the metric before mapping
    score: float  # 0-100
    weight: float


class AggregateScore(BaseModel):
    components: list[ComponentScore] = Field(default_factory=list)
    score: float  # 0-100, rounded to 2 decimals
    bucket: Literal["excellent", "good", "acceptable", "poor"]
    recommendation: str
    critical_issues: int = 0
    ready_for_production: bool = False


class ComparisonResult(BaseModel):
    empty: bool = False

    # Image metrics (absent when no images were compared)
    width: int = 0
    height: int = 0
    total_pixels: int = 0
    reference_size: Optional[tuple[int, int]] = None
    actual_size: Optional[tuple[int, int]] = None
    ssim: Optional[float] = None
    similarity: Optional[str] = None  # Very High / High / Medium / Low
    pixel_difference_count: Optional[int] = None
    pixel_difference_percent: Optional[float] = None
    antialiased_pixels: Optional[int] = None
    color_difference_percent: Optional[float] = None
    max_color_difference: Optional[int] = None
    pixel_recommendation: Optional[str] = None
    palette: Optional[PaletteDiff] = None

    # Property metrics
    differences: list[DifferenceEntry] = Field(default_factory=list)
    property_summary: Optional[PropertySummary] = None

    # Verdict
    score: Optional[AggregateScore] = None
    identical: bool = False
    within_threshold: bool = False
    bucket: Optional[str] = None
    recommendation: str = ""

    # Heat map for visualization; never serialized
    diff_mask: Optional[PixelBuffer] = Field(default=None, exclude=True, repr=False)


class ComplianceCheck(BaseModel):
    """One element value checked against the allowed design tokens."""
    element_index: int
    element: str = ""
    category: Literal["color", "typography", "spacing", "styling"]
    property_name: str  # e.g. "backgroundColor", "paddingTop"
    actual: Union[str, float]  # hex for colors, px otherwise
    valid: bool
    matched: Union[str, float, None] = None  # the allowed token it matched
    delta: Optional[float] = None


class ComplianceReport(BaseModel):
    design_system: DesignSystem
    total_elements: int = 0
    total_checks: int = 0
    passed_checks: int = 0
    failed_checks: int = 0
    compliance_rate: float = 100.0  # percent, 2 decimals
    compliance_level: Literal["Excellent", "Good", "Acceptable", "Poor", "Critical"] = "Excellent"
    checks: list[ComplianceCheck] = Field(default_factory=list)
    most_common_violations: dict[str, int] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)

    @property
    def violations(self) -> list[ComplianceCheck]:
        return [c for c in self.checks if not c.valid]
