"""Configuration models for comparisons and the host tooling."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from visual_parity.errors import ToleranceConfigError

_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


class ToleranceConfig(BaseModel):
    """Per-property tolerances. Values at or below a tolerance are acceptable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    color_delta: float = Field(10, alias="colorDelta")  # sum of RGB(A) channel deltas, 0-255
    size_tolerance: float = Field(2, alias="sizeTolerance")  # px
    position_tolerance: float = Field(5, alias="positionTolerance")  # px
    font_size_tolerance: float = Field(1, alias="fontSizeTolerance")  # px
    opacity_tolerance: float = Field(0.1, alias="opacityTolerance")  # 0-1

    @model_validator(mode="after")
    def check_ranges(self) -> "ToleranceConfig":
        for name in ("color_delta", "size_tolerance", "position_tolerance",
                     "font_size_tolerance", "opacity_tolerance"):
            value = getattr(self, name)
            if value < 0:
                raise ToleranceConfigError(f"{name} must be >= 0, got {value}")
        if self.color_delta > 255:
            raise ToleranceConfigError(f"color_delta must be <= 255, got {self.color_delta}")
        if self.opacity_tolerance > 1:
            raise ToleranceConfigError(f"opacity_tolerance must be <= 1, got {self.opacity_tolerance}")
        return self

    @classmethod
    def preset(cls, level: str) -> "ToleranceConfig":
        """Named tolerance level; fields a preset doesn't set keep their defaults."""
        if level not in TOLERANCE_PRESETS:
            raise ToleranceConfigError(
                f"Unknown tolerance level '{level}', expected one of {', '.join(TOLERANCE_PRESETS)}"
            )
        return cls(**TOLERANCE_PRESETS[level])


ToleranceLevel = Literal["strict", "normal", "lenient"]

TOLERANCE_PRESETS: dict[str, dict[str, float]] = {
    "strict": {"color_delta": 5, "size_tolerance": 1, "position_tolerance": 2},
    "normal": {"color_delta": 15, "size_tolerance": 3, "position_tolerance": 5},
    "lenient": {"color_delta": 25, "size_tolerance": 5, "position_tolerance": 10},
}


class ScoreWeights(BaseModel):
    """Relative weight of each component in the aggregate score."""

    model_config = ConfigDict(frozen=True)

    ssim: float = 0.3
    pixel: float = 0.3
    color: float = 0.2
    properties: float = 0.2

    @model_validator(mode="after")
    def check_non_negative(self) -> "ScoreWeights":
        for name, value in self.model_dump().items():
            if value < 0:
                raise ToleranceConfigError(f"Weight '{name}' must be >= 0, got {value}")
        return self


class PixelDiffOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: float = 0.1  # perceptual YIQ threshold, 0-1
    include_aa: bool = False
    diff_color: tuple[int, int, int] = (255, 0, 0)
    aa_color: Optional[tuple[int, int, int]] = None  # None leaves AA pixels transparent

    @model_validator(mode="after")
    def check_threshold(self) -> "PixelDiffOptions":
        if not 0 <= self.threshold <= 1:
            raise ToleranceConfigError(f"Pixel threshold must be within [0, 1], got {self.threshold}")
        return self


class ComparisonConfig(BaseModel):
    """Everything a single comparison call needs, passed explicitly."""

    model_config = ConfigDict(frozen=True)

    threshold: float = 0.01  # max share of differing pixels still "within threshold"
    pixel: PixelDiffOptions = Field(default_factory=PixelDiffOptions)
    color_noise_threshold: int = 30
    normalize_mode: Literal["resize", "pad"] = "resize"
    palette_size: int = 10
    tolerances: ToleranceConfig = Field(default_factory=ToleranceConfig)
    weights: ScoreWeights = Field(default_factory=ScoreWeights)

    @model_validator(mode="after")
    def check_ranges(self) -> "ComparisonConfig":
        if not 0 <= self.threshold <= 1:
            raise ToleranceConfigError(f"threshold must be within [0, 1], got {self.threshold}")
        if not 0 <= self.color_noise_threshold <= 255 * 3:
            raise ToleranceConfigError(
                f"color_noise_threshold must be within [0, 765], got {self.color_noise_threshold}"
            )
        if self.palette_size < 1:
            raise ToleranceConfigError(f"palette_size must be >= 1, got {self.palette_size}")
        return self


class ParityConfig(BaseModel):
    # Comparison settings
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)

    # Batch execution
    max_workers: int = 4

    # Reporting
    report_output_dir: str = "./parity-reports"
    write_heatmaps: bool = True

    @classmethod
    def load(cls, path: str | Path) -> "ParityConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)


class DesignSystem(BaseModel):
    """Allowed design tokens and the tolerances used to match against them.

    An empty list leaves that category unconstrained.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    colors: list[str] = Field(default_factory=list)  # "#rrggbb"
    font_sizes: list[float] = Field(default_factory=list, alias="fontSizes")
    spacing: list[float] = Field(default_factory=list)  # padding and margin values
    border_radius: list[float] = Field(default_factory=list, alias="borderRadius")
    color_tolerance: float = Field(15, alias="colorTolerance")  # summed RGB delta, 0-255
    size_tolerance: float = Field(2, alias="sizeTolerance")  # px

    @field_validator("colors")
    @classmethod
    def check_hex(cls, colors: list[str]) -> list[str]:
        for color in colors:
            if not _HEX_COLOR.fullmatch(color):
                raise ValueError(f"Design system color must be #rrggbb, got '{color}'")
        return [c.lower() for c in colors]

    @model_validator(mode="after")
    def check_tolerances(self) -> "DesignSystem":
        if not 0 <= self.color_tolerance <= 255:
            raise ToleranceConfigError(f"color_tolerance must be within [0, 255], got {self.color_tolerance}")
        if self.size_tolerance < 0:
            raise ToleranceConfigError(f"size_tolerance must be >= 0, got {self.size_tolerance}")
        return self

    @classmethod
    def load(cls, path: str | Path) -> "DesignSystem":
        """Load design tokens from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Design system file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)
