"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from helpers import BLACK, BLUE, RED, WHITE, paint

from visual_parity.models.config import ComparisonConfig, ParityConfig, ToleranceConfig
from visual_parity.models.pixel_buffer import PixelBuffer
from visual_parity.models.property_record import (
    RGBA,
    BoxSides,
    Colors,
    Position,
    PropertyRecord,
    Styling,
    Typography,
)


# ============================================================================
# Pixel Buffer Fixtures
# ============================================================================


@pytest.fixture
def red_100() -> PixelBuffer:
    """Solid red 100x100 buffer."""
    return PixelBuffer.solid(100, 100, RED)


@pytest.fixture
def red_with_blue_corner(red_100: PixelBuffer) -> PixelBuffer:
    """Solid red 100x100 with a 10x10 blue square in the top-left corner."""
    return paint(red_100, 0, 0, 10, 10, BLUE)


@pytest.fixture
def hard_edge() -> PixelBuffer:
    """10x10: black left half, white right half."""
    return paint(PixelBuffer.solid(10, 10, BLACK), 5, 0, 5, 10, WHITE)


@pytest.fixture
def soft_edge(hard_edge: PixelBuffer) -> PixelBuffer:
    """Same as hard_edge but the boundary column is anti-aliased gray."""
    return paint(hard_edge, 5, 0, 1, 10, (128, 128, 128, 255))


# ============================================================================
# Property Record Fixtures
# ============================================================================


@pytest.fixture
def button_record() -> PropertyRecord:
    """A typical button's computed style snapshot."""
    return PropertyRecord(
        element="button.primary[0]",
        position=Position(x=20, y=40, width=120, height=36),
        colors=Colors(
            color=RGBA(r=255, g=255, b=255, a=1.0),
            background_color=RGBA(r=0, g=102, b=204, a=1.0),
            border_color=RGBA(r=0, g=82, b=163, a=1.0),
        ),
        typography=Typography(font_size=16, line_height=20, font_weight="600", font_family="Inter, sans-serif"),
        styling=Styling(
            opacity=1.0,
            border_radius=4,
            padding=BoxSides(top=8, right=16, bottom=8, left=16),
            margin=BoxSides(),
            border=BoxSides(top=1, right=1, bottom=1, left=1),
        ),
    )


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def tolerances() -> ToleranceConfig:
    return ToleranceConfig()


@pytest.fixture
def comparison_config() -> ComparisonConfig:
    return ComparisonConfig()


@pytest.fixture
def parity_config(tmp_path: Path) -> ParityConfig:
    """Config writing reports into the test's temp directory."""
    return ParityConfig(max_workers=2, report_output_dir=str(tmp_path / "reports"))
