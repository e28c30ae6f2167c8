"""Computed style/geometry snapshot of a single element.

Records are produced once per compared side. Element ``i`` of the reference
sequence corresponds to element ``i`` of the actual sequence. Field names are
snake_case in Python; the camelCase names the browser reports (``fontSize``,
``backgroundColor``) are accepted as aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RGBA(_RecordModel):
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)
    a: float = Field(1.0, ge=0, le=1)

    def css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"


class Position(_RecordModel):
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0


class BoxSides(_RecordModel):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


class Colors(_RecordModel):
    color: RGBA = Field(default_factory=RGBA)
    background_color: RGBA = Field(default_factory=RGBA)
    border_color: RGBA = Field(default_factory=RGBA)


class Typography(_RecordModel):
    font_size: float = 0
    line_height: float = 0
    font_weight: str = ""
    font_family: str = ""


class Styling(_RecordModel):
    opacity: float = 1.0
    border_radius: float = 0
    padding: BoxSides = Field(default_factory=BoxSides)
    margin: BoxSides = Field(default_factory=BoxSides)
    border: BoxSides = Field(default_factory=BoxSides)  # border widths


class PropertyRecord(_RecordModel):
    element: str = ""  # e.g. "button.primary[0]"
    position: Position = Field(default_factory=Position)
    colors: Colors = Field(default_factory=Colors)
    typography: Typography = Field(default_factory=Typography)
    styling: Styling = Field(default_factory=Styling)
