"""
Pydantic schemas for values exchanged with external vision providers.
"""
from typing import List

from pydantic import BaseModel, Field, ConfigDict, field_validator


class NormalizedVertex(BaseModel):
    """Polygon vertex in normalized image coordinates."""
    # Providers omit zero-valued coordinates
    x: float = Field(0.0, ge=0, le=1)
    y: float = Field(0.0, ge=0, le=1)

    model_config = ConfigDict(frozen=True)


class Detection(BaseModel):
    """One raw object-localization result."""
    raw_label: str
    confidence: float = Field(0.0, ge=0, le=1)
    # Ordered top-left, top-right, bottom-right, bottom-left
    bounding_polygon: List[NormalizedVertex]

    model_config = ConfigDict(frozen=True)

    @field_validator("bounding_polygon")
    @classmethod
    def check_four_vertices(cls, value: List[NormalizedVertex]) -> List[NormalizedVertex]:
        if len(value) != 4:
            raise ValueError(f"bounding_polygon must have 4 vertices, got {len(value)}")
        return value


class LabelAnnotation(BaseModel):
    """Descriptive label returned by the label service."""
    description: str
    confidence: float = Field(0.0, ge=0, le=1)

    model_config = ConfigDict(frozen=True)


class DominantColor(BaseModel):
    """One entry of a dominant-color list. Missing channels are 0."""
    r: float = 0
    g: float = 0
    b: float = 0

    model_config = ConfigDict(frozen=True)
