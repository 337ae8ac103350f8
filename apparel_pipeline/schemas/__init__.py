"""
Pydantic schemas for provider boundary values.
"""
from apparel_pipeline.schemas.detection import (
    NormalizedVertex,
    Detection,
    LabelAnnotation,
    DominantColor,
)

__all__ = [
    "NormalizedVertex",
    "Detection",
    "LabelAnnotation",
    "DominantColor",
]
