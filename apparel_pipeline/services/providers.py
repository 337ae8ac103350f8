"""
External provider interfaces.

The pipeline depends only on these protocols. Each backend ships exactly
one adapter (see vision_service and generation_service), injected into
ApparelPipeline at construction time.
"""
from typing import List, Protocol

from apparel_pipeline.schemas.detection import Detection, DominantColor, LabelAnnotation


class ObjectDetector(Protocol):
    def detect(self, image_bytes: bytes) -> List[Detection]:
        """Localize objects; polygons normalized to [0, 1]."""
        ...


class LabelService(Protocol):
    def labels_for(self, crop_bytes: bytes) -> List[LabelAnnotation]:
        """Descriptive labels, ranked by confidence descending."""
        ...


class ColorService(Protocol):
    def dominant_colors(self, crop_bytes: bytes) -> List[DominantColor]:
        """Dominant colors, most dominant first."""
        ...


class ColorNamer(Protocol):
    def name_for(self, hex_color: str) -> str:
        ...


class ImageGenerator(Protocol):
    def generate(self, prompt: str) -> bytes:
        """Generate an encoded image from a text prompt."""
        ...
