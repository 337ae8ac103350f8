"""
Region Extraction Module

Crops detected garment regions out of the source photograph using the
normalized bounding polygons returned by the object detector.
"""
import logging
import math
from typing import Union
import numpy as np
import cv2
from dataclasses import dataclass

from apparel_pipeline.core.exceptions import InvalidRegion
from apparel_pipeline.schemas.detection import Detection

logger = logging.getLogger(__name__)


@dataclass
class CroppedRegion:
    """Pixel crop of one detection."""
    pixels: np.ndarray  # RGB crop (H x W x 3)
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def to_bytes(self, ext: str = ".png") -> bytes:
        """Encode the crop for external services."""
        bgr = cv2.cvtColor(self.pixels, cv2.COLOR_RGB2BGR)
        ok, buffer = cv2.imencode(ext, bgr)
        if not ok:
            raise ValueError(f"Failed to encode {self.width}x{self.height} crop as {ext}")
        return buffer.tobytes()


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decode encoded image bytes into an RGB array.

    Raises:
        ValueError: If the bytes are not a decodable image
    """
    data = np.frombuffer(image_bytes, dtype=np.uint8)
    bgr = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if bgr is None:
        raise ValueError("Could not decode image")
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


class RegionExtractor:
    """
    Crop a detection's bounding polygon out of the full image.

    The polygon is ordered top-left, top-right, bottom-right, bottom-left;
    only vertices 0 and 2 define the crop. Coordinates are floored and not
    clamped further, since the detector keeps them within [0, 1].
    """

    def extract(
        self,
        image: Union[bytes, np.ndarray],
        detection: Detection
    ) -> CroppedRegion:
        """
        Crop a detection from an image.

        Args:
            image: Encoded image bytes or RGB array (H x W x 3)
            detection: Detection with a 4-vertex normalized polygon

        Returns:
            CroppedRegion with the cropped pixels and pixel bounds

        Raises:
            InvalidRegion: If the crop width or height is <= 0
        """
        if isinstance(image, (bytes, bytearray)):
            image = decode_image(bytes(image))

        h, w = image.shape[:2]
        top_left = detection.bounding_polygon[0]
        bottom_right = detection.bounding_polygon[2]

        left = math.floor(top_left.x * w)
        top = math.floor(top_left.y * h)
        right = math.floor(bottom_right.x * w)
        bottom = math.floor(bottom_right.y * h)

        crop_w = right - left
        crop_h = bottom - top
        if crop_w <= 0 or crop_h <= 0:
            logger.warning(
                f"Degenerate region for '{detection.raw_label}': {crop_w}x{crop_h}"
            )
            raise InvalidRegion(crop_w, crop_h, detection.raw_label)

        pixels = image[top:bottom, left:right].copy()

        logger.debug(
            f"Cropped '{detection.raw_label}' at ({left}, {top}) size {crop_w}x{crop_h}"
        )

        return CroppedRegion(
            pixels=pixels,
            left=left,
            top=top,
            right=right,
            bottom=bottom
        )


def create_region_extractor() -> RegionExtractor:
    """
    Factory function to create region extractor.

    Returns:
        RegionExtractor instance
    """
    return RegionExtractor()
