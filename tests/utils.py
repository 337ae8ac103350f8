"""
Shared helpers for building test images, detections and candidates.
"""
import io

import cv2
import numpy as np
from PIL import Image

from apparel_pipeline.cv.color_extractor import ColorDescriptor, rgb_to_hex
from apparel_pipeline.cv.matcher import ApparelCandidate
from apparel_pipeline.schemas.detection import Detection, NormalizedVertex


def encode_rgb(pixels: np.ndarray, ext: str = ".png") -> bytes:
    """Encode an RGB array with OpenCV."""
    ok, buffer = cv2.imencode(ext, cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


def encode_pil(pixels: np.ndarray, image_format: str = "PNG") -> bytes:
    """Encode an RGB/RGBA array with Pillow."""
    output = io.BytesIO()
    Image.fromarray(pixels).save(output, format=image_format)
    return output.getvalue()


def decode_pil(image_bytes: bytes) -> np.ndarray:
    return np.array(Image.open(io.BytesIO(image_bytes)))


def make_detection(label: str, x0: float, y0: float, x1: float, y1: float,
                   confidence: float = 0.9) -> Detection:
    """Detection with an axis-aligned polygon (TL, TR, BR, BL)."""
    return Detection(
        raw_label=label,
        confidence=confidence,
        bounding_polygon=[
            NormalizedVertex(x=x0, y=y0),
            NormalizedVertex(x=x1, y=y0),
            NormalizedVertex(x=x1, y=y1),
            NormalizedVertex(x=x0, y=y1),
        ],
    )


def make_candidate(refined_label: str, rgb=(0, 0, 0), raw_label=None) -> ApparelCandidate:
    r, g, b = rgb
    return ApparelCandidate(
        raw_label=raw_label or refined_label,
        cropped_pixels=np.zeros((2, 2, 3), dtype=np.uint8),
        refined_label=refined_label,
        color=ColorDescriptor(r=r, g=g, b=b, hex=rgb_to_hex(r, g, b), color_name="test"),
    )

