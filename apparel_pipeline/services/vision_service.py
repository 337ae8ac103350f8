"""
Vision provider adapters.

- GoogleVisionService: object localization, label detection and image
  properties through Google Cloud Vision
- OpenCVColorService: offline dominant colors via k-means clustering
"""
import logging
from typing import Any, List, Optional

import cv2
import numpy as np
from google.api_core import exceptions as google_exceptions
from google.cloud import vision

from apparel_pipeline.core.config import settings
from apparel_pipeline.core.exceptions import ExternalServiceFailure
from apparel_pipeline.schemas.detection import (
    Detection,
    DominantColor,
    LabelAnnotation,
    NormalizedVertex,
)

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class GoogleVisionService:
    """
    Google Cloud Vision adapter for detection, labeling and color.

    Every call uses a per-call timeout and no client-side retry; failures
    surface as ExternalServiceFailure.
    """

    SERVICE_NAME = "google_vision"

    def __init__(self, client: Optional[Any] = None, timeout: Optional[float] = None):
        """
        Initialize Vision client.

        Args:
            client: Preconfigured ImageAnnotatorClient (created if None)
            timeout: Per-call timeout in seconds (defaults to settings)
        """
        self.client = client or vision.ImageAnnotatorClient()
        self.timeout = settings.SERVICE_TIMEOUT_SECONDS if timeout is None else timeout

    def _annotate(self, operation: str, image_bytes: bytes):
        method = getattr(self.client, operation)
        try:
            response = method(
                image=vision.Image(content=image_bytes),
                retry=None,
                timeout=self.timeout,
            )
        except (google_exceptions.GoogleAPIError, TimeoutError) as e:
            logger.error(f"❌ Vision {operation} failed: {e}")
            raise ExternalServiceFailure(self.SERVICE_NAME, operation, str(e)) from e

        if response.error.message:
            logger.error(f"❌ Vision {operation} returned error: {response.error.message}")
            raise ExternalServiceFailure(self.SERVICE_NAME, operation, response.error.message)

        return response

    def detect(self, image_bytes: bytes) -> List[Detection]:
        """
        Localize objects in an image.

        Returns:
            Detections in the order Vision returned them
        """
        response = self._annotate("object_localization", image_bytes)

        detections = []
        for annotation in response.localized_object_annotations:
            vertices = [
                NormalizedVertex(x=_clamp_unit(v.x), y=_clamp_unit(v.y))
                for v in annotation.bounding_poly.normalized_vertices
            ]
            if len(vertices) != 4:
                logger.warning(
                    f"Skipping '{annotation.name}' with {len(vertices)} polygon vertices"
                )
                continue
            detections.append(Detection(
                raw_label=annotation.name,
                confidence=_clamp_unit(annotation.score),
                bounding_polygon=vertices
            ))

        logger.info(f"Vision localized {len(detections)} objects")
        return detections

    def labels_for(self, crop_bytes: bytes) -> List[LabelAnnotation]:
        response = self._annotate("label_detection", crop_bytes)
        return [
            LabelAnnotation(description=label.description, confidence=_clamp_unit(label.score))
            for label in response.label_annotations
        ]

    def dominant_colors(self, crop_bytes: bytes) -> List[DominantColor]:
        response = self._annotate("image_properties", crop_bytes)
        colors = response.image_properties_annotation.dominant_colors.colors
        return [
            DominantColor(r=c.color.red, g=c.color.green, b=c.color.blue)
            for c in colors
        ]


class OpenCVColorService:
    """
    Offline dominant-color adapter.

    Clusters crop pixels with k-means and reports cluster centers ordered
    by cluster size, largest first.
    """

    SERVICE_NAME = "opencv"

    def __init__(self, clusters: int = 3, attempts: int = 5):
        """
        Initialize color service.

        Args:
            clusters: Number of k-means clusters
            attempts: k-means restarts
        """
        self.clusters = clusters
        self.attempts = attempts

    def dominant_colors(self, crop_bytes: bytes) -> List[DominantColor]:
        data = np.frombuffer(crop_bytes, dtype=np.uint8)
        bgr = cv2.imdecode(data, cv2.IMREAD_COLOR)
        if bgr is None:
            raise ExternalServiceFailure(self.SERVICE_NAME, "dominant_colors", "undecodable crop")

        pixels = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB).reshape(-1, 3).astype(np.float32)
        k = min(self.clusters, len(pixels))

        criteria = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, 10, 1.0)
        _, labels, centers = cv2.kmeans(
            pixels, k, None, criteria, self.attempts, cv2.KMEANS_PP_CENTERS
        )

        counts = np.bincount(labels.flatten(), minlength=k)
        order = np.argsort(-counts, kind="stable")

        return [
            DominantColor(r=float(centers[i][0]), g=float(centers[i][1]), b=float(centers[i][2]))
            for i in order
        ]
