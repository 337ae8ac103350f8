"""
Apparel Filter Module

Keeps only garment-relevant detections and removes duplicate labels.
"""
import logging
from typing import Iterable, List, Optional

from apparel_pipeline.core.config import settings
from apparel_pipeline.schemas.detection import Detection

logger = logging.getLogger(__name__)


def contains_keyword(text: Optional[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test of text against any keyword."""
    if not text:
        return False
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


class ApparelFilter:
    """
    Filter raw detections down to garment candidates.

    A detection is kept iff its label contains any garment keyword.
    Duplicates by exact raw label are dropped, keeping the first occurrence
    in detector order.
    """

    def __init__(self, keywords: Optional[List[str]] = None):
        """
        Initialize apparel filter.

        Args:
            keywords: Garment keywords (defaults to configured keywords
                      plus generic apparel terms)
        """
        if keywords is None:
            keywords = settings.APPAREL_KEYWORDS + settings.GENERIC_APPAREL_TERMS
        self.keywords = [k.lower() for k in keywords]

    def is_apparel(self, label: str) -> bool:
        return contains_keyword(label, self.keywords)

    def filter(self, detections: List[Detection]) -> List[Detection]:
        """
        Filter and deduplicate detections.

        Args:
            detections: Detections in detector-returned order

        Returns:
            Apparel detections, unique by raw_label, order preserved
        """
        seen = set()
        kept = []

        for detection in detections:
            if not self.is_apparel(detection.raw_label):
                logger.debug(f"Skipping non-apparel detection '{detection.raw_label}'")
                continue
            if detection.raw_label in seen:
                continue
            seen.add(detection.raw_label)
            kept.append(detection)

        logger.info(f"Apparel filter kept {len(kept)}/{len(detections)} detections")
        return kept


def create_apparel_filter() -> ApparelFilter:
    """
    Factory function to create apparel filter.

    Returns:
        ApparelFilter instance
    """
    return ApparelFilter()
