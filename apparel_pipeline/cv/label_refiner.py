"""
Label Refinement Module

Derives a garment-specific label for a cropped region from the ranked
labels of an external label service.
"""
import logging
from typing import List, Optional

from apparel_pipeline.core.config import settings
from apparel_pipeline.cv.apparel_filter import contains_keyword
from apparel_pipeline.schemas.detection import LabelAnnotation

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"


class LabelRefiner:
    """
    Pick the most specific garment label for a crop.

    Labels are consumed in the service's native ranking and never re-sorted.
    Category-level labels ("Clothing", "Footwear") are skipped so a
    specific garment ranked below them still wins. Fallback order: first
    garment label, then the raw detection label, then "unknown".
    """

    def __init__(
        self,
        label_service,
        keywords: Optional[List[str]] = None,
        excluded_terms: Optional[List[str]] = None
    ):
        """
        Initialize label refiner.

        Args:
            label_service: Provider implementing labels_for(crop_bytes)
            keywords: Garment keywords (defaults to configured keywords)
            excluded_terms: Category-level terms never returned as a label
        """
        self.label_service = label_service
        if excluded_terms is None:
            excluded_terms = settings.REFINER_EXCLUDED_TERMS
        self.excluded_terms = {term.lower() for term in excluded_terms}
        if keywords is None:
            keywords = settings.APPAREL_KEYWORDS
        self.keywords = [k for k in keywords if k.lower() not in self.excluded_terms]

    def is_specific(self, description: str) -> bool:
        """True if a label names a garment rather than a category."""
        if description.strip().lower() in self.excluded_terms:
            return False
        return contains_keyword(description, self.keywords)

    def choose(self, labels: List[LabelAnnotation], raw_label: Optional[str]) -> str:
        """Select a refined label from an already-ranked label list."""
        for label in labels:
            if self.is_specific(label.description):
                return label.description.strip()

        if raw_label and raw_label.strip():
            logger.debug(f"No garment label in {len(labels)} labels, using '{raw_label}'")
            return raw_label.strip()

        return UNKNOWN_LABEL

    def refine(self, crop_bytes: bytes, raw_label: Optional[str]) -> str:
        """
        Refine the label of a cropped region.

        Args:
            crop_bytes: Encoded crop
            raw_label: Detector label used as fallback

        Returns:
            Refined label string (never empty)

        Raises:
            ExternalServiceFailure: If the label service fails
        """
        labels = self.label_service.labels_for(crop_bytes)
        refined = self.choose(labels, raw_label)
        logger.debug(f"Refined '{raw_label}' -> '{refined}'")
        return refined
