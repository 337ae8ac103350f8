"""
Candidate Matching Module

Selects the garment candidate that best fits a free-text query using a
tiered scoring rule:

1. Exact label match
2. Label contains query
3. Query contains label
4. Query and label share a garment category
5. Word-level token overlap

Ties go to the candidate that came first in detector order.
"""
import logging
from typing import Dict, List, Optional, Set
import numpy as np
from dataclasses import dataclass, field

from apparel_pipeline.core.config import settings
from apparel_pipeline.core.exceptions import NoApparelDetected, NoMatchFound
from apparel_pipeline.cv.color_extractor import ColorDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ApparelCandidate:
    """One enriched, request-scoped garment detection."""
    raw_label: str
    cropped_pixels: np.ndarray
    refined_label: str
    color: ColorDescriptor


@dataclass
class MatchResult:
    """Chosen candidate, or a no-match carrying the labels on offer."""
    candidate: Optional[ApparelCandidate]
    score: int
    available_labels: List[str] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.candidate is not None

    def unwrap(self, query: str = "") -> ApparelCandidate:
        """
        Return the matched candidate.

        Raises:
            NoMatchFound: If no candidate matched
        """
        if self.candidate is None:
            raise NoMatchFound(query, self.available_labels)
        return self.candidate


class Matcher:
    """
    Score candidates against a query and pick exactly one.

    An empty query selects the first candidate. A non-empty query that
    scores zero everywhere is a no-match; it never falls back to the
    first candidate.
    """

    def __init__(
        self,
        category_keywords: Optional[Dict[str, List[str]]] = None,
        score_exact: Optional[int] = None,
        score_label_contains_query: Optional[int] = None,
        score_query_contains_label: Optional[int] = None,
        score_category: Optional[int] = None,
        score_token_exact: Optional[int] = None,
        score_token_partial: Optional[int] = None
    ):
        """
        Initialize matcher. Unset weights come from settings.

        Args:
            category_keywords: Category name -> keywords table
            score_exact: Weight for exact label equality
            score_label_contains_query: Weight when the label contains the query
            score_query_contains_label: Weight when the query contains the label
            score_category: Weight when both share a garment category
            score_token_exact: Per word pair that is equal
            score_token_partial: Per word pair where one contains the other
        """
        self.category_keywords = (
            category_keywords if category_keywords is not None else settings.CATEGORY_KEYWORDS
        )
        self.score_exact = _pick(score_exact, settings.SCORE_EXACT)
        self.score_label_contains_query = _pick(
            score_label_contains_query, settings.SCORE_LABEL_CONTAINS_QUERY
        )
        self.score_query_contains_label = _pick(
            score_query_contains_label, settings.SCORE_QUERY_CONTAINS_LABEL
        )
        self.score_category = _pick(score_category, settings.SCORE_CATEGORY)
        self.score_token_exact = _pick(score_token_exact, settings.SCORE_TOKEN_EXACT)
        self.score_token_partial = _pick(score_token_partial, settings.SCORE_TOKEN_PARTIAL)

    def categories_of(self, text: str) -> Set[str]:
        """Categories whose keywords appear in text."""
        return {
            category
            for category, keywords in self.category_keywords.items()
            if any(keyword.lower() in text for keyword in keywords)
        }

    def token_overlap(self, query: str, label: str) -> int:
        total = 0
        for query_word in query.split():
            for label_word in label.split():
                if query_word == label_word:
                    total += self.score_token_exact
                elif query_word in label_word or label_word in query_word:
                    total += self.score_token_partial
        # Many-word labels must never reach the exact-match score
        return min(total, self.score_exact - 1)

    def score(self, query: str, label: str) -> int:
        """
        Score a single label against a query.

        Args:
            query: Free-text query
            label: Candidate's refined label

        Returns:
            Integer score, 0 meaning no relation
        """
        query = query.lower().strip()
        label = label.lower().strip()

        if query == label:
            return self.score_exact
        if query in label:
            return self.score_label_contains_query
        if label in query:
            return self.score_query_contains_label
        if self.categories_of(query) & self.categories_of(label):
            return self.score_category
        return self.token_overlap(query, label)

    def match(self, candidates: List[ApparelCandidate], query: Optional[str]) -> MatchResult:
        """
        Select one candidate for a query.

        Args:
            candidates: CandidateSet in detector order
            query: Free-text request (may be empty)

        Returns:
            MatchResult with the chosen candidate, or a no-match carrying
            every candidate's refined label

        Raises:
            NoApparelDetected: If candidates is empty
        """
        if not candidates:
            raise NoApparelDetected()

        labels = [c.refined_label for c in candidates]

        if not query or not query.strip():
            logger.info(f"Empty query, selecting first candidate '{labels[0]}'")
            return MatchResult(candidate=candidates[0], score=0, available_labels=labels)

        best = None
        best_score = 0
        for candidate in candidates:
            candidate_score = self.score(query, candidate.refined_label)
            logger.debug(f"Score '{query}' vs '{candidate.refined_label}' = {candidate_score}")
            # Strict comparison keeps the earliest candidate on ties
            if candidate_score > best_score:
                best = candidate
                best_score = candidate_score

        if best is None:
            logger.info(f"No candidate matched '{query}' among {labels}")
            return MatchResult(candidate=None, score=0, available_labels=labels)

        logger.info(f"Matched '{query}' -> '{best.refined_label}' (score={best_score})")
        return MatchResult(candidate=best, score=best_score, available_labels=labels)


def _pick(value: Optional[int], default: int) -> int:
    return default if value is None else value


def create_matcher() -> Matcher:
    """
    Factory function to create matcher with configured weights.

    Returns:
        Matcher instance
    """
    return Matcher()
