"""
Unit tests for query matching.

Tests the tiered scoring rule:
- Exact, substring and reverse-substring tiers
- Shared garment category tier
- Token overlap tier
- Empty-query and no-match behavior
"""
import pytest

from apparel_pipeline.core.exceptions import NoApparelDetected, NoMatchFound
from apparel_pipeline.cv.matcher import Matcher
from tests.utils import make_candidate


@pytest.fixture
def matcher():
    return Matcher()


@pytest.fixture
def shirt_and_jeans():
    return [
        make_candidate("t-shirt", (255, 0, 0)),
        make_candidate("jeans", (0, 0, 255)),
    ]


@pytest.mark.unit
class TestScoring:
    """Test individual score tiers."""

    def test_exact_match(self, matcher):
        assert matcher.score("shirt", "shirt") == 1000

    def test_exact_match_ignores_case_and_whitespace(self, matcher):
        assert matcher.score("  Shirt ", "SHIRT") == 1000

    def test_label_contains_query(self, matcher):
        assert matcher.score("shirt", "t-shirt") == 500

    def test_query_contains_label(self, matcher):
        assert matcher.score("blue jeans please", "jeans") == 400

    def test_shared_category(self, matcher):
        assert matcher.score("red shirt", "t-shirt") == 300

    def test_different_categories_fall_through(self, matcher):
        assert matcher.score("red shirt", "jeans") == 0

    def test_token_exact_overlap(self, matcher):
        assert matcher.score("floral print", "floral pattern") == 50

    def test_token_partial_overlap(self, matcher):
        assert matcher.score("wool stripe", "striped polo") == 25

    def test_no_relation(self, matcher):
        assert matcher.score("purple hat", "t-shirt") == 0

    def test_exact_is_the_maximum(self, matcher):
        label = " ".join(["silk"] * 30)
        assert matcher.score("silk " * 30, label) == 1000
        assert matcher.score("silk", label) < 1000
        assert matcher.score(" ".join(["silk"] * 29) + " x", label) < 1000

    def test_custom_weights(self):
        matcher = Matcher(score_exact=7, score_category=3)

        assert matcher.score("shirt", "shirt") == 7
        assert matcher.score("red shirt", "t-shirt") == 3


@pytest.mark.unit
class TestMatch:
    """Test candidate selection."""

    def test_red_shirt_picks_t_shirt(self, matcher, shirt_and_jeans):
        result = matcher.match(shirt_and_jeans, "red shirt")

        assert result.matched
        assert result.candidate.refined_label == "t-shirt"
        assert result.score > 0
        assert result.unwrap("red shirt") is shirt_and_jeans[0]

    def test_purple_hat_is_no_match(self, matcher, shirt_and_jeans):
        result = matcher.match(shirt_and_jeans, "purple hat")

        assert not result.matched
        assert result.available_labels == ["t-shirt", "jeans"]

        with pytest.raises(NoMatchFound) as exc_info:
            result.unwrap("purple hat")

        assert exc_info.value.available_labels == ["t-shirt", "jeans"]
        assert "t-shirt, jeans" in str(exc_info.value)

    def test_empty_query_picks_first(self, matcher, shirt_and_jeans):
        for query in ("", "   ", None):
            result = matcher.match(shirt_and_jeans, query)
            assert result.candidate is shirt_and_jeans[0]

    def test_ties_keep_detector_order(self, matcher):
        candidates = [
            make_candidate("shirt", raw_label="Shirt"),
            make_candidate("shirt", raw_label="Top"),
        ]

        result = matcher.match(candidates, "shirt")

        assert result.candidate.raw_label == "Shirt"

    def test_highest_score_wins(self, matcher):
        candidates = [
            make_candidate("t-shirt"),
            make_candidate("shirt"),
            make_candidate("jeans"),
        ]

        result = matcher.match(candidates, "shirt")

        assert result.candidate.refined_label == "shirt"
        assert result.score == 1000

    def test_deterministic(self, matcher, shirt_and_jeans):
        results = [matcher.match(shirt_and_jeans, "red shirt") for _ in range(5)]

        assert {id(r.candidate) for r in results} == {id(shirt_and_jeans[0])}
        assert {r.score for r in results} == {results[0].score}

    def test_empty_candidate_set(self, matcher):
        with pytest.raises(NoApparelDetected):
            matcher.match([], "shirt")
        with pytest.raises(NoApparelDetected):
            matcher.match([], "")
