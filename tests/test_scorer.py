"""
Tests for the content scorer.

Covers:
  - Text normalization
  - Axis scoring (occurrence cap, context terms, bounds)
  - Source reputation blending
  - Truth and confidence estimation
  - End-to-end classify_content on the bundled keyword table
"""

from __future__ import annotations

import pytest

from derigo.models import AXES, KeywordEntry, SourceEntry
from derigo.reference import load_reference
from derigo.scorer import (
    blend_with_source,
    classify_content,
    estimate_confidence,
    estimate_truth,
    normalize_text,
    round_half_up,
    score_axis,
)


@pytest.fixture(scope="module")
def keywords():
    return load_reference().keywords


def _source(factual: int = 80, **bias) -> SourceEntry:
    rating = {axis: 0 for axis in AXES}
    rating.update(bias)
    return SourceEntry(
        domain="example.com", name="Example", factual_rating=factual,
        bias_rating=rating, category="news",
    )


# ============================================================
# NORMALIZATION
# ============================================================

class TestNormalize:

    def test_lowercases_and_strips_punctuation(self):
        assert normalize_text("Hello, World!  Tax-cuts") == "hello world tax cuts"

    def test_empty(self):
        assert normalize_text("   ") == ""


# ============================================================
# AXIS SCORER
# ============================================================

class TestAxisScorer:

    def test_no_matches_scores_zero(self, keywords):
        for axis in AXES:
            result = score_axis(normalize_text("The weather was mild on Tuesday."), keywords, axis)
            assert result.score == 0
            assert result.matches == 0

    def test_left_economic_text(self, keywords):
        text = normalize_text("We need to nationalize healthcare and raise the wealth tax")
        result = score_axis(text, keywords, "economic")
        assert result.score < -30
        assert result.matches == 2

    def test_right_economic_text(self, keywords):
        text = normalize_text("Deregulation and tax cuts will boost free enterprise")
        result = score_axis(text, keywords, "economic")
        assert result.score > 30
        assert result.matches == 3

    def test_occurrence_cap(self):
        table = [
            KeywordEntry("tax cuts", "economic", 1, 6),
            KeywordEntry("wealth tax", "economic", -1, 10),
        ]
        text = normalize_text("tax cuts tax cuts tax cuts tax cuts tax cuts wealth tax")
        # 3 capped x 6 - 10 = 8 over 4 occurrences x 10
        assert score_axis(text, table, "economic").score == 20

    def test_max_occurrences_override(self):
        table = [KeywordEntry("tax cuts", "economic", 1, 6),
                 KeywordEntry("wealth tax", "economic", -1, 10)]
        text = normalize_text("tax cuts tax cuts wealth tax")
        assert score_axis(text, table, "economic", max_occurrences=1).score == -20

    def test_context_required(self):
        table = [KeywordEntry("union", "economic", -1, 5, context=("workers",))]
        assert score_axis("the union met", table, "economic").matches == 0
        assert score_axis("the union workers met", table, "economic").score == -50

    def test_word_boundaries(self):
        table = [KeywordEntry("ban", "authority", 1, 5)]
        assert score_axis("a banner on the bank", table, "authority").matches == 0

    def test_other_axes_ignored(self):
        table = [KeywordEntry("tax cuts", "economic", 1, 10)]
        assert score_axis("tax cuts", table, "social").score == 0

    def test_bounded(self):
        table = [KeywordEntry(t, "globalism", -1, 10) for t in ("a b", "c d", "e f")]
        result = score_axis("a b c d e f a b a b a b", table, "globalism")
        assert result.score == -100

    def test_half_rounds_up(self):
        table = [KeywordEntry("aa", "social", 1, 2), KeywordEntry("bb", "social", -1, 1),
                 KeywordEntry("cc", "social", 1, 1), KeywordEntry("dd", "social", -1, 1)]
        # net 1 over 4 occurrences x 10 = 2.5
        assert score_axis("aa bb cc dd", table, "social").score == 3
        mirrored = [KeywordEntry(k.term, k.axis, -k.direction, k.weight) for k in table]
        assert score_axis("aa bb cc dd", mirrored, "social").score == -2


class TestRounding:

    def test_halves_toward_positive(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(-2.5) == -2

    def test_non_halves(self):
        assert round_half_up(1.4) == 1
        assert round_half_up(-1.6) == -2
        assert round_half_up(7) == 7


# ============================================================
# REPUTATION BLENDER
# ============================================================

class TestBlend:

    def test_no_source_passes_through(self):
        assert blend_with_source(42, "economic", None) == 42

    def test_blend_weights(self):
        assert blend_with_source(-50, "economic", _source(economic=50)) == -10

    def test_missing_axis_rating_treated_as_zero(self):
        source = SourceEntry("x.com", "X", 50, {"economic": 10}, "news")
        assert blend_with_source(50, "social", source) == 30


# ============================================================
# TRUTH ESTIMATOR
# ============================================================

class TestTruth:

    def test_neutral_baseline(self):
        assert estimate_truth("The committee met on Tuesday.") == 50

    def test_source_baseline(self):
        assert estimate_truth("The committee met on Tuesday.", _source(factual=80)) == 80

    def test_clickbait_penalty(self):
        assert estimate_truth("You won't believe what happens next") == 40

    def test_caps_penalty(self):
        assert estimate_truth("THIS IS TOTALLY OUTRAGEOUS NEWS") == 45

    def test_sensational_words_penalty(self):
        assert estimate_truth("amazing incredible explosive bombshell") == 45

    def test_citation_and_statistic_bonus(self):
        text = "According to the agency, prices rose 5% last quarter."
        assert estimate_truth(text) == 58

    def test_long_quote_bonus(self):
        text = 'She said "the plan will be reviewed next month" at the hearing.'
        assert estimate_truth(text) == 52

    def test_clamped_high(self):
        text = 'According to data from 2023, "a quote that is long enough to count" rose 5%.'
        assert estimate_truth(text, _source(factual=100)) == 100

    def test_clamped_low(self):
        text = "SHOCKING BOMBSHELL! AMAZING INCREDIBLE EXPLOSIVE TERRIFYING"
        assert estimate_truth(text, _source(factual=5)) == 0

    def test_empty_text(self):
        assert estimate_truth("") == 50


# ============================================================
# CONFIDENCE
# ============================================================

class TestConfidence:

    def test_minimum(self):
        assert estimate_confidence(0, False, 0) == pytest.approx(0.1)

    def test_components(self):
        assert estimate_confidence(5, True, 2500) == pytest.approx(0.6)

    def test_capped_at_one(self):
        assert estimate_confidence(100, True, 100_000) == pytest.approx(1.0)

    def test_monotonic_in_matches(self):
        assert estimate_confidence(10, False, 100) > estimate_confidence(1, False, 100)

    def test_not_rounded(self):
        # 0.1 + 0.02 + 1/5000 x 0.2
        assert estimate_confidence(1, False, 1) == pytest.approx(0.12004, abs=1e-9)


# ============================================================
# CLASSIFY CONTENT
# ============================================================

class TestClassifyContent:

    def test_result_shape(self, keywords):
        result = classify_content(
            "Deregulation and tax cuts will boost free enterprise", keywords,
        )
        assert result.source == "local"
        assert result.economic > 30
        assert result.social == 0
        assert result.author is None
        assert result.timestamp > 0

    def test_source_blending(self, keywords):
        source = _source(factual=90, economic=100)
        result = classify_content("The committee met on Tuesday.", keywords, source)
        assert result.economic == 40
        assert result.truth_score == 90
        assert result.confidence > 0.3

    def test_empty_text_is_bounded(self, keywords):
        result = classify_content("", keywords, timestamp=1.0)
        assert (result.economic, result.social, result.authority, result.globalism) == (0, 0, 0, 0)
        assert result.truth_score == 50
        assert result.confidence == pytest.approx(0.1)
        assert result.timestamp == 1.0

    def test_scores_within_bounds(self, keywords):
        text = ("America first! Border wall now! " * 20) + "martial law crackdown iron fist " * 5
        result = classify_content(text, keywords)
        for value in (result.economic, result.social, result.authority, result.globalism):
            assert -100 <= value <= 100
        assert 0 <= result.truth_score <= 100
        assert 0.0 <= result.confidence <= 1.0
        assert result.globalism < 0
        assert result.authority > 0
