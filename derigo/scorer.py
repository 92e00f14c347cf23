"""
Content Scorer — Axis, Reputation, Truth and Confidence

Deterministic, rule-based scoring of a text on the four political axes,
blended with a known source's prior rating, plus a truth estimate and
a confidence figure. Zero API cost, no I/O.

Usage:
    from derigo.scorer import classify_content
    result = classify_content(text, reference.keywords, source=reference.source_for(url))
    print(result.economic, result.truth_score, result.confidence)
"""

from __future__ import annotations

import math
import re
import time
from functools import lru_cache
from typing import Iterable, Optional

from derigo.models import AXES, AxisScore, ClassificationResult, KeywordEntry, SourceEntry
from derigo.patterns import (
    CITATION_PHRASES,
    CLICKBAIT_PHRASES,
    LONG_QUOTE_PATTERN,
    SENSATIONAL_WORDS,
    STATISTIC_PATTERN,
)

# --- Tuned constants ---

MAX_OCCURRENCES = 3          # diminishing returns per keyword
MAX_KEYWORD_WEIGHT = 10

SOURCE_BIAS_WEIGHT = 0.4
KEYWORD_WEIGHT = 0.6

NEUTRAL_TRUTH = 50
CAPS_RATIO_THRESHOLD = 0.2
CAPS_PENALTY = -5
CLICKBAIT_PENALTY = -10
SENSATIONAL_WORD_LIMIT = 3
SENSATIONAL_PENALTY = -5
CITATION_BONUS = 5
STATISTIC_BONUS = 3
QUOTE_BONUS = 2

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def normalize_text(text: str) -> str:
    """Lowercase, punctuation to spaces, whitespace collapsed."""
    text = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(normalize_text(term))}\b")


# ============================================================
# AXIS SCORER
# ============================================================

def score_axis(
    text: str,
    keywords: Iterable[KeywordEntry],
    axis: str,
    *,
    max_occurrences: int = MAX_OCCURRENCES,
) -> AxisScore:
    """
    Score one axis of already-normalized text.

    Each keyword contributes direction x weight per occurrence, with
    occurrences capped at max_occurrences. The signed sum is divided by
    the counted occurrences times the maximum weight, so the result is
    the mean signed weight per occurrence mapped onto -100..100.
    """
    total = 0.0
    weight_total = 0.0
    occurrences = 0
    matches = 0

    for entry in keywords:
        if entry.axis != axis:
            continue
        if entry.context and not any(c in text for c in entry.context):
            continue

        count = len(_term_pattern(entry.term).findall(text))
        if count == 0:
            continue

        effective = min(count, max_occurrences)
        total += entry.direction * entry.weight * effective
        weight_total += entry.weight * effective
        occurrences += effective
        matches += 1

    if matches == 0:
        return AxisScore(score=0, matches=0, weight_total=0.0)

    score = round_half_up(total / (max(occurrences, 1) * MAX_KEYWORD_WEIGHT) * 100)
    return AxisScore(
        score=int(_clamp(score, -100, 100)),
        matches=matches,
        weight_total=weight_total,
    )


def score_axes(
    text: str,
    keywords: Iterable[KeywordEntry],
    *,
    max_occurrences: int = MAX_OCCURRENCES,
) -> dict[str, AxisScore]:
    """Score all four axes of already-normalized text."""
    keywords = tuple(keywords)
    return {
        axis: score_axis(text, keywords, axis, max_occurrences=max_occurrences)
        for axis in AXES
    }


# ============================================================
# REPUTATION BLENDER
# ============================================================

def blend_with_source(score: int, axis: str, source: Optional[SourceEntry]) -> int:
    """Blend a keyword score with the source's prior rating for that axis."""
    if source is None:
        return score
    prior = source.bias_rating.get(axis, 0)
    blended = round_half_up(prior * SOURCE_BIAS_WEIGHT + score * KEYWORD_WEIGHT)
    return int(_clamp(blended, -100, 100))


# ============================================================
# TRUTH ESTIMATOR
# ============================================================

def _caps_ratio(text: str) -> float:
    words = text.split()
    if not words:
        return 0.0
    shouting = sum(1 for w in words if len(w) > 2 and w.isupper())
    return shouting / len(words)


def estimate_truth(text: str, source: Optional[SourceEntry] = None) -> int:
    """Source factual rating (or neutral 50) adjusted by content-quality signals."""
    score = source.factual_rating if source is not None else NEUTRAL_TRUTH
    lower = text.lower()

    if _caps_ratio(text) > CAPS_RATIO_THRESHOLD:
        score += CAPS_PENALTY

    if any(phrase in lower for phrase in CLICKBAIT_PHRASES):
        score += CLICKBAIT_PENALTY

    sensational = sum(1 for word in SENSATIONAL_WORDS if word in lower)
    if sensational > SENSATIONAL_WORD_LIMIT:
        score += SENSATIONAL_PENALTY

    if any(phrase in lower for phrase in CITATION_PHRASES):
        score += CITATION_BONUS

    if STATISTIC_PATTERN.search(text):
        score += STATISTIC_BONUS

    if LONG_QUOTE_PATTERN.search(text):
        score += QUOTE_BONUS

    return int(_clamp(round_half_up(score), 0, 100))


# ============================================================
# CONFIDENCE ESTIMATOR
# ============================================================

def estimate_confidence(total_matches: int, source_known: bool, text_length: int) -> float:
    """Confidence in 0..1 from match density, source presence and length."""
    confidence = (
        0.1
        + min(0.4, total_matches * 0.02)
        + (0.3 if source_known else 0.0)
        + min(1.0, text_length / 5000) * 0.2
    )
    return min(1.0, confidence)


# ============================================================
# CLASSIFICATION
# ============================================================

def classify_content(
    text: str,
    keywords: Iterable[KeywordEntry],
    source: Optional[SourceEntry] = None,
    *,
    max_occurrences: int = MAX_OCCURRENCES,
    timestamp: Optional[float] = None,
) -> ClassificationResult:
    """Run the full local content pipeline on raw text."""
    normalized = normalize_text(text)
    axes = score_axes(normalized, keywords, max_occurrences=max_occurrences)
    total_matches = sum(a.matches for a in axes.values())

    return ClassificationResult(
        economic=blend_with_source(axes["economic"].score, "economic", source),
        social=blend_with_source(axes["social"].score, "social", source),
        authority=blend_with_source(axes["authority"].score, "authority", source),
        globalism=blend_with_source(axes["globalism"].score, "globalism", source),
        truth_score=estimate_truth(text, source),
        confidence=estimate_confidence(total_matches, source is not None, len(text)),
        source="local",
        timestamp=timestamp if timestamp is not None else time.time(),
    )
