"""
Content Signal Extractor

Derives author-behaviour heuristics from raw text: repetition,
templating, emotional density, attacks, bad faith, engagement bait,
promotion, affiliate links, whataboutism, personal voice and nuance.

Pure and deterministic. Every sub-score is computed independently.
"""

from __future__ import annotations

import re
from collections import Counter

from derigo.models import ContentSignals
from derigo.patterns import (
    AFFILIATE_PATTERNS,
    ATTACK_PATTERNS,
    BAD_FAITH_PATTERNS,
    EMOTIONAL_WORDS,
    ENGAGEMENT_BAIT_PATTERNS,
    NUANCE_MARKERS,
    PERSONAL_VOICE_MARKERS,
    PROMOTIONAL_PATTERNS,
    QUESTION_CAP,
    QUESTION_PATTERN,
    QUESTION_WEIGHT,
    RHETORICAL_QUESTION_PATTERN,
    TEMPLATE_PATTERNS,
    VOICE_SENTENCE_BONUS,
    VOICE_SENTENCE_LENGTH,
    WHATABOUTISM_PATTERNS,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]")
_NON_WORD = re.compile(r"[^\w\s]")
_TOKEN_STRIP = "\"'.,!?;:()[]{}<>*_-…“”‘’"

MIN_REPEAT_SENTENCE_LENGTH = 10


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]


def _count_all(patterns, text: str) -> int:
    return sum(len(p.findall(text)) for p in patterns)


# ============================================================
# INDIVIDUAL SIGNALS
# ============================================================

def repetition_score(sentences: list[str]) -> float:
    """Fraction of sentences whose normalized text occurs more than once."""
    if len(sentences) < 3:
        return 0.0

    buckets = Counter(
        _NON_WORD.sub("", s.lower()).strip()
        for s in sentences
        if len(s) > MIN_REPEAT_SENTENCE_LENGTH
    )
    repeated = sum(n for n in buckets.values() if n > 1)
    return min(1.0, repeated / len(sentences))


def template_score(text: str) -> float:
    return min(1.0, _count_all(TEMPLATE_PATTERNS, text) * 0.5)


def emotional_density(words: list[str]) -> float:
    hits = sum(1 for w in words if w in EMOTIONAL_WORDS)
    return hits / max(len(words), 1)


def personal_voice_score(text: str) -> float:
    score = sum(weight for pattern, weight in PERSONAL_VOICE_MARKERS if pattern.search(text))

    raw_sentences = _SENTENCE_SPLIT.split(text)
    if raw_sentences:
        avg_length = sum(len(s.strip()) for s in raw_sentences) / len(raw_sentences)
        low, high = VOICE_SENTENCE_LENGTH
        if low < avg_length < high:
            score += VOICE_SENTENCE_BONUS

    return min(1.0, score)


def nuance_score(text: str) -> float:
    score = sum(weight for pattern, weight in NUANCE_MARKERS if pattern.search(text))

    # Genuine questions count; rhetorical "really?" style ones do not
    questions = len(QUESTION_PATTERN.findall(text))
    if questions > 0 and not RHETORICAL_QUESTION_PATTERN.search(text):
        score += min(QUESTION_CAP, questions * QUESTION_WEIGHT)

    return min(1.0, score)


# ============================================================
# EXTRACTOR
# ============================================================

def extract_signals(text: str) -> ContentSignals:
    """Compute the full ContentSignals record for a text."""
    lower = text.lower()
    words = [w.strip(_TOKEN_STRIP) for w in lower.split()]
    words = [w for w in words if w]
    sentences = _sentences(text)
    sentence_count = max(len(sentences), 1)

    repetition = repetition_score(sentences)

    return ContentSignals(
        repetitive_patterns=repetition,
        template_likelihood=template_score(text),
        emotional_language_density=emotional_density(words),
        personal_attacks=float(_count_all(ATTACK_PATTERNS, text)),
        bad_faith_arguments=float(_count_all(BAD_FAITH_PATTERNS, text)),
        engagement_baiting=min(1.0, _count_all(ENGAGEMENT_BAIT_PATTERNS, text) * 0.3),
        promotional_language=_count_all(PROMOTIONAL_PATTERNS, lower) / sentence_count,
        affiliate_link_count=float(_count_all(AFFILIATE_PATTERNS, text)),
        whataboutism_density=(
            _count_all(WHATABOUTISM_PATTERNS, text) / len(_SENTENCE_BOUNDARY.split(text))
        ),
        personal_voice=personal_voice_score(text),
        nuanced_arguments=nuance_score(text),
        original_content=1.0 - repetition,
    )
