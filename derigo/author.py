"""
Author Scorer — Authenticity, Coordination and Intent

Turns content signals, an optional known-actor record and whatever
profile metadata the extractor found into an AuthorClassification:
  1. Start from a fixed prior (mostly organic)
  2. Apply threshold rules over the content signals
  3. Let a known-actor record dominate the intent distribution
  4. Nudge for account metadata (new account, verified)
  5. Renormalize and pick the primary intent

Every applied rule is recorded as an AuthorSignal so the verdict can be
audited after the fact.

Usage:
    from derigo.author import classify_author
    actor = reference.known_actor_for(author.platform, author.identifier)
    profile = classify_author(author, text, known_actor=actor)
    print(profile.authenticity, profile.intent.primary)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlparse

from derigo.models import (
    INTENTS,
    AuthorClassification,
    AuthorSignal,
    ContentSignals,
    ExtractedAuthor,
    IntentAssessment,
    KnownActorEntry,
)
from derigo.scorer import round_half_up
from derigo.signals import extract_signals

logger = logging.getLogger(__name__)


# ============================================================
# RULE TABLE
# ============================================================

@dataclass(frozen=True)
class AuthorRule:
    """Fires when `signal` exceeds `threshold`."""
    signal: str                # ContentSignals field name
    threshold: float
    type: str                  # AuthorSignal.type recorded when fired
    weight: float
    direction: str = "suspicious"
    authenticity: int = 0
    coordination: int = 0
    intents: dict[str, float] = field(default_factory=dict)


BASE_AUTHENTICITY = 60
BASE_COORDINATION = 15

INTENT_PRIOR: dict[str, float] = {
    "organic": 0.6,
    "troll": 0.1,
    "bot": 0.1,
    "state_sponsored": 0.05,
    "commercial": 0.1,
    "activist": 0.05,
}

DEFAULT_RULES: tuple[AuthorRule, ...] = (
    # Bot
    AuthorRule("repetitive_patterns", 0.3, "repetitive_content", 0.25,
               authenticity=-25, intents={"bot": 0.25, "organic": -0.2}),
    AuthorRule("template_likelihood", 0.5, "template_detected", 0.3,
               authenticity=-30, intents={"bot": 0.3}),
    # Troll
    AuthorRule("emotional_language_density", 0.15, "emotional_language", 0.2,
               intents={"troll": 0.2, "organic": -0.1}),
    AuthorRule("personal_attacks", 2, "personal_attacks", 0.25,
               intents={"troll": 0.25, "organic": -0.15}),
    AuthorRule("engagement_baiting", 0.5, "engagement_bait", 0.2,
               intents={"troll": 0.2}),
    AuthorRule("bad_faith_arguments", 1, "bad_faith_arguments", 0.15,
               intents={"troll": 0.15}),
    # Commercial
    AuthorRule("promotional_language", 0.2, "promotional_language", 0.3,
               intents={"commercial": 0.3, "organic": -0.15}),
    AuthorRule("affiliate_link_count", 2, "affiliate_links", 0.25,
               intents={"commercial": 0.25}),
    # Coordination
    AuthorRule("whataboutism_density", 0.1, "whataboutism", 0.1,
               coordination=10, intents={"state_sponsored": 0.1, "troll": 0.1}),
    # Authenticity
    AuthorRule("personal_voice", 0.7, "personal_voice", 0.15, direction="authentic",
               authenticity=15, intents={"organic": 0.15}),
    AuthorRule("nuanced_arguments", 0.5, "nuanced_arguments", 0.1, direction="authentic",
               authenticity=10, intents={"organic": 0.1}),
    AuthorRule("original_content", 0.8, "original_content", 0.1, direction="authentic",
               authenticity=10),
)

# Known-actor blending targets
BOT_AUTHENTICITY_TARGET = 10
STATE_COORDINATION_TARGET = 85

NEW_ACCOUNT_DAYS = 30
NEW_ACCOUNT_PENALTY = -10
VERIFIED_BONUS = 15
VERIFIED_ORGANIC = 0.1

HIGH_QUALITY_ACTOR_CONFIDENCE = 0.8


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _meta(metadata: dict[str, Any], *keys: str) -> Any:
    """First present metadata value among snake_case / camelCase spellings."""
    for key in keys:
        if metadata.get(key) is not None:
            return metadata[key]
    return None


def _meta_number(metadata: dict[str, Any], *keys: str) -> Optional[float]:
    """Numeric metadata value, or None when missing or not a number."""
    value = _meta(metadata, *keys)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _meta_flag(metadata: dict[str, Any], key: str) -> Optional[bool]:
    value = _meta(metadata, key)
    return value if isinstance(value, bool) else None


# ============================================================
# SCORING
# ============================================================

def _normalize_intents(
    scores: dict[str, float],
    known_actor: Optional[KnownActorEntry],
) -> dict[str, float]:
    """Floor at zero and rescale to sum to 1, preserving known-actor mass."""
    floored = {k: max(0.0, v) for k, v in scores.items()}

    if known_actor is not None:
        category = known_actor.category
        pinned = known_actor.confidence
        others = {k: v for k, v in floored.items() if k != category}
        other_total = sum(others.values())
        remaining = 1.0 - pinned
        if other_total > 0:
            breakdown = {k: v / other_total * remaining for k, v in others.items()}
        else:
            breakdown = {k: remaining / len(others) for k in others}
        breakdown[category] = pinned
        return {k: breakdown[k] for k in INTENTS}

    total = sum(floored.values())
    if total <= 0:
        total = sum(INTENT_PRIOR.values())
        floored = dict(INTENT_PRIOR)
    return {k: floored[k] / total for k in INTENTS}


def determine_data_quality(
    signals: ContentSignals,
    known_actor: Optional[KnownActorEntry],
    metadata: dict[str, Any],
) -> str:
    if known_actor is not None and known_actor.confidence > HIGH_QUALITY_ACTOR_CONFIDENCE:
        return "high"

    score = 0.0
    if _meta_number(metadata, "account_age", "accountAge") is not None:
        score += 2
    if _meta_flag(metadata, "verified") is not None:
        score += 2
    if _meta_number(metadata, "followers") is not None:
        score += 1
    score += min(3.0, signals.nonzero_count() / 3)

    if score >= 6:
        return "high"
    if score >= 4:
        return "medium"
    if score >= 2:
        return "low"
    return "minimal"


def score_author(
    author: ExtractedAuthor,
    signals: ContentSignals,
    known_actor: Optional[KnownActorEntry] = None,
    *,
    rules: tuple[AuthorRule, ...] = DEFAULT_RULES,
    prior: Optional[dict[str, float]] = None,
) -> AuthorClassification:
    """Score an author from precomputed content signals."""
    authenticity = float(BASE_AUTHENTICITY)
    coordination = float(BASE_COORDINATION)
    intents = dict(prior or INTENT_PRIOR)
    collected: list[AuthorSignal] = []

    for rule in rules:
        value = getattr(signals, rule.signal)
        if value <= rule.threshold:
            continue
        authenticity += rule.authenticity
        coordination += rule.coordination
        for intent, delta in rule.intents.items():
            intents[intent] += delta
        collected.append(AuthorSignal(
            type=rule.type, value=value, weight=rule.weight, direction=rule.direction,
        ))

    if known_actor is not None:
        conf = known_actor.confidence
        category = known_actor.category
        intents = {
            k: (conf if k == category else v * (1 - conf))
            for k, v in intents.items()
        }
        if category == "bot":
            authenticity = round_half_up(authenticity * (1 - conf) + BOT_AUTHENTICITY_TARGET * conf)
        elif category == "state_sponsored":
            coordination = round_half_up(coordination * (1 - conf) + STATE_COORDINATION_TARGET * conf)
        collected.append(AuthorSignal(
            type="known_actor", value=category, weight=conf, direction="suspicious",
        ))

    metadata = author.metadata or {}
    account_age = _meta_number(metadata, "account_age", "accountAge")
    if account_age is not None and account_age < NEW_ACCOUNT_DAYS:
        authenticity += NEW_ACCOUNT_PENALTY
        collected.append(AuthorSignal(
            type="new_account", value=account_age, weight=0.1, direction="suspicious",
        ))

    if _meta_flag(metadata, "verified"):
        authenticity += VERIFIED_BONUS
        intents["organic"] += VERIFIED_ORGANIC
        collected.append(AuthorSignal(
            type="verified_account", value=True, weight=0.15, direction="authentic",
        ))

    breakdown = _normalize_intents(intents, known_actor)
    primary = max(INTENTS, key=lambda k: breakdown[k])

    return AuthorClassification(
        authenticity=int(_clamp(round_half_up(authenticity), 0, 100)),
        coordination=int(_clamp(round_half_up(coordination), 0, 100)),
        intent=IntentAssessment(
            primary=primary,
            confidence=breakdown[primary],
            breakdown=breakdown,
        ),
        signals=tuple(collected),
        data_quality=determine_data_quality(signals, known_actor, metadata),
        author_id=author.identifier,
        platform=author.platform,
        known_actor=known_actor,
    )


def classify_author(
    author: ExtractedAuthor,
    text: str,
    known_actor: Optional[KnownActorEntry] = None,
    **kwargs,
) -> AuthorClassification:
    """Extract signals from text and score the author."""
    profile = score_author(author, extract_signals(text), known_actor, **kwargs)
    logger.debug(
        f"Author classified: {profile.intent.primary}",
        extra={"author_key": author.key, "platform": author.platform},
    )
    return profile


# ============================================================
# FALLBACKS
# ============================================================

def domain_author(url: str) -> ExtractedAuthor:
    """Treat the site itself as the author when no byline is found."""
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        host = ""
    if host.startswith("www."):
        host = host[4:]
    identifier = host or "unknown"
    return ExtractedAuthor(
        identifier=identifier,
        platform="unknown",
        display_name=identifier,
        metadata={"is_organization": True, "domain": identifier},
    )


def default_author_classification() -> AuthorClassification:
    """Neutral profile used when no author could be identified."""
    return AuthorClassification(
        authenticity=50,
        coordination=20,
        intent=IntentAssessment(
            primary="organic",
            confidence=0.5,
            breakdown={
                "organic": 0.5,
                "troll": 0.1,
                "bot": 0.1,
                "state_sponsored": 0.1,
                "commercial": 0.1,
                "activist": 0.1,
            },
        ),
        signals=(),
        data_quality="minimal",
    )
