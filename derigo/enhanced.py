"""
Enhanced Analysis — Optional LLM Second Opinion

Asks a configured LLMProvider for axis, truthfulness and author scores
and, when the model is confident enough, replaces the local axis and
truth scores with its own and blends its author scores into the local
profile. The local rule-based result is always computed first and is
kept whenever the model is unavailable, unsure, or returns something
unusable.

Two response layouts are accepted: the nested {content, author} form
the prompt asks for, and an older flat form with the axes at top level.

Usage:
    from derigo.enhanced import enhance_result
    result = await enhance_result(result, provider, text, url, author=author)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from derigo.config import settings
from derigo.llm import LLMProvider
from derigo.models import (
    AXES,
    INTENTS,
    AuthorClassification,
    AuthorSignal,
    ClassificationResult,
    ExtractedAuthor,
)
from derigo.scorer import round_half_up

logger = logging.getLogger(__name__)

MAX_PROMPT_CONTENT = 2000
DEFAULT_MODEL_CONFIDENCE = 0.5

# camelCase spellings some models echo back
_INTENT_ALIASES = {"stateSponsored": "state_sponsored", "state-sponsored": "state_sponsored"}

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class ScoredReason:
    score: float
    reasoning: str = ""


@dataclass(frozen=True)
class EnhancedAnalysis:
    """Parsed, clamped model response."""
    economic: ScoredReason
    social: ScoredReason
    authority: ScoredReason
    globalism: ScoredReason
    truthfulness: ScoredReason
    authenticity: Optional[ScoredReason] = None
    coordination: Optional[ScoredReason] = None
    intent: Optional[str] = None
    intent_confidence: float = 0.0
    confidence: float = DEFAULT_MODEL_CONFIDENCE
    claims: tuple[dict, ...] = field(default_factory=tuple)


SYSTEM_INSTRUCTION = (
    "You are a careful media analyst. Be objective and evidence-based. "
    "Only output valid JSON."
)


def build_enhanced_prompt(
    text: str,
    url: str,
    author: Optional[ExtractedAuthor] = None,
) -> str:
    """Prompt asking for the nested content/author JSON layout."""
    content = text if len(text) <= MAX_PROMPT_CONTENT else text[:MAX_PROMPT_CONTENT] + "..."

    author_context = ""
    if author is not None:
        lines = [
            "Author Information:",
            f"- Identifier: {author.identifier}",
            f"- Platform: {author.platform}",
        ]
        if author.display_name:
            lines.append(f"- Display Name: {author.display_name}")
        if author.profile_url:
            lines.append(f"- Profile URL: {author.profile_url}")
        if author.metadata:
            lines.append(f"- Metadata: {json.dumps(author.metadata, default=str)}")
        author_context = "\n".join(lines) + "\n"

    return f"""Analyze this content for political alignment, factual accuracy, and author authenticity.

URL: {url}
{author_context}
Content:
{content}

Respond with a JSON object containing:
{{
  "content": {{
    "economic": {{"score": <-100 to +100, left to right>, "reasoning": "<brief explanation>"}},
    "social": {{"score": <-100 to +100, progressive to conservative>, "reasoning": "<brief explanation>"}},
    "authority": {{"score": <-100 to +100, libertarian to authoritarian>, "reasoning": "<brief explanation>"}},
    "globalism": {{"score": <-100 to +100, nationalist to globalist>, "reasoning": "<brief explanation>"}},
    "truthfulness": {{"score": <0 to 100>, "reasoning": "<brief explanation>"}}
  }},
  "author": {{
    "authenticity": {{"score": <0 to 100, bot-like to human>, "reasoning": "<brief explanation>"}},
    "coordination": {{"score": <0 to 100, organic to orchestrated campaign>, "reasoning": "<brief explanation>"}},
    "intent": {{
      "primary": "<{'|'.join(INTENTS)}>",
      "confidence": <0 to 1>,
      "reasoning": "<brief explanation>"
    }}
  }},
  "confidence": <0 to 1>,
  "claims": [{{"claim": "<factual claim found>", "assessment": "<verified/unverified/false>"}}]
}}

Author intent categories:
- organic: Genuine individual sharing their views
- troll: Account primarily seeking to provoke or disrupt
- bot: Automated account with non-human posting patterns
- state_sponsored: Account linked to government influence operations
- commercial: Account promoting products/services or paid content
- activist: Organized advocacy account (not necessarily bad, but coordinated)"""


# ============================================================
# RESPONSE PARSING
# ============================================================

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _scored(block: Any, low: float, high: float, name: str) -> ScoredReason:
    if not isinstance(block, dict) or not _is_number(block.get("score")):
        raise ValueError(f"Missing numeric score for '{name}'")
    return ScoredReason(
        score=_clamp(block["score"], low, high),
        reasoning=str(block.get("reasoning") or ""),
    )


def _optional_scored(block: Any, low: float, high: float) -> Optional[ScoredReason]:
    if isinstance(block, dict) and _is_number(block.get("score")):
        return ScoredReason(_clamp(block["score"], low, high), str(block.get("reasoning") or ""))
    return None


def validate_intent(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = _INTENT_ALIASES.get(value, value)
    return value if value in INTENTS else None


def parse_enhanced_response(payload: str | dict) -> EnhancedAnalysis:
    """
    Parse a model response into an EnhancedAnalysis.

    Accepts a dict or a string containing a JSON object. Every score is
    clamped to its range. Raises ValueError if the content scores are
    missing or not numeric. Author scores and intent are optional and
    left as None when absent or invalid.
    """
    if isinstance(payload, str):
        match = _JSON_OBJECT.search(payload)
        if match is None:
            raise ValueError("No JSON object found in response")
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in response: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError("Response is not a JSON object")

    confidence = payload.get("confidence")
    if _is_number(confidence) and confidence > 0:
        confidence = _clamp(confidence, 0.0, 1.0)
    else:
        confidence = DEFAULT_MODEL_CONFIDENCE
    claims = payload.get("claims") or []
    claims = tuple(c for c in claims if isinstance(c, dict)) if isinstance(claims, list) else ()

    nested = isinstance(payload.get("content"), dict)
    content = payload["content"] if nested else payload
    axes = {axis: _scored(content.get(axis), -100, 100, axis) for axis in AXES}
    truthfulness = _scored(content.get("truthfulness"), 0, 100, "truthfulness")

    if not nested:
        return EnhancedAnalysis(
            **axes, truthfulness=truthfulness, confidence=confidence, claims=claims,
        )

    author = payload.get("author") if isinstance(payload.get("author"), dict) else {}
    intent_block = author.get("intent") if isinstance(author.get("intent"), dict) else {}
    intent = validate_intent(intent_block.get("primary"))
    intent_confidence = intent_block.get("confidence")
    if intent is None:
        intent_confidence = 0.0
    elif _is_number(intent_confidence):
        intent_confidence = _clamp(intent_confidence, 0.0, 1.0)
    else:
        intent_confidence = DEFAULT_MODEL_CONFIDENCE
    return EnhancedAnalysis(
        **axes,
        truthfulness=truthfulness,
        authenticity=_optional_scored(author.get("authenticity"), 0, 100),
        coordination=_optional_scored(author.get("coordination"), 0, 100),
        intent=intent,
        intent_confidence=intent_confidence,
        confidence=confidence,
        claims=claims,
    )


# ============================================================
# MERGE
# ============================================================

# Local / model weights for author scores
AUTHENTICITY_WEIGHTS = (0.4, 0.3)
COORDINATION_WEIGHTS = (0.5, 0.5)


def _blend(local: int, model: Optional[ScoredReason], weights: tuple[float, float]) -> int:
    if model is None:
        return local
    local_weight, model_weight = weights
    value = (local * local_weight + model.score * model_weight) / (local_weight + model_weight)
    return int(_clamp(round_half_up(value), 0, 100))


def _merge_author(author: AuthorClassification, analysis: EnhancedAnalysis) -> AuthorClassification:
    """Blend the model's author scores into the local profile."""
    signals = author.signals
    if analysis.intent is not None:
        signals += (AuthorSignal(
            type="model_intent",
            value=analysis.intent,
            weight=analysis.intent_confidence,
            direction="authentic" if analysis.intent == "organic" else "suspicious",
        ),)
    return replace(
        author,
        authenticity=_blend(author.authenticity, analysis.authenticity, AUTHENTICITY_WEIGHTS),
        coordination=_blend(author.coordination, analysis.coordination, COORDINATION_WEIGHTS),
        signals=signals,
    )


def apply_enhanced(
    result: ClassificationResult,
    analysis: EnhancedAnalysis,
    threshold: Optional[float] = None,
) -> ClassificationResult:
    """
    Merge a confident model response into result.

    Axis and truth scores are replaced outright. When result carries an
    author profile, the model's authenticity is blended in at 0.4 local
    to 0.3 model and its coordination at 0.5 / 0.5; its intent is
    recorded as a `model_intent` signal without changing the local
    intent distribution.
    """
    threshold = settings.ENHANCED_CONFIDENCE_THRESHOLD if threshold is None else threshold
    if analysis.confidence < threshold:
        return result
    author = result.author
    if author is not None:
        author = _merge_author(author, analysis)
    return replace(
        result,
        economic=round_half_up(analysis.economic.score),
        social=round_half_up(analysis.social.score),
        authority=round_half_up(analysis.authority.score),
        globalism=round_half_up(analysis.globalism.score),
        truth_score=round_half_up(analysis.truthfulness.score),
        confidence=max(result.confidence, analysis.confidence),
        source="enhanced",
        author=author,
    )


async def enhance_result(
    result: ClassificationResult,
    provider: LLMProvider,
    text: str,
    url: str,
    author: Optional[ExtractedAuthor] = None,
    threshold: Optional[float] = None,
) -> ClassificationResult:
    """
    Ask the provider for a second opinion and merge it into result.

    Unusable model output keeps the local result. Provider transport
    errors propagate to the caller.
    """
    try:
        payload = await provider.generate_json(
            build_enhanced_prompt(text, url, author),
            system_instruction=SYSTEM_INSTRUCTION,
        )
        analysis = parse_enhanced_response(payload)
    except ValueError as e:
        logger.warning("Enhanced response rejected", extra={"url": url, "error": str(e)})
        return result

    merged = apply_enhanced(result, analysis, threshold)
    logger.info(
        "Enhanced analysis applied" if merged is not result else "Enhanced analysis below threshold",
        extra={"url": url, "confidence": analysis.confidence},
    )
    return merged
