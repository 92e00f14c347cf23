"""
Display Labels

Human-readable wording for scores and filter verdicts.
"""

from __future__ import annotations

AXIS_LABELS: dict[str, tuple[str, str]] = {
    "economic": ("Left", "Right"),
    "social": ("Progressive", "Conservative"),
    "authority": ("Libertarian", "Authoritarian"),
    "globalism": ("Nationalist", "Globalist"),
}

CENTER_BAND = 33

INTENT_INFO: dict[str, dict[str, str]] = {
    "organic": {
        "label": "Organic",
        "description": "Genuine personal or organizational expression",
    },
    "troll": {
        "label": "Troll",
        "description": "Provocative, disruptive intent",
    },
    "bot": {
        "label": "Bot",
        "description": "Automated spam or amplification",
    },
    "state_sponsored": {
        "label": "State-Sponsored",
        "description": "Government-affiliated disinformation",
    },
    "commercial": {
        "label": "Commercial",
        "description": "Marketing or promotional content",
    },
    "activist": {
        "label": "Activist",
        "description": "Organized advocacy campaigns",
    },
}

FILTER_REASONS: dict[str, str] = {
    "economic": "Economic alignment outside your preferred range",
    "social": "Social alignment outside your preferred range",
    "authority": "Authority alignment outside your preferred range",
    "globalism": "Globalism alignment outside your preferred range",
    "truthfulness": "Truthfulness score below your threshold",
    "authenticity": "Author authenticity below your minimum",
    "coordination": "Author coordination above your maximum",
    "author_intent": "Author intent type is blocked",
}


def format_axis_label(axis: str, score: int) -> str:
    low, high = AXIS_LABELS.get(axis, ("Low", "High"))
    if score < -CENTER_BAND:
        return low
    if score > CENTER_BAND:
        return high
    return "Center"


def truth_indicator(score: int) -> str:
    if score >= 80:
        return "Highly credible"
    if score >= 60:
        return "Generally reliable"
    if score >= 40:
        return "Mixed/unverified"
    return "Low credibility"


def authenticity_label(score: int) -> str:
    if score < 30:
        return "Bot-like"
    if score < 50:
        return "Suspicious"
    if score < 70:
        return "Unclear"
    return "Human"


def coordination_label(score: int) -> str:
    if score < 20:
        return "Organic"
    if score < 40:
        return "Independent"
    if score < 60:
        return "Aligned"
    if score < 80:
        return "Coordinated"
    return "Orchestrated"


def intent_label(intent: str) -> str:
    return INTENT_INFO.get(intent, {}).get("label", intent)


def intent_description(intent: str) -> str:
    return INTENT_INFO.get(intent, {}).get("description", "")


def format_filter_reason(reason: str) -> str:
    """Unknown reasons are returned unchanged."""
    return FILTER_REASONS.get(reason, reason)
