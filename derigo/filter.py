"""
Filter Decision Engine

Applies effective preferences to a ClassificationResult and returns a
single FilterAction. Checks run in a fixed order and the first failure
wins: content bias, then truthfulness, then author identity.

Usage:
    from derigo.filter import decide_filter_action
    action = decide_filter_action(result, effective_prefs)
    if action.action != "none":
        print(action.action, action.reason)
"""

from __future__ import annotations

import logging
from typing import Optional

from derigo.models import ClassificationResult, FilterAction
from derigo.preferences import Range, UserPreferences

logger = logging.getLogger(__name__)

INACTIVE_MODES = ("off", "disabled")


def _in_range(value: int, bounds: Range) -> bool:
    if bounds is None:
        return True
    low, high = bounds
    return low <= value <= high


def failed_check(result: ClassificationResult, prefs: UserPreferences) -> Optional[str]:
    """Name of the first check the result fails, or None."""
    if not _in_range(result.economic, prefs.economic_range):
        return "economic"
    if not _in_range(result.social, prefs.social_range):
        return "social"
    if not _in_range(result.authority, prefs.authority_range):
        return "authority"
    if not _in_range(result.globalism, prefs.globalism_range):
        return "globalism"
    if result.truth_score < prefs.min_truth_score:
        return "truthfulness"

    author = result.author
    if author is not None:
        if author.authenticity < prefs.min_authenticity:
            return "authenticity"
        if author.coordination > prefs.max_coordination:
            return "coordination"
        if author.intent.primary in prefs.blocked_intents:
            return "author_intent"

    return None


def decide_filter_action(result: ClassificationResult, prefs: UserPreferences) -> FilterAction:
    """Map a result and effective preferences to none/badge/overlay/block."""
    if prefs.display_mode in INACTIVE_MODES:
        return FilterAction(action="none", result=result)

    reason = failed_check(result, prefs)
    if reason is not None:
        logger.debug(
            f"Filter triggered: {reason}",
            extra={"action": prefs.display_mode, "reason": reason},
        )
        return FilterAction(action=prefs.display_mode, result=result, reason=reason)

    if prefs.display_mode == "badge":
        return FilterAction(action="badge", result=result)
    return FilterAction(action="none", result=result)
