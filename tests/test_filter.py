"""
Tests for the filter decision engine.
"""

from __future__ import annotations

from derigo.filter import decide_filter_action, failed_check
from derigo.models import INTENTS, AuthorClassification, ClassificationResult, IntentAssessment
from derigo.preferences import UserPreferences


def _result(economic=0, social=0, authority=0, globalism=0, truth=60, author=None):
    return ClassificationResult(
        economic=economic, social=social, authority=authority, globalism=globalism,
        truth_score=truth, confidence=0.5, source="local", timestamp=0.0, author=author,
    )


def _profile(authenticity=70, coordination=15, intent="organic"):
    breakdown = {k: (1.0 if k == intent else 0.0) for k in INTENTS}
    return AuthorClassification(
        authenticity=authenticity, coordination=coordination,
        intent=IntentAssessment(intent, 1.0, breakdown), signals=(), data_quality="low",
    )


# ============================================================
# CONTENT CHECKS
# ============================================================

class TestContentChecks:

    def test_economic_out_of_range_overlays(self):
        prefs = UserPreferences(economic_range=(-50, 50), display_mode="overlay")
        action = decide_filter_action(_result(economic=80), prefs)
        assert action.action == "overlay"
        assert action.reason == "economic"

    def test_range_bounds_inclusive(self):
        prefs = UserPreferences(economic_range=(-50, 50), display_mode="block")
        assert decide_filter_action(_result(economic=50), prefs).reason is None
        assert decide_filter_action(_result(economic=-50), prefs).reason is None
        assert decide_filter_action(_result(economic=51), prefs).reason == "economic"

    def test_axes_checked_in_order(self):
        prefs = UserPreferences(social_range=(0, 10), globalism_range=(0, 10))
        assert failed_check(_result(social=-40, globalism=-40), prefs) == "social"

    def test_axis_before_truth(self):
        prefs = UserPreferences(authority_range=(-10, 10), min_truth_score=90)
        assert failed_check(_result(authority=60, truth=10), prefs) == "authority"

    def test_truthfulness(self):
        prefs = UserPreferences(min_truth_score=70, display_mode="block")
        action = decide_filter_action(_result(truth=69), prefs)
        assert action.action == "block"
        assert action.reason == "truthfulness"
        assert decide_filter_action(_result(truth=70), prefs).reason is None


# ============================================================
# AUTHOR CHECKS
# ============================================================

class TestAuthorChecks:

    def test_skipped_without_author(self):
        prefs = UserPreferences(min_authenticity=90, blocked_intents=("organic",))
        assert failed_check(_result(), prefs) is None

    def test_authenticity(self):
        prefs = UserPreferences(min_authenticity=50)
        assert failed_check(_result(author=_profile(authenticity=30)), prefs) == "authenticity"

    def test_coordination(self):
        prefs = UserPreferences(max_coordination=50)
        assert failed_check(_result(author=_profile(coordination=80)), prefs) == "coordination"

    def test_blocked_intent(self):
        prefs = UserPreferences(blocked_intents=("troll", "bot"))
        assert failed_check(_result(author=_profile(intent="bot")), prefs) == "author_intent"
        assert failed_check(_result(author=_profile(intent="organic")), prefs) is None

    def test_truth_before_author(self):
        prefs = UserPreferences(min_truth_score=80, min_authenticity=90)
        assert failed_check(_result(truth=10, author=_profile(authenticity=10)), prefs) == "truthfulness"


# ============================================================
# DISPLAY MODES
# ============================================================

class TestDisplayModes:

    def test_inactive_modes_never_filter(self):
        for mode in ("off", "disabled"):
            prefs = UserPreferences(economic_range=(0, 0), display_mode=mode)
            action = decide_filter_action(_result(economic=100), prefs)
            assert action.action == "none"
            assert action.reason is None

    def test_badge_on_pass(self):
        action = decide_filter_action(_result(), UserPreferences(display_mode="badge"))
        assert action.action == "badge"
        assert action.reason is None

    def test_block_mode_pass_shows_nothing(self):
        action = decide_filter_action(_result(), UserPreferences(display_mode="block"))
        assert action.action == "none"

    def test_badge_mode_failure(self):
        prefs = UserPreferences(min_truth_score=90, display_mode="badge")
        action = decide_filter_action(_result(truth=20), prefs)
        assert action.action == "badge"
        assert action.reason == "truthfulness"

    def test_action_carries_result(self):
        result = _result()
        assert decide_filter_action(result, UserPreferences()).result is result
