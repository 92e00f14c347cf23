"""
Tests for the optional LLM enhancement layer.

No network: a scripted LLMProvider stands in for the model.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from derigo.enhanced import (
    DEFAULT_MODEL_CONFIDENCE,
    MAX_PROMPT_CONTENT,
    apply_enhanced,
    build_enhanced_prompt,
    enhance_result,
    parse_enhanced_response,
    validate_intent,
)
from derigo.llm import LLMProvider
from derigo.models import ClassificationResult, ExtractedAuthor


class ScriptedProvider(LLMProvider):
    """Returns a fixed response, or raises a fixed error."""

    name = "scripted"

    def __init__(self, response: str = "", error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt, system_instruction=None, temperature=0.7, json_mode=False):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def _content(**overrides) -> dict:
    content = {
        "economic": {"score": -40, "reasoning": "left-leaning policy language"},
        "social": {"score": 10, "reasoning": ""},
        "authority": {"score": 0},
        "globalism": {"score": 25},
        "truthfulness": {"score": 80},
    }
    content.update(overrides)
    return content


def _local() -> ClassificationResult:
    return ClassificationResult(
        economic=5, social=5, authority=5, globalism=5,
        truth_score=50, confidence=0.3, source="local", timestamp=1.0,
    )


# ============================================================
# PROMPT
# ============================================================

class TestPrompt:

    def test_truncates_long_content(self):
        prompt = build_enhanced_prompt("x" * 5000, "https://example.com/a")
        assert "x" * MAX_PROMPT_CONTENT + "..." in prompt
        assert "x" * (MAX_PROMPT_CONTENT + 1) not in prompt

    def test_short_content_kept_whole(self):
        prompt = build_enhanced_prompt("A short text.", "https://example.com/a")
        assert "A short text.\n" in prompt
        assert "Author Information" not in prompt

    def test_author_context(self):
        author = ExtractedAuthor(
            identifier="someone", platform="twitter", display_name="Some One",
            metadata={"followers": 12},
        )
        prompt = build_enhanced_prompt("Text.", "https://example.com/a", author)
        assert "- Identifier: someone" in prompt
        assert "- Display Name: Some One" in prompt
        assert '"followers": 12' in prompt


# ============================================================
# RESPONSE PARSING
# ============================================================

class TestParsing:

    def test_nested_layout(self):
        analysis = parse_enhanced_response({
            "content": _content(),
            "author": {
                "authenticity": {"score": 30, "reasoning": "templated"},
                "coordination": {"score": 70},
                "intent": {"primary": "troll", "confidence": 0.8},
            },
            "confidence": 0.9,
            "claims": [{"claim": "x", "assessment": "unverified"}, "junk"],
        })
        assert analysis.economic.score == -40
        assert analysis.economic.reasoning == "left-leaning policy language"
        assert analysis.authenticity.score == 30
        assert analysis.coordination.score == 70
        assert analysis.intent == "troll"
        assert analysis.intent_confidence == 0.8
        assert analysis.confidence == 0.9
        assert analysis.claims == ({"claim": "x", "assessment": "unverified"},)

    def test_flat_layout(self):
        analysis = parse_enhanced_response({**_content(), "confidence": 0.8})
        assert analysis.globalism.score == 25
        assert analysis.intent is None
        assert analysis.authenticity is None
        assert analysis.coordination is None

    def test_scores_clamped(self):
        analysis = parse_enhanced_response({
            "content": _content(economic={"score": 150}, truthfulness={"score": -5}),
            "author": {"coordination": {"score": 400}},
            "confidence": 3,
        })
        assert analysis.economic.score == 100
        assert analysis.truthfulness.score == 0
        assert analysis.coordination.score == 100
        assert analysis.confidence == 1.0

    def test_missing_or_zero_confidence_defaults(self):
        assert parse_enhanced_response(_content()).confidence == DEFAULT_MODEL_CONFIDENCE
        zero = parse_enhanced_response({**_content(), "confidence": 0})
        assert zero.confidence == DEFAULT_MODEL_CONFIDENCE

    def test_string_with_surrounding_prose(self):
        text = "Here is the analysis:\n" + json.dumps({"content": _content()}) + "\nDone."
        assert parse_enhanced_response(text).truthfulness.score == 80

    def test_camel_case_intent(self):
        analysis = parse_enhanced_response({
            "content": _content(),
            "author": {"intent": {"primary": "stateSponsored"}},
        })
        assert analysis.intent == "state_sponsored"
        assert analysis.intent_confidence == DEFAULT_MODEL_CONFIDENCE

    def test_unknown_intent_dropped(self):
        assert validate_intent("villain") is None
        assert validate_intent(3) is None
        analysis = parse_enhanced_response({
            "content": _content(), "author": {"intent": {"primary": "villain"}},
        })
        assert analysis.intent is None
        assert analysis.intent_confidence == 0.0

    def test_missing_content_score(self):
        content = _content()
        del content["social"]
        with pytest.raises(ValueError, match="social"):
            parse_enhanced_response({"content": content})

    def test_non_numeric_score(self):
        with pytest.raises(ValueError):
            parse_enhanced_response(_content(economic={"score": "high"}))
        with pytest.raises(ValueError):
            parse_enhanced_response(_content(economic={"score": True}))

    def test_not_json(self):
        with pytest.raises(ValueError):
            parse_enhanced_response("I cannot help with that.")
        with pytest.raises(ValueError):
            parse_enhanced_response("{broken json}")


# ============================================================
# MERGE
# ============================================================

class TestMerge:

    def test_confident_model_replaces_scores(self):
        analysis = parse_enhanced_response({**_content(), "confidence": 0.9})
        merged = apply_enhanced(_local(), analysis, threshold=0.7)
        assert merged.source == "enhanced"
        assert merged.economic == -40
        assert merged.truth_score == 80
        assert merged.confidence == 0.9
        assert merged.timestamp == 1.0

    def test_unsure_model_keeps_local(self):
        local = _local()
        analysis = parse_enhanced_response({**_content(), "confidence": 0.6})
        assert apply_enhanced(local, analysis, threshold=0.7) is local

    def test_threshold_inclusive(self):
        analysis = parse_enhanced_response({**_content(), "confidence": 0.7})
        assert apply_enhanced(_local(), analysis, threshold=0.7).source == "enhanced"

    def _with_author(self):
        from dataclasses import replace
        from derigo.author import default_author_classification
        return replace(_local(), author=default_author_classification())

    def test_author_scores_blended(self):
        analysis = parse_enhanced_response({
            "content": _content(),
            "author": {
                "authenticity": {"score": 30},
                "coordination": {"score": 71},
                "intent": {"primary": "troll", "confidence": 0.8},
            },
            "confidence": 0.9,
        })
        merged = apply_enhanced(self._with_author(), analysis, threshold=0.7)
        # (50 x 0.4 + 30 x 0.3) / 0.7 = 41.4 and (20 + 71) / 2 = 45.5
        assert merged.author.authenticity == 41
        assert merged.author.coordination == 46
        assert merged.author.intent.primary == "organic"
        intent_signal = [s for s in merged.author.signals if s.type == "model_intent"]
        assert len(intent_signal) == 1
        assert intent_signal[0].value == "troll"
        assert intent_signal[0].weight == 0.8
        assert intent_signal[0].direction == "suspicious"

    def test_missing_author_scores_keep_local(self):
        local = self._with_author()
        analysis = parse_enhanced_response({"content": _content(), "confidence": 0.9})
        merged = apply_enhanced(local, analysis, threshold=0.7)
        assert merged.author.authenticity == local.author.authenticity
        assert merged.author.coordination == local.author.coordination
        assert merged.author.signals == ()

    def test_unsure_model_leaves_author(self):
        local = self._with_author()
        analysis = parse_enhanced_response({
            "content": _content(), "author": {"authenticity": {"score": 0}}, "confidence": 0.5,
        })
        assert apply_enhanced(local, analysis, threshold=0.7).author is local.author

    def test_no_author_profile(self):
        analysis = parse_enhanced_response({
            "content": _content(), "author": {"authenticity": {"score": 0}}, "confidence": 0.9,
        })
        assert apply_enhanced(_local(), analysis, threshold=0.7).author is None


# ============================================================
# END TO END
# ============================================================

class TestEnhanceResult:

    def test_enhanced(self):
        provider = ScriptedProvider(json.dumps({"content": _content(), "confidence": 0.95}))
        merged = asyncio.run(
            enhance_result(_local(), provider, "Some text.", "https://example.com/a")
        )
        assert merged.source == "enhanced"
        assert len(provider.prompts) == 1

    def test_fenced_json(self):
        body = json.dumps({"content": _content(), "confidence": 0.95})
        provider = ScriptedProvider(f"```json\n{body}\n```")
        merged = asyncio.run(enhance_result(_local(), provider, "Text.", "https://example.com/a"))
        assert merged.source == "enhanced"

    def test_garbage_keeps_local(self):
        local = _local()
        provider = ScriptedProvider("the model rambled instead")
        assert asyncio.run(enhance_result(local, provider, "Text.", "https://example.com/a")) is local

    def test_invalid_scores_keep_local(self):
        local = _local()
        provider = ScriptedProvider(json.dumps({"content": {"economic": {"score": 1}}}))
        assert asyncio.run(enhance_result(local, provider, "Text.", "https://example.com/a")) is local

    def test_transport_error_propagates(self):
        provider = ScriptedProvider(error=RuntimeError("connection reset"))
        with pytest.raises(RuntimeError):
            asyncio.run(enhance_result(_local(), provider, "Text.", "https://example.com/a"))
