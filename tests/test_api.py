"""
API Integration Tests — Endpoint Verification

Tests every public API endpoint using FastAPI's TestClient.
No LLM calls: the provider defaults to "none", so every result
is computed locally.

These tests catch:
  - Schema mismatches (response model vs actual data)
  - Route registration issues
  - Request validation gaps
  - Response format regressions
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

LEFT_TEXT = "We need to nationalize healthcare and raise the wealth tax. " * 3
RIGHT_TEXT = "Deregulation and tax cuts will boost free enterprise across the country. " * 3


# --- Fixtures ---

@pytest.fixture(scope="module")
def client():
    """Create a test client for the Derigo API."""
    from api.main import app
    with TestClient(app) as c:
        yield c


# ============================================================
# HEALTH
# ============================================================

class TestHealth:
    """Verify /health returns correct structure."""

    def test_health_returns_200(self, client):
        assert client.get("/health").status_code == 200

    def test_health_fields(self, client):
        data = client.get("/health").json()
        assert data["status"] == "operational"
        assert data["engine_version"]
        assert data["keywords"] >= 100
        assert data["sources"] > 0
        assert data["known_actors"] > 0
        assert "llm_provider" in data
        assert set(data["cache"]) == {"entries", "hits", "misses", "hit_rate"}


# ============================================================
# CLASSIFY
# ============================================================

class TestClassify:

    def test_left_text(self, client):
        r = client.post("/classify", json={"text": LEFT_TEXT})
        assert r.status_code == 200
        data = r.json()
        assert data["economic"] < -30
        assert data["labels"]["economic"] == "Left"
        assert data["source"] == "local"
        assert data["author"] is None
        assert 0 <= data["truth_score"] <= 100

    def test_known_source(self, client):
        data = client.post("/classify", json={
            "text": "The committee met on Tuesday.",
            "url": "https://www.reuters.com/world/story",
        }).json()
        assert data["truth_score"] == 92
        assert data["labels"]["truth"] == "Highly credible"

    def test_with_author(self, client):
        data = client.post("/classify", json={
            "text": RIGHT_TEXT,
            "author": {"identifier": "someone", "platform": "Reddit",
                       "metadata": {"account_age": 3}},
        }).json()
        author = data["author"]
        assert author["platform"] == "reddit"
        assert author["author_id"] == "someone"
        assert any(s["type"] == "new_account" for s in author["signals"])
        assert abs(sum(author["intent"]["breakdown"].values()) - 1.0) < 0.01

    def test_empty_text_rejected(self, client):
        assert client.post("/classify", json={"text": ""}).status_code == 422

    def test_missing_text_rejected(self, client):
        assert client.post("/classify", json={}).status_code == 422


# ============================================================
# CLASSIFY AUTHOR
# ============================================================

class TestClassifyAuthor:

    def test_known_actor(self, client):
        r = client.post("/classify/author", json={
            "text": LEFT_TEXT,
            "author": {"identifier": "TEN_GOP", "platform": "twitter"},
        })
        assert r.status_code == 200
        data = r.json()
        assert data["intent"]["primary"] == "state_sponsored"
        assert data["intent"]["label"] == "State-Sponsored"
        assert data["known_actor"]["category"] == "state_sponsored"
        assert data["data_quality"] == "high"

    def test_domain_fallback(self, client):
        data = client.post("/classify/author", json={
            "text": LEFT_TEXT, "url": "https://www.foxnews.com/politics/story",
        }).json()
        assert data["author_id"] == "foxnews.com"
        assert data["platform"] == "unknown"
        assert data["known_actor"] is None

    def test_author_or_url_required(self, client):
        assert client.post("/classify/author", json={"text": LEFT_TEXT}).status_code == 422

    def test_malformed_metadata_degrades(self, client):
        r = client.post("/classify/author", json={
            "text": LEFT_TEXT,
            "author": {"identifier": "someone", "platform": "twitter",
                       "metadata": {"account_age": "12", "verified": "yes"}},
        })
        assert r.status_code == 200
        types = {s["type"] for s in r.json()["signals"]}
        assert "new_account" not in types
        assert "verified_account" not in types


# ============================================================
# FILTER
# ============================================================

class TestFilter:

    def test_out_of_range_overlay(self, client):
        r = client.post("/filter", json={
            "result": {"economic": 80},
            "preferences": {"economic_range": [-50, 50], "display_mode": "overlay"},
        })
        assert r.status_code == 200
        data = r.json()
        assert data["action"] == "overlay"
        assert data["reason"] == "economic"
        assert data["reason_label"] == "Economic alignment outside your preferred range"

    def test_pass_in_badge_mode(self, client):
        data = client.post("/filter", json={"result": {}}).json()
        assert data == {"action": "badge", "reason": None, "reason_label": None, "profile": None}

    def test_author_intent_blocked(self, client):
        data = client.post("/filter", json={
            "result": {"author": {"authenticity": 80, "coordination": 10, "intent": "bot"}},
            "preferences": {"blocked_intents": ["bot"], "display_mode": "block"},
        }).json()
        assert data["action"] == "block"
        assert data["reason"] == "author_intent"

    def test_site_profile_explicit_zero(self, client):
        body = {
            "result": {"truth_score": 20},
            "preferences": {
                "min_truth_score": 50,
                "display_mode": "block",
                "site_profiles": [{
                    "id": "lenient", "name": "Lenient",
                    "domains": ["example.com"],
                    "overrides": {"min_truth_score": 0},
                }],
            },
        }
        without = client.post("/filter", json=body).json()
        assert without["reason"] == "truthfulness"

        within = client.post("/filter", json={**body, "domain": "news.example.com"}).json()
        assert within["action"] == "none"
        assert within["profile"] == "Lenient"

    def test_inverted_range_rejected(self, client):
        r = client.post("/filter", json={
            "result": {}, "preferences": {"economic_range": [50, -50]},
        })
        assert r.status_code == 422

    def test_unknown_intent_rejected(self, client):
        r = client.post("/filter", json={
            "result": {}, "preferences": {"blocked_intents": ["villain"]},
        })
        assert r.status_code == 422

    def test_out_of_bounds_score_rejected(self, client):
        assert client.post("/filter", json={"result": {"economic": 150}}).status_code == 422


# ============================================================
# ANALYZE
# ============================================================

class TestAnalyze:

    def test_full_pipeline_then_cache(self, client):
        body = {
            "text": RIGHT_TEXT,
            "url": "https://example.org/api-test/story",
            "preferences": {"economic_range": [-50, 50], "display_mode": "overlay"},
        }
        first = client.post("/analyze", json=body).json()
        assert first["analyzed"] is True
        assert first["cached"] is False
        assert first["domain"] == "example.org"
        assert first["action"]["action"] == "overlay"
        assert first["action"]["reason"] == "economic"

        second = client.post("/analyze", json=body).json()
        assert second["cached"] is True
        assert second["result"]["economic"] == first["result"]["economic"]

    def test_skipped(self, client):
        data = client.post("/analyze", json={
            "text": "Short.", "url": "https://example.org/api-test/short",
        }).json()
        assert data["analyzed"] is False
        assert data["skipped"] == "insufficient_content"
        assert data["result"] is None
        assert data["action"] is None

    def test_whitelisted(self, client):
        data = client.post("/analyze", json={
            "text": LEFT_TEXT,
            "url": "https://www.example.org/api-test/white",
            "preferences": {"whitelisted_domains": ["example.org"]},
        }).json()
        assert data["skipped"] == "whitelisted"

    def test_profile_name_reported(self, client):
        data = client.post("/analyze", json={
            "text": LEFT_TEXT,
            "url": "https://blog.example.net/post",
            "preferences": {"site_profiles": [
                {"id": "blogs", "name": "Blogs", "domains": ["example.net"],
                 "overrides": {"display_mode": "block", "min_truth_score": 80}},
            ]},
        }).json()
        assert data["profile"] == "Blogs"
        assert data["action"]["action"] == "block"
        assert data["action"]["profile"] == "Blogs"


# ============================================================
# SOURCES
# ============================================================

class TestSources:

    def test_known_source(self, client):
        r = client.get("/sources/www.reuters.com")
        assert r.status_code == 200
        data = r.json()
        assert data["domain"] == "reuters.com"
        assert data["factual_rating"] == 92
        assert set(data["bias_labels"]) == {"economic", "social", "authority", "globalism"}

    def test_unknown_source(self, client):
        r = client.get("/sources/unknown.example")
        assert r.status_code == 404
        assert "unknown.example" in r.json()["detail"]
