"""
Page Analyzer — Engine Boundary

Runs one page through the full pipeline:
  eligibility -> enabled -> whitelist -> site profile -> content cache
  -> length check -> content + author classification -> optional
  enhancement -> cache write -> filter decision

Scoring itself is pure. Everything that touches a collaborator (the
cache, reference lookups, the LLM provider) is wrapped here so a
failure is logged and treated as "no data", never raised into scoring.

Usage:
    from derigo.analyzer import analyze_page
    page = await analyze_page(text, url, reference=reference, preferences=prefs)
    if page.action and page.action.action != "none":
        print(page.action.action, page.action.reason)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlparse

from derigo.author import classify_author
from derigo.cache import ResultCache
from derigo.config import settings
from derigo.enhanced import enhance_result
from derigo.filter import decide_filter_action
from derigo.llm import LLMProvider
from derigo.logging import get_logger
from derigo.models import (
    AuthorClassification,
    ClassificationResult,
    ExtractedAuthor,
    FilterAction,
    KnownActorEntry,
    SourceEntry,
)
from derigo.patterns import SKIP_PATH_PATTERNS, SKIP_SCHEMES
from derigo.preferences import (
    SiteProfile,
    UserPreferences,
    is_whitelisted,
    merge_preferences,
    profile_for_domain,
)
from derigo.reference import ReferenceData, extract_host
from derigo.scorer import classify_content

logger = get_logger("analyzer")


@dataclass(frozen=True)
class PageAnalysis:
    """Outcome of analyze_page. `skipped` names why nothing was scored."""
    url: str
    domain: str
    result: Optional[ClassificationResult] = None
    action: Optional[FilterAction] = None
    profile: Optional[SiteProfile] = None
    skipped: Optional[str] = None
    cached: bool = False

    @property
    def analyzed(self) -> bool:
        return self.result is not None


def should_analyze_url(url: str) -> bool:
    """False for browser-internal pages, local files and account/checkout flows."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme.lower() in SKIP_SCHEMES:
        return False
    return not any(p.search(parsed.path) for p in SKIP_PATH_PATTERNS)


# ============================================================
# COLLABORATOR GUARDS
# ============================================================

async def _cached_result(cache: Optional[ResultCache], url: str) -> Optional[ClassificationResult]:
    if cache is None:
        return None
    try:
        return await cache.get_classification(url)
    except Exception as e:
        logger.warning("Cache read failed", extra={"url": url, "error": str(e)})
        return None


async def _store_result(cache: Optional[ResultCache], url: str, result: ClassificationResult) -> None:
    if cache is None:
        return
    try:
        await cache.put_classification(url, result)
    except Exception as e:
        logger.warning("Cache write failed", extra={"url": url, "error": str(e)})


def _lookup_source(reference: ReferenceData, url: str) -> Optional[SourceEntry]:
    try:
        return reference.source_for(url)
    except Exception as e:
        logger.warning("Source lookup failed", extra={"url": url, "error": str(e)})
        return None


def _lookup_actor(reference: ReferenceData, author: ExtractedAuthor) -> Optional[KnownActorEntry]:
    try:
        return reference.known_actor_for(author.platform, author.identifier)
    except Exception as e:
        logger.warning("Known-actor lookup failed",
                       extra={"author_key": author.key, "error": str(e)})
        return None


async def _author_profile(
    author: ExtractedAuthor,
    text: str,
    reference: ReferenceData,
    cache: Optional[ResultCache],
) -> AuthorClassification:
    if cache is not None:
        try:
            cached = await cache.get_author(author)
        except Exception as e:
            logger.warning("Author cache read failed",
                           extra={"author_key": author.key, "error": str(e)})
            cached = None
        if cached is not None:
            return cached

    profile = classify_author(author, text, _lookup_actor(reference, author))

    if cache is not None:
        try:
            await cache.put_author(author, profile)
        except Exception as e:
            logger.warning("Author cache write failed",
                           extra={"author_key": author.key, "error": str(e)})
    return profile


# ============================================================
# ORCHESTRATION
# ============================================================

async def analyze_page(
    text: str,
    url: str,
    *,
    reference: ReferenceData,
    preferences: UserPreferences,
    author: Optional[ExtractedAuthor] = None,
    cache: Optional[ResultCache] = None,
    provider: Optional[LLMProvider] = None,
    min_content_length: Optional[int] = None,
) -> PageAnalysis:
    """Classify one page and decide what to show for it."""
    start = time.time()
    domain = extract_host(url)

    if not should_analyze_url(url):
        return PageAnalysis(url=url, domain=domain, skipped="ineligible_url")
    if not preferences.enabled:
        return PageAnalysis(url=url, domain=domain, skipped="disabled")
    if is_whitelisted(preferences, domain):
        return PageAnalysis(url=url, domain=domain, skipped="whitelisted")

    profile = profile_for_domain(domain, preferences.site_profiles)
    effective = merge_preferences(preferences, profile)
    if effective.display_mode == "disabled":
        return PageAnalysis(url=url, domain=domain, profile=profile, skipped="profile_disabled")

    cached = await _cached_result(cache, url)
    if cached is not None:
        return PageAnalysis(
            url=url,
            domain=domain,
            result=cached,
            action=decide_filter_action(cached, effective),
            profile=profile,
            cached=True,
        )

    min_length = settings.MIN_CONTENT_LENGTH if min_content_length is None else min_content_length
    if len(text.strip()) < min_length:
        return PageAnalysis(url=url, domain=domain, profile=profile, skipped="insufficient_content")

    result = classify_content(text, reference.keywords, _lookup_source(reference, url))

    if author is not None:
        result = replace(result, author=await _author_profile(author, text, reference, cache))

    if provider is not None and effective.enable_enhanced_analysis:
        try:
            result = await enhance_result(result, provider, text, url, author=author)
        except Exception as e:
            logger.warning("Enhanced analysis failed",
                           extra={"url": url, "error": str(e), "error_type": type(e).__name__})

    await _store_result(cache, url, result)
    action = decide_filter_action(result, effective)

    logger.info(
        f"Page analyzed: action={action.action}",
        extra={
            "url": url,
            "domain": domain,
            "action": action.action,
            "reason": action.reason,
            "truth_score": result.truth_score,
            "duration_ms": int((time.time() - start) * 1000),
        },
    )
    return PageAnalysis(url=url, domain=domain, result=result, action=action, profile=profile)
