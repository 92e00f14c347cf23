"""
Derigo — Content Bias, Credibility and Author Classification Engine

Transparent, rule-based scoring of web content on four political axes,
a truthfulness estimate, and an author authenticity/intent profile,
followed by a user-configurable filter decision.

Public API:
  - classify_content:     Axis scores, truth score and confidence for a text
  - classify_author:      Authenticity, coordination and intent for an author
  - extract_signals:      Author-behaviour heuristics from raw text
  - merge_preferences:    Overlay a site profile onto global preferences
  - decide_filter_action: none / badge / overlay / block for a result
  - analyze_page:         Full pipeline with cache and reference lookups
  - ReferenceStore:       Once-loaded keyword, source and known-actor tables
  - MemoryResultCache:    TTL cache for classification and author results
  - LLMProvider:          Abstract LLM interface for enhanced analysis

Usage:
    from derigo import classify_content, decide_filter_action, UserPreferences
    from derigo import reference_store
"""

__version__ = "1.0.0"

from derigo.models import (
    AXES,
    INTENTS,
    AuthorClassification,
    AuthorSignal,
    AxisScore,
    ClassificationResult,
    ContentSignals,
    ExtractedAuthor,
    FilterAction,
    IntentAssessment,
    KeywordEntry,
    KnownActorEntry,
    SourceEntry,
)
from derigo.scorer import (
    classify_content,
    score_axis,
    blend_with_source,
    estimate_truth,
    estimate_confidence,
    normalize_text,
)
from derigo.signals import extract_signals
from derigo.author import (
    classify_author,
    score_author,
    domain_author,
    default_author_classification,
)
from derigo.preferences import (
    UNSET,
    UserPreferences,
    ProfileOverrides,
    SiteProfile,
    merge_preferences,
    effective_preferences,
    profile_for_domain,
    domain_matches,
    is_whitelisted,
)
from derigo.filter import decide_filter_action
from derigo.reference import ReferenceData, ReferenceStore, load_reference, reference_store
from derigo.cache import ResultCache, MemoryResultCache, result_cache
from derigo.analyzer import PageAnalysis, analyze_page, should_analyze_url
from derigo.llm import LLMProvider
