"""
Engine Data Model

Plain dataclasses passed between the scoring components. Reference
entries and results are frozen; nothing here performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional

# --- Axes and intents ---

AXES = ("economic", "social", "authority", "globalism")

INTENTS = (
    "organic",
    "troll",
    "bot",
    "state_sponsored",
    "commercial",
    "activist",
)

DATA_QUALITY_LEVELS = ("high", "medium", "low", "minimal")


# ============================================================
# REFERENCE DATA
# ============================================================

@dataclass(frozen=True)
class KeywordEntry:
    """A weighted, directional lexical signal for one axis."""
    term: str
    axis: str              # one of AXES
    direction: int         # -1 (left/progressive/libertarian/nationalist) or +1
    weight: int            # 1-10
    context: tuple[str, ...] = ()  # at least one must appear, if given


@dataclass(frozen=True)
class SourceEntry:
    """Prior bias and factuality rating for a known domain."""
    domain: str
    name: str
    factual_rating: int                  # 0-100
    bias_rating: dict[str, int]          # axis -> -100..100
    category: str                        # news, opinion, satire, ...
    country: Optional[str] = None


@dataclass(frozen=True)
class KnownActorEntry:
    """A persisted identity with an asserted intent category."""
    identifier: str
    platform: str          # platform name or "all"
    category: str          # one of INTENTS
    confidence: float      # 0-1
    source: str
    added_date: str
    attribution: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.platform}:{self.identifier}"


@dataclass
class ExtractedAuthor:
    """Author identity as produced by the page extractor."""
    identifier: str
    platform: str
    display_name: Optional[str] = None
    profile_url: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.platform}:{self.identifier}"


# ============================================================
# CONTENT CLASSIFICATION
# ============================================================

@dataclass(frozen=True)
class AxisScore:
    """Result of scoring one axis."""
    score: int             # -100..100
    matches: int           # keywords that contributed
    weight_total: float = 0.0


@dataclass
class ContentSignals:
    """Author-behaviour heuristics derived from raw text."""
    # Bot indicators
    repetitive_patterns: float = 0.0
    template_likelihood: float = 0.0
    unnatural_phrasing: float = 0.0
    # Troll indicators
    emotional_language_density: float = 0.0
    personal_attacks: float = 0.0
    bad_faith_arguments: float = 0.0
    engagement_baiting: float = 0.0
    # Commercial indicators
    promotional_language: float = 0.0
    affiliate_link_count: float = 0.0
    product_mentions: float = 0.0
    # Coordination indicators
    coordinated_narratives: float = 0.0
    whataboutism_density: float = 0.0
    # Authenticity indicators
    personal_voice: float = 0.0
    nuanced_arguments: float = 0.0
    original_content: float = 0.0

    def nonzero_count(self) -> int:
        return sum(1 for f in fields(self) if getattr(self, f.name) > 0)


@dataclass(frozen=True)
class AuthorSignal:
    """One piece of evidence recorded while scoring an author."""
    type: str
    value: Any
    weight: float
    direction: str         # "authentic" | "suspicious" | "neutral"


@dataclass(frozen=True)
class IntentAssessment:
    primary: str
    confidence: float
    breakdown: dict[str, float]


@dataclass(frozen=True)
class AuthorClassification:
    """Authenticity, coordination and intent profile for an author."""
    authenticity: int
    coordination: int
    intent: IntentAssessment
    signals: tuple[AuthorSignal, ...]
    data_quality: str
    author_id: str = ""
    platform: str = ""
    known_actor: Optional[KnownActorEntry] = None


@dataclass(frozen=True)
class ClassificationResult:
    """Bias, truth and confidence scores for one analyzed text."""
    economic: int
    social: int
    authority: int
    globalism: int
    truth_score: int
    confidence: float
    source: str            # "local" | "enhanced"
    timestamp: float
    author: Optional[AuthorClassification] = None


@dataclass(frozen=True)
class FilterAction:
    """Terminal decision for one evaluation."""
    action: str            # "none" | "badge" | "overlay" | "block"
    result: ClassificationResult
    reason: Optional[str] = None
