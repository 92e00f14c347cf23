"""
API Schemas — Request and Response Models

Pydantic models for the Derigo API, plus the conversions between them
and the engine's dataclasses.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from derigo.labels import (
    authenticity_label,
    coordination_label,
    format_axis_label,
    format_filter_reason,
    intent_label,
    truth_indicator,
)
from derigo.models import (
    INTENTS,
    AuthorClassification,
    ClassificationResult,
    ExtractedAuthor,
    FilterAction,
    IntentAssessment,
    SourceEntry,
)
from derigo.preferences import ProfileOverrides, SiteProfile, UserPreferences

Intent = Literal["organic", "troll", "bot", "state_sponsored", "commercial", "activist"]
DisplayMode = Literal["block", "overlay", "badge", "off", "disabled"]

AXIS_RANGE_FIELDS = ("economic_range", "social_range", "authority_range", "globalism_range")


def _check_range(value: Optional[tuple[int, int]]) -> Optional[tuple[int, int]]:
    if value is None:
        return None
    low, high = value
    if not (-100 <= low <= high <= 100):
        raise ValueError("range must satisfy -100 <= min <= max <= 100")
    return value


# ============================================================
# INPUTS
# ============================================================

class AuthorInput(BaseModel):
    identifier: str = Field(..., min_length=1, max_length=500)
    platform: str = Field("unknown", min_length=1, max_length=50)
    display_name: Optional[str] = None
    profile_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_author(self) -> ExtractedAuthor:
        return ExtractedAuthor(
            identifier=self.identifier,
            platform=self.platform.lower(),
            display_name=self.display_name,
            profile_url=self.profile_url,
            metadata=dict(self.metadata),
        )


class OverridesModel(BaseModel):
    """Only fields present in the request body count as overrides."""
    economic_range: Optional[tuple[int, int]] = None
    social_range: Optional[tuple[int, int]] = None
    authority_range: Optional[tuple[int, int]] = None
    globalism_range: Optional[tuple[int, int]] = None
    min_truth_score: Optional[int] = Field(None, ge=0, le=100)
    min_authenticity: Optional[int] = Field(None, ge=0, le=100)
    max_coordination: Optional[int] = Field(None, ge=0, le=100)
    blocked_intents: Optional[list[Intent]] = None
    display_mode: Optional[DisplayMode] = None

    @field_validator(*AXIS_RANGE_FIELDS)
    @classmethod
    def valid_range(cls, v):
        return _check_range(v)

    def to_overrides(self) -> ProfileOverrides:
        # An explicit null only means something for ranges ("no filter")
        given = {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name in AXIS_RANGE_FIELDS or getattr(self, name) is not None
        }
        if "blocked_intents" in given:
            given["blocked_intents"] = tuple(given["blocked_intents"])
        return ProfileOverrides(**given)


class SiteProfileModel(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    domains: list[str] = Field(default_factory=list)
    overrides: OverridesModel = Field(default_factory=OverridesModel)

    def to_profile(self) -> SiteProfile:
        return SiteProfile(
            id=self.id,
            name=self.name or self.id,
            domains=tuple(self.domains),
            overrides=self.overrides.to_overrides(),
        )


class PreferencesModel(BaseModel):
    economic_range: Optional[tuple[int, int]] = None
    social_range: Optional[tuple[int, int]] = None
    authority_range: Optional[tuple[int, int]] = None
    globalism_range: Optional[tuple[int, int]] = None
    min_truth_score: int = Field(0, ge=0, le=100)
    min_authenticity: int = Field(0, ge=0, le=100)
    max_coordination: int = Field(100, ge=0, le=100)
    blocked_intents: list[Intent] = Field(default_factory=list)
    display_mode: DisplayMode = "badge"
    enabled: bool = True
    enable_enhanced_analysis: bool = False
    whitelisted_domains: list[str] = Field(default_factory=list)
    site_profiles: list[SiteProfileModel] = Field(default_factory=list)

    @field_validator(*AXIS_RANGE_FIELDS)
    @classmethod
    def valid_range(cls, v):
        return _check_range(v)

    def to_preferences(self) -> UserPreferences:
        return UserPreferences(
            economic_range=self.economic_range,
            social_range=self.social_range,
            authority_range=self.authority_range,
            globalism_range=self.globalism_range,
            min_truth_score=self.min_truth_score,
            min_authenticity=self.min_authenticity,
            max_coordination=self.max_coordination,
            blocked_intents=tuple(self.blocked_intents),
            display_mode=self.display_mode,
            enabled=self.enabled,
            enable_enhanced_analysis=self.enable_enhanced_analysis,
            whitelisted_domains=tuple(self.whitelisted_domains),
            site_profiles=tuple(p.to_profile() for p in self.site_profiles),
        )


class ClassifyRequest(BaseModel):
    """POST /classify request body."""
    text: str = Field(..., min_length=1, max_length=100_000)
    url: Optional[str] = Field(None, max_length=2048,
                               description="Page URL; used for source reputation lookup.")
    author: Optional[AuthorInput] = None

    model_config = {"json_schema_extra": {"examples": [
        {"text": "We need to nationalize healthcare and raise the wealth tax.",
         "url": "https://example.com/opinion"},
    ]}}


class AuthorRequest(BaseModel):
    """POST /classify/author request body. Without an author, the URL's site is the author."""
    text: str = Field(..., min_length=1, max_length=100_000)
    author: Optional[AuthorInput] = None
    url: Optional[str] = Field(None, max_length=2048)

    @model_validator(mode="after")
    def author_or_url(self):
        if self.author is None and not self.url:
            raise ValueError("either 'author' or 'url' is required")
        return self


class AuthorScoresInput(BaseModel):
    authenticity: int = Field(..., ge=0, le=100)
    coordination: int = Field(..., ge=0, le=100)
    intent: Intent = "organic"


class ClassificationInput(BaseModel):
    economic: int = Field(0, ge=-100, le=100)
    social: int = Field(0, ge=-100, le=100)
    authority: int = Field(0, ge=-100, le=100)
    globalism: int = Field(0, ge=-100, le=100)
    truth_score: int = Field(50, ge=0, le=100)
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    author: Optional[AuthorScoresInput] = None

    def to_result(self, timestamp: float) -> ClassificationResult:
        author = None
        if self.author is not None:
            breakdown = {k: (1.0 if k == self.author.intent else 0.0) for k in INTENTS}
            author = AuthorClassification(
                authenticity=self.author.authenticity,
                coordination=self.author.coordination,
                intent=IntentAssessment(self.author.intent, 1.0, breakdown),
                signals=(),
                data_quality="minimal",
            )
        return ClassificationResult(
            economic=self.economic,
            social=self.social,
            authority=self.authority,
            globalism=self.globalism,
            truth_score=self.truth_score,
            confidence=self.confidence,
            source="local",
            timestamp=timestamp,
            author=author,
        )


class FilterRequest(BaseModel):
    """POST /filter request body. `domain` selects a site profile, if any."""
    result: ClassificationInput
    preferences: PreferencesModel = Field(default_factory=PreferencesModel)
    domain: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """POST /analyze request body."""
    text: str = Field(..., max_length=100_000)
    url: str = Field(..., min_length=1, max_length=2048)
    author: Optional[AuthorInput] = None
    preferences: PreferencesModel = Field(default_factory=PreferencesModel)


# ============================================================
# RESPONSES
# ============================================================

class SignalResponse(BaseModel):
    type: str
    value: Any
    weight: float
    direction: str


class IntentResponse(BaseModel):
    primary: str
    label: str
    confidence: float
    breakdown: dict[str, float]


class KnownActorResponse(BaseModel):
    identifier: str
    platform: str
    category: str
    confidence: float
    source: str
    added_date: str
    attribution: Optional[str] = None


class AuthorResponse(BaseModel):
    author_id: str
    platform: str
    authenticity: int
    authenticity_label: str
    coordination: int
    coordination_label: str
    intent: IntentResponse
    signals: list[SignalResponse]
    data_quality: str
    known_actor: Optional[KnownActorResponse] = None

    @classmethod
    def from_classification(cls, profile: AuthorClassification) -> "AuthorResponse":
        actor = profile.known_actor
        return cls(
            author_id=profile.author_id,
            platform=profile.platform,
            authenticity=profile.authenticity,
            authenticity_label=authenticity_label(profile.authenticity),
            coordination=profile.coordination,
            coordination_label=coordination_label(profile.coordination),
            intent=IntentResponse(
                primary=profile.intent.primary,
                label=intent_label(profile.intent.primary),
                confidence=round(profile.intent.confidence, 4),
                breakdown={k: round(v, 4) for k, v in profile.intent.breakdown.items()},
            ),
            signals=[
                SignalResponse(type=s.type, value=s.value, weight=s.weight, direction=s.direction)
                for s in profile.signals
            ],
            data_quality=profile.data_quality,
            known_actor=KnownActorResponse(
                identifier=actor.identifier,
                platform=actor.platform,
                category=actor.category,
                confidence=actor.confidence,
                source=actor.source,
                added_date=actor.added_date,
                attribution=actor.attribution,
            ) if actor else None,
        )


class ClassificationResponse(BaseModel):
    """POST /classify response body."""
    economic: int
    social: int
    authority: int
    globalism: int
    truth_score: int
    confidence: float
    source: str
    timestamp: float
    labels: dict[str, str]
    author: Optional[AuthorResponse] = None

    @classmethod
    def from_result(cls, result: ClassificationResult) -> "ClassificationResponse":
        return cls(
            economic=result.economic,
            social=result.social,
            authority=result.authority,
            globalism=result.globalism,
            truth_score=result.truth_score,
            confidence=result.confidence,
            source=result.source,
            timestamp=result.timestamp,
            labels={
                "economic": format_axis_label("economic", result.economic),
                "social": format_axis_label("social", result.social),
                "authority": format_axis_label("authority", result.authority),
                "globalism": format_axis_label("globalism", result.globalism),
                "truth": truth_indicator(result.truth_score),
            },
            author=AuthorResponse.from_classification(result.author) if result.author else None,
        )


class FilterResponse(BaseModel):
    """POST /filter response body."""
    action: str
    reason: Optional[str] = None
    reason_label: Optional[str] = None
    profile: Optional[str] = None

    @classmethod
    def from_action(cls, action: FilterAction, profile: Optional[SiteProfile] = None) -> "FilterResponse":
        return cls(
            action=action.action,
            reason=action.reason,
            reason_label=format_filter_reason(action.reason) if action.reason else None,
            profile=profile.name if profile else None,
        )


class AnalyzeResponse(BaseModel):
    """POST /analyze response body."""
    url: str
    domain: str
    analyzed: bool
    skipped: Optional[str] = None
    cached: bool = False
    profile: Optional[str] = None
    result: Optional[ClassificationResponse] = None
    action: Optional[FilterResponse] = None


class SourceResponse(BaseModel):
    """GET /sources/{domain} response body."""
    domain: str
    name: str
    factual_rating: int
    bias_rating: dict[str, int]
    bias_labels: dict[str, str]
    category: str
    country: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: SourceEntry) -> "SourceResponse":
        return cls(
            domain=entry.domain,
            name=entry.name,
            factual_rating=entry.factual_rating,
            bias_rating=dict(entry.bias_rating),
            bias_labels={axis: format_axis_label(axis, v) for axis, v in entry.bias_rating.items()},
            category=entry.category,
            country=entry.country,
        )


class HealthResponse(BaseModel):
    """GET /health response body."""
    status: str
    engine_version: str
    keywords: int
    sources: int
    known_actors: int
    llm_provider: str
    cache: dict
