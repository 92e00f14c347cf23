"""
Reference Data — Keyword, Source and Known-Actor Tables

Loads the three read-only tables the engine scores against. Every
entry is validated with pydantic on the way in; an entry that fails
validation is logged and skipped, never fatal. A missing or unparsable
file yields an empty table.

Tables are loaded once per process through a ReferenceStore. The store
owns the loaded handle and serializes the first load so concurrent
callers await a single in-flight read instead of racing each other.

Usage:
    from derigo.reference import reference_store
    reference = await reference_store.get()
    source = reference.source_for("https://www.reuters.com/world/...")
    actor = reference.known_actor_for("twitter", "ten_gop")
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError

from derigo.config import settings
from derigo.models import KeywordEntry, KnownActorEntry, SourceEntry
from derigo.scorer import normalize_text

logger = logging.getLogger(__name__)


# ============================================================
# VALIDATION MODELS
# ============================================================

class KeywordRecord(BaseModel):
    term: str = Field(..., min_length=1)
    axis: Literal["economic", "social", "authority", "globalism"]
    direction: Literal[-1, 1]
    weight: int = Field(..., ge=1, le=10)
    context: list[str] = Field(default_factory=list)


class BiasRating(BaseModel):
    economic: int = Field(0, ge=-100, le=100)
    social: int = Field(0, ge=-100, le=100)
    authority: int = Field(0, ge=-100, le=100)
    globalism: int = Field(0, ge=-100, le=100)


class SourceRecord(BaseModel):
    domain: str = Field(..., min_length=1)
    name: str
    factual_rating: int = Field(..., ge=0, le=100)
    bias_rating: BiasRating
    category: str = "news"
    country: Optional[str] = None


class KnownActorRecord(BaseModel):
    identifier: str = Field(..., min_length=1)
    platform: str = Field(..., min_length=1)
    category: Literal[
        "organic", "troll", "bot", "state_sponsored", "commercial", "activist",
    ]
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: str
    added_date: str
    attribution: Optional[str] = None


# ============================================================
# FILE LOADING
# ============================================================

def _read_table(path: str | Path, table: str) -> list:
    """Read a JSON array from disk. Missing or malformed files yield []."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"{table} table not found", extra={"path": str(path)})
        return []
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(
            f"{table} table unreadable",
            extra={"path": str(path), "error": str(e)},
        )
        return []

    if not isinstance(raw, list):
        logger.warning(f"{table} table is not a JSON array", extra={"path": str(path)})
        return []
    return raw


def parse_keywords(rows: list) -> tuple[KeywordEntry, ...]:
    """Validate raw keyword rows. Malformed rows are skipped."""
    entries = []
    skipped = 0
    for row in rows:
        try:
            rec = KeywordRecord.model_validate(row)
        except ValidationError as e:
            skipped += 1
            logger.warning("Skipping malformed keyword entry",
                           extra={"error": str(e).splitlines()[0], "skipped": skipped})
            continue
        entries.append(KeywordEntry(
            term=rec.term.lower(),
            axis=rec.axis,
            direction=rec.direction,
            weight=rec.weight,
            context=tuple(c for c in map(normalize_text, rec.context) if c),
        ))
    return tuple(entries)


def parse_sources(rows: list) -> dict[str, SourceEntry]:
    """Validate raw source rows into a domain-keyed map."""
    sources: dict[str, SourceEntry] = {}
    for row in rows:
        try:
            rec = SourceRecord.model_validate(row)
        except ValidationError as e:
            logger.warning("Skipping malformed source entry",
                           extra={"error": str(e).splitlines()[0]})
            continue
        domain = rec.domain.lower()
        sources[domain] = SourceEntry(
            domain=domain,
            name=rec.name,
            factual_rating=rec.factual_rating,
            bias_rating=rec.bias_rating.model_dump(),
            category=rec.category,
            country=rec.country,
        )
    return sources


def parse_known_actors(rows: list) -> dict[str, KnownActorEntry]:
    """Validate raw known-actor rows into a platform:identifier map."""
    actors: dict[str, KnownActorEntry] = {}
    for row in rows:
        try:
            rec = KnownActorRecord.model_validate(row)
        except ValidationError as e:
            logger.warning("Skipping malformed known-actor entry",
                           extra={"error": str(e).splitlines()[0]})
            continue
        actor = KnownActorEntry(
            identifier=rec.identifier.lower(),
            platform=rec.platform.lower(),
            category=rec.category,
            confidence=rec.confidence,
            source=rec.source,
            added_date=rec.added_date,
            attribution=rec.attribution,
        )
        actors[actor.key] = actor
    return actors


# ============================================================
# REFERENCE DATA HANDLE
# ============================================================

def extract_host(url_or_domain: str) -> str:
    """Lowercased host of a URL, or the input itself if it is a bare domain."""
    value = url_or_domain.strip().lower()
    if "://" in value:
        return (urlparse(value).hostname or "").lower()
    return value.split("/", 1)[0].split(":", 1)[0]


@dataclass(frozen=True)
class ReferenceData:
    """Immutable handle over the three loaded tables."""
    keywords: tuple[KeywordEntry, ...] = ()
    sources: dict[str, SourceEntry] = field(default_factory=dict)
    known_actors: dict[str, KnownActorEntry] = field(default_factory=dict)

    def source_for(self, url_or_domain: str) -> Optional[SourceEntry]:
        """Exact host first, then the host with a leading www. removed."""
        host = extract_host(url_or_domain)
        if not host:
            return None
        entry = self.sources.get(host)
        if entry is None and host.startswith("www."):
            entry = self.sources.get(host[4:])
        return entry

    def known_actor_for(self, platform: str, identifier: str) -> Optional[KnownActorEntry]:
        """Exact platform:identifier first, then the all:identifier wildcard."""
        ident = identifier.lower()
        return (
            self.known_actors.get(f"{platform.lower()}:{ident}")
            or self.known_actors.get(f"all:{ident}")
        )


def load_reference(
    keywords_path: Optional[str] = None,
    sources_path: Optional[str] = None,
    known_actors_path: Optional[str] = None,
) -> ReferenceData:
    """Load and validate all three tables from disk."""
    data = ReferenceData(
        keywords=parse_keywords(_read_table(keywords_path or settings.KEYWORDS_PATH, "Keyword")),
        sources=parse_sources(_read_table(sources_path or settings.SOURCES_PATH, "Source")),
        known_actors=parse_known_actors(
            _read_table(known_actors_path or settings.KNOWN_ACTORS_PATH, "Known-actor")
        ),
    )
    logger.info(
        "Reference data loaded",
        extra={
            "keywords": len(data.keywords),
            "sources": len(data.sources),
            "known_actors": len(data.known_actors),
        },
    )
    return data


# ============================================================
# ONCE-INITIALIZED STORE
# ============================================================

class ReferenceStore:
    """
    Lazily loads ReferenceData once and hands the same handle to every caller.

    Concurrent first calls wait on one lock, so exactly one load runs.
    A loader failure propagates and leaves the store empty; the next
    call retries.
    """

    def __init__(self, loader: Callable[[], ReferenceData] = load_reference):
        self._loader = loader
        self._data: Optional[ReferenceData] = None
        self._lock = asyncio.Lock()
        self._loads = 0

    async def get(self) -> ReferenceData:
        if self._data is not None:
            return self._data
        async with self._lock:
            if self._data is None:
                self._loads += 1
                self._data = await asyncio.to_thread(self._loader)
        return self._data

    def set(self, data: ReferenceData) -> None:
        """Install a preloaded handle (tests, embedding applications)."""
        self._data = data

    def reset(self) -> None:
        self._data = None

    @property
    def loaded(self) -> bool:
        return self._data is not None

    @property
    def load_count(self) -> int:
        return self._loads


# Process-wide instance
reference_store = ReferenceStore()
