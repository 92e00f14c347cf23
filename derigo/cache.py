"""
Result Cache

TTL-keyed store for classification and author results.
Content key = SHA-256(URL without fragment). Author key = "platform:identifier".
An entry is stale once now - timestamp >= ttl.

ResultCache is the contract; durable backends implement get/put/delete/
clear_expired. MemoryResultCache is the in-process implementation with
oldest-first eviction, guarded by an asyncio lock.

Usage:
    from derigo.cache import result_cache
    cached = await result_cache.get_classification(url)
    if cached is None:
        result = classify_content(...)
        await result_cache.put_classification(url, result)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urldefrag, urlparse

from derigo.config import settings
from derigo.models import AuthorClassification, ClassificationResult, ExtractedAuthor

HOUR = 60 * 60
DAY = 24 * HOUR

SOCIAL_HOSTS = frozenset({
    "twitter.com", "x.com", "facebook.com", "fb.com", "reddit.com",
    "instagram.com", "tiktok.com", "linkedin.com",
})
NEWS_HOST_MARKERS = (
    "news", "cnn", "bbc", "reuters", "nytimes", "washingtonpost",
    "guardian", "foxnews", "msnbc", "npr",
)
SOCIAL_AUTHOR_PLATFORMS = ("twitter", "reddit")


# ============================================================
# KEYS AND TTL POLICY
# ============================================================

def content_cache_key(url: str) -> str:
    """SHA-256 hex of the URL with any fragment removed."""
    canonical, _ = urldefrag(url)
    return hashlib.sha256(canonical.encode()).hexdigest()


def author_cache_key(author: ExtractedAuthor) -> str:
    return f"{author.platform}:{author.identifier}"


def content_ttl(url: str) -> int:
    """1h for social media, 6h for news, 24h for everything else."""
    host = (urlparse(url).hostname or "").lower()
    bare = host[4:] if host.startswith("www.") else host
    if bare in SOCIAL_HOSTS or any(bare.endswith("." + h) for h in SOCIAL_HOSTS):
        return HOUR
    if any(marker in bare for marker in NEWS_HOST_MARKERS):
        return 6 * HOUR
    return DAY


def author_ttl(author: ExtractedAuthor, profile: AuthorClassification) -> int:
    """7 days for high-quality profiles, 12h on social platforms, else 6h."""
    if profile.data_quality == "high":
        return 7 * DAY
    if author.platform in SOCIAL_AUTHOR_PLATFORMS:
        return 12 * HOUR
    return 6 * HOUR


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: Any
    timestamp: float
    ttl: float

    def is_stale(self, now: float) -> bool:
        return now - self.timestamp >= self.ttl


# ============================================================
# CONTRACT
# ============================================================

class ResultCache(ABC):
    """Abstract TTL store. Writes are last-write-wins upserts."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Payload for key, or None if absent or stale."""
        ...

    @abstractmethod
    async def put(self, key: str, payload: Any, ttl: float) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear_expired(self) -> int:
        """Drop stale entries; returns how many were removed."""
        ...

    async def get_classification(self, url: str) -> Optional[ClassificationResult]:
        return await self.get(content_cache_key(url))

    async def put_classification(
        self, url: str, result: ClassificationResult, ttl: Optional[float] = None,
    ) -> None:
        await self.put(
            content_cache_key(url), result, ttl if ttl is not None else content_ttl(url),
        )

    async def get_author(self, author: ExtractedAuthor) -> Optional[AuthorClassification]:
        return await self.get(author_cache_key(author))

    async def put_author(
        self, author: ExtractedAuthor, profile: AuthorClassification,
    ) -> None:
        await self.put(author_cache_key(author), profile, author_ttl(author, profile))


# ============================================================
# IN-MEMORY IMPLEMENTATION
# ============================================================

class MemoryResultCache(ResultCache):
    """In-memory cache with TTL expiry and oldest-first eviction."""

    def __init__(
        self,
        max_entries: int = 2000,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_stale(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None

            self._hits += 1
            return entry.payload

    async def put(self, key: str, payload: Any, ttl: float) -> None:
        async with self._lock:
            # Evict oldest entry if at capacity
            if key not in self._entries and len(self._entries) >= self._max_entries:
                oldest_key = min(
                    self._entries, key=lambda k: self._entries[k].timestamp,
                )
                del self._entries[oldest_key]

            self._entries[key] = CacheEntry(
                key=key, payload=payload, timestamp=self._clock(), ttl=ttl,
            )

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def clear_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if e.is_stale(now)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


# Process-wide instance
result_cache = MemoryResultCache(max_entries=settings.CACHE_MAX_ENTRIES)
