"""
Filter Preferences — Global Settings and Site Profiles

UserPreferences is the global filter configuration. A SiteProfile
scopes a partial override of it to a set of domains. Overrides use an
explicit UNSET sentinel: a field is overridden iff it was given, so 0,
an empty tuple and None ("no range filter") are all honored values.

Usage:
    from derigo.preferences import UserPreferences, effective_preferences
    prefs = UserPreferences(economic_range=(-50, 50), display_mode="overlay")
    effective = effective_preferences(prefs, "news.example.com")
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

DISPLAY_MODES = ("block", "overlay", "badge", "off", "disabled")

Range = Optional[tuple[int, int]]


class _Unset:
    """Marker for 'no override given'."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class UserPreferences:
    """Global filter configuration."""
    # None = no filter on that axis
    economic_range: Range = None
    social_range: Range = None
    authority_range: Range = None
    globalism_range: Range = None

    min_truth_score: int = 0
    min_authenticity: int = 0
    max_coordination: int = 100
    blocked_intents: tuple[str, ...] = ()

    display_mode: str = "badge"
    enabled: bool = True
    enable_enhanced_analysis: bool = False

    whitelisted_domains: tuple[str, ...] = ()
    site_profiles: tuple["SiteProfile", ...] = ()


@dataclass(frozen=True)
class ProfileOverrides:
    """Per-field overrides; UNSET means fall back to the global value."""
    economic_range: Any = UNSET
    social_range: Any = UNSET
    authority_range: Any = UNSET
    globalism_range: Any = UNSET
    min_truth_score: Any = UNSET
    min_authenticity: Any = UNSET
    max_coordination: Any = UNSET
    blocked_intents: Any = UNSET
    display_mode: Any = UNSET

    def explicit(self) -> dict[str, Any]:
        """Only the fields that were actually given."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


@dataclass(frozen=True)
class SiteProfile:
    id: str
    name: str
    domains: tuple[str, ...]
    overrides: ProfileOverrides = ProfileOverrides()


# ============================================================
# MERGING
# ============================================================

def merge_preferences(
    global_prefs: UserPreferences,
    profile: Optional[SiteProfile],
) -> UserPreferences:
    """Overlay a profile's explicit overrides onto the global preferences."""
    if profile is None:
        return global_prefs

    changes = profile.overrides.explicit()
    if "blocked_intents" in changes:
        changes["blocked_intents"] = tuple(changes["blocked_intents"])
    for name in ("economic_range", "social_range", "authority_range", "globalism_range"):
        if changes.get(name) is not None:
            low, high = changes[name]
            changes[name] = (low, high)
    return replace(global_prefs, **changes)


def count_overrides(profile: SiteProfile) -> int:
    return len(profile.overrides.explicit())


# ============================================================
# DOMAIN MATCHING
# ============================================================

def _bare(domain: str) -> str:
    domain = domain.strip().lower().rstrip(".")
    return domain[4:] if domain.startswith("www.") else domain


def domain_matches(domain: str, pattern: str) -> bool:
    """Exact or subdomain match; 'example.com' never matches 'badexample.com'."""
    domain, pattern = _bare(domain), _bare(pattern)
    if not domain or not pattern:
        return False
    return domain == pattern or domain.endswith("." + pattern)


def profile_for_domain(
    domain: str,
    profiles: tuple[SiteProfile, ...] | list[SiteProfile],
) -> Optional[SiteProfile]:
    """The profile whose matching pattern is most specific (longest)."""
    best: Optional[SiteProfile] = None
    best_len = -1
    for profile in profiles:
        for pattern in profile.domains:
            if domain_matches(domain, pattern) and len(_bare(pattern)) > best_len:
                best = profile
                best_len = len(_bare(pattern))
    return best


def effective_preferences(global_prefs: UserPreferences, domain: str) -> UserPreferences:
    """Global preferences merged with the site profile matching `domain`."""
    return merge_preferences(
        global_prefs, profile_for_domain(domain, global_prefs.site_profiles),
    )


def is_whitelisted(prefs: UserPreferences, domain: str) -> bool:
    """True if the domain, with or without www., is on the whitelist."""
    host = domain.strip().lower()
    candidates = {host, _bare(host), f"www.{_bare(host)}"}
    return any(w.strip().lower() in candidates for w in prefs.whitelisted_domains)
