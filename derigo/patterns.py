"""
Pattern Library — Static Lexical Tables

Every lexical signal the engine looks for lives here: word lists for
emotional language, compiled regex tables for attacks, bad-faith
rhetoric, engagement bait, promotion, templating, affiliate links and
whataboutism, and weighted marker tables for personal voice and nuance.

These tables are read-only. The scorer and signal extractor receive
them by import; nothing mutates them at runtime.
"""

from __future__ import annotations

import re

_I = re.IGNORECASE


# ============================================================
# TRUTH ESTIMATOR TABLES
# ============================================================

# Substring phrases typical of clickbait headlines
CLICKBAIT_PHRASES: tuple[str, ...] = (
    "you won't believe",
    "shocking",
    "mind-blowing",
    "what happens next",
    "this will change",
    "secret revealed",
    "they don't want you to know",
    "share before deleted",
    "breaking:",
)

# Sensational vocabulary; more than three distinct hits lowers truth
SENSATIONAL_WORDS: tuple[str, ...] = (
    "outrage", "disgusting", "horrific", "amazing", "incredible",
    "terrifying", "explosive", "bombshell", "slammed", "destroyed",
)

# Attribution phrasing or inline links
CITATION_PHRASES: tuple[str, ...] = (
    "according to",
    "reported by",
    "study shows",
    "research indicates",
    "data from",
    "http",
    "source:",
)

# Percentages, decimals, dollar amounts, years
STATISTIC_PATTERN = re.compile(r"\d+%|\d+\.\d+|\$\d+|\d{4}")

# A quoted span of 20+ characters, straight or curly quotes
LONG_QUOTE_PATTERN = re.compile(r"\"[^\"]{20,}\"|“[^”]{20,}”")


# ============================================================
# AUTHOR SIGNAL TABLES
# ============================================================

# Emotionally charged words, matched against whole tokens
EMOTIONAL_WORDS: frozenset[str] = frozenset({
    "outrage", "disgusting", "horrific", "unbelievable", "shocking",
    "pathetic", "idiotic", "insane", "radical", "extremist",
    "destroy", "attack", "enemy", "traitor", "corrupt", "evil",
    "terrible", "awful", "horrible", "despicable", "vile",
})

ATTACK_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"you('re| are) (an? )?(idiot|moron|stupid|dumb)", _I),
    re.compile(r"people like you", _I),
    re.compile(r"wake up,? (sheeple|sheep)", _I),
    re.compile(r"(libtard|conservatard|snowflake|cuck|shill)", _I),
    re.compile(r"go back to", _I),
    re.compile(r"typical (liberal|conservative|leftist|rightist)", _I),
    re.compile(r"you (must|probably) (work for|be paid by)", _I),
)

BAD_FAITH_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"what about", _I),
    re.compile(r"so you('re)? saying", _I),
    re.compile(r"typical \w+ response", _I),
    re.compile(r"you (probably|must) (think|believe)", _I),
    re.compile(r"nice try,? but", _I),
    re.compile(r"that's rich coming from", _I),
)

ENGAGEMENT_BAIT_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"change my mind", _I),
    re.compile(r"fight me", _I),
    re.compile(r"prove me wrong", _I),
    re.compile(r"bet you (can't|won't)", _I),
    re.compile(r"i dare (you|anyone)", _I),
    re.compile(r"unpopular opinion:?", _I),
    re.compile(r"hot take:?", _I),
    re.compile(r"controversial:?", _I),
)

PROMOTIONAL_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"buy now", _I),
    re.compile(r"limited time", _I),
    re.compile(r"click (here|the link)", _I),
    re.compile(r"check out", _I),
    re.compile(r"don't miss", _I),
    re.compile(r"exclusive offer", _I),
    re.compile(r"use code", _I),
    re.compile(r"sign up", _I),
    re.compile(r"subscribe", _I),
    re.compile(r"free trial", _I),
)

# Placeholder tokens left behind by templated posting tools
TEMPLATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\[name\]|\[company\]|\[product\]", _I),
    re.compile(r"\{\{.*?\}\}"),
    re.compile(r"%[A-Z_]+%"),
    re.compile(r"INSERT .*? HERE", _I),
    re.compile(r"\{your.*?\}", _I),
)

# Tracking parameters and link shorteners
AFFILIATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\?ref=", _I),
    re.compile(r"\?aff=", _I),
    re.compile(r"\?tag=", _I),
    re.compile(r"affiliate", _I),
    re.compile(r"amzn\.to", _I),
    re.compile(r"bit\.ly", _I),
    re.compile(r"tinyurl", _I),
    re.compile(r"linktr\.ee", _I),
)

WHATABOUTISM_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"what about", _I),
    re.compile(r"but (what|how) about", _I),
    re.compile(r"yeah,? but", _I),
    re.compile(r"but they (also|did)", _I),
)


# ============================================================
# WEIGHTED MARKERS (additive, capped at 1.0 by the extractor)
# ============================================================

PERSONAL_VOICE_MARKERS: tuple[tuple[re.Pattern, float], ...] = (
    (re.compile(r"\bi\s+(think|believe|feel|wonder|guess)", _I), 0.2),
    (re.compile(r"\bmy (experience|opinion|view|take)", _I), 0.2),
    (re.compile(r"\b(maybe|perhaps|might|could be|seems like)", _I), 0.15),
    (re.compile(r"\b(i'm not sure|i could be wrong|correct me if)", _I), 0.2),
    (re.compile(r"\bi (was|went|saw|heard|met|talked)", _I), 0.1),
)

# Mean sentence length (chars) that reads as varied, hand-written prose
VOICE_SENTENCE_LENGTH = (80, 200)
VOICE_SENTENCE_BONUS = 0.15

NUANCE_MARKERS: tuple[tuple[re.Pattern, float], ...] = (
    (re.compile(r"\b(on the other hand|however|although|while|granted)", _I), 0.2),
    (re.compile(r"\b(it depends|in some cases|under certain)", _I), 0.15),
    (re.compile(r"\b(complex|nuanced|complicated|multifaceted)", _I), 0.15),
    (re.compile(r"\b(according to|research shows|studies indicate|data suggests)", _I), 0.2),
    (re.compile(r"\b(i (don't|can't) (know|say) for sure|more research|not an expert)", _I), 0.1),
)

QUESTION_PATTERN = re.compile(r"\?[^?!]*\?")
RHETORICAL_QUESTION_PATTERN = re.compile(r"\b(seriously|really|honestly)\?", _I)
QUESTION_WEIGHT = 0.05
QUESTION_CAP = 0.2


# ============================================================
# PAGE ELIGIBILITY
# ============================================================

SKIP_SCHEMES: frozenset[str] = frozenset({
    "chrome", "chrome-extension", "moz-extension", "about", "data", "file",
})

SKIP_PATH_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(p, _I) for p in (
        r"/login", r"/signin", r"/signup", r"/register", r"/cart",
        r"/checkout", r"/account", r"/settings", r"/search",
    )
)
