"""Heuristic content analysis — readability, SEO and engagement scores.

Offline stand-in for the remote analysis service. Scores are simple
weighted checks on the tag-stripped text; they are meant to rank drafts
against each other, not to be compared with third-party SEO tools.
"""

from __future__ import annotations

import logging
import re
from collections import Counter

from newsdesk.autoprocess.models import (
    ContentAnalysisReport,
    EngagementScore,
    ReadabilityScore,
    SEOScore,
)
from newsdesk.formatting import count_words, strip_tags

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10

_READABILITY_LEVELS: list[tuple[int, str]] = [
    (90, "very easy"),
    (80, "easy"),
    (70, "fairly easy"),
    (60, "standard"),
    (50, "fairly difficult"),
    (30, "difficult"),
    (0, "very difficult"),
]

_SENTENCE_RE = re.compile(r"[.!?។]+")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_NUMBER_RE = re.compile(r"\d")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Return the most frequent words longer than three characters."""
    words = re.sub(r"[^\w\s]", "", strip_tags(text).lower()).split()
    counts = Counter(w for w in words if len(w) > 3)
    return [word for word, _ in counts.most_common(limit)]


def count_syllables(word: str) -> int:
    word = word.lower()
    groups = _VOWEL_GROUP_RE.findall(word)
    count = len(groups)
    if word.endswith("e") and count > 1 and not word.endswith("le"):
        count -= 1
    return max(1, count)


def readability_level(score: int) -> str:
    for threshold, level in _READABILITY_LEVELS:
        if score >= threshold:
            return level
    return _READABILITY_LEVELS[-1][1]


def score_readability(text: str) -> ReadabilityScore:
    """Flesch reading ease, clamped to 0-100."""
    plain = strip_tags(text)
    words = re.findall(r"[A-Za-z']+", plain)
    if not words:
        return ReadabilityScore(score=0, level=readability_level(0))

    sentences = max(1, len([s for s in _SENTENCE_RE.split(plain) if s.strip()]))
    syllables = sum(count_syllables(w) for w in words)
    ease = 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
    score = _clamp(round(ease))
    return ReadabilityScore(score=score, level=readability_level(score))


def score_seo(text: str, keywords: list[str] | None = None) -> SEOScore:
    keywords = keywords if keywords is not None else extract_keywords(text)
    words = count_words(text)
    score = 40
    if words >= 300:
        score += 20
    if words >= 600:
        score += 10
    if "<h2" in text:
        score += 15
    if "<p" in text:
        score += 5
    if keywords and words:
        plain = strip_tags(text).lower()
        density = plain.count(keywords[0]) / words
        if 0.005 <= density <= 0.03:
            score += 10
    return SEOScore(score=_clamp(score), keywords=keywords)


def score_engagement(text: str) -> EngagementScore:
    plain = strip_tags(text)
    words = count_words(text)
    score = 30
    if "<blockquote" in text or any(q in plain for q in ('"', "“", "”")):
        score += 15
    if _NUMBER_RE.search(plain):
        score += 15
    if "<ul" in text or "<ol" in text:
        score += 10
    if "<h2" in text:
        score += 10
    if 300 <= words <= 1500:
        score += 10
    if "?" in plain:
        score += 10
    return EngagementScore(score=_clamp(score))


def analyze_content(text: str) -> ContentAnalysisReport:
    """Build a full report for ``text`` (plain text or HTML)."""
    report = ContentAnalysisReport(
        readability=score_readability(text),
        seo=score_seo(text),
        engagement=score_engagement(text),
    )
    logger.debug(
        "Heuristic analysis: readability=%d seo=%d engagement=%d",
        report.readability.score,
        report.seo.score,
        report.engagement.score,
    )
    return report


def _clamp(value: int) -> int:
    return max(0, min(100, value))
