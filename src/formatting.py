"""Local article formatter — plain text → structured HTML.

Used by the offline content services and the ``newsdesk format``
command. Paragraphs are split on blank lines and classified as
heading, quote, list or body text. Input that already carries HTML is
only tidied.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

WORDS_PER_MINUTE = 200
SECTION_BREAK_EVERY = 4

EMPTY_HTML = "<p>No content available.</p>"

_HEADING_WORDS = ("breaking", "update", "latest", "news", "report", "analysis", "summary")
_ATTRIBUTION_WORDS = ("said", "stated", "announced", "confirmed", "reported", "according to")
_QUOTE_MARKS = ('"', "“", "”")
_KEY_TERMS_RE = re.compile(
    r"\b(breaking|urgent|important|latest|update|confirmed|announced)\b", re.IGNORECASE
)
_LIST_MARKER_RE = re.compile(r"^(\d+\.|\*|-|•)\s")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_TAG_RE = re.compile(r"<[^>]*>")
_EMPTY_P_RE = re.compile(r"<p>\s*</p>")
_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}")


class FormattedArticle(BaseModel):
    """Result of formatting one article body."""

    html: str
    word_count: int = 0
    read_time: int = 1
    has_images: bool = False
    has_quotes: bool = False


class ContentInfo(BaseModel):
    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    has_quotes: bool = False
    has_numbers: bool = False
    has_dates: bool = False


def format_article(content: str) -> FormattedArticle:
    """Format an article body for display.

    Returns:
        FormattedArticle with html plus word count and read time
        (200 words per minute, at least one minute).
    """
    text = content.strip()
    if not text:
        return FormattedArticle(html=EMPTY_HTML, word_count=0, read_time=1)

    html = _tidy_html(text) if "<" in text else _plain_text_to_html(text)
    words = count_words(html)
    return FormattedArticle(
        html=html,
        word_count=words,
        read_time=max(1, -(-words // WORDS_PER_MINUTE)),
        has_images="<img" in html,
        has_quotes="<blockquote" in html,
    )


def count_words(text: str) -> int:
    """Count words, ignoring HTML tags."""
    return len(_TAG_RE.sub(" ", text).split())


def strip_tags(text: str) -> str:
    return re.sub(r"\s+", " ", _TAG_RE.sub(" ", text)).strip()


def is_html(text: str) -> bool:
    return "<h2>" in text and "<p>" in text


def extract_content_info(content: str) -> ContentInfo:
    """Summarize an article: first 50 words plus up to 3 key sentences."""
    words = content.split()
    summary = " ".join(words[:50]) + ("..." if len(words) > 50 else "")

    sentences = [s.strip() for s in re.split(r"[.!?]+", content) if len(s.strip()) > 20]
    key_points: list[str] = []
    for word in ("announced", "confirmed", "said", "reported", "breaking", "important", "update"):
        match = next((s for s in sentences if word in s.lower()), None)
        if match and f"{match}." not in key_points:
            key_points.append(f"{match}.")

    return ContentInfo(
        summary=summary,
        key_points=key_points[:3],
        has_quotes=any(mark in content for mark in _QUOTE_MARKS),
        has_numbers=bool(re.search(r"\d+", content)),
        has_dates=bool(_DATE_RE.search(content)),
    )


def _plain_text_to_html(text: str) -> str:
    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]
    if not paragraphs:
        return EMPTY_HTML

    blocks: list[str] = []
    for index, paragraph in enumerate(paragraphs):
        if _is_heading(paragraph, index):
            blocks.append(f"<h2>{paragraph}</h2>")
        elif _is_quote(paragraph):
            blocks.append(f"<blockquote>{paragraph}</blockquote>")
        elif _is_list(paragraph):
            blocks.append(_format_list(paragraph))
        else:
            blocks.append(f"<p>{_emphasize(paragraph)}</p>")
    return _add_section_breaks(blocks)


def _tidy_html(html: str) -> str:
    return _EMPTY_P_RE.sub("", html).strip()


def _is_heading(text: str, index: int) -> bool:
    if index == 0 and len(text) < 100:
        return True
    if len(text) < 80 and text.endswith(":"):
        return True
    if len(text) < 60 and text == text.upper() and any(c.isalpha() for c in text):
        return True
    return text.lower().startswith(_HEADING_WORDS)


def _is_quote(text: str) -> bool:
    if text.startswith(_QUOTE_MARKS):
        return True
    lowered = text.lower()
    return any(word in lowered for word in _ATTRIBUTION_WORDS)


def _is_list(text: str) -> bool:
    lines = text.split("\n")
    if len(lines) < 2:
        return False
    marked = [line for line in lines if _LIST_MARKER_RE.match(line.strip())]
    return len(marked) >= len(lines) * 0.7


def _format_list(text: str) -> str:
    items = [
        re.sub(r"^(\d+\.|\*|-|•)\s*", "", line.strip()).strip()
        for line in text.split("\n")
        if line.strip()
    ]
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


def _emphasize(text: str) -> str:
    return _KEY_TERMS_RE.sub(r"<strong>\1</strong>", text)


def _add_section_breaks(blocks: list[str]) -> str:
    out: list[str] = []
    for index, block in enumerate(blocks, start=1):
        out.append(block)
        if index % SECTION_BREAK_EVERY == 0 and index < len(blocks):
            out.append("<hr />")
    return "\n".join(out)
