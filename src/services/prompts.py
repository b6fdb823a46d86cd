"""LLM prompts for the format, translate and analyze collaborators."""

from __future__ import annotations

LANGUAGE_NAMES = {"en": "English", "kh": "Khmer"}

_HTML_TAGS = "<h2>, <p>, <blockquote>, <ul>, <li>, <strong>, <em>"

FORMAT_SYSTEM_PROMPT = f"""\
You are the copy desk of a bilingual English/Khmer news site.
You turn article drafts into clean HTML for the site's article body.
Only these tags are allowed: {_HTML_TAGS}.
Return only the HTML, with no commentary and no code fences."""


def get_format_prompt(content: str, *, already_structured: bool) -> str:
    """Build the user prompt for the formatter.

    Drafts that already carry ``<h2>`` / ``<p>`` structure are polished in
    place; plain-text drafts are converted.
    """
    if already_structured:
        return f"""Enhance this HTML news article so it reads professionally.

Requirements:
- Keep the existing HTML structure and tags
- Improve clarity and readability without changing the facts
- Keep a journalistic register

Article:
{content}"""

    return f"""Convert this plain-text news article into structured HTML.

Requirements:
- Use <h2> for 3-5 section headings (e.g. Background, Current Situation, Implications)
- Use <p> for every paragraph
- Use <blockquote> for quotes and attributed statements
- Use <ul>/<li> for lists
- Use <strong> for key facts and <em> for light emphasis
- Do not add facts that are not in the draft

Article:
{content}"""


def get_translate_prompt(text: str, target_language: str) -> tuple[str, str]:
    """Return (system, user) prompts for translating ``text``."""
    language = LANGUAGE_NAMES[target_language]
    system = f"""\
You are a professional news translator working into {language}.
Keep the original tone, meaning and any HTML tags exactly as they are;
translate only the text between tags. Keep names, numbers and dates accurate.
Return only the translation."""
    return system, text


ANALYZE_SYSTEM_PROMPT = """\
You are an editorial quality reviewer for a news site.
Score the article and reply with JSON only, in exactly this shape:
{"readability": {"score": 0-100, "level": "easy|standard|difficult"},
 "seo": {"score": 0-100, "keywords": ["up to 10 keywords"]},
 "engagement": {"score": 0-100}}"""
