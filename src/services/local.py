"""Offline content services: local formatter and heuristic analysis.

There is no offline translator, so :meth:`LocalContentServices.translate`
always fails. Translation is a best-effort stage, so a cycle run
against these services still completes with the previous Khmer text.
"""

from __future__ import annotations

from newsdesk.analysis import analyze_content
from newsdesk.autoprocess.models import AuthoredContent, ContentAnalysisReport
from newsdesk.formatting import format_article
from newsdesk.services.base import ContentServices, ServiceError, check_language


class LocalContentServices(ContentServices):
    name = "local"

    async def format_content(
        self, content: AuthoredContent, *, article_id: str | None = None
    ) -> AuthoredContent:
        if not content.en.strip():
            raise ServiceError("Content is required to format")
        kh = format_article(content.kh).html if content.kh.strip() else ""
        return AuthoredContent(en=format_article(content.en).html, kh=kh)

    async def translate(self, text: str, *, target_language: str) -> str:
        check_language(target_language)
        raise ServiceError("Translation is not available offline")

    async def analyze(self, text: str) -> ContentAnalysisReport:
        return analyze_content(text)
