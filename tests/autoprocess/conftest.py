"""Shared fakes for the auto-processing tests."""

from __future__ import annotations

import asyncio

import pytest

from newsdesk.autoprocess.models import (
    AuthoredContent,
    ContentAnalysisReport,
    EngagementScore,
    ReadabilityScore,
    SEOScore,
)
from newsdesk.services.base import ContentServices, ServiceError

LONG_TEXT = "Cambodia's economy grew 6% in 2024 according to new reports."
FORMATTED_EN = "<p>Cambodia's economy grew 6% in 2024 according to new reports.</p>"
KHMER_TEXT = "សេដ្ឋកិច្ចកម្ពុជាបានកើនឡើង ៦% ក្នុងឆ្នាំ ២០២៤"


def make_report(readability: int = 82) -> ContentAnalysisReport:
    return ContentAnalysisReport(
        readability=ReadabilityScore(score=readability, level="easy"),
        seo=SEOScore(score=70, keywords=["cambodia", "economy"]),
        engagement=EngagementScore(score=55),
    )


class FakeServices(ContentServices):
    """Deterministic collaborators that record every call.

    Set ``gate`` (or ``translate_gate``) to an asyncio.Event to hold the
    next format (or translate) call until it is set.
    """

    name = "fake"

    def __init__(
        self,
        *,
        formatted: AuthoredContent | None = None,
        translation: str = KHMER_TEXT,
        report: ContentAnalysisReport | None = None,
        format_error: Exception | None = None,
        translate_error: Exception | None = None,
        analyze_error: Exception | None = None,
    ) -> None:
        self.formatted = formatted
        self.translation = translation
        self.report = report or make_report()
        self.format_error = format_error
        self.translate_error = translate_error
        self.analyze_error = analyze_error
        self.gate: asyncio.Event | None = None
        self.translate_gate: asyncio.Event | None = None
        self.calls: list[tuple[str, str]] = []
        self.article_ids: list[str | None] = []

    async def format_content(
        self, content: AuthoredContent, *, article_id: str | None = None
    ) -> AuthoredContent:
        self.calls.append(("format", content.en))
        self.article_ids.append(article_id)
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate.wait()
        if self.format_error is not None:
            raise self.format_error
        if self.formatted is not None:
            return self.formatted
        return AuthoredContent(en=f"<p>{content.en}</p>", kh="")

    async def translate(self, text: str, *, target_language: str) -> str:
        self.calls.append(("translate", text))
        if self.translate_gate is not None:
            gate, self.translate_gate = self.translate_gate, None
            await gate.wait()
        if self.translate_error is not None:
            raise self.translate_error
        return self.translation

    async def analyze(self, text: str) -> ContentAnalysisReport:
        self.calls.append(("analyze", text))
        if self.analyze_error is not None:
            raise self.analyze_error
        return self.report

    def stages(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def services() -> FakeServices:
    return FakeServices(formatted=AuthoredContent(en=FORMATTED_EN, kh=""))


@pytest.fixture
def failing_format() -> FakeServices:
    return FakeServices(format_error=ServiceError("formatter down"))
