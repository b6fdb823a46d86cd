"""Base class for the remote collaborators used by the auto-processing cycle."""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsdesk.autoprocess.models import AuthoredContent, ContentAnalysisReport

SUPPORTED_LANGUAGES = ("en", "kh")


class ServiceError(Exception):
    """A format, translate or analyze call failed."""


class ContentServices(ABC):
    """Format, translate and analyze article content.

    Implementations raise :class:`ServiceError` on any failure.
    """

    name: str = ""

    @abstractmethod
    async def format_content(
        self, content: AuthoredContent, *, article_id: str | None = None
    ) -> AuthoredContent:
        """Return a structured (HTML) rendering of ``content``."""

    @abstractmethod
    async def translate(self, text: str, *, target_language: str) -> str:
        """Translate ``text`` into ``target_language`` ("en" or "kh")."""

    @abstractmethod
    async def analyze(self, text: str) -> ContentAnalysisReport:
        """Score ``text`` for readability, SEO and engagement."""


def check_language(target_language: str) -> None:
    if target_language not in SUPPORTED_LANGUAGES:
        raise ServiceError(f"Unsupported target language: {target_language!r}")
