"""Claude-backed content services."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from newsdesk.autoprocess.models import AuthoredContent, ContentAnalysisReport
from newsdesk.formatting import is_html
from newsdesk.llm import LLMError, call_claude, strip_code_fences, strip_json_fences
from newsdesk.services.base import ContentServices, ServiceError, check_language
from newsdesk.services.prompts import (
    ANALYZE_SYSTEM_PROMPT,
    FORMAT_SYSTEM_PROMPT,
    get_format_prompt,
    get_translate_prompt,
)

logger = logging.getLogger(__name__)


class LLMContentServices(ContentServices):
    """Formats, translates and analyzes article text with Claude.

    ``article_id`` is accepted for interface parity but unused: the model
    only sees the text itself.
    """

    name = "llm"

    def __init__(self, *, model: str | None = None, timeout: float = 120) -> None:
        self.model = model
        self.timeout = timeout

    async def format_content(
        self, content: AuthoredContent, *, article_id: str | None = None
    ) -> AuthoredContent:
        prompt = get_format_prompt(content.en, already_structured=is_html(content.en))
        html = await self._call(FORMAT_SYSTEM_PROMPT, prompt, label="format")
        return AuthoredContent(en=strip_code_fences(html), kh=content.kh)

    async def translate(self, text: str, *, target_language: str) -> str:
        check_language(target_language)
        system, user = get_translate_prompt(text, target_language)
        return await self._call(system, user, label=f"translate-{target_language}")

    async def analyze(self, text: str) -> ContentAnalysisReport:
        raw = await self._call(ANALYZE_SYSTEM_PROMPT, text, label="analyze")
        try:
            return ContentAnalysisReport.model_validate(json.loads(strip_json_fences(raw)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ServiceError(f"Could not parse analysis report: {exc}") from exc

    async def _call(self, system_prompt: str, user_prompt: str, *, label: str) -> str:
        try:
            return await call_claude(
                system_prompt,
                user_prompt,
                model=self.model,
                timeout=self.timeout,
                label=label,
            )
        except LLMError as exc:
            raise ServiceError(str(exc)) from exc
