"""REST client for the newsroom API's AI endpoints.

Blocking urllib calls run in a worker thread so the editor's event
loop keeps serving edits while a request is in flight.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from pydantic import ValidationError

from newsdesk.autoprocess.models import AuthoredContent, ContentAnalysisReport
from newsdesk.services.base import ContentServices, ServiceError, check_language

logger = logging.getLogger(__name__)

FORMAT_PATH = "/ai/format-content"
TRANSLATE_PATH = "/ai/translate"
ANALYZE_PATH = "/ai/analyze-content"


class HttpContentServices(ContentServices):
    """Calls the format / translate / analyze endpoints of the API."""

    name = "http"

    def __init__(self, base_url: str, *, api_token: str = "", timeout: float = 30.0) -> None:
        if not base_url:
            raise ServiceError("No API base URL configured for http services")
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout

    async def format_content(
        self, content: AuthoredContent, *, article_id: str | None = None
    ) -> AuthoredContent:
        payload: dict[str, Any] = {"content": content.model_dump()}
        if article_id:
            payload["options"] = {"articleId": article_id}
        body = await self._post(FORMAT_PATH, payload)

        raw = body.get("content")
        if raw is None and isinstance(body.get("data"), dict):
            raw = body["data"].get("content")
        if isinstance(raw, str):
            raw = {"en": raw, "kh": ""}
        try:
            return AuthoredContent.model_validate(raw)
        except ValidationError as exc:
            raise ServiceError(f"{FORMAT_PATH} returned malformed content") from exc

    async def translate(self, text: str, *, target_language: str) -> str:
        check_language(target_language)
        body = await self._post(TRANSLATE_PATH, {"text": text, "targetLanguage": target_language})
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        translation = data.get("translation")
        if not isinstance(translation, str):
            raise ServiceError(f"{TRANSLATE_PATH} returned no translation")
        return translation

    async def analyze(self, text: str) -> ContentAnalysisReport:
        body = await self._post(ANALYZE_PATH, {"content": text})
        try:
            return ContentAnalysisReport.model_validate(body.get("data"))
        except ValidationError as exc:
            raise ServiceError(f"{ANALYZE_PATH} returned a malformed report") from exc

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._request, path, payload)

    def _request(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST JSON and return the decoded success envelope."""
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers=headers,
        )
        logger.debug("POST %s", url)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raise ServiceError(f"{path} returned HTTP {exc.code}: {_error_detail(exc)}") from exc
        except urllib.error.URLError as exc:
            raise ServiceError(f"{path} unreachable: {exc.reason}") from exc
        except TimeoutError as exc:
            raise ServiceError(f"{path} timed out after {self.timeout}s") from exc
        except ValueError as exc:
            raise ServiceError(f"{path} returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise ServiceError(f"{path} returned an unexpected payload")
        if body.get("success") is False:
            raise ServiceError(body.get("error") or body.get("message") or f"{path} failed")
        return body


def _error_detail(exc: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(exc.read().decode("utf-8"))
    except (ValueError, OSError):
        return exc.reason or ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or exc.reason)
    return str(exc.reason)
