"""Shared LLM calling utilities.

All Claude calls go through :func:`call_claude`, an async wrapper around
the Anthropic Messages API, plus a helper for pulling JSON out of model
output.
"""

from __future__ import annotations

import logging
import os
import re

import anthropic

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base error for LLM calls."""


_MODEL_MAP: dict[str, str] = {
    "sonnet": "claude-sonnet-4-6",
    "haiku": "claude-haiku-4-5-20251001",
    "opus": "claude-opus-4-6",
}

_DEFAULT_MODEL = "claude-sonnet-4-6"
_MAX_TOKENS = 8192


def resolve_model(model: str | None) -> str:
    """Resolve a short model name to an API model ID."""
    if model is None:
        return _DEFAULT_MODEL
    return _MODEL_MAP.get(model, model)


async def call_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    timeout: float = 120,
    label: str = "newsdesk",
) -> str:
    """Call Claude and return the response text.

    Args:
        system_prompt: System prompt for the LLM.
        user_prompt: User/content prompt.
        model: Optional model override (e.g. "sonnet", "haiku", "opus").
        timeout: Request timeout in seconds.
        label: Label for logging and error messages.

    Returns:
        The LLM response text (stripped).

    Raises:
        LLMError: On any failure, including a missing API key.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if not api_key:
        raise LLMError(f"ANTHROPIC_API_KEY not set (label={label})")

    resolved_model = resolve_model(model)
    logger.debug("Calling Anthropic API model=%s (%s)", resolved_model, label)

    try:
        async with anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout) as client:
            response = await client.messages.create(
                model=resolved_model,
                max_tokens=_MAX_TOKENS,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
    except anthropic.APIError as exc:
        raise LLMError(f"Anthropic API failed (label={label}): {exc}") from exc

    text = "".join(block.text for block in response.content if block.type == "text").strip()
    if not text:
        raise LLMError(f"Anthropic API returned empty response (label={label})")
    return text


_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences from LLM JSON output.

    Falls back to the outermost ``{...}`` span when there is no fence.
    """
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```html (or bare) fence from model output."""
    text = text.strip()
    match = re.fullmatch(r"```[a-zA-Z]*\s*\n?(.*?)\n?```", text, re.DOTALL)
    return match.group(1).strip() if match else text
