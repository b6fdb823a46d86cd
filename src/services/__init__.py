"""Content services — the format / translate / analyze collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING

from newsdesk.services.base import ContentServices, ServiceError

if TYPE_CHECKING:
    from newsdesk.config import NewsdeskConfig

__all__ = ["ContentServices", "ServiceError", "create_services"]


def create_services(backend: str, config: NewsdeskConfig | None = None) -> ContentServices:
    """Create the content services for the given backend.

    Args:
        backend: ``"http"``, ``"llm"`` or ``"local"``.
        config: Loaded config; defaults are used when omitted.

    Returns:
        A ContentServices instance.

    Raises:
        ValueError: If the backend is unknown.
    """
    from newsdesk.config import NewsdeskConfig
    from newsdesk.services.http import HttpContentServices
    from newsdesk.services.llm import LLMContentServices
    from newsdesk.services.local import LocalContentServices

    config = config or NewsdeskConfig()

    if backend == "http":
        return HttpContentServices(
            config.services.base_url,
            api_token=config.services.api_token,
            timeout=config.services.timeout,
        )
    if backend == "llm":
        return LLMContentServices(model=config.llm.model, timeout=config.llm.timeout)
    if backend == "local":
        return LocalContentServices()

    raise ValueError(f"Unknown content services backend: {backend!r}")
