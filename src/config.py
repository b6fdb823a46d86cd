"""Unified configuration loaded from .newsdesk.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from newsdesk.autoprocess.models import AutoProcessingConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".newsdesk.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "newsdesk",
]

ServicesBackend = Literal["http", "llm", "local"]


class AutoProcessSectionConfig(BaseModel):
    """[autoprocess] section."""

    enabled: bool = True
    auto_format: bool = True
    auto_translate: bool = True
    auto_analyze: bool = True
    quiet_interval: float = Field(default=2.0, ge=0)
    min_length: int = Field(default=50, ge=0)
    done_hold: float = Field(default=1.0, ge=0)

    def to_autoprocessing_config(self) -> AutoProcessingConfig:
        return AutoProcessingConfig(
            enabled=self.enabled,
            auto_format=self.auto_format,
            auto_translate=self.auto_translate,
            auto_analyze=self.auto_analyze,
        )


class ServicesSectionConfig(BaseModel):
    """[services] section."""

    backend: ServicesBackend = "http"
    base_url: str = "http://localhost:5000/api"
    api_token: str = ""
    timeout: float = 30.0


class LLMSectionConfig(BaseModel):
    """[llm] section."""

    model: str | None = None
    timeout: float = 120.0


class NewsdeskConfig(BaseModel):
    """Top-level configuration model."""

    autoprocess: AutoProcessSectionConfig = Field(default_factory=AutoProcessSectionConfig)
    services: ServicesSectionConfig = Field(default_factory=ServicesSectionConfig)
    llm: LLMSectionConfig = Field(default_factory=LLMSectionConfig)


def load_config(path: str | Path | None = None) -> NewsdeskConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .newsdesk.toml in CWD
    3. ~/.config/newsdesk/.newsdesk.toml
    4. ~/.config/newsdesk/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "newsdesk" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    try:
        config = NewsdeskConfig.model_validate(data) if data else NewsdeskConfig()
    except ValidationError as exc:
        logger.warning("Invalid config, using defaults: %s", exc)
        config = NewsdeskConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: NewsdeskConfig, **cli_kwargs: object) -> NewsdeskConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "auto_format": ("autoprocess", "auto_format"),
        "auto_translate": ("autoprocess", "auto_translate"),
        "auto_analyze": ("autoprocess", "auto_analyze"),
        "quiet_interval": ("autoprocess", "quiet_interval"),
        "services": ("services", "backend"),
        "api_url": ("services", "base_url"),
        "model": ("llm", "model"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return NewsdeskConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes", "on")


def _apply_env_vars(config: NewsdeskConfig) -> NewsdeskConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "NEWSDESK_SERVICES": ("services", "backend"),
        "NEWSDESK_API_URL": ("services", "base_url"),
        "NEWSDESK_API_TOKEN": ("services", "api_token"),
        "NEWSDESK_MODEL": ("llm", "model"),
    }
    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    for env_var, field in [
        ("NEWSDESK_AUTOPROCESS", "enabled"),
        ("NEWSDESK_AUTO_FORMAT", "auto_format"),
        ("NEWSDESK_AUTO_TRANSLATE", "auto_translate"),
        ("NEWSDESK_AUTO_ANALYZE", "auto_analyze"),
    ]:
        raw = os.environ.get(env_var)
        if raw is not None:
            data["autoprocess"][field] = _parse_bool(raw)

    interval_raw = os.environ.get("NEWSDESK_QUIET_INTERVAL")
    if interval_raw is not None:
        try:
            data["autoprocess"]["quiet_interval"] = float(interval_raw)
        except ValueError:
            logger.warning("Ignoring invalid NEWSDESK_QUIET_INTERVAL=%r", interval_raw)

    timeout_raw = os.environ.get("NEWSDESK_API_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["services"]["timeout"] = float(timeout_raw)
        except ValueError:
            logger.warning("Ignoring invalid NEWSDESK_API_TIMEOUT=%r", timeout_raw)

    try:
        return NewsdeskConfig.model_validate(data)
    except ValidationError as exc:
        logger.warning("Ignoring invalid environment overrides: %s", exc)
        return config
