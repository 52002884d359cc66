"""
Centralized configuration with environment variable overrides.

CRM connection details, cache lifetimes, query defaults and assistant
session limits are configurable here. Services receive the config
explicitly and only fall back to ``settings`` when none is given.
"""

import logging
import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

from dynamics_assistant.logging_context import LOG_FORMAT, attach_session_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class DynamicsConfig:
    """Connection settings for the Dynamics 365 Web API."""

    url: str = os.getenv("DYNAMICS_URL", "")
    api_version: str = os.getenv("DYNAMICS_API_VERSION", "9.2")
    access_token: str = os.getenv("DYNAMICS_ACCESS_TOKEN", "")
    request_timeout_sec: float = _safe_float("DYNAMICS_REQUEST_TIMEOUT", "30")

    @property
    def is_live(self) -> bool:
        """True when enough is configured to talk to a real organization."""
        return bool(self.url and self.access_token)


@dataclass(frozen=True)
class CacheConfig:
    """Metadata cache lifetimes and sizes."""

    metadata_ttl_sec: float = _safe_float("METADATA_CACHE_TTL", "3600")
    data_model_entity_limit: int = _safe_int("DATA_MODEL_ENTITY_LIMIT", "20")
    entity_list_top: int = _safe_int("ENTITY_LIST_TOP", "500")


@dataclass(frozen=True)
class QueryConfig:
    """Defaults applied to list and count queries."""

    default_top: int = _safe_int("QUERY_DEFAULT_TOP", "50")
    default_order_by: str = os.getenv("QUERY_DEFAULT_ORDER_BY", "createdon desc")
    count_cap: int = _safe_int("QUERY_COUNT_CAP", "1000")
    count_select_field: str = os.getenv("QUERY_COUNT_SELECT_FIELD", "createdon")


@dataclass(frozen=True)
class AssistantConfig:
    """Interactive query assistant session limits."""

    session_ttl_minutes: float = _safe_float("ASSISTANT_SESSION_TTL_MINUTES", "30")
    sweep_interval_sec: float = _safe_float("ASSISTANT_SWEEP_INTERVAL", "300")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    dynamics: DynamicsConfig = field(default_factory=DynamicsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    server_name: str = os.getenv("MCP_SERVER_NAME", "dynamics-assistant")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.dynamics.request_timeout_sec <= 0:
        raise ValueError(
            "DYNAMICS_REQUEST_TIMEOUT must be > 0, "
            f"got {config.dynamics.request_timeout_sec}"
        )
    if config.cache.metadata_ttl_sec <= 0:
        raise ValueError(
            f"METADATA_CACHE_TTL must be > 0, got {config.cache.metadata_ttl_sec}"
        )

    for name, value in [
        ("DATA_MODEL_ENTITY_LIMIT", config.cache.data_model_entity_limit),
        ("ENTITY_LIST_TOP", config.cache.entity_list_top),
        ("QUERY_DEFAULT_TOP", config.query.default_top),
        ("QUERY_COUNT_CAP", config.query.count_cap),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if not config.query.default_order_by.strip():
        raise ValueError("QUERY_DEFAULT_ORDER_BY must not be empty")
    if config.assistant.session_ttl_minutes <= 0:
        raise ValueError(
            "ASSISTANT_SESSION_TTL_MINUTES must be > 0, "
            f"got {config.assistant.session_ttl_minutes}"
        )
    if config.assistant.sweep_interval_sec <= 0:
        raise ValueError(
            "ASSISTANT_SWEEP_INTERVAL must be > 0, "
            f"got {config.assistant.sweep_interval_sec}"
        )
    if config.dynamics.url and not config.dynamics.url.startswith(("http://", "https://")):
        raise ValueError(
            f"DYNAMICS_URL must be an http(s) URL, got {config.dynamics.url!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    # stdout carries the MCP stdio transport, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    for handler in logging.getLogger().handlers:
        attach_session_filter(handler)
    logger.info(
        "Configuration loaded for '%s' (live CRM: %s)",
        config.server_name, config.dynamics.is_live,
    )
    return config


# Singleton instance
settings = load_config()
