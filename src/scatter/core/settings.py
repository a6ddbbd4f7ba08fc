"""Process-wide settings for scatter.

Configuration is explicit, validated, and environment-driven: every field can
be overridden with a ``SCATTER_`` prefixed environment variable or a ``.env``
file.

Fields
──────
deadline_seconds : Per-unit deadline enforced by the Unit Executor
max_concurrency  : Upper bound on in-flight executions (``None`` = one per unit)
units            : Default fixed unit set used when the facade is given none
user_agent       : ``User-Agent`` header sent by the HTTP transport
follow_redirects : Whether the HTTP transport follows redirects
log_level        : Structlog log level
json_logs        : JSON log output (``None`` = auto, JSON when not a tty)

Examples:
    >>> import os
    >>> os.environ["SCATTER_DEADLINE_SECONDS"] = "2"
    >>> reset_settings()
    >>> get_settings().deadline_seconds
    2.0
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UNITS: tuple[str, ...] = (
    "http://www.microsoft.com",
    "http://www.google.com",
    "http://www.bing.com",
    "http://wwjs.badurlwillerror.netf",
    "http://www.reddit.com",
    "http://news.ycombinator.com",
)


class ScatterSettings(BaseSettings):
    """Settings for the dispatch engine and its HTTP transport."""

    model_config = SettingsConfigDict(
        env_prefix="SCATTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Execution ────────────────────────────────────────────────
    deadline_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Per-unit deadline in seconds",
    )
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Bound on in-flight executions; None runs one context per unit",
    )
    units: tuple[str, ...] = Field(
        default=DEFAULT_UNITS,
        description="Default fixed unit set",
    )

    # ── Transport ────────────────────────────────────────────────
    user_agent: str = "scatter/0.1"
    follow_redirects: bool = True

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, ScatterSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ScatterSettings:
    """Load, validate, and cache a :class:`ScatterSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = ScatterSettings()
    _settings_cache["default"] = settings
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads the env."""
    _settings_cache.clear()


__all__ = ["DEFAULT_UNITS", "ScatterSettings", "get_settings", "reset_settings"]
