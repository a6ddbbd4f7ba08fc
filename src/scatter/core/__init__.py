"""Scatter Core -- errors, logging, and settings shared by every layer.

Architecture::

    errors.py      Structured error hierarchy (ScatterError, TransportError)
    logging.py     structlog configuration + get_logger
    settings.py    ScatterSettings (pydantic-settings, SCATTER_ env prefix)
"""

from scatter.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    ScatterError,
    SinkError,
    TransportError,
    UnitTimeoutError,
)
from scatter.core.logging import configure_logging, get_logger
from scatter.core.settings import ScatterSettings, get_settings, reset_settings

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "ScatterError",
    "SinkError",
    "TransportError",
    "UnitTimeoutError",
    "configure_logging",
    "get_logger",
    "ScatterSettings",
    "get_settings",
    "reset_settings",
]
