"""Logging configuration for the storefront.

Handlers, renderers and noisy-library levels come from Protean's
``configure_logging``; this module only maps storefront settings onto it.
"""

from pathlib import Path

from protean.utils.logging import add_context, clear_context
from protean.utils.logging import configure_logging as configure_protean_logging

from shared.config import get_settings

__all__ = ["add_context", "clear_context", "configure_logging", "get_log_level"]

LOG_FILE_PREFIX = "storefront"

_ENV_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_log_level() -> str:
    """Explicit ``LOG_LEVEL`` wins; otherwise the level follows ``ENVIRONMENT``."""
    settings = get_settings()
    return settings.LOG_LEVEL or _ENV_LEVELS.get(settings.ENVIRONMENT.lower(), "INFO")


def configure_logging(log_dir: Path | str | None = "logs") -> None:
    """Configure stdlib and structlog logging for the application."""
    configure_protean_logging(
        level=get_log_level(),
        log_dir=log_dir,
        log_file_prefix=LOG_FILE_PREFIX,
        per_logger={"protean": "WARNING", "httpx": "WARNING"},
    )
