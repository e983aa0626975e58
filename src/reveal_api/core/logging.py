"""Logging setup for the Reveal API process."""

import logging

from reveal_api.core.settings import settings


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure root logging once at startup and return the package logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=(level or settings.log_level).upper(),
    )
    return logging.getLogger("reveal_api")
