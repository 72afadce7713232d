"""Logging configuration helpers for the Mindwave API."""

import logging
from logging import Logger

from mindwave.config import settings


def configure_logging() -> Logger:
    """Configure basic logging for the application and return its logger."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("mindwave")
