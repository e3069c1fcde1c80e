"""Logging configuration shared by the app and the command line."""

from typing import Any
import logging


def configure_logging(config: dict[str, Any]) -> None:
    settings = config.get("logging", {})
    level = getattr(logging, str(settings.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=settings.get("format", "%(asctime)s - %(levelname)s - %(message)s"),
    )
