"""Logging setup and structured stage summaries."""

import json
import logging
import time

from courier_recon.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging. Without ``level`` the configured ``log_level`` is used."""
    level = level or settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def log_event(logger: logging.Logger, event: str, **fields) -> None:
    """Emit one JSON line summarising a pipeline stage at INFO."""
    if not logger.isEnabledFor(logging.INFO):
        return
    log_data = {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        "event": event,
        **fields,
    }
    logger.info(json.dumps(log_data, default=str))
