from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Attach a console handler to the ``mke_events`` logger (once)."""
    log_level = getattr(
        logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO
    )
    package_logger = logging.getLogger("mke_events")
    package_logger.setLevel(log_level)

    if package_logger.handlers:
        return package_logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
    return package_logger
