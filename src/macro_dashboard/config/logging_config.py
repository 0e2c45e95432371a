"""Logging configuration."""

import logging
import sys
from typing import Optional

from macro_dashboard.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("sqlalchemy.engine", "yfinance", "peewee", "urllib3", "requests", "httpx")


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging to stdout, plus a log file when one is configured.

    Safe to call more than once; handlers are replaced, not stacked.
    """
    settings = settings or get_settings()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_path = settings.get_log_path()
    if log_path is not None:
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
