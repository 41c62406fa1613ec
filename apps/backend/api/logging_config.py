"""
Logging for the API.

Router loggers are children of "api" ("api.movies", "api.reviews", ...).
Handlers are attached once at startup, writing next to the core
component logs, and every record carries the id of the request being
served.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Optional, Union

from moviedb.utils import LOG_DATE_FORMAT, daily_log_handler

API_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

logger = logging.getLogger("api")


class RequestIdFilter(logging.Filter):
    """Stamp records with the current request id ('-' outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


def configure_api_logging(log_dir: Path, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attach file and stdout handlers to the "api" logger.

    Args:
        log_dir: Directory of the daily api_YYYYMMDD.log file
        level: Level name or number; unknown names fall back to INFO
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    if logger.handlers:
        return logger

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(API_LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    for handler in (daily_log_handler(log_dir, "api", API_LOG_FORMAT), console):
        handler.addFilter(RequestIdFilter())
        logger.addHandler(handler)
    return logger


def start_request() -> str:
    """Give the current request a short id and return it."""
    request_id = uuid.uuid4().hex[:8]
    request_id_var.set(request_id)
    return request_id


def current_request_id() -> Optional[str]:
    return request_id_var.get()
