"""structlog setup for the review service.

Call ``setup_logging()`` once at startup; modules then do:

    from review_app.core.logging import get_logger
    logger = get_logger(__name__)
    logger.info("status_changed", content_id="abc", status="APPROVED")

Events render as key=value lines by default and as one JSON object per line
when ``LOG_JSON`` is set.
"""
from __future__ import annotations
import logging
import sys
from typing import Any, Optional

import structlog

from review_app.core import config

_QUIET_LOGGERS = ("uvicorn.access", "urllib3", "httpx", "httpcore")


def _final_renderer(as_json: bool):
    if as_json:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    level_no = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    as_json = config.LOG_JSON if json_output is None else json_output

    # stdlib handler so uvicorn and requests output lands in the same stream
    logging.basicConfig(level=level_no, format="%(message)s", stream=sys.stderr)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _final_renderer(as_json),
        ],
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **bound_values: Any):
    """Return a structlog logger for ``name``, optionally pre-bound with context."""
    return structlog.get_logger(name).bind(**bound_values)
