"""Side-channel diagnostics using structlog.

Diagnostics never go into the database file. They are rendered as one JSON
object per line on stderr, with ISO-8601 timestamps, and every string value
is reduced to printable ASCII (anything else becomes `?`) so registry content
cannot smuggle control sequences into operator terminals or log files.

Usage:
    >>> from epp_repo_ids.logging import configure_logging, get_logger
    >>> configure_logging("INFO")
    >>> get_logger(__name__).warning("record_rejected", record=7, reason="too_long")
"""

import logging
import os
import sys
from typing import Any, MutableMapping, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor


def printable(text: str) -> str:
    return "".join(ch if " " <= ch <= "~" else "?" for ch in text)


def _printable_value(value: Any) -> Any:
    if isinstance(value, str):
        return printable(value)
    if isinstance(value, dict):
        return {k: _printable_value(v) for k, v in value.items()}
    return value


def printable_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor replacing non-printable characters with `?`."""
    return {key: _printable_value(value) for key, value in event_dict.items()}


def configure_logging(
    level: str = "INFO", force: bool = True, stream: Optional[TextIO] = None
) -> None:
    """
    Route diagnostics through the sanitizing JSON chain.

    With force=False an already configured root logger keeps its handlers.
    Output goes to stderr unless another stream is given.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(log_level)
    logging.basicConfig(format="%(message)s", level=log_level, handlers=[handler], force=force)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        printable_processor,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


# Configure on import so library callers and the HTTP surface get the same
# sanitized diagnostics as the CLI.
configure_logging(os.getenv("EPP_REPO_IDS_LOG_LEVEL", "INFO"), force=False)
