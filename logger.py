"""
Centralized logging configuration.

Modules keep using ``logging.getLogger(__name__)``. The entry point calls
``setup_logging`` once with ``LOG_LEVEL``; uvicorn's own loggers are routed
through the same handler and level so server and request lines share one
format.
"""

import logging
import sys
from typing import IO, Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# uvicorn's "trace" sits below DEBUG
TRACE_LEVEL = 5

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_handler: Optional[logging.Handler] = None


def resolve_level(level) -> int:
    """
    Translate a LOG_LEVEL value into a logging level number.

    Accepts names in any case ("info", "WARNING", "trace") or an int.
    Anything unrecognised falls back to INFO.
    """
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    name = str(level or "").strip().upper()
    if name == "TRACE":
        return TRACE_LEVEL
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level="info", stream: Optional[IO] = None) -> int:
    """
    Configure the root logger and the uvicorn loggers.

    Calling it again replaces the level but never stacks a second handler.

    Args:
        level: LOG_LEVEL value
        stream: Output stream, stdout by default

    Returns:
        The resolved numeric level
    """
    global _handler
    numeric = resolve_level(level)
    root = logging.getLogger()

    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stdout)
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        root.addHandler(_handler)
    elif stream is not None:
        _handler.setStream(stream)
    root.setLevel(numeric)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.setLevel(numeric)
        server_logger.propagate = True

    return numeric
