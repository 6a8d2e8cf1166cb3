"""Logging configuration for the service."""

import logging
import sys

from routetrack.Core.log_ws import WebSocketLogHandler, log_ws_manager

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure the ``routetrack`` logger with console and WebSocket output.

    Idempotent: calling it again only adjusts the level, so pytest's caplog
    and uvicorn's own handlers are left alone.

    Args:
        level: Level name (``"DEBUG"``) or number for the console handler.

    Returns:
        The configured ``routetrack`` logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("routetrack")
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT)

    console = next(
        (h for h in logger.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, WebSocketLogHandler)),
        None,
    )
    if console is None:
        console = logging.StreamHandler(stream=sys.stdout)
        console.setFormatter(formatter)
        logger.addHandler(console)
    console.setLevel(level)

    if not any(isinstance(h, WebSocketLogHandler) for h in logger.handlers):
        ws_handler = WebSocketLogHandler(log_ws_manager, level=max(level, logging.INFO))
        ws_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(ws_handler)

    return logger
