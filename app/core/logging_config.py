# -*- coding: utf-8 -*-
"""
Logging setup for processes that use the acquiring client (CLI, webhook server).

Routes logs by severity:
- DEBUG, INFO, WARNING → STDOUT
- ERROR, CRITICAL → STDERR

Records go through a QueueHandler so the caller (an aiohttp loop serving
webhooks) never blocks on stream I/O; a QueueListener thread writes them out.
httpx request lines are lowered to WARNING, the client logs its own events.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional, Union


class MaxLevelFilter(logging.Filter):
    """Pass only records at or below max_level."""

    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno <= self.max_level


_log_listener: Optional[QueueListener] = None


def setup_logging(level: Union[int, str, None] = None) -> QueueListener:
    """
    Configure the root logger. Safe to call more than once: a previous
    listener is stopped and handlers are replaced.

    Args:
        level: Level name or number; defaults to config.LOG_LEVEL

    Returns:
        The running QueueListener
    """
    global _log_listener

    if level is None:
        import config
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    stop_logging()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(MaxLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    log_queue: queue.Queue = queue.Queue()
    root_logger.addHandler(QueueHandler(log_queue))

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _log_listener = QueueListener(
        log_queue,
        stdout_handler,
        stderr_handler,
        respect_handler_level=True,
    )
    _log_listener.start()
    atexit.register(stop_logging)
    return _log_listener


def stop_logging() -> None:
    """Flush and stop the queue listener."""
    global _log_listener
    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None
