"""
Centralized logging configuration for the order portal.

Every record carries the thread that produced it and, while a request is
being served, the short id of the browser workspace it belongs to. That is
enough to follow one customer's order from catalog edits to submission even
when many browsers are active.

Log Format:
    2026-10-17 10:15:30 [INFO    ] [MainThread] [-] order_portal.app - Starting order portal
    2026-10-17 10:15:31 [INFO    ] [Thread-3] [a1b2c3d4] order_portal.services.submission - Order placed
    2026-10-17 10:15:32 [WARNING ] [Thread-4] [9f8e7d6c] order_portal.core.api_client - list_orders: HTTP 502

Usage:
    # At application startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)

    # For one browser session's workspace
    ws_logger = get_workspace_logger(workspace.id)
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from flask import g, has_request_context


APP_LOGGER_NAME = "order_portal"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] [%(workspace)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

NO_WORKSPACE = "-"


class RequestContextFilter(logging.Filter):
    """
    Adds thread_name and workspace to every record.

    workspace is the first 8 characters of the id of the workspace serving
    the current request, or "-" outside a request or before login.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.workspace = NO_WORKSPACE
        if has_request_context():
            workspace = g.get("workspace")
            if workspace is not None:
                record.workspace = workspace.id[:8]
        return True


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the portal's logger tree.

    Console output is always on. With file logging enabled, everything at
    log_level goes to <app_name>.log and ERROR or worse is duplicated to
    <app_name>_error.log, both rotated at 10 MB.

    Calling this again replaces the previous handlers, so app factories
    built repeatedly (tests) do not stack duplicate output.

    Args:
        app_name: Name of the root logger (default: "order_portal")
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Whether to write log files

    Returns:
        The configured root logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    handlers: List[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    log_file = None
    if enable_file_logging:
        log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{app_name}.log"
        handlers.append(_rotating_handler(log_file, log_level))
        handlers.append(_rotating_handler(log_dir / f"{app_name}_error.log", logging.ERROR))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    context_filter = RequestContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        logger.addHandler(handler)

    if log_file is not None:
        logger.info(f"File logging enabled: {log_file}")
    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Child logger under the application namespace.

    Example:
        get_logger("services.submission")  # "order_portal.services.submission"
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_workspace_logger(workspace_id: str) -> logging.Logger:
    """Logger for one browser workspace ("order_portal.workspace.<first 8 chars>")."""
    return logging.getLogger(f"{APP_LOGGER_NAME}.workspace.{workspace_id[:8]}")
