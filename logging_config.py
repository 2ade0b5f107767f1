"""
Logging setup for Order Desk.

All loggers hang off the "order_desk" logger, and every record is tagged
with the thread that emitted it. The catalog refresh runs on a thread
named "Catalog"; request handlers keep the server's thread names.

    2026-10-18 09:00:00 [INFO    ] [MainThread] order_desk.app - Starting Order Desk in production mode
    2026-10-18 09:00:01 [INFO    ] [Catalog] order_desk.services.catalog_service - Catalog refresh loop starting
    2026-10-18 09:03:12 [WARNING ] [Thread-7] order_desk.services.cart_store - Discarding corrupt stored cart

Production also writes ``<name>.log`` and ``<name>_error.log`` (ERROR and
above), each rotated at 10 MB with five backups.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "order_desk"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class ThreadContextFilter(logging.Filter):
    """Sets ``thread_name`` and ``thread_id`` on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.thread_id = threading.get_ident()
        return True


def _attach(logger: logging.Logger, handler: logging.Handler, level: int,
            formatter: logging.Formatter, thread_filter: logging.Filter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(thread_filter)
    logger.addHandler(handler)


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the application logger.

    Safe to call more than once; earlier handlers are replaced.

    Args:
        app_name: Application logger name, also the log file stem
        log_level: Minimum level for the console and main log file
        log_dir: Where log files go (default: ``logs/`` beside this module)
        enable_file_logging: Also write rotating log files

    Returns:
        The application logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    thread_filter = ThreadContextFilter()

    _attach(logger, logging.StreamHandler(sys.stdout), log_level, formatter, thread_filter)

    if enable_file_logging:
        log_dir = log_dir or Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        for filename, level in ((f"{app_name}.log", log_level), (f"{app_name}_error.log", logging.ERROR)):
            handler = RotatingFileHandler(
                filename=log_dir / filename,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
            _attach(logger, handler, level, formatter, thread_filter)

        logger.info(f"File logging enabled in {log_dir}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under "order_desk" ("services.cart_store" -> "order_desk.services.cart_store")."""
    if name != APP_LOGGER_NAME and not name.startswith(f"{APP_LOGGER_NAME}."):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_thread_name(name: str) -> None:
    """Rename the current thread; the name shows up in every log line it emits."""
    threading.current_thread().name = name
