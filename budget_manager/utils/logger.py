"""
Logging helpers
- setup_logging(): console + rotating file handler, safe to call more than once
- get_logger(): module logger
- log_function: entry/exit/exception logging for sync and async callables
- LogOperation: timed block with start/finish/failure messages
"""
import functools
import inspect
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "budget_manager.log"

_configured = False


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure the ``budget_manager`` logger hierarchy.

    Args:
        level: Log level name (default: LOG_LEVEL env or INFO)
        log_dir: Directory for the rotating log file (default: LOG_DIR env or ./logs)

    Returns:
        The package root logger
    """
    global _configured

    root = logging.getLogger("budget_manager")
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if _configured:
        return root

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    try:
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning(f"File logging disabled ({directory}): {e}")

    root.propagate = False
    _configured = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the package hierarchy"""
    if name == "__main__" or not name.startswith("budget_manager"):
        name = f"budget_manager.{name}"
    return logging.getLogger(name)


def install_excepthook(logger: logging.Logger) -> None:
    """Log uncaught exceptions before handing them to the default hook"""

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
        sys.__excepthook__(exc_type, exc_value, exc_traceback)

    sys.excepthook = handle_exception


def log_function(func: Callable) -> Callable:
    """Log calls to ``func`` (works for coroutines too)"""
    logger = get_logger(func.__module__)
    name = func.__qualname__

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger.debug(f"-> {name}")
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                logger.exception(f"!! {name} failed")
                raise
            logger.debug(f"<- {name} ({(time.perf_counter() - started) * 1000:.1f}ms)")
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f"-> {name}")
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception:
            logger.exception(f"!! {name} failed")
            raise
        logger.debug(f"<- {name} ({(time.perf_counter() - started) * 1000:.1f}ms)")
        return result

    return wrapper


class LogOperation:
    """
    Context manager that logs an operation's duration

    Usage:
        with LogOperation("database_pool_initialization", logger):
            ...
    """

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.started = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self):
        self.started = time.perf_counter()
        self.logger.info(f"[{self.operation}] started")
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.elapsed_ms = (time.perf_counter() - self.started) * 1000
        if exc_type is None:
            self.logger.info(f"[{self.operation}] finished in {self.elapsed_ms:.1f}ms")
        else:
            self.logger.error(
                f"[{self.operation}] failed after {self.elapsed_ms:.1f}ms: {exc_value}"
            )
        return False
