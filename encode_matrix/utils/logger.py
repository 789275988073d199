"""
Logging utilities with Rich integration.

This module provides logging setup and utilities for console output.
"""

import inspect
import logging
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, cast

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# Type variable for generic function decoration
F = TypeVar("F", bound=Callable[..., Any])

# Global reference to active monitor for log integration
_active_monitor: Optional[Any] = None


def set_active_monitor(monitor: Optional[Any]) -> None:
    """
    Set the active MatrixMonitor for log integration.

    Args:
        monitor: MatrixMonitor instance or None to clear
    """
    global _active_monitor
    _active_monitor = monitor


def get_active_monitor() -> Optional[Any]:
    """
    Get the active MatrixMonitor.

    Returns:
        Active monitor or None
    """
    return _active_monitor


class MonitorIntegratedHandler(logging.Handler):
    """
    Log handler that integrates with MatrixMonitor.

    When a monitor is active, logs are displayed in the monitor UI.
    Otherwise, logs are printed normally via RichHandler.
    """

    LEVEL_COLORS = {
        "DEBUG": "dim",
        "INFO": "cyan",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold red",
    }

    def __init__(self, rich_handler: RichHandler):
        """
        Initialize the handler.

        Args:
            rich_handler: Fallback RichHandler for when no monitor is active
        """
        super().__init__()
        self.rich_handler = rich_handler
        self.setFormatter(rich_handler.formatter)
        self.setLevel(rich_handler.level)

    def emit(self, record: logging.LogRecord) -> None:
        """
        Emit a log record.

        Args:
            record: Log record to emit
        """
        monitor = get_active_monitor()

        if monitor is not None and hasattr(monitor, "add_log"):
            try:
                color = self.LEVEL_COLORS.get(record.levelname, "white")
                formatted = f"[{color}]{record.levelname}[/{color}]: {escape(record.getMessage())}"
                monitor.add_log(formatted)
            except Exception:
                # Fallback to rich handler if monitor fails
                self.rich_handler.emit(record)
        else:
            self.rich_handler.emit(record)


def setup_logger(
    name: str = "encode_matrix",
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Setup logger with Rich handler and optional file output.

    Args:
        name: Logger name (use "encode_matrix" to match package name)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        verbose: Enable verbose output with file paths
        console: Rich console to use (creates new if None)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        markup=True,
        show_time=True,
        show_path=verbose,
        omit_repeated_times=False,
        level=log_level,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    monitor_handler = MonitorIntegratedHandler(rich_handler)
    monitor_handler.setLevel(log_level)
    logger.addHandler(monitor_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    return logger


def log_performance(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Decorator to log function execution time.

    Args:
        logger: Logger instance to use (package logger if None)

    Returns:
        Decorated function that logs execution time
    """
    log = logger or logging.getLogger("encode_matrix")

    def decorator(func: F) -> F:
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.time()
            try:
                result = await func(*args, **kwargs)
                log.debug(f"{func.__name__} completed in {time.time() - start:.2f}s")
                return result
            except Exception as e:
                log.debug(
                    f"{func.__name__} failed after {time.time() - start:.2f}s: {e}"
                )
                raise

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.time()
            try:
                result = func(*args, **kwargs)
                log.debug(f"{func.__name__} completed in {time.time() - start:.2f}s")
                return result
            except Exception as e:
                log.debug(
                    f"{func.__name__} failed after {time.time() - start:.2f}s: {e}"
                )
                raise

        if inspect.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


# Create default logger
default_logger = setup_logger()


def get_logger(name: str = "encode_matrix") -> logging.Logger:
    """
    Get a logger instance.

    Modules call get_logger(__name__); names like "encode_matrix.executor.scheduler"
    inherit the handlers configured on the "encode_matrix" logger.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
