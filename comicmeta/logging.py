"""
Rich-enhanced logging configuration.

Every module logs through ``logging.getLogger(__name__)``; configure_logging()
attaches handlers to the package logger so all of them share one setup.

Usage:
    from comicmeta.logging import configure_logging

    # Rich console output
    configure_logging(level="info")

    # Plain output plus a log file
    configure_logging(level="debug", use_rich=False, file_path="logs/comicmeta.log")
"""

import logging
import sys
from pathlib import Path
from typing import Any, Literal

from rich.console import Console
from rich.logging import RichHandler

# Package logger name - all module loggers are children of it
PACKAGE_LOGGER_NAME = "comicmeta"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

console = Console(stderr=True)


def _get_log_level(level: LogLevel | str | int) -> int:
    """Convert level string to logging constant."""
    if isinstance(level, int):
        return level

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return level_map.get(level.lower(), logging.INFO)


def configure_logging(
    level: LogLevel | str | int = "info",
    console_output: bool = True,
    file_path: str | Path | None = None,
    file_log_level: LogLevel | str | int | None = None,
    use_rich: bool = True,
    show_path: bool = False,
) -> logging.Logger:
    """
    Configure logging for the package.

    Args:
        level: Log level for console output
        console_output: Whether to log to the console
        file_path: Optional file path for file logging
        file_log_level: Log level for file output (defaults to level)
        use_rich: Use RichHandler for the console
        show_path: Show file path in Rich console logs

    Returns:
        Configured package logger
    """
    log_level = _get_log_level(level)
    file_level = _get_log_level(file_log_level) if file_log_level else log_level

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(min(log_level, file_level) if file_path else log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler: logging.Handler
        if use_rich:
            console_handler = RichHandler(
                level=log_level,
                console=console,
                show_path=show_path,
                markup=True,
                rich_tracebacks=True,
                log_time_format="[%X]",
                keywords=["Komga", "series", "provider", "aggregation"],
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(console_handler)

    # File handler - always plain formatting for parseable logs
    if file_path:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a package logger.

    Args:
        name: Optional sub-logger name (e.g., "komga")

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")
    return logging.getLogger(PACKAGE_LOGGER_NAME)


def set_level(level: LogLevel | str | int) -> None:
    """Change the log level of the package logger and its handlers."""
    log_level = _get_log_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)


class LogContext:
    """
    Context manager for temporarily changing log level.

    Example:
        with LogContext("debug"):
            service.match_series_metadata(series_id)
    """

    def __init__(self, level: LogLevel | str | int):
        self._target_level = _get_log_level(level)
        self._original_level: int | None = None

    def __enter__(self) -> "LogContext":
        logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        self._original_level = logger.level
        logger.setLevel(self._target_level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._original_level is not None:
            logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(self._original_level)


# =============================================================================
# Markup helpers
# =============================================================================


def _resolve(logger: logging.Logger | None) -> logging.Logger:
    return logger if logger is not None else logging.getLogger(PACKAGE_LOGGER_NAME)


def log_success(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log a success message with green checkmark."""
    _resolve(logger).info("[green]✓[/green] " + message, *args)


def log_error(message: str, *args: Any, logger: logging.Logger | None = None, exc_info: bool = False) -> None:
    """Log an error message with red X."""
    _resolve(logger).error("[red]✗[/red] " + message, *args, exc_info=exc_info)


def log_warning(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log a warning message with yellow warning sign."""
    _resolve(logger).warning("[yellow]⚠[/yellow] " + message, *args)


def log_info(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log an info message with cyan info icon."""
    _resolve(logger).info("[cyan]ℹ[/cyan] " + message, *args)


def log_debug(message: str, *args: Any, logger: logging.Logger | None = None) -> None:
    """Log a debug message with dim styling."""
    _resolve(logger).debug("[dim]" + message + "[/dim]", *args)
