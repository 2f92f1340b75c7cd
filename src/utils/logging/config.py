"""
Logging configuration for the transform and its CLI.

The transform itself only creates module loggers; hosts (the CLI, or the
pipeline embedding the transform) call setup_logging once at startup.
"""

import logging
import logging.handlers
import os
import sys

from .formatters import ConsoleFormatter, JSONFormatter

# Libraries that log too much at INFO
_NOISY_LOGGERS = ("opentelemetry", "urllib3", "grpc")


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    app_name: str = "cdc-flatten",
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure logging for the application

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (if None, file logging is disabled)
        console_output: Whether to log to stderr
        json_format: Use JSON format for both console and file logs
        app_name: Application name for log context
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated log files to keep
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    def make_formatter(console: bool) -> logging.Formatter:
        if json_format:
            return JSONFormatter(app_name=app_name)
        if console:
            return ConsoleFormatter(use_colors=True)
        return logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(make_formatter(console=True))
        root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(make_formatter(console=False))
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging initialized: level={level}, file={log_file or 'none'}, "
        f"console={console_output}, json={json_format}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically get_logger(__name__))"""
    return logging.getLogger(name)


def configure_from_env() -> None:
    """
    Configure logging from environment variables

    Environment variables:
        LOG_LEVEL: Log level (default: INFO)
        LOG_FILE: Log file path (default: none)
        LOG_JSON: Use JSON format (default: false)
        LOG_CONSOLE: Enable console output (default: true)
    """
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE"),
        console_output=os.getenv("LOG_CONSOLE", "true").lower() in ("true", "1", "yes"),
        json_format=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
    )
