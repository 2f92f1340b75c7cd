"""
Log formatters for structured and console logging.

The JSON formatter emits one object per line so transform logs can be
shipped next to pipeline logs; the console formatter is for interactive
use of the CLI.
"""

import json
import logging
import socket
import sys
import traceback
from datetime import datetime, timezone

# LogRecord attributes that are not user-supplied context
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "asctime",
})


def extra_context(record: logging.LogRecord) -> dict:
    """Collect the fields passed through logger.<level>(..., extra={...})."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging

    Outputs log records as JSON with standard fields plus any extra context.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_hostname: bool = True,
        app_name: str = "cdc-flatten",
    ):
        """
        Initialize JSON formatter

        Args:
            include_timestamp: Include ISO8601 timestamp
            include_hostname: Include hostname in log records
            app_name: Application name to include in logs
        """
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_hostname = include_hostname
        self.app_name = app_name
        self.hostname = socket.gethostname() if include_hostname else None

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }

        if self.include_timestamp:
            log_data["timestamp"] = datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat()

        if self.include_hostname and self.hostname:
            log_data["hostname"] = self.hostname

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        log_data["thread"] = record.threadName

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        context = extra_context(record)
        if context:
            log_data["context"] = context

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with colors
    """

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        """
        Initialize console formatter

        Args:
            use_colors: Whether to use ANSI color codes (only on a tty)
        """
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_colors and levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        try:
            formatted = super().format(record)
        finally:
            record.levelname = levelname

        context = extra_context(record)
        if context:
            formatted += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"

        return formatted
