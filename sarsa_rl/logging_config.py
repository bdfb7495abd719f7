"""
Structured logging configuration.

Emits human-readable logs on stderr and, optionally, JSON lines to a file.
JSON logs include:
- Timestamp
- Level
- Logger name
- Subsystem (agent, config, cli)
- Event type
- Any extra structured data
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "subsystem"):
            log_data["subsystem"] = record.subsystem
        if getattr(record, "event_type", None):
            log_data["event"] = record.event_type
        if getattr(record, "extra_data", None):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable format with colors."""

    COLORS = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        level = record.levelname[:4]

        prefix_parts = [f"{timestamp} {level}"]
        subsystem = getattr(record, "subsystem", "general")
        if subsystem != "general":
            prefix_parts.append(f"[{subsystem}]")

        line = f"{' '.join(prefix_parts)}: {record.getMessage()}"

        if self.use_colors and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, "")
            line = f"{color}{line}{self.RESET}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class StructuredLogger(logging.Logger):
    """Logger with an event() helper for structured records."""

    def event(
        self,
        event_type: str,
        msg: str,
        subsystem: str = "general",
        level: int = logging.INFO,
        **extra: Any,
    ) -> None:
        """Log an event with structured data attached."""
        self.log(
            level,
            msg,
            extra={
                "subsystem": subsystem,
                "event_type": event_type,
                "extra_data": extra,
            },
        )


def configure_logging(
    level: str = "INFO",
    json_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_file: Optional path for JSON-lines logs
        max_bytes: Max size per JSON log file
        backup_count: Number of rotated JSON log files to keep
    """
    logging.setLoggerClass(StructuredLogger)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    root_logger.handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HumanFormatter())
    root_logger.addHandler(console)

    if json_file:
        os.makedirs(os.path.dirname(json_file) or ".", exist_ok=True)
        json_handler = RotatingFileHandler(
            json_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        json_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(json_handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger."""
    logging.setLoggerClass(StructuredLogger)
    return logging.getLogger(name)  # type: ignore
