"""
Centralized Logging Configuration

Provides structured logging with JSON formatting for production
and human-readable formatting for development.
"""

import sys
import logging
import json
from datetime import datetime, timezone
from flask import Flask, has_request_context, request

from .astro.errors import DomainError


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in production.

    Outputs logs as JSON for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add request context if available
        if has_request_context():
            log_data["request"] = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            if isinstance(record.exc_info[1], DomainError):
                log_data["errorCode"] = record.exc_info[1].code

        # Structured fields passed as extra={"extra_data": {...}}
        if hasattr(record, 'extra_data'):
            log_data["extra"] = record.extra_data

        # Add source location for errors
        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Human-readable formatter with colors for development.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.COLORS.get(record.levelname, '')
        timestamp = datetime.now(timezone.utc).strftime('%H:%M:%S')

        log_parts = [
            f"{color}{record.levelname:8s}{self.RESET}",
            f"{timestamp}",
            f"{record.name:20s}",
            record.getMessage(),
        ]

        if has_request_context():
            log_parts.append(f"[{request.method} {request.path}]")

        # endpoint=dasha depth=6 ...
        extra = getattr(record, "extra_data", None)
        if extra:
            log_parts.append(" ".join(f"{key}={value}" for key, value in extra.items()))

        message = " | ".join(log_parts)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def configure_logging(app: Flask) -> None:
    """
    Configure logging for the Flask application.

    Args:
        app: Flask application instance

    Uses JSON output when FLASK_ENV=production and colored output
    otherwise, at the level given by LOG_LEVEL.
    """
    env = app.config.get('FLASK_ENV', 'development')
    log_level_str = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    if env == 'production':
        formatter = JsonFormatter()
    else:
        formatter = ColoredFormatter()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    app.logger.setLevel(log_level)

    # Reduce noise from verbose libraries
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Environment: {env}, Level: {log_level_str}")
