"""Logging Setup.

One-call configuration for structured logging. JSON output for
production builds, colored console output for development.
"""

import dataclasses
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import get_context_dict

# Record attributes copied into JSON entries when present
EXTRA_FIELDS = ("duration_ms", "notification_id", "kind", "error_code", "extra_data")

_active_config: LoggingConfig = DEFAULT_LOGGING_CONFIG


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    One JSON object per line: timestamp, level, logger, message, service,
    bound session context and any extra notification fields.
    """

    def __init__(self, service_name: str = "tradealerts", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        if self.include_caller:
            log_entry["module"] = record.module
            log_entry["function"] = record.funcName
            log_entry["line"] = record.lineno

        log_entry.update(get_context_dict())

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]

        ctx = get_context_dict()
        ctx_str = f" [{', '.join(f'{k}={v}' for k, v in ctx.items())}]" if ctx else ""

        line = (
            f"{color}{timestamp} {record.levelname:8s}{self.RESET} "
            f"{record.name}: {record.getMessage()}{ctx_str}"
        )

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)

        return line


def _apply_env_overrides(config: LoggingConfig) -> LoggingConfig:
    env_level = os.environ.get("TRADEALERTS_LOG_LEVEL", "").upper()
    if env_level in LogLevel.__members__:
        config = dataclasses.replace(config, level=LogLevel(env_level))

    env_format = os.environ.get("TRADEALERTS_LOG_FORMAT", "").lower()
    if env_format in {f.value for f in LogFormat}:
        config = dataclasses.replace(config, format=LogFormat(env_format))

    return config


def configure_logging(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Configure logging for the app.

    Call once at startup. TRADEALERTS_LOG_LEVEL and TRADEALERTS_LOG_FORMAT
    override the given config.

    Returns:
        The effective configuration.
    """
    global _active_config
    config = _apply_env_overrides(config or DEFAULT_LOGGING_CONFIG)
    _active_config = config

    if config.format == LogFormat.JSON:
        formatter = StructuredFormatter(
            service_name=config.service_name,
            include_caller=config.include_caller,
        )
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.value))

    for noisy in ("asyncio", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return config


def get_active_config() -> LoggingConfig:
    """The configuration last applied by ``configure_logging``."""
    return _active_config


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance, typically ``get_logger(__name__)``."""
    return logging.getLogger(name)
