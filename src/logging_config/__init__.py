"""Structured logging for tradealerts.

JSON or console logging, session context binding, and timing of slow
platform calls.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import SessionContext, generate_session_id
from src.logging_config.performance import log_performance
from src.logging_config.setup import configure_logging, get_active_config, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SessionContext",
    "configure_logging",
    "get_active_config",
    "generate_session_id",
    "get_logger",
    "log_performance",
]
