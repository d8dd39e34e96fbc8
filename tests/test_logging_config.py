"""Tests for structured logging, session context and call timing."""

import asyncio
import json
import logging
import sys

import pytest

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    SessionContext,
    generate_session_id,
    get_context_dict,
    get_session_id,
    get_user_id,
)
from src.logging_config.performance import log_performance
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)
from src.settings import Settings, get_settings


def _record(msg="registered device", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="src.notifications.registrar",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.include_caller is True
        assert config.slow_threshold_ms == 1000.0
        assert config.service_name == "tradealerts"

    def test_from_settings(self):
        settings = Settings(log_level="debug", log_format="CONSOLE", slow_operation_ms=250.0)
        config = LoggingConfig.from_settings(settings)
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE
        assert config.slow_threshold_ms == 250.0

    def test_from_settings_falls_back_on_unknown_values(self):
        settings = Settings(log_level="chatty", log_format="xml")
        config = LoggingConfig.from_settings(settings)
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.database_url.startswith("sqlite+aiosqlite://")
        assert settings.persist_remote_notifications is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TRADEALERTS_APP_VERSION", "2.3.0")
        monkeypatch.setenv("TRADEALERTS_PERSIST_REMOTE_NOTIFICATIONS", "false")
        settings = get_settings()
        assert settings.app_version == "2.3.0"
        assert settings.persist_remote_notifications is False

    def test_cached(self):
        assert get_settings() is get_settings()


class TestSessionContext:
    """Tests for contextvars-based session binding."""

    def test_generate_session_id_unique(self):
        assert generate_session_id() != generate_session_id()

    def test_context_sets_ids(self):
        with SessionContext(session_id="sess-1", user_id="user123"):
            assert get_session_id() == "sess-1"
            assert get_user_id() == "user123"

    def test_auto_generates_session_id(self):
        with SessionContext() as ctx:
            assert ctx.session_id
            assert get_session_id() == ctx.session_id

    def test_context_cleanup_on_exit(self):
        with SessionContext(session_id="sess-1", user_id="user123"):
            pass
        assert get_session_id() == ""
        assert get_user_id() == ""
        assert get_context_dict() == {}

    def test_bind_extra_context(self):
        with SessionContext(session_id="sess-1") as ctx:
            ctx.bind(platform="ios")
            assert get_context_dict() == {"session_id": "sess-1", "platform": "ios"}
        assert get_context_dict() == {}

    def test_nested_contexts_restore_outer(self):
        with SessionContext(session_id="outer", user_id="a"):
            with SessionContext(session_id="inner", user_id="b"):
                assert get_session_id() == "inner"
            assert get_session_id() == "outer"
            assert get_user_id() == "a"

    @pytest.mark.asyncio
    async def test_isolated_between_tasks(self):
        async def bound(session_id):
            with SessionContext(session_id=session_id):
                await asyncio.sleep(0)
                return get_session_id()

        assert await asyncio.gather(bound("one"), bound("two")) == ["one", "two"]


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_formats_as_json(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["message"] == "registered device"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "src.notifications.registrar"
        assert entry["service"] == "tradealerts"
        assert "timestamp" in entry

    def test_caller_info_toggle(self):
        with_caller = json.loads(StructuredFormatter().format(_record()))
        without = json.loads(StructuredFormatter(include_caller=False).format(_record()))
        assert with_caller["line"] == 10
        assert "line" not in without

    def test_includes_session_context(self):
        with SessionContext(session_id="sess-1", user_id="user123"):
            entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["session_id"] == "sess-1"
        assert entry["user_id"] == "user123"

    def test_includes_notification_fields(self):
        record = _record(notification_id="abc", kind="signal", error_code="display_failed")
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["notification_id"] == "abc"
        assert entry["kind"] == "signal"
        assert entry["error_code"] == "display_failed"

    def test_formats_exception(self):
        try:
            raise RuntimeError("token service down")
        except RuntimeError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"]["type"] == "RuntimeError"
        assert entry["exception"]["message"] == "token service down"


class TestConsoleFormatter:
    """Tests for the development formatter."""

    def test_readable_output(self):
        line = ConsoleFormatter().format(_record())
        assert "INFO" in line
        assert "registered device" in line

    def test_includes_context(self):
        with SessionContext(session_id="sess-1"):
            line = ConsoleFormatter().format(_record())
        assert "session_id=sess-1" in line


class TestConfigureLogging:
    """Tests for one-call setup."""

    def test_json_format(self):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_console_format(self):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    def test_sets_level(self):
        configure_logging(LoggingConfig(level=LogLevel.WARNING))
        assert logging.getLogger().level == logging.WARNING

    def test_quiets_noisy_loggers(self):
        configure_logging()
        assert logging.getLogger("aiosqlite").level == logging.WARNING

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TRADEALERTS_LOG_LEVEL", "error")
        monkeypatch.setenv("TRADEALERTS_LOG_FORMAT", "console")
        effective = configure_logging(LoggingConfig())
        assert effective.level == LogLevel.ERROR
        assert effective.format == LogFormat.CONSOLE
        assert logging.getLogger().level == logging.ERROR

    def test_get_logger(self):
        assert get_logger("src.notifications").name == "src.notifications"


class TestLogPerformance:
    """Tests for the timing decorator."""

    def test_sync_debug_when_fast(self, caplog):
        @log_performance(threshold_ms=10_000, logger_name="perf")
        def fast():
            return 42

        with caplog.at_level(logging.DEBUG, logger="perf"):
            assert fast() == 42
        assert any("completed" in r.message and r.levelno == logging.DEBUG for r in caplog.records)

    @pytest.mark.asyncio
    async def test_async_slow_warns(self, caplog):
        @log_performance(threshold_ms=0, logger_name="perf")
        async def slow():
            await asyncio.sleep(0)
            return "token"

        with caplog.at_level(logging.DEBUG, logger="perf"):
            assert await slow() == "token"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings and "Slow operation" in warnings[0].message
        assert hasattr(warnings[0], "duration_ms")

    @pytest.mark.asyncio
    async def test_async_failure_logs_and_reraises(self, caplog):
        @log_performance(logger_name="perf")
        async def broken():
            raise RuntimeError("denied")

        with caplog.at_level(logging.DEBUG, logger="perf"):
            with pytest.raises(RuntimeError):
                await broken()
        assert any(r.levelno == logging.ERROR and "RuntimeError" in r.message for r in caplog.records)

    def test_configured_threshold_applies_at_call_time(self, caplog):
        @log_performance(logger_name="perf")
        def lookup():
            return "granted"

        configure_logging(LoggingConfig(slow_threshold_ms=0))
        logging.getLogger().addHandler(caplog.handler)
        with caplog.at_level(logging.DEBUG, logger="perf"):
            lookup()
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

        caplog.clear()
        configure_logging(LoggingConfig(slow_threshold_ms=60_000))
        logging.getLogger().addHandler(caplog.handler)
        with caplog.at_level(logging.DEBUG, logger="perf"):
            lookup()
        assert [r.levelno for r in caplog.records] == [logging.DEBUG]

    @pytest.mark.asyncio
    async def test_slow_operation_setting_reaches_permission_gate(self, caplog, monkeypatch):
        from src.notifications import PermissionGate, SimulatedNotificationCenter

        monkeypatch.setenv("TRADEALERTS_SLOW_OPERATION_MS", "0")
        effective = configure_logging(LoggingConfig.from_settings(get_settings()))
        assert effective.slow_threshold_ms == 0.0
        logging.getLogger().addHandler(caplog.handler)

        with caplog.at_level(logging.DEBUG, logger="src.notifications.permissions"):
            await PermissionGate(SimulatedNotificationCenter()).request_permission()
        assert any(
            r.levelno == logging.WARNING and "Slow operation" in r.message
            for r in caplog.records
        )

    def test_preserves_name(self):
        @log_performance()
        def request_permission():
            pass

        assert request_permission.__name__ == "request_permission"
        assert asyncio.iscoroutinefunction(log_performance()(_noop)) is True


async def _noop():
    return None
