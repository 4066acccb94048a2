"""Tests for settings, environment detection and core plugin defaults."""

import pytest

from logweave import create_logger
from logweave.foundation import env
from logweave.foundation.config import LogweaveSettings, clear_settings_cache, get_settings
from logweave.io.transports import ConsoleTransport, MemoryTransport
from logweave.plugins import CorrelationPlugin, generate_correlation_id


class TestSettings:
    """LOGWEAVE_* environment variables."""

    def test_defaults(self) -> None:
        settings = LogweaveSettings()
        assert settings.level is None
        assert settings.environment == "development"
        assert not settings.is_production

    def test_reads_env_and_normalizes_case(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGWEAVE_LEVEL", "DEBUG")
        monkeypatch.setenv("LOGWEAVE_FORMAT", "JSON")
        monkeypatch.setenv("LOGWEAVE_ENVIRONMENT", "Production")
        monkeypatch.setenv("LOGWEAVE_TIMESTAMP", "false")
        settings = LogweaveSettings()
        assert settings.level == "debug"
        assert settings.format == "json"
        assert settings.timestamp is False
        assert settings.is_production

    def test_get_settings_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("LOGWEAVE_NAME", "changed")
        assert get_settings() is first
        clear_settings_cache()
        assert get_settings().name == "changed"

    def test_reads_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("LOGWEAVE_LEVEL=warn\n")
        assert LogweaveSettings().level == "warn"

    def test_env_feeds_create_logger(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGWEAVE_LEVEL", "debug")
        monkeypatch.setenv("LOGWEAVE_NAME", "billing")
        monkeypatch.setenv("LOGWEAVE_TIMESTAMP", "false")
        mem = MemoryTransport()
        log = create_logger(transports=[mem])
        log.debug("visible")
        assert log.name == "billing"
        assert log.level == "debug"
        assert "time" not in mem.entries[0]

    def test_explicit_arguments_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGWEAVE_LEVEL", "debug")
        log = create_logger(level="error", transports=[])
        assert log.level == "error"

    def test_explicit_settings_object(self) -> None:
        log = create_logger(settings=LogweaveSettings(level="warn"), transports=[])
        assert log.level == "warn"


class TestCorePlugins:
    """Context defaults filled in by the core plugins."""

    def test_defaults_filled(self) -> None:
        log = create_logger(transports=[])
        assert log.context.level == "info"
        assert log.context.timestamp is True
        assert log.context.format in ("json", "pretty")

    def test_auto_format_resolved(self) -> None:
        log = create_logger(format="auto", transports=[])
        # not a TTY under pytest
        assert log.context.format == "json"

    def test_default_console_transport(self) -> None:
        log = create_logger(format="pretty", colors=False)
        (console,) = log.transports
        assert isinstance(console, ConsoleTransport)
        assert console.format == "pretty"
        assert console.colors is False


class TestEnvironment:
    """Execution context and terminal detection."""

    def test_execution_context(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert env.detect_execution_context() == "server"
        monkeypatch.setattr(env.sys, "platform", "emscripten")
        assert env.detect_execution_context() == "client"
        assert env.is_client()
        assert not env.should_use_colors()

    def test_color_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert not env.should_use_colors()
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert env.should_use_colors()
        monkeypatch.setenv("NO_COLOR", "1")
        assert not env.should_use_colors()

    def test_is_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert env.is_development()
        monkeypatch.setenv("PYTHON_ENV", "production")
        clear_settings_cache()
        assert not env.is_development()
        assert env.detect_format() == "json"

    def test_logweave_environment_wins_over_python_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PYTHON_ENV", "production")
        monkeypatch.setenv("LOGWEAVE_ENVIRONMENT", "Staging")
        settings = LogweaveSettings()
        assert settings.environment == "staging"
        assert settings.is_development

    def test_environment_from_dotenv_drives_is_development(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("LOGWEAVE_ENVIRONMENT=PRODUCTION\n")
        clear_settings_cache()
        assert get_settings().is_production
        assert not env.is_development()


def test_correlation_ids() -> None:
    cid = generate_correlation_id("req")
    assert cid.startswith("req_")
    assert cid != generate_correlation_id("req")
    assert CorrelationPlugin(generator=lambda: "x").new_id() == "x"
