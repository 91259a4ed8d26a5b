"""Tests for environment-driven engine settings."""

import pytest

from gomoku_zero.config import EngineSettings
from gomoku_zero.errors import ConfigurationError


class TestEngineSettings:

    def test_defaults(self, monkeypatch) -> None:
        for key in (
            "GOMOKU_STRICT_EQUALITY", "GOMOKU_TT_MAX_ENTRIES",
            "GOMOKU_ACTIVE_RADIUS", "GOMOKU_LOG_LEVEL",
        ):
            monkeypatch.delenv(key, raising=False)
        settings = EngineSettings.from_env()
        assert settings.strict_equality is False
        assert settings.tt_max_entries == 200_000
        assert settings.active_radius == 2
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("GOMOKU_STRICT_EQUALITY", "True")
        monkeypatch.setenv("GOMOKU_ACTIVE_RADIUS", "3")
        monkeypatch.setenv("GOMOKU_REUSE_SCORE_MAPS", "false")
        monkeypatch.setenv("GOMOKU_LOG_LEVEL", "debug")
        settings = EngineSettings.from_env()
        assert settings.strict_equality is True
        assert settings.active_radius == 3
        assert settings.reuse_score_maps is False
        assert settings.log_level == "DEBUG"

    def test_non_integer_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("GOMOKU_TT_MAX_ENTRIES", "lots")
        with pytest.raises(ConfigurationError) as excinfo:
            EngineSettings.from_env()
        assert excinfo.value.key == "GOMOKU_TT_MAX_ENTRIES"

    def test_below_minimum_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("GOMOKU_ACTIVE_RADIUS", "0")
        with pytest.raises(ConfigurationError):
            EngineSettings.from_env()

    def test_settings_are_frozen(self) -> None:
        settings = EngineSettings()
        with pytest.raises(AttributeError):
            settings.active_radius = 5
