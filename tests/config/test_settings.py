"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from rollingplan.config.settings import Settings


class TestSettingsDefaults:
    def test_threshold_defaults(self):
        cfg = Settings()

        assert cfg.planning_window_days == 7
        assert cfg.acwr_detraining_below == 0.8
        assert cfg.acwr_safe_max == 1.5
        assert cfg.acwr_elevated_max == 2.0
        assert cfg.deload_hard_factor == 0.55
        assert cfg.deload_easy_factor == 0.75
        assert cfg.readiness_no_change_above == 65
        assert cfg.readiness_severe_below == 50


class TestSettingsEnvironment:
    def test_env_overrides_field(self, monkeypatch):
        monkeypatch.setenv("ROLLINGPLAN_LOOKBACK_DAYS", "42")
        monkeypatch.setenv("ROLLINGPLAN_TIMEZONE", "UTC")

        cfg = Settings()

        assert cfg.lookback_days == 42
        assert cfg.timezone == "UTC"

    def test_invalid_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("ROLLINGPLAN_LOG_LEVEL", "chatty")

        assert Settings().log_level == "INFO"

    def test_log_level_is_uppercased(self, monkeypatch):
        monkeypatch.setenv("ROLLINGPLAN_LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_planning_window_must_cover_a_week(self, monkeypatch):
        """Windows shorter than 7 or longer than 14 days are rejected."""
        monkeypatch.setenv("ROLLINGPLAN_PLANNING_WINDOW_DAYS", "6")
        with pytest.raises(ValidationError):
            Settings()

        monkeypatch.setenv("ROLLINGPLAN_PLANNING_WINDOW_DAYS", "15")
        with pytest.raises(ValidationError):
            Settings()

    def test_constructor_accepts_field_names(self):
        cfg = Settings(planning_window_days=14, default_hard_ceiling=4)

        assert cfg.planning_window_days == 14
        assert cfg.default_hard_ceiling == 4
