"""Tests for settings and logging setup."""

import json
import logging

import pytest
from pydantic import ValidationError

from courier_recon.config import Settings
from courier_recon.config import settings as default_settings
from courier_recon.logging_config import configure_logging, log_event


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, test_settings):
        assert test_settings.overbilling_tolerance_kg == 0.1
        assert test_settings.outlier_min_group_size == 5
        assert test_settings.delhivery_grams_per_value_unit == 1.25
        assert test_settings.top_pins_limit == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("COURIER_RECON_OUTLIER_MIN_GROUP_SIZE", "8")
        monkeypatch.setenv("COURIER_RECON_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.outlier_min_group_size == 8
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("override", [
        {"outlier_high_percentile": 1.0},
        {"outlier_low_percentile": 0.0},
        {"outlier_min_group_size": 0},
        {"top_pins_limit": -1},
    ])
    def test_rejects_out_of_range_values(self, override):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **override)


class TestLogging:
    """Tests for configure_logging and log_event."""

    def test_configure_logging_accepts_unknown_level(self):
        configure_logging("not-a-level")

    def test_configure_logging_defaults_to_settings_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setattr(default_settings, "log_level", "DEBUG")
        configure_logging()
        assert calls[0]["level"] == logging.DEBUG

    def test_log_event_emits_json(self, caplog):
        logger = logging.getLogger("courier_recon.test")
        with caplog.at_level(logging.INFO, logger="courier_recon.test"):
            log_event(logger, "stage_done", rows=3)
        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "stage_done"
        assert payload["rows"] == 3

    def test_log_event_silent_above_info(self, caplog):
        logger = logging.getLogger("courier_recon.test.quiet")
        with caplog.at_level(logging.WARNING, logger="courier_recon.test.quiet"):
            log_event(logger, "stage_done")
        assert caplog.records == []
