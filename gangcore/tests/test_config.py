"""
Tests for settings loading.
"""

import json
import logging
import sys

import pytest
from pydantic import ValidationError

from ..config import DEFAULT_STORE_URL, ProgressionSettings, load_settings
from ..errors import InvalidArgument
from ..logging_setup import configure_logging


class TestLoadSettings:
    """Tests for defaults, files and environment overrides."""

    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings == ProgressionSettings()
        assert settings.premium_store.default_url == DEFAULT_STORE_URL
        assert settings.premium_store.override_url is None
        assert settings.curve.hard_cap_level > settings.curve.soft_cap_level >= 20

    def test_json_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "curve": {"soft_cap_level": 30, "hard_cap_level": 70},
            "starting_premium_credits": 25,
        }))

        settings = load_settings(path, environ={})

        assert settings.curve.soft_cap_level == 30
        assert settings.curve.hard_cap_level == 70
        assert settings.curve.base_xp == 2500  # Untouched fields keep defaults
        assert settings.starting_premium_credits == 25

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"premium_store": {"override_url": "https://file.example.test/"}}))

        settings = load_settings(path, environ={
            "GANGCORE_STORE_URL_OVERRIDE": "https://env.example.test/",
            "GANGCORE_STORE_PROVIDER_TIMEOUT": "0.5",
            "GANGCORE_STARTING_PREMIUM_CREDITS": "40",
        })

        assert settings.premium_store.override_url == "https://env.example.test/"
        assert settings.premium_store.provider_timeout_seconds == 0.5
        assert settings.starting_premium_credits == 40

    def test_empty_env_value_ignored(self):
        settings = load_settings(environ={"GANGCORE_STORE_URL_DEFAULT": ""})
        assert settings.premium_store.default_url == DEFAULT_STORE_URL

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(InvalidArgument):
            load_settings(path, environ={})

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        with pytest.raises(InvalidArgument):
            load_settings(path, environ={})

    def test_invalid_curve_rejected(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"curve": {"soft_cap_level": 40, "hard_cap_level": 35}}))
        with pytest.raises(ValidationError):
            load_settings(path, environ={})

    def test_negative_starting_credits_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(environ={"GANGCORE_STARTING_PREMIUM_CREDITS": "-1"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.json", environ={})


class TestConfigureLogging:
    """Tests for the logging helper."""

    @pytest.fixture(autouse=True)
    def reset_logger(self):
        yield
        logger = logging.getLogger("gangcore")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_single_handler(self):
        configure_logging("debug")
        logger = configure_logging("WARNING")

        assert logger.name == "gangcore"
        assert logger.level == logging.WARNING
        assert len([h for h in logger.handlers if getattr(h, "_gangcore", False)]) == 1

    def test_stream_can_be_redirected(self):
        logger = configure_logging("INFO")
        configure_logging("INFO", stream=sys.stderr)

        handlers = [h for h in logger.handlers if getattr(h, "_gangcore", False)]
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging("chatty").level == logging.INFO
