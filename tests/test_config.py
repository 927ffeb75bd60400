"""
Tests for settings loading and log redaction.
"""

import logging

import pytest
from pydantic import ValidationError

from brainwave_mood.config import DEFAULT_SOURCE_IDS, Settings
from brainwave_mood.log import SensitiveDataFilter, configure_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.source_ids == DEFAULT_SOURCE_IDS
        assert settings.window_interval == 3.0
        assert settings.tick_period == 0.1
        assert settings.request_timeout == 15.0
        assert settings.source_token is None
        assert settings.analysis_token is None

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "BRAINWAVE_SOURCE_IDS": " a, b ,,c ",
                "BRAINWAVE_SOURCE_URL_TEMPLATE": "https://files.example/{source_id}",
                "BRAINWAVE_ANALYSIS_TOKEN": "secret-token",
                "BRAINWAVE_WINDOW_INTERVAL": "2.5",
                "BRAINWAVE_REFRESH_ON_STARTUP": "false",
                "BRAINWAVE_PORT": "9000",
                "BRAINWAVE_TICK_PERIOD": "",
            }
        )

        assert settings.source_ids == ["a", "b", "c"]
        assert settings.window_interval == 2.5
        assert settings.tick_period == 0.1
        assert settings.refresh_on_startup is False
        assert settings.port == 9000
        assert settings.analysis_token is not None
        assert settings.analysis_token.get_secret_value() == "secret-token"
        assert "secret-token" not in repr(settings)

        descriptors = settings.source_descriptors()
        assert [d.url for d in descriptors] == [
            "https://files.example/a",
            "https://files.example/b",
            "https://files.example/c",
        ]
        assert descriptors[0].source_id == "a"

    def test_rejects_non_positive_intervals(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"BRAINWAVE_WINDOW_INTERVAL": "0"})
        with pytest.raises(ValidationError):
            Settings(tick_period=-1)

    @pytest.mark.parametrize(
        "template",
        [
            "https://files.example/{id}",
            "https://files.example/{0}",
            "https://files.example/{source_id}{",
            "https://files.example/{source_id}/{name}",
            "https://files.example/{source_id:d}",
            "https://files.example/ipfs",
        ],
    )
    def test_rejects_unusable_url_template(self, template):
        with pytest.raises(ValidationError):
            Settings(source_url_template=template)
        with pytest.raises(ValidationError):
            Settings.from_env({"BRAINWAVE_SOURCE_URL_TEMPLATE": template})

    def test_template_may_repeat_placeholder(self):
        settings = Settings(
            source_ids=["x"], source_url_template="https://{source_id}.example/{source_id}"
        )

        assert settings.source_descriptors()[0].url == "https://x.example/x"


class TestSensitiveDataFilter:
    def test_masks_bearer_tokens(self):
        record = logging.LogRecord(
            "brainwave_mood",
            logging.INFO,
            __file__,
            1,
            "Sending Authorization: Bearer abc.def-123 with %s",
            ("api_key=xyz",),
            None,
        )

        assert SensitiveDataFilter().filter(record)
        message = record.getMessage()
        assert "abc.def-123" not in message
        assert "xyz" not in message

    def test_configure_logging_is_idempotent(self):
        logger = configure_logging("debug")
        configure_logging("info")

        installed = [h for h in logger.handlers if getattr(h, "_brainwave_handler", False)]
        assert len(installed) == 1
        assert logger.level == logging.INFO
