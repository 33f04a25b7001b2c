"""Tests for configuration, errors and logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from eventfetch.core.config import FetchConfig, LogConfig
from eventfetch.core.errors import ContractError, EventFetchError, FetchTimeoutError
from eventfetch.core.logging_utils import configure_logging


class TestFetchConfig:
    """Tests for FetchConfig."""

    def test_defaults(self):
        """Test default values."""
        config = FetchConfig()
        assert config.default_timeout == 5.0
        assert config.default_priority == 50
        assert config.falsy_is_no_answer is True
        assert config.request_id_prefix == "o-"
        assert config.self_id_prefix == "u-"
        assert config.logs.level == "INFO"

    def test_timeout_must_be_positive(self):
        """Test that a non-positive timeout is rejected."""
        with pytest.raises(ValueError):
            FetchConfig(default_timeout=0)

    def test_env_override(self, monkeypatch):
        """Test environment variables with nested delimiter."""
        monkeypatch.setenv("EVENTFETCH_DEFAULT_TIMEOUT", "1.5")
        monkeypatch.setenv("EVENTFETCH_LOGS__LEVEL", "DEBUG")

        config = FetchConfig()

        assert config.default_timeout == 1.5
        assert config.logs.level == "DEBUG"

    def test_from_yaml(self, tmp_path):
        """Test loading from a YAML file."""
        path = tmp_path / "eventfetch.yaml"
        path.write_text("default_timeout: 2\nlogs:\n  structured: false\n")

        config = FetchConfig.from_yaml(path)

        assert config.default_timeout == 2.0
        assert config.logs.structured is False

    def test_from_empty_yaml(self, tmp_path):
        """Test that an empty YAML file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert FetchConfig.from_yaml(path).default_timeout == 5.0

    def test_from_yaml_missing(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            FetchConfig.from_yaml(tmp_path / "nope.yaml")

    def test_dict_roundtrip(self):
        """Test from_dict and to_dict."""
        config = FetchConfig.from_dict({"default_priority": 0})
        assert config.to_dict()["default_priority"] == 0


class TestErrors:
    """Tests for structured errors."""

    def test_timeout_error_shape(self):
        """Test the TIMEOUT rejection value."""
        error = FetchTimeoutError(api_key="X", request_id="o-1", timeout=0.5)
        assert isinstance(error, EventFetchError)
        assert isinstance(error, TimeoutError)
        assert error.to_dict() == {"code": "TIMEOUT", "message": "Request timed out"}
        assert str(error) == "Request timed out"

    def test_contract_error_code(self):
        """Test the contract error code."""
        assert ContractError("bad").to_dict() == {"code": "CONTRACT", "message": "bad"}

    def test_custom_code(self):
        """Test overriding the code per instance."""
        assert EventFetchError("x", code="CUSTOM").code == "CUSTOM"


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize("structured", [True, False])
    def test_installs_single_handler(self, structured):
        """Test that one stream handler is installed at the configured level."""
        configure_logging(LogConfig(level="DEBUG", structured=structured))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_defaults(self):
        """Test that configure_logging works without arguments."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO
