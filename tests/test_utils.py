"""
Tests for utility modules: logging, retry, downloads, settings.

Run with: pytest tests/test_utils.py -v
"""

import logging
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from resmeasures.core.config import get_max_workers, settings
from resmeasures.utils import (
    FileFormatter,
    MeasureFormatter,
    RetryConfig,
    download_file,
    get_logger,
    retry_with_backoff,
    setup_logging,
)
from resmeasures.utils.retry import calculate_delay, should_retry_exception


class TestLogging:
    """Tests for logging configuration."""

    def test_get_logger(self):
        """Test getting a logger instance."""
        logger = get_logger("test_module")
        assert logger is not None
        assert logger.name == "test_module"

    def test_logger_has_handlers(self):
        """Test that logging is set up with handlers."""
        setup_logging()
        root = logging.getLogger()
        assert len(root.handlers) > 0

    def test_context_in_console_format(self):
        """Job context from `extra` is appended to the message."""
        formatter = MeasureFormatter(use_colors=False)
        record = logging.LogRecord("resmeasures.test", logging.INFO, __file__, 1, "Job finished", None, None)
        record.building_id = 12
        record.upgrade_name = "Baseline"

        text = formatter.format(record)
        assert "Job finished" in text
        assert "[building_id=12, upgrade_name=Baseline]" in text

    def test_file_format(self):
        """File records are dict-style with level and message."""
        record = logging.LogRecord("resmeasures.test", logging.WARNING, __file__, 1, "Low setpoint", None, None)
        record.measure = "Set Residential Tank Water Heater"

        text = FileFormatter().format(record)
        assert "'level': 'WARNING'" in text
        assert "'message': 'Low setpoint'" in text
        assert "'measure': 'Set Residential Tank Water Heater'" in text

    def test_log_to_file(self, temp_dir):
        """setup_logging can add a file handler."""
        log_file = temp_dir / "run.log"
        setup_logging(level="DEBUG", log_to_file=True, log_file=str(log_file))
        try:
            get_logger("resmeasures.test").info("written to file")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "written to file" in log_file.read_text()
        finally:
            setup_logging()


class TestRetry:
    """Tests for retry with backoff."""

    def test_delay_grows_and_caps(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0, jitter=False)

        assert calculate_delay(0, config) == 1.0
        assert calculate_delay(2, config) == 4.0
        assert calculate_delay(5, config) == 5.0

    def test_retryable_status(self):
        """HTTP 503 is retried, 404 is not."""
        config = RetryConfig()
        unavailable = requests.HTTPError(response=Mock(status_code=503))
        not_found = requests.HTTPError(response=Mock(status_code=404))

        assert should_retry_exception(unavailable, config)
        assert not should_retry_exception(not_found, config)
        assert should_retry_exception(requests.ConnectionError(), config)
        assert not should_retry_exception(ValueError("bad"), config)

    @patch("resmeasures.utils.retry.time.sleep")
    def test_succeeds_after_retries(self, mock_sleep):
        """Transient failures are retried until success."""
        calls = {"n": 0}

        @retry_with_backoff(max_retries=3)
        def flaky():
            calls["n"] += 1
            if calls["n"] < 3:
                raise ConnectionError("reset")
            return "ok"

        assert flaky() == "ok"
        assert calls["n"] == 3
        assert mock_sleep.call_count == 2

    @patch("resmeasures.utils.retry.time.sleep")
    def test_gives_up(self, mock_sleep):
        """The last error propagates once retries are exhausted."""
        @retry_with_backoff(config=RetryConfig(max_retries=2, jitter=False))
        def always_down():
            raise TimeoutError("down")

        with pytest.raises(TimeoutError):
            always_down()
        assert mock_sleep.call_count == 2

    @patch("resmeasures.utils.retry.time.sleep")
    def test_non_retryable_propagates(self, mock_sleep):
        @retry_with_backoff(max_retries=3)
        def broken():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            broken()
        mock_sleep.assert_not_called()

    @patch("resmeasures.utils.retry.time.sleep")
    def test_max_retries_override_leaves_config_alone(self, mock_sleep):
        """A per-call retry limit does not change a shared config."""
        shared = RetryConfig(max_retries=5, jitter=False)

        @retry_with_backoff(config=shared, max_retries=1)
        def always_down():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            always_down()
        assert mock_sleep.call_count == 1
        assert shared.max_retries == 5


class TestDownload:
    """Tests for streaming downloads."""

    def test_download_file(self, temp_dir):
        response = MagicMock()
        response.iter_content.return_value = [b"PK", b"", b"data"]
        response.__enter__.return_value = response

        with patch("resmeasures.utils.retry.requests.get", return_value=response) as mock_get:
            path = download_file("https://example.org/weather.zip", temp_dir / "weather.zip", timeout=5)

        assert path.read_bytes() == b"PKdata"
        mock_get.assert_called_once_with("https://example.org/weather.zip", stream=True, timeout=5)


class TestSettings:
    """Tests for settings and worker counts."""

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_PARALLEL_WORKERS", "3")
        assert get_max_workers() == 3

    def test_invalid_env_falls_back(self, monkeypatch):
        monkeypatch.setenv("MAX_PARALLEL_WORKERS", "many")
        monkeypatch.setattr(settings, "max_workers", 2)
        assert get_max_workers() == 2

    def test_at_least_one(self, monkeypatch):
        monkeypatch.setenv("MAX_PARALLEL_WORKERS", "0")
        assert get_max_workers() == 1
