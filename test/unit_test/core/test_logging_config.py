"""Unit tests for logging configuration module.

Tests verify that setup_logging applies levels, formats, file logging and
per-module levels, and that get_logger hands out named loggers.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from storefront.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_format,
    get_logger,
    setup_logging,
)


def _console_handler():
    root_logger = logging.getLogger()
    return next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)),
        None,
    )


class TestSetupLoggingLogLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        handler = _console_handler()
        assert handler is not None
        assert handler.level == expected_level

    def test_root_logger_captures_everything(self):
        setup_logging(enable_file=False)
        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
        ],
    )
    def test_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format

    def test_unknown_format_falls_back_to_detailed(self):
        assert get_format("xml") == DETAILED_FORMAT


class TestSetupLoggingFileHandling:
    def test_file_handler_when_enabled(self, tmp_path: Path):
        with (
            patch("storefront.core.logging_config.ENABLE_FILE_LOGGING", True),
            patch("storefront.core.logging_config.LOG_FILE_DIR", str(tmp_path / "logs")),
        ):
            setup_logging(enable_file=True)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert (tmp_path / "logs").is_dir()

        for handler in file_handlers:
            handler.close()
        setup_logging(enable_file=False)

    def test_no_file_handler_when_disabled(self):
        setup_logging(enable_file=False)
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1


class TestModuleLevels:
    @pytest.mark.parametrize("module_name,expected_level", sorted(MODULE_LOG_LEVELS.items()))
    def test_module_specific_log_levels(self, module_name, expected_level):
        setup_logging(enable_file=False)
        assert logging.getLogger(module_name).level == getattr(logging, expected_level)

    def test_third_party_noise_is_reduced(self):
        assert MODULE_LOG_LEVELS["sqlalchemy.engine"] == "WARNING"
        assert MODULE_LOG_LEVELS["httpx"] == "WARNING"


class TestGetLogger:
    def test_named_logger(self):
        logger = get_logger("storefront.server.api.v1.orders")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "storefront.server.api.v1.orders"

    def test_same_name_same_instance(self):
        assert get_logger("storefront.payments") is get_logger("storefront.payments")

    def test_logs_reach_handlers(self, caplog):
        logger = get_logger("storefront.server.services.orders")
        with caplog.at_level(logging.INFO, logger="storefront.server.services.orders"):
            logger.info("order placed")
        assert "order placed" in caplog.text
