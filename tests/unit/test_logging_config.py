"""Tests for datacollections/logging_config.py"""

import logging

import pytest

from datacollections.config import StoreConfig
from datacollections.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)


class TestSetupLogging:
    def test_level_from_config(self, restore_root_logger):
        setup_logging(StoreConfig(log_level="warning"))
        assert restore_root_logger.level == logging.WARNING

    def test_verbose_forces_debug(self, restore_root_logger):
        setup_logging(StoreConfig(log_level="ERROR"), verbose=True)
        assert restore_root_logger.level == logging.DEBUG

    def test_writes_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "datacollections.log"

        logger = setup_logging(StoreConfig(log_file=log_file))
        logger.info("Imported %d records", 3)
        for handler in restore_root_logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "| INFO     | datacollections | Imported 3 records" in text

    def test_quiets_driver_loggers(self, restore_root_logger):
        setup_logging(StoreConfig(log_level="DEBUG"))
        assert logging.getLogger("aiosqlite").level == logging.WARNING
