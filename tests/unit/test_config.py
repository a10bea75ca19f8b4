"""Tests for datacollections/config.py"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from datacollections.config import (
    AppSettings,
    Config,
    PerformanceConfig,
    QueryConfig,
    RateLimitConfig,
    StoreConfig,
)
from datacollections.exceptions import ConfigError


class TestStoreConfig:
    """Tests for StoreConfig class."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        config = StoreConfig()

        assert config.db_path == Path("data/datacollections.db")
        assert config.log_level == "INFO"
        assert config.cors_origins() == []

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DATACOLLECTIONS_DB_PATH", str(tmp_path / "x.db"))
        monkeypatch.setenv("DATACOLLECTIONS_LOG_LEVEL", "debug")
        monkeypatch.setenv("DATACOLLECTIONS_CORS_ALLOWED_ORIGINS", "http://a.test, http://b.test,")

        config = StoreConfig()

        assert config.db_path == tmp_path / "x.db"
        assert config.log_level == "DEBUG"
        assert config.cors_origins() == ["http://a.test", "http://b.test"]

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            StoreConfig(log_level="LOUD")


class TestAppSettings:
    """Tests for the JSON settings file."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.performance.batch_size == 1000
        assert settings.query.default_page_size == 100
        assert settings.query.max_page_size == 1000

    def test_load_missing_file(self, tmp_path):
        settings = AppSettings.load(str(tmp_path / "missing.json"))
        assert settings.performance.batch_size == 1000

    def test_load_file(self, tmp_path):
        path = tmp_path / "datacollections.json"
        path.write_text(
            json.dumps({"performance": {"batch_size": 250}, "rate_limits": {"upload": "1/hour"}}),
            encoding="utf-8",
        )

        settings = AppSettings.load(str(path))

        assert settings.performance.batch_size == 250
        assert settings.query.default_page_size == 100
        assert settings.rate_limits.upload == "1/hour"
        assert settings.rate_limits.consolidate == "2/minute"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "datacollections.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            AppSettings.load(str(path))

    def test_batch_size_bounds(self):
        with pytest.raises(ValidationError):
            PerformanceConfig(batch_size=0)
        with pytest.raises(ValidationError):
            QueryConfig(max_page_size=20000)


class TestConfig:
    def test_paths_come_from_store_config(self, test_config, temp_db_path):
        assert test_config.db_path == temp_db_path
        assert test_config.reports_dir == temp_db_path.parent / "reports"

    def test_load(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        config = Config.load(str(tmp_path / "datacollections.json"))
        assert isinstance(config.store, StoreConfig)
        assert isinstance(config.settings, AppSettings)


class TestRateLimitConfig:
    def test_defaults(self):
        limits = RateLimitConfig()
        assert limits.upload == "5/minute"
        assert limits.read == "120/minute"
        assert limits.clear == "10/minute"
        assert limits.consolidate == "2/minute"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATACOLLECTIONS_RATE_LIMIT_READ", "30/second")
        assert RateLimitConfig().read == "30/second"

    def test_rejects_unparseable_limit(self):
        with pytest.raises(ValidationError):
            RateLimitConfig(upload="often")
