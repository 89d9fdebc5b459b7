"""Tests for environment configuration and logging setup."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from listing_api import config
from listing_api.logs import JsonFormatter, logging_config, setup_logging


class TestConfig:
    def test_database_url_default_is_sqlite(self) -> None:
        with patch.dict(os.environ, {"DATABASE_URL": ""}):
            assert config.database_url().startswith("sqlite:///")
            assert config.is_local_dev()

    def test_database_url_rewrites_postgres_scheme(self) -> None:
        with patch.dict(os.environ, {"DATABASE_URL": "postgres://u:p@db/x"}):
            assert config.database_url() == "postgresql://u:p@db/x"

    def test_jwt_exp_hours(self) -> None:
        with patch.dict(os.environ, {"JWT_EXP_HOURS": ""}):
            assert config.jwt_exp_hours() == 168
        with patch.dict(os.environ, {"JWT_EXP_HOURS": "0"}):
            assert config.jwt_exp_hours() == 0
        with patch.dict(os.environ, {"JWT_EXP_HOURS": "soon"}):
            assert config.jwt_exp_hours() == 168

    def test_prod_refuses_default_secret(self) -> None:
        with patch.dict(os.environ, {"APP_ENV": "prod", "JWT_SECRET": ""}):
            with pytest.raises(RuntimeError):
                config.enforce_secure_secrets()
        with patch.dict(os.environ, {"APP_ENV": "prod", "JWT_SECRET": "real"}):
            config.enforce_secure_secrets()

    def test_cors_origins(self) -> None:
        with patch.dict(os.environ, {"CORS_ORIGINS": ""}):
            assert config.cors_origins() == ["*"]
        with patch.dict(os.environ, {"CORS_ORIGINS": "https://a.test, https://b.test"}):
            assert config.cors_origins() == ["https://a.test", "https://b.test"]

    def test_cloudinary_folder_default(self) -> None:
        with patch.dict(os.environ, {"CLOUDINARY_FOLDER": ""}):
            assert config.cloudinary_folder() == "property_uploads"


class TestLogging:
    def test_setup_sets_level(self) -> None:
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("listing_api").level == logging.DEBUG
        setup_logging("INFO")

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert logging_config("chatty")["root"]["level"] == "INFO"

    def test_noisy_libraries_held_at_warning(self) -> None:
        setup_logging("DEBUG", "json")
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)
        setup_logging("INFO")

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("listing_api.views", logging.INFO, __file__, 1, "counted %s", (3,), None)
        data = json.loads(JsonFormatter().format(record))
        assert data["level"] == "INFO"
        assert data["logger"] == "listing_api.views"
        assert data["message"] == "counted 3"
        assert "ts" in data

    def test_json_formatter_carries_extra_fields(self) -> None:
        record = logging.LogRecord("listing_api.views", logging.INFO, __file__, 1, "counted", (), None)
        record.property_id = 7
        data = json.loads(JsonFormatter().format(record))
        assert data["property_id"] == 7
        assert "args" not in data
