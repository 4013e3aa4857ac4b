"""
Tests for configuration management and startup
"""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from feature_flag_api.config import LoggingConfig, ServerConfig, Settings, StorageConfig
from feature_flag_api.main import create_app, load_settings, parse_address, parse_args


class TestSettings:
    """Test Settings configuration"""

    def test_default_settings(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            settings = Settings()

        assert settings.environment == "development"
        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 8080

    def test_environment_validation(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "invalid"}):
            with pytest.raises(ValueError):
                Settings()

    def test_production_check(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.is_production() is True


class TestStorageConfig:

    def test_defaults(self):
        config = StorageConfig(backend="sqlite")

        assert config.path == "features.db"
        assert config.bucket == "features"
        assert config.timeout == 1.0

    def test_environment_override(self):
        with patch.dict(os.environ, {
            "STORAGE_BACKEND": "SQLite",
            "STORAGE_PATH": "/tmp/flags.db",
            "STORAGE_TIMEOUT": "2.5"
        }):
            config = StorageConfig()

            assert config.backend == "sqlite"
            assert config.path == "/tmp/flags.db"
            assert config.timeout == 2.5


class TestServerConfig:

    def test_environment_override(self):
        with patch.dict(os.environ, {"HOST": "127.0.0.1", "PORT": "9000"}):
            config = ServerConfig()

            assert config.host == "127.0.0.1"
            assert config.port == 9000


class TestLoggingConfig:

    def test_environment_override(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG", "LOG_FORMAT": "text"}):
            config = LoggingConfig()

            assert config.level == "DEBUG"
            assert config.format == "text"


class TestCommandLine:

    @pytest.mark.parametrize("address, expected", [
        (":8080", ("0.0.0.0", 8080)),
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        ("localhost:80", ("localhost", 80)),
    ])
    def test_parse_address(self, address, expected):
        assert parse_address(address) == expected

    def test_parse_invalid_address(self):
        with pytest.raises(ValueError):
            parse_address("8080")

    def test_flags_override_settings(self):
        settings = load_settings(parse_args(["-a", ":9090", "-d", "/tmp/test.db"]))

        assert settings.server.port == 9090
        assert settings.storage.path == "/tmp/test.db"


def test_lifespan_opens_configured_store(tmp_path):
    settings = Settings(storage=StorageConfig(backend="sqlite", path=str(tmp_path / "app.db")))
    app = create_app(settings)

    with TestClient(app) as client:
        assert client.post("/features", json={"key": "persisted"}).status_code == 201

    assert app.state.feature_service is None

    with TestClient(create_app(settings)) as client:
        assert client.get("/features/persisted").status_code == 200


class TestCreateApp:

    def test_debug_follows_settings(self):
        assert create_app(Settings(debug=True)).debug is True
        assert create_app(Settings(debug=False)).debug is False

    def test_docs_hidden_in_production(self):
        client = TestClient(create_app(Settings(environment="production")))

        assert client.get("/docs").status_code == 404
        assert client.get("/redoc").status_code == 404

    def test_docs_served_outside_production(self):
        client = TestClient(create_app(Settings(environment="development")))

        assert client.get("/docs").status_code == 200
