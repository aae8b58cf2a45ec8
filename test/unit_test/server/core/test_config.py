"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables, that the
grouped views are built from the flat fields, and that .env.example
documents every variable the model reads.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront.server.core.config import CORSConfig, EsewaConfig, JWTConfig, Settings


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parent.parent.parent.parent.parent / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_server_binding(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_SERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("STOREFRONT_SERVER_PORT", "8080")

        settings = Settings()
        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 8080

    def test_database_url_binding(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/shop")
        assert Settings().database_url == "postgresql+asyncpg://u:p@db:5432/shop"

    def test_list_values_are_json(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://a.example", "https://b.example"]')
        assert Settings().cors_origins == ["https://a.example", "https://b.example"]

    def test_env_example_covers_settings(self, env_example_vars: dict[str, str]):
        aliases = {field.alias for field in Settings.model_fields.values() if field.alias}
        documented = set(env_example_vars)
        assert aliases - documented <= {"CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS"}


class TestJwtSecret:
    def test_missing_secret_is_refused(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    @pytest.mark.parametrize("value", ["", "   ", "change-me"])
    def test_placeholder_secret_is_refused(self, monkeypatch, value):
        monkeypatch.setenv("JWT_SECRET", value)
        with pytest.raises(ValidationError, match="JWT_SECRET"):
            Settings(_env_file=None)


class TestGroupedConfig:
    def test_jwt_view(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3")
        monkeypatch.setenv("JWT_EXPIRES_DAYS", "7")
        monkeypatch.setenv("JWT_COOKIE_SECURE", "true")

        jwt = Settings().jwt
        assert isinstance(jwt, JWTConfig)
        assert jwt.secret == "s3"
        assert jwt.expires_days == 7
        assert jwt.cookie_name == "jwt"
        assert jwt.cookie_secure is True

    def test_esewa_view(self, monkeypatch):
        monkeypatch.setenv("ESEWA_VERIFY_URL", "http://mock-esewa/verify")
        esewa = Settings().esewa
        assert isinstance(esewa, EsewaConfig)
        assert esewa.verify_url == "http://mock-esewa/verify"
        assert esewa.merchant_code == "EPAYTEST"

    def test_cors_view(self):
        cors = Settings().cors
        assert isinstance(cors, CORSConfig)
        assert cors.allow_credentials is True
        assert "PUT" in cors.allow_methods

    def test_esewa_defaults_are_uat(self):
        esewa = EsewaConfig()
        assert esewa.payment_url == "https://uat.esewa.com.np/epay/main"
        assert esewa.verify_url == "https://uat.esewa.com.np/epay/transrec"


class TestCallbackUrl:
    def test_joins_without_double_slash(self):
        settings = Settings(STOREFRONT_PUBLIC_BASE_URL="https://shop.example.com/")
        assert settings.callback_url("/api/orders/success") == "https://shop.example.com/api/orders/success"

    def test_explicit_base(self):
        settings = Settings()
        assert settings.callback_url("api/x", base_url="http://h:1") == "http://h:1/api/x"
