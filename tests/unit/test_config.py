"""
Unit tests for app.core.config validators.
"""
import pytest
from pydantic import ValidationError

from app.core.config import DEFAULT_SQLITE_URL, Settings

SECRET = "test-secret-key-for-testing-only-32-chars"


def make_settings(**kwargs):
    """Create Settings without loading values from .env."""
    kwargs.setdefault("secret_key", SECRET)
    return Settings(_env_file=None, **kwargs)


class TestTimeoutValidation:

    def test_defaults(self):
        settings = make_settings()
        assert settings.chevereto_probe_timeout_seconds == 10.0
        assert settings.chevereto_upload_timeout_seconds == 60.0
        assert settings.http_client_timeout_seconds == 10.0

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_timeout_rejected(self, value):
        with pytest.raises(ValidationError, match="Timeout must be positive"):
            make_settings(chevereto_upload_timeout_seconds=value)

    def test_timeout_upper_bound(self):
        with pytest.raises(ValidationError, match="cannot exceed 3600"):
            make_settings(chevereto_probe_timeout_seconds=7200)


class TestApiPrefix:

    @pytest.mark.parametrize(
        "raw, expected",
        [("/api", "/api"), ("api", "/api"), ("/api/", "/api"), ("/v2/api//", "/v2/api"), ("", "")],
    )
    def test_normalized(self, raw, expected):
        assert make_settings(api_prefix=raw).api_prefix == expected


class TestSecretKey:

    def test_generated_outside_production(self):
        settings = make_settings(environment="development", secret_key="")
        assert len(settings.secret_key) >= 32

    def test_required_in_production(self):
        with pytest.raises(ValidationError, match="SECRET_KEY must be set in production"):
            make_settings(environment="production", secret_key="")

    def test_debug_rejected_in_production(self):
        with pytest.raises(ValidationError, match="DEBUG must be False in production"):
            make_settings(environment="production", debug=True)


class TestDatabaseUrl:

    def test_blank_falls_back_to_sqlite(self):
        assert make_settings(database_url="  ").database_url == DEFAULT_SQLITE_URL

    def test_database_type(self):
        assert make_settings(database_url="postgresql://u:p@db/x").database_type == "postgresql"
        assert make_settings(database_url="sqlite://").database_type == "sqlite"


class TestCorsOrigins:

    def test_comma_separated_string(self):
        settings = make_settings(enable_cors=True, cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_local_defaults_when_enabled_without_origins(self):
        settings = make_settings(environment="development", enable_cors=True)
        assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]

    def test_production_requires_origins_when_enabled(self):
        with pytest.raises(ValidationError, match="CORS_ORIGINS must be configured"):
            make_settings(environment="production", enable_cors=True)
