"""
Tests for environment-driven settings.
"""

from ..config import Settings


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.env == "development"
        assert settings.allowed_origins == ["*"]
        assert settings.log_level == "INFO"
        assert settings.session_ttl_seconds == 3600
        assert settings.default_seed is None
        assert not settings.is_production

    def test_from_environment(self):
        settings = Settings.from_env({
            "DECKFORGE_ENV": "production",
            "ALLOWED_ORIGINS": "https://a.example, https://b.example,",
            "DECKFORGE_LOG_LEVEL": "debug",
            "DECKFORGE_SESSION_TTL": "60",
            "DECKFORGE_SEED": "42",
        })
        assert settings.is_production
        assert settings.allowed_origins == ["https://a.example", "https://b.example"]
        assert settings.log_level == "DEBUG"
        assert settings.session_ttl_seconds == 60
        assert settings.default_seed == 42
