"""Tests for application configuration."""

from hypothesis import given, strategies as st

from facelift.config import Settings, get_settings
from facelift.constants import DEFAULT_MAX_SUBPAGES


class TestSettings:
    """Test Settings model validation."""

    def test_defaults(self, monkeypatch):
        """Nothing is required; the service runs with direct fetch only."""
        for key in ("FIRECRAWL_API_KEY", "MAX_SUBPAGES", "DEFAULT_MODEL", "ENV"):
            monkeypatch.delenv(key, raising=False)
        settings = Settings(_env_file=None)

        assert settings.env == "local"
        assert settings.firecrawl_api_key is None
        assert settings.max_subpages == DEFAULT_MAX_SUBPAGES
        assert settings.design_consultation_enabled is True
        assert settings.default_model.startswith("gateway/")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-env-key")
        monkeypatch.setenv("MAX_SUBPAGES", "5")
        monkeypatch.setenv("DESIGN_CONSULTATION_ENABLED", "false")
        monkeypatch.setenv("ANALYSIS_TIMEOUT_SECONDS", "45")
        settings = Settings(_env_file=None)

        assert settings.firecrawl_api_key == "fc-env-key"
        assert settings.max_subpages == 5
        assert settings.design_consultation_enabled is False
        assert settings.analysis_timeout_seconds == 45.0

    def test_negative_subpages_rejected(self):
        try:
            Settings(_env_file=None, max_subpages=-1)
        except Exception:
            return
        raise AssertionError("max_subpages=-1 should be rejected")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    @given(max_subpages=st.integers(min_value=0, max_value=50))
    def test_max_subpages_accepts_non_negative(self, max_subpages: int):
        """Property: any non-negative subpage count is accepted as-is."""
        assert Settings(_env_file=None, max_subpages=max_subpages).max_subpages == max_subpages
