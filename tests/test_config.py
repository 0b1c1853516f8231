"""Tests for application settings."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from gift_client.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults point at the public GIFT API."""
        monkeypatch.delenv("GIFT_API_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.api_url == "https://gift.uni-goettingen.de/api/extended/"
        assert settings.gift_version == "latest"
        assert settings.page_size == 10000
        assert settings.max_workers == 4

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GIFT_-prefixed variables override defaults."""
        monkeypatch.setenv("GIFT_MAX_WORKERS", "8")
        monkeypatch.setenv("GIFT_GIFT_VERSION", "3.1")
        settings = Settings(_env_file=None)
        assert settings.max_workers == 8
        assert settings.gift_version == "3.1"

    def test_rejects_zero_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """max_workers must be positive."""
        monkeypatch.setenv("GIFT_MAX_WORKERS", "0")
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self) -> None:
        """get_settings returns the same instance."""
        assert get_settings() is get_settings()
