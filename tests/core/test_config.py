import pytest
from pydantic import ValidationError

from core.config import (
    DerivationSettings,
    SignerSettings,
    load_derivation_settings,
    load_signer_settings,
)
from core.utils.constants import (
    DEFAULT_MOUNT_PREFIX,
    DEFAULT_TOKEN_TTL_MINUTES,
    ENV_FILES_MOUNT_PREFIX,
    ENV_MAX_CONCURRENT_DERIVATIONS,
    ENV_PREVIEW_MAX_EDGE,
    ENV_PUBLIC_BASE_URL,
    ENV_SIGNED_URL_SECRET,
    ENV_SIGNED_URL_TTL_MINUTES,
    ENV_THUMB_MAX_EDGE,
)


class TestSignerSettings:
    def test_from_env_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv(ENV_SIGNED_URL_TTL_MINUTES, raising=False)
        monkeypatch.delenv(ENV_FILES_MOUNT_PREFIX, raising=False)
        monkeypatch.delenv(ENV_PUBLIC_BASE_URL, raising=False)

        settings = SignerSettings.from_env()

        assert settings.default_ttl_minutes == DEFAULT_TOKEN_TTL_MINUTES
        assert settings.mount_prefix == DEFAULT_MOUNT_PREFIX
        assert settings.public_base_url is None

    def test_from_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_SIGNED_URL_TTL_MINUTES, "5")
        monkeypatch.setenv(ENV_FILES_MOUNT_PREFIX, "/static")
        monkeypatch.setenv(ENV_PUBLIC_BASE_URL, "https://cdn.example.com")

        settings = SignerSettings.from_env()

        assert settings.default_ttl_minutes == 5
        assert settings.mount_prefix == "/static"
        assert settings.public_base_url == "https://cdn.example.com"

    def test_missing_secret_raises(self, monkeypatch) -> None:
        monkeypatch.delenv(ENV_SIGNED_URL_SECRET, raising=False)

        with pytest.raises(RuntimeError, match=ENV_SIGNED_URL_SECRET):
            SignerSettings.from_env()

    def test_short_secret_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_SIGNED_URL_SECRET, "short")

        with pytest.raises(ValidationError):
            SignerSettings.from_env()

    @pytest.mark.parametrize("ttl", ["0", "-1", "1441", "soon"])
    def test_invalid_default_ttl_rejected(self, monkeypatch, ttl) -> None:
        monkeypatch.setenv(ENV_SIGNED_URL_TTL_MINUTES, ttl)

        with pytest.raises(ValidationError):
            SignerSettings.from_env()

    def test_secret_hidden_from_repr(self) -> None:
        settings = SignerSettings(secret="super-secret-value-123")

        assert "super-secret-value-123" not in repr(settings)


class TestDerivationSettings:
    def test_defaults(self) -> None:
        settings = DerivationSettings()

        assert settings.original_quality == 95
        assert settings.preview_max_edge == 2048
        assert settings.preview_quality == 85
        assert settings.thumb_max_edge == 1024
        assert settings.thumb_quality == 80

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_PREVIEW_MAX_EDGE, "800")
        monkeypatch.setenv(ENV_THUMB_MAX_EDGE, "200")
        monkeypatch.setenv(ENV_MAX_CONCURRENT_DERIVATIONS, "2")

        settings = DerivationSettings.from_env()

        assert settings.preview_max_edge == 800
        assert settings.thumb_max_edge == 200
        assert settings.max_concurrent_derivations == 2

    def test_thumb_bound_must_not_exceed_preview(self) -> None:
        with pytest.raises(ValidationError, match="thumb_max_edge"):
            DerivationSettings(preview_max_edge=500, thumb_max_edge=600)

    @pytest.mark.parametrize("quality", [0, 101])
    def test_quality_range(self, quality) -> None:
        with pytest.raises(ValidationError):
            DerivationSettings(preview_quality=quality)


def test_loaders_are_cached() -> None:
    assert load_signer_settings() is load_signer_settings()
    assert load_derivation_settings() is load_derivation_settings()
