"""Runtime configuration loaded from environment variables.

Settings are read once per process and passed explicitly into the services
that need them. The signing secret has no default: a process without
``SIGNED_URL_SECRET`` cannot sign or verify anything.
"""

from functools import lru_cache
import os

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.utils.constants import (
    DEFAULT_MAX_CONCURRENT_DERIVATIONS,
    DEFAULT_MOUNT_PREFIX,
    DEFAULT_ORIGINAL_QUALITY,
    DEFAULT_PREVIEW_MAX_EDGE,
    DEFAULT_PREVIEW_QUALITY,
    DEFAULT_THUMB_MAX_EDGE,
    DEFAULT_THUMB_QUALITY,
    DEFAULT_TOKEN_TTL_MINUTES,
    ENV_FILES_MOUNT_PREFIX,
    ENV_MAX_CONCURRENT_DERIVATIONS,
    ENV_ORIGINAL_QUALITY,
    ENV_PREVIEW_MAX_EDGE,
    ENV_PREVIEW_QUALITY,
    ENV_PUBLIC_BASE_URL,
    ENV_SIGNED_URL_SECRET,
    ENV_SIGNED_URL_TTL_MINUTES,
    ENV_THUMB_MAX_EDGE,
    ENV_THUMB_QUALITY,
    MAX_TOKEN_TTL_MINUTES,
    MIN_SIGNING_SECRET_LENGTH,
)


class SignerSettings(BaseModel):
    """Configuration for minting and verifying capability tokens."""

    model_config = ConfigDict(frozen=True)

    secret: str = Field(..., min_length=MIN_SIGNING_SECRET_LENGTH, repr=False)
    default_ttl_minutes: int = Field(
        DEFAULT_TOKEN_TTL_MINUTES, gt=0, le=MAX_TOKEN_TTL_MINUTES
    )
    mount_prefix: str = DEFAULT_MOUNT_PREFIX
    public_base_url: str | None = None

    @classmethod
    def from_env(cls) -> "SignerSettings":
        """Build settings from the environment.

        Raises:
            RuntimeError: If the signing secret is not set
            pydantic.ValidationError: If a value is malformed
        """
        secret = os.getenv(ENV_SIGNED_URL_SECRET)
        if not secret:
            raise RuntimeError(f"{ENV_SIGNED_URL_SECRET} environment variable is not set")

        return cls(
            secret=secret,
            default_ttl_minutes=os.getenv(
                ENV_SIGNED_URL_TTL_MINUTES, DEFAULT_TOKEN_TTL_MINUTES
            ),
            mount_prefix=os.getenv(ENV_FILES_MOUNT_PREFIX, DEFAULT_MOUNT_PREFIX),
            public_base_url=os.getenv(ENV_PUBLIC_BASE_URL) or None,
        )


class DerivationSettings(BaseModel):
    """Bounds and encoder quality for the derived tiers."""

    model_config = ConfigDict(frozen=True)

    original_quality: int = Field(DEFAULT_ORIGINAL_QUALITY, ge=1, le=100)
    preview_max_edge: int = Field(DEFAULT_PREVIEW_MAX_EDGE, gt=0)
    preview_quality: int = Field(DEFAULT_PREVIEW_QUALITY, ge=1, le=100)
    thumb_max_edge: int = Field(DEFAULT_THUMB_MAX_EDGE, gt=0)
    thumb_quality: int = Field(DEFAULT_THUMB_QUALITY, ge=1, le=100)
    max_concurrent_derivations: int = Field(
        DEFAULT_MAX_CONCURRENT_DERIVATIONS, ge=1, le=32
    )

    @model_validator(mode="after")
    def check_tier_bounds(self) -> "DerivationSettings":
        if self.thumb_max_edge > self.preview_max_edge:
            raise ValueError("thumb_max_edge must not exceed preview_max_edge")
        return self

    @classmethod
    def from_env(cls) -> "DerivationSettings":
        return cls(
            original_quality=os.getenv(ENV_ORIGINAL_QUALITY, DEFAULT_ORIGINAL_QUALITY),
            preview_max_edge=os.getenv(ENV_PREVIEW_MAX_EDGE, DEFAULT_PREVIEW_MAX_EDGE),
            preview_quality=os.getenv(ENV_PREVIEW_QUALITY, DEFAULT_PREVIEW_QUALITY),
            thumb_max_edge=os.getenv(ENV_THUMB_MAX_EDGE, DEFAULT_THUMB_MAX_EDGE),
            thumb_quality=os.getenv(ENV_THUMB_QUALITY, DEFAULT_THUMB_QUALITY),
            max_concurrent_derivations=os.getenv(
                ENV_MAX_CONCURRENT_DERIVATIONS, DEFAULT_MAX_CONCURRENT_DERIVATIONS
            ),
        )


@lru_cache(maxsize=1)
def load_signer_settings() -> SignerSettings:
    """Process-wide signer settings, read on first use."""
    return SignerSettings.from_env()


@lru_cache(maxsize=1)
def load_derivation_settings() -> DerivationSettings:
    """Process-wide derivation settings, read on first use."""
    return DerivationSettings.from_env()
