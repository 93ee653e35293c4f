"""Models describing signed URLs and access decisions."""

from enum import Enum

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr

from core.models.image import Access, Tier
from core.utils.constants import (
    DENY_REASON_BAD_SIGNATURE,
    DENY_REASON_EXPIRED,
    DENY_REASON_MISSING_TOKEN,
)


class DenyReason(str, Enum):
    """Machine-readable reasons a protected request is rejected."""

    MISSING_TOKEN = DENY_REASON_MISSING_TOKEN
    EXPIRED = DENY_REASON_EXPIRED
    BAD_SIGNATURE = DENY_REASON_BAD_SIGNATURE


class SignedUrl(BaseModel):
    """A capability token for one canonical path, rendered as a URL."""

    path: StrictStr = Field(..., description="Canonical path the token is bound to")
    token: StrictStr = Field(..., description="Hex-encoded HMAC-SHA256 signature")
    expires_at_ms: StrictInt = Field(..., description="Absolute expiry, epoch ms")
    expires: StrictStr = Field(..., description="Expiry as ISO-8601 UTC")
    url: StrictStr = Field(..., description="Dereferenceable URL with query params")


class VerificationResult(BaseModel):
    """Outcome of verifying a token against a path and the clock."""

    valid: StrictBool
    reason: DenyReason | None = None

    @classmethod
    def ok(cls) -> "VerificationResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: DenyReason) -> "VerificationResult":
        return cls(valid=False, reason=reason)


class AccessDecision(BaseModel):
    """Gate decision for a single request."""

    allowed: StrictBool
    path: StrictStr
    tier: Tier | None = None
    access: Access
    reason: DenyReason | None = None
