"""Shared image models: tiers, tier policy and derivation output."""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, Field, StrictInt, StrictStr


class Tier(str, Enum):
    """Derived variant tiers. The value is the leading canonical path segment."""

    ORIGINAL = "original"
    PREVIEW = "preview"
    THUMB = "thumb"


class Access(str, Enum):
    """Access policy applied to a tier."""

    PUBLIC = "public"
    PROTECTED = "protected"


TIER_POLICY: Mapping[Tier, Access] = MappingProxyType(
    {
        Tier.THUMB: Access.PUBLIC,
        Tier.PREVIEW: Access.PROTECTED,
        Tier.ORIGINAL: Access.PROTECTED,
    }
)


def policy_for(tier: Tier | None) -> Access:
    """Return the access policy for a tier; unknown tiers are protected."""
    if tier is None:
        return Access.PROTECTED
    return TIER_POLICY.get(tier, Access.PROTECTED)


class VariantPaths(BaseModel):
    """Canonical storage-relative paths of the three tiers of one asset."""

    original: StrictStr = Field(..., description="Archival tier path")
    preview: StrictStr = Field(..., description="Display tier path")
    thumb: StrictStr = Field(..., description="Public thumbnail path")

    def for_tier(self, tier: Tier) -> str:
        return str(getattr(self, tier.value))

    def all(self) -> list[str]:
        return [self.original, self.preview, self.thumb]


class DerivedVariant(BaseModel):
    """Metadata recorded for one persisted tier."""

    tier: Tier
    path: StrictStr = Field(..., description="Canonical path of the variant")
    byte_size: StrictInt = Field(..., ge=0, description="Encoded size in bytes")
    width: StrictInt = Field(..., gt=0)
    height: StrictInt = Field(..., gt=0)


class DerivationResult(BaseModel):
    """Result of deriving the three tiers from one upload."""

    image_id: StrictStr = Field(..., description="Unique asset identifier")
    original_filename: StrictStr = Field(
        ..., description="Filename supplied by the uploader (reporting only)"
    )
    byte_size: StrictInt = Field(..., description="Archival tier size in bytes")
    width: StrictInt = Field(..., description="Archival tier width in pixels")
    height: StrictInt = Field(..., description="Archival tier height in pixels")
    paths: VariantPaths
    variants: list[DerivedVariant] = Field(default_factory=list)
    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
