"""Pydantic models for signed URL requests/responses."""

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from core.models.image import Tier
from core.utils.constants import ASSET_ID_PATTERN, MAX_TOKEN_TTL_MINUTES
from core.utils.paths import strip_file_key_suffix

_ASSET_ID_RE = re.compile(ASSET_ID_PATTERN)


class SignUrlRequest(BaseModel):
    """Validation model for minting a signed URL."""

    model_config = ConfigDict(str_strip_whitespace=True)

    file_key: StrictStr = Field(..., description="Asset identifier, optionally with .jpg")
    tier: Tier = Field(default=Tier.PREVIEW, description="Tier to grant access to")
    expiry_minutes: Annotated[StrictInt, Field(gt=0, le=MAX_TOKEN_TTL_MINUTES)] | None = Field(
        default=None,
        description="Token lifetime; the configured default when omitted",
    )

    @field_validator("file_key")
    @classmethod
    def validate_file_key(cls, value: str) -> str:
        image_id = strip_file_key_suffix(value)
        if not _ASSET_ID_RE.match(image_id):
            raise ValueError("file_key is not a valid image identifier")
        return image_id


class SignUrlResponse(BaseModel):
    """Response model for a minted signed URL."""

    file_key: StrictStr
    tier: Tier
    url: StrictStr = Field(..., description="URL including token and expires")
    expires: StrictStr = Field(..., description="Expiry as ISO-8601 UTC")
    expires_at_ms: StrictInt = Field(..., description="Expiry as epoch milliseconds")
