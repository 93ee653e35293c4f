"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import ASSET_ID_PATTERN


class DeleteImageRequest(BaseModel):
    """Validation model for delete image request."""

    model_config = ConfigDict(str_strip_whitespace=True)
    image_id: str = Field(
        ...,
        pattern=ASSET_ID_PATTERN,
        description="Image ID whose tiers are deleted",
    )


class DeleteImageResponse(BaseModel):
    """Response model for successful image deletion."""

    image_id: str = Field(..., description="Deleted image ID")
    message: str = Field(..., description="Success message")
    deleted_at: str = Field(..., description="Deletion timestamp")
    deleted_paths: list[str] = Field(..., description="Variant paths that were removed")
