"""Pydantic models for image upload request/response."""

import base64
import binascii

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from core.models.image import DerivationResult
from core.utils.constants import MAX_BATCH_FILES, MAX_FILE_SIZE, get_max_file_size_mb

logger = Logger(UTC=True)


class ImageUploadRequest(BaseModel):
    """Validation model for a single image upload."""

    model_config = ConfigDict(str_strip_whitespace=True)

    file: str = Field(..., description="Base64 encoded image file")
    image_name: str = Field(
        ..., min_length=1, max_length=255, description="Original filename (reporting only)"
    )

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        """
        Validate base64 file:
        - must not be empty
        - must decode correctly
        - must not exceed MAX_FILE_SIZE
        """
        if not value:
            raise ValueError("file must not be empty")

        try:
            file_data = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"File validation error: Invalid base64 - {e}")
            raise ValueError("Invalid base64 encoded file") from e

        if not file_data:
            raise ValueError("Decoded file is empty")

        if len(file_data) > MAX_FILE_SIZE:
            logger.error("File size validation error: File size exceeds limit")
            raise ValueError(f"File size exceeds {get_max_file_size_mb()}MB limit")

        return value


class BatchUploadRequest(BaseModel):
    """Validation model for uploading several images in one request."""

    files: list[ImageUploadRequest] = Field(
        ..., min_length=1, max_length=MAX_BATCH_FILES
    )


class ImageUploadResponse(DerivationResult):
    """Response model for a successful single upload."""

    message: str = Field(..., description="Success message")


class UploadFailure(BaseModel):
    """One failed item of a batch upload."""

    image_name: StrictStr
    error: StrictStr = Field(..., description="Machine-readable error code")
    message: StrictStr


class BatchUploadResponse(BaseModel):
    """Per-file outcome of a batch upload, in request order."""

    files: list[DerivationResult]
    errors: list[UploadFailure]
    total: StrictInt
    success_count: StrictInt
    error_count: StrictInt
