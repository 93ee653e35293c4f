"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"

# Derivation Errors
ERROR_CODE_IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_VARIANT_WRITE_FAILED = "VARIANT_WRITE_FAILED"
ERROR_CODE_VARIANT_READ_FAILED = "VARIANT_READ_FAILED"
ERROR_CODE_VARIANT_DELETE_FAILED = "VARIANT_DELETE_FAILED"

# Access Denial Reasons (surfaced verbatim to clients)
DENY_REASON_MISSING_TOKEN = "missing-token"
DENY_REASON_EXPIRED = "expired"
DENY_REASON_BAD_SIGNATURE = "bad-signature"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
MAX_BATCH_FILES = 10

# Decoder ceiling; larger images are rejected as decompression bombs
MAX_IMAGE_PIXELS = 64_000_000


# ============================================================================
# Asset Identifiers & Paths
# ============================================================================

ASSET_ID_PREFIX = "img_"
ASSET_ID_PATTERN = r"^img_[0-9a-f]{32}$"
VARIANT_EXTENSION: Final[str] = "jpg"
VARIANT_CONTENT_TYPE: Final[str] = "image/jpeg"


# ============================================================================
# Derivation Defaults
# ============================================================================

DEFAULT_ORIGINAL_QUALITY = 95
DEFAULT_PREVIEW_MAX_EDGE = 2048
DEFAULT_PREVIEW_QUALITY = 85
DEFAULT_THUMB_MAX_EDGE = 1024
DEFAULT_THUMB_QUALITY = 80
DEFAULT_MAX_CONCURRENT_DERIVATIONS = 4


# ============================================================================
# Signed URL Defaults
# ============================================================================

DEFAULT_TOKEN_TTL_MINUTES = 30
MAX_TOKEN_TTL_MINUTES = 24 * 60
MIN_SIGNING_SECRET_LENGTH = 16
DEFAULT_MOUNT_PREFIX = "/files"
TOKEN_QUERY_PARAM = "token"
EXPIRES_QUERY_PARAM = "expires"

PUBLIC_CACHE_CONTROL = "public, max-age=86400"
PROTECTED_CACHE_CONTROL = "private, no-store"


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,Cache-Control"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_VARIANT_S3_BUCKET_NAME = "VARIANT_S3_BUCKET_NAME"
ENV_STORAGE_BACKEND = "STORAGE_BACKEND"
ENV_VARIANT_STORAGE_ROOT = "VARIANT_STORAGE_ROOT"
ENV_SIGNED_URL_SECRET = "SIGNED_URL_SECRET"
ENV_SIGNED_URL_TTL_MINUTES = "SIGNED_URL_TTL_MINUTES"
ENV_FILES_MOUNT_PREFIX = "FILES_MOUNT_PREFIX"
ENV_PUBLIC_BASE_URL = "PUBLIC_BASE_URL"
ENV_ORIGINAL_QUALITY = "ORIGINAL_QUALITY"
ENV_PREVIEW_MAX_EDGE = "PREVIEW_MAX_EDGE"
ENV_PREVIEW_QUALITY = "PREVIEW_QUALITY"
ENV_THUMB_MAX_EDGE = "THUMB_MAX_EDGE"
ENV_THUMB_QUALITY = "THUMB_QUALITY"
ENV_MAX_CONCURRENT_DERIVATIONS = "MAX_CONCURRENT_DERIVATIONS"

STORAGE_BACKEND_S3 = "s3"
STORAGE_BACKEND_LOCAL = "local"
DEFAULT_STORAGE_ROOT = "./uploads"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb() -> int:
    """Get maximum file size in megabytes."""
    return MAX_FILE_SIZE // (1024 * 1024)
