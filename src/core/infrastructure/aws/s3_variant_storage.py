"""S3-backed implementation of VariantStorageRepository."""

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import NotFoundError, StorageError
from core.repositories.storage_repository import VariantStorageRepository
from core.utils.constants import (
    ERROR_CODE_VARIANT_DELETE_FAILED,
    ERROR_CODE_VARIANT_READ_FAILED,
    ERROR_CODE_VARIANT_WRITE_FAILED,
)
from core.utils.paths import canonicalize_path

logger = Logger(UTC=True)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3VariantStorage(VariantStorageRepository):
    """Variant storage backed by Amazon S3; the object key is the canonical path."""

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3 = adapter or S3Adapter()

    def put_variant(self, *, path: str, data: bytes, content_type: str) -> None:
        key = canonicalize_path(path)

        logger.debug("Uploading variant", extra={"key": key, "size": len(data)})

        try:
            self._s3.put_object(
                key=key,
                body=data,
                content_type=content_type,
                metadata={"tier": key.split("/", 1)[0]},
            )
        except Exception as exc:
            logger.exception("S3 variant upload failed", extra={"key": key})
            raise StorageError(
                message="Unable to store image variant",
                error_code=ERROR_CODE_VARIANT_WRITE_FAILED,
                details={"path": key},
            ) from exc

        logger.info("Variant uploaded successfully", extra={"key": key})

    def get_variant(self, *, path: str) -> tuple[bytes, str, int]:
        key = canonicalize_path(path)

        try:
            response = self._s3.get_object(key=key)
            body = response["Body"].read()
        except ClientError as exc:
            if _error_code(exc) in _MISSING_KEY_CODES:
                raise NotFoundError(
                    message="Image not found",
                    details={"path": key},
                ) from exc

            logger.error("S3 variant download failed", extra={"key": key})
            raise StorageError(
                message="Unable to read image variant",
                error_code=ERROR_CODE_VARIANT_READ_FAILED,
                details={"path": key},
            ) from exc
        except Exception as exc:
            logger.exception("Unexpected error downloading variant")
            raise StorageError(
                message="Unable to read image variant",
                error_code=ERROR_CODE_VARIANT_READ_FAILED,
                details={"path": key},
            ) from exc

        content_type = response.get("ContentType", "application/octet-stream")
        content_length = response.get("ContentLength", len(body))

        return body, content_type, content_length

    def variant_exists(self, *, path: str) -> bool:
        key = canonicalize_path(path)

        try:
            self._s3.head_object(key=key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_KEY_CODES:
                return False

            logger.error("S3 variant lookup failed", extra={"key": key})
            raise StorageError(
                message="Unable to check image variant",
                error_code=ERROR_CODE_VARIANT_READ_FAILED,
                details={"path": key},
            ) from exc

        return True

    def remove_variant(self, *, path: str) -> None:
        key = canonicalize_path(path)

        try:
            self._s3.delete_object(key=key)
        except Exception as exc:
            logger.exception("S3 variant deletion failed", extra={"key": key})
            raise StorageError(
                message="Unable to delete image variant",
                error_code=ERROR_CODE_VARIANT_DELETE_FAILED,
                details={"path": key},
            ) from exc

        logger.info("Variant deleted successfully", extra={"key": key})
