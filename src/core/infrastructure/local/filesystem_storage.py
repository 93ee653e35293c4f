"""Local-disk implementation of VariantStorageRepository.

Variants live under ``<root>/<tier>/<image_id>.jpg``. Writes land in a
temporary sibling first and are moved into place with ``os.replace``, so a
canonical path either holds a complete variant or nothing.
"""

import os
from pathlib import Path
import tempfile

from aws_lambda_powertools import Logger

from core.models.errors import NotFoundError, StorageError
from core.repositories.storage_repository import VariantStorageRepository
from core.utils.constants import (
    DEFAULT_STORAGE_ROOT,
    ENV_VARIANT_STORAGE_ROOT,
    ERROR_CODE_VARIANT_DELETE_FAILED,
    ERROR_CODE_VARIANT_READ_FAILED,
    ERROR_CODE_VARIANT_WRITE_FAILED,
    VARIANT_CONTENT_TYPE,
)
from core.utils.paths import canonicalize_path

logger = Logger(UTC=True)


class LocalVariantStorage(VariantStorageRepository):
    """Variant storage in a directory tree on the local filesystem."""

    def __init__(self, root: str | Path | None = None) -> None:
        base = root or os.getenv(ENV_VARIANT_STORAGE_ROOT, DEFAULT_STORAGE_ROOT)
        self.root = Path(base).resolve()

    def _resolve(self, path: str) -> Path:
        """Map a canonical path into the root, refusing anything outside it."""
        candidate = (self.root / canonicalize_path(path)).resolve()

        try:
            candidate.relative_to(self.root)
        except ValueError as exc:
            raise ValueError("Invalid file path: outside storage root") from exc

        return candidate

    def put_variant(self, *, path: str, data: bytes, content_type: str) -> None:
        target = self._resolve(path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.exception("Local variant write failed", extra={"path": path})
            raise StorageError(
                message="Unable to store image variant",
                error_code=ERROR_CODE_VARIANT_WRITE_FAILED,
                details={"path": path},
            ) from exc

        logger.info(
            "Variant stored successfully",
            extra={"path": path, "size": len(data), "content_type": content_type},
        )

    def get_variant(self, *, path: str) -> tuple[bytes, str, int]:
        target = self._resolve(path)

        try:
            body = target.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(
                message="Image not found",
                details={"path": path},
            ) from exc
        except OSError as exc:
            logger.exception("Local variant read failed", extra={"path": path})
            raise StorageError(
                message="Unable to read image variant",
                error_code=ERROR_CODE_VARIANT_READ_FAILED,
                details={"path": path},
            ) from exc

        return body, VARIANT_CONTENT_TYPE, len(body)

    def variant_exists(self, *, path: str) -> bool:
        return self._resolve(path).is_file()

    def remove_variant(self, *, path: str) -> None:
        target = self._resolve(path)

        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.exception("Local variant deletion failed", extra={"path": path})
            raise StorageError(
                message="Unable to delete image variant",
                error_code=ERROR_CODE_VARIANT_DELETE_FAILED,
                details={"path": path},
            ) from exc
