"""Selects the variant storage backend from the environment."""

import os

from core.infrastructure.aws.s3_variant_storage import S3VariantStorage
from core.infrastructure.local.filesystem_storage import LocalVariantStorage
from core.repositories.storage_repository import VariantStorageRepository
from core.utils.constants import (
    ENV_STORAGE_BACKEND,
    STORAGE_BACKEND_LOCAL,
    STORAGE_BACKEND_S3,
)


def build_storage() -> VariantStorageRepository:
    """Return the storage implementation named by ``STORAGE_BACKEND``.

    Raises:
        RuntimeError: If the backend name is unknown
    """
    backend = os.getenv(ENV_STORAGE_BACKEND, STORAGE_BACKEND_S3).strip().lower()

    if backend == STORAGE_BACKEND_S3:
        return S3VariantStorage()

    if backend == STORAGE_BACKEND_LOCAL:
        return LocalVariantStorage()

    raise RuntimeError(f"Unsupported {ENV_STORAGE_BACKEND}: {backend!r}")
