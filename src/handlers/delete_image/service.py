"""Business logic for image deletion.

All three tiers of an asset are removed together. Tiers that are already
gone are skipped; an asset with no tier left at all is reported as missing.
"""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.factory import build_storage
from core.models.errors import NotFoundError, StorageError
from core.repositories.storage_repository import VariantStorageRepository
from core.utils.paths import variant_paths
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DeleteService:
    """Application service responsible for deleting an asset's tiers."""

    def __init__(self, storage: VariantStorageRepository | None = None) -> None:
        self.storage = storage or build_storage()

    def delete_image(self, image_id: str) -> dict[str, Any]:
        """Delete every stored tier of an image.

        The deletion flow is:
        1. Check which of the three canonical paths are stored
        2. Remove each stored variant

        Args:
            image_id: Unique identifier of the image to delete

        Returns:
            A dictionary containing deletion confirmation details

        Raises:
            NotFoundError: If no tier of the image exists
            StorageError: If a lookup or removal fails
        """
        logger.debug("Starting image deletion", extra={"image_id": image_id})

        present = [
            path
            for path in variant_paths(image_id).all()
            if self.storage.variant_exists(path=path)
        ]

        if not present:
            logger.warning("No variants found for image", extra={"image_id": image_id})
            raise NotFoundError(
                message="Image not found",
                details={"image_id": image_id},
            )

        for path in present:
            try:
                self.storage.remove_variant(path=path)
            except StorageError:
                logger.exception(
                    "Failed to delete variant",
                    extra={"image_id": image_id, "path": path},
                )
                raise

        logger.info(
            "Image deleted successfully",
            extra={"image_id": image_id, "paths": present},
        )

        return {
            "image_id": image_id,
            "deleted_paths": present,
            "deleted_at": utc_now_iso(),
        }
