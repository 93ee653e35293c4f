"""Business logic for deriving the three variant tiers of an upload.

Decoding happens once per upload; the original, preview and thumbnail tiers
are rendered from that one handle and then written to storage under paths
built from a freshly minted identifier.
"""

import base64
import binascii
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
import uuid

from aws_lambda_powertools import Logger

from core.config import DerivationSettings, load_derivation_settings
from core.imaging.derivation import decode_image, render_tiers
from core.infrastructure.factory import build_storage
from core.models.errors import (
    DecodeError,
    ImageServiceError,
    StorageError,
    ValidationError,
)
from core.models.image import DerivationResult, DerivedVariant, Tier
from core.repositories.storage_repository import VariantStorageRepository
from core.utils.constants import (
    ASSET_ID_PREFIX,
    ERROR_CODE_INTERNAL_ERROR,
    ERROR_CODE_VARIANT_WRITE_FAILED,
    VARIANT_CONTENT_TYPE,
)
from core.utils.paths import variant_paths
from core.utils.time import utc_now_iso

from .models import UploadFailure

logger = Logger(UTC=True)

# Write order: the archival tier is the source of truth and goes first
WRITE_ORDER = (Tier.ORIGINAL, Tier.PREVIEW, Tier.THUMB)


class DerivationService:
    """Application service responsible for image derivation.

    This service orchestrates:
    - Identifier generation
    - Decoding and orientation correction (once per upload)
    - Rendering the three tiers
    - Writing the tiers to variant storage
    """

    def __init__(
        self,
        storage: VariantStorageRepository | None = None,
        settings: DerivationSettings | None = None,
    ) -> None:
        self.storage = storage or build_storage()
        self.settings = settings or load_derivation_settings()

    @staticmethod
    def decode_file(encoded: str) -> bytes:
        """Decode base64-encoded image data.

        Raises:
            ValidationError: If decoding fails
        """
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.exception("Failed to decode base64 image data")
            raise ValidationError(
                message="Invalid image data",
                details={"encoding": "base64"},
            ) from exc

    @staticmethod
    def generate_image_id() -> str:
        """Generate a unique image identifier."""
        return f"{ASSET_ID_PREFIX}{uuid.uuid4().hex}"

    def derive(self, *, file_data: bytes, original_filename: str) -> DerivationResult:
        """Derive and persist the original, preview and thumbnail tiers.

        The derivation flow is:
        1. Generate a fresh identifier
        2. Decode once, applying embedded orientation
        3. Render all three tiers in memory
        4. Record the archival tier's size and dimensions as canonical
        5. Write the tiers to storage

        Deriving the same bytes twice yields two unrelated assets.

        Args:
            file_data: Raw image bytes
            original_filename: Uploader's filename, reported back only

        Returns:
            DerivationResult describing the new asset

        Raises:
            DecodeError: If the payload is not a decodable image (nothing written)
            StorageError: If a tier write fails; ``details`` lists the
                paths already written so the caller can clean them up
        """
        image_id = self.generate_image_id()
        paths = variant_paths(image_id)

        logger.debug(
            "Starting image derivation",
            extra={"image_id": image_id, "size": len(file_data)},
        )

        decoded = decode_image(file_data)

        try:
            rendered = render_tiers(decoded, self.settings)
        except (OSError, ValueError) as exc:
            logger.exception("Failed to encode image tiers", extra={"image_id": image_id})
            raise DecodeError(
                message="Image could not be re-encoded",
                details={"cause": str(exc)},
            ) from exc

        original = rendered[Tier.ORIGINAL]
        variants = [
            DerivedVariant(
                tier=tier,
                path=paths.for_tier(tier),
                byte_size=rendered[tier].byte_size,
                width=rendered[tier].width,
                height=rendered[tier].height,
            )
            for tier in WRITE_ORDER
        ]

        written: list[str] = []
        for variant in variants:
            try:
                self.storage.put_variant(
                    path=variant.path,
                    data=rendered[variant.tier].data,
                    content_type=VARIANT_CONTENT_TYPE,
                )
            except Exception as exc:
                logger.exception(
                    "Variant write failed; derivation incomplete",
                    extra={"image_id": image_id, "path": variant.path},
                )
                raise StorageError(
                    message="Unable to store image variants",
                    error_code=ERROR_CODE_VARIANT_WRITE_FAILED,
                    details={
                        "image_id": image_id,
                        "failed_path": variant.path,
                        "written_paths": list(written),
                    },
                ) from exc
            written.append(variant.path)

        logger.info(
            "Image derived successfully",
            extra={
                "image_id": image_id,
                "width": original.width,
                "height": original.height,
                "source_format": decoded.source_format,
            },
        )

        return DerivationResult(
            image_id=image_id,
            original_filename=original_filename,
            byte_size=original.byte_size,
            width=original.width,
            height=original.height,
            paths=paths,
            variants=variants,
            created_at=utc_now_iso(),
        )

    def discard(self, image_id: str) -> list[str]:
        """Best-effort removal of every tier of an asset.

        Returns:
            Paths whose removal failed
        """
        failed: list[str] = []

        for path in variant_paths(image_id).all():
            try:
                self.storage.remove_variant(path=path)
            except Exception:
                logger.warning(
                    "Failed to clean up variant",
                    extra={"image_id": image_id, "path": path},
                )
                failed.append(path)

        return failed

    def _derive_item(
        self, image_name: str, file_data: bytes
    ) -> DerivationResult | UploadFailure:
        try:
            return self.derive(file_data=file_data, original_filename=image_name)
        except StorageError as exc:
            image_id = exc.details.get("image_id")
            if image_id:
                self.discard(image_id)
            return UploadFailure(
                image_name=image_name, error=exc.error_code, message=exc.message
            )
        except ImageServiceError as exc:
            return UploadFailure(
                image_name=image_name, error=exc.error_code, message=exc.message
            )
        except Exception:
            logger.exception("Unexpected derivation failure", extra={"image_name": image_name})
            return UploadFailure(
                image_name=image_name,
                error=ERROR_CODE_INTERNAL_ERROR,
                message="Unable to process image",
            )

    def derive_many(
        self,
        uploads: Sequence[tuple[str, bytes]],
    ) -> list[DerivationResult | UploadFailure]:
        """Derive several uploads on a bounded worker pool.

        Each upload is independent; a failing item is reported in place and
        any partial writes it left are removed. Results keep input order.

        Args:
            uploads: (image_name, file_data) pairs
        """
        if not uploads:
            return []

        workers = min(self.settings.max_concurrent_derivations, len(uploads))

        logger.info(
            "Starting batch derivation",
            extra={"count": len(uploads), "workers": workers},
        )

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(
                executor.map(lambda item: self._derive_item(*item), uploads)
            )
