"""Abstract contract for variant file storage."""

from abc import ABC, abstractmethod


class VariantStorageRepository(ABC):
    """Contract for storing and retrieving derived variant files.

    Implementations could be S3, GCS, local disk, etc.
    Services depend on this interface, not the implementation.
    Every method takes a canonical path (``<tier>/<image_id>.jpg``).
    """

    @abstractmethod
    def put_variant(self, *, path: str, data: bytes, content_type: str) -> None:
        """Persist variant bytes at a canonical path.

        Args:
            path: Canonical variant path
            data: Encoded image bytes
            content_type: MIME type (e.g., 'image/jpeg')

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def get_variant(self, *, path: str) -> tuple[bytes, str, int]:
        """Read variant bytes.

        Args:
            path: Canonical variant path

        Returns:
            Tuple of (content_bytes, content_type, content_length)

        Raises:
            NotFoundError: If the variant doesn't exist
            StorageError: If the read fails
        """

    @abstractmethod
    def variant_exists(self, *, path: str) -> bool:
        """Return True if a variant is stored at the path.

        Raises:
            StorageError: If the check fails
        """

    @abstractmethod
    def remove_variant(self, *, path: str) -> None:
        """Delete a variant. Deleting a missing variant is not an error.

        Raises:
            StorageError: If deletion fails
        """
