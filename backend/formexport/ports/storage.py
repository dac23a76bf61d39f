"""
Blob store interface.

An opaque store for export artifacts. Metadata about stored blobs is kept in
the file_storage table by StorageService; the blob store only moves bytes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    """Location of a blob written by a BlobStore."""

    id: str
    storage: str  # Backend name, e.g. "local"
    path: str
    size: int


class BlobStore(ABC):
    """Upload, read and delete blobs by ID."""

    @abstractmethod
    def upload(self, blob_id: str, name: str, data: bytes) -> StoredBlob:
        """
        Write a blob, replacing any existing blob with the same ID.

        Args:
            blob_id: Blob ID (the file_storage row ID)
            name: Original file name
            data: Content

        Returns:
            StoredBlob describing where it was written

        Raises:
            StorageFailure: If the write fails
        """
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        """
        Read a blob.

        Raises:
            StorageFailure: If the blob cannot be read
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if the blob was deleted, False if it could not be
        """
        pass
