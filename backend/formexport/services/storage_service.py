"""
Storage service - blob store plus file_storage metadata rows.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from formexport.core.errors import StorageFailure
from formexport.models import FileStorage
from formexport.ports.storage import BlobStore

logger = logging.getLogger(__name__)


class StorageService:
    """
    Stores artifacts in a BlobStore and tracks them in file_storage.

    Row writes are flushed, not committed; callers own the transaction.
    """

    def __init__(self, db: Session, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store

    def get(self, file_id: Optional[str]) -> Optional[FileStorage]:
        """Get a file_storage row, or None."""
        if not file_id:
            return None
        return self.db.get(FileStorage, file_id, populate_existing=True)

    def upload_data(
        self,
        file_id: str,
        original_name: str,
        data: bytes,
        mime_type: str,
        owner: str,
    ) -> FileStorage:
        """
        Write data under file_id, creating or replacing its metadata row.

        Raises:
            StorageFailure: If the blob store write fails
        """
        stored = self.blob_store.upload(file_id, original_name, data)

        row = self.get(file_id)
        if row is None:
            row = FileStorage(id=file_id, created_by=owner)
            self.db.add(row)
        else:
            row.updated_by = owner

        row.original_name = original_name
        row.mime_type = mime_type
        row.size = stored.size
        row.storage = stored.storage
        row.path = stored.path
        self.db.flush()

        logger.info("Uploaded %s (%s, %d bytes)", file_id, original_name, stored.size)
        return row

    def read_data(self, file_id: str) -> bytes:
        """
        Read the bytes of a stored file.

        Raises:
            StorageFailure: If there is no such file or it cannot be read
        """
        row = self.get(file_id)
        if row is None:
            raise StorageFailure(f"File {file_id} not found in storage")
        return self.blob_store.read(row.path)

    def delete(self, row: FileStorage) -> None:
        """
        Delete the blob and its metadata row.

        Raises:
            StorageFailure: If the blob store could not delete the blob
        """
        if not self.blob_store.delete(row.path):
            raise StorageFailure(f"Could not delete file {row.id} from {row.storage} storage")
        self.db.delete(row)
        self.db.flush()
