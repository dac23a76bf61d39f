"""
Local filesystem blob store.

Blobs are written under <root>/<blob_id>. Writes go through a temporary file
and an atomic rename so a reader never sees a partial artifact.
"""
import logging
import os
import tempfile
from pathlib import Path

from formexport.core.errors import StorageFailure
from formexport.ports.storage import BlobStore, StoredBlob

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """BlobStore backed by a local directory."""

    storage_name = "local"

    def __init__(self, root: Path):
        """
        Initialize blob store.

        Args:
            root: Directory blobs are written to (created if missing)
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(self, blob_id: str, name: str, data: bytes) -> StoredBlob:
        """Write a blob, replacing any existing blob with the same ID."""
        target = self.root / blob_id
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=f".{blob_id}.")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, target)
        except OSError as e:
            raise StorageFailure(f"Could not store '{name}' ({blob_id}): {e}", cause=e) from e

        logger.debug("Stored blob %s (%s, %d bytes)", blob_id, name, len(data))
        return StoredBlob(id=blob_id, storage=self.storage_name, path=str(target), size=len(data))

    def read(self, path: str) -> bytes:
        """Read a blob."""
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise StorageFailure(f"Could not read blob at {path}: {e}", cause=e) from e

    def delete(self, path: str) -> bool:
        """Delete a blob. A blob that is already gone counts as deleted."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.warning("Blob at %s already removed", path)
        except OSError as e:
            logger.error("Could not delete blob at %s: %s", path, e)
            return False
        return True
