"""
Reservation service - reserve-then-fulfill protocol for export artifacts.

Lifecycle:
    reserve  → pending (ready=False, file_id=None)
    fulfill  → ready   (ready=True, file_id set)
    fail     → failed  (error recorded, never ready)
    release  → gone, together with its ledger rows, blob and file_storage row

Every mutation runs in a transaction: committed on success, rolled back on
any failure.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from formexport.core.database import transaction
from formexport.core.errors import NotFound, ReservationConflict
from formexport.models import FileStorageReservation, ReservationStatus
from formexport.ports.repositories import ExportJobsRepo
from formexport.services.storage_service import StorageService

logger = logging.getLogger(__name__)

RELEASE_ATTEMPTS = 3


class ReservationService:
    """Manages file storage reservations."""

    def __init__(self, db: Session, storage: StorageService, export_jobs_repo: ExportJobsRepo):
        """
        Initialize reservation service.

        Args:
            db: SQLAlchemy database session
            storage: Storage service used to remove artifacts on release
            export_jobs_repo: Ledger repository, cleaned up on release
        """
        self.db = db
        self.storage = storage
        self.export_jobs_repo = export_jobs_repo

    def reserve(self, owner: str) -> FileStorageReservation:
        """Create a new pending reservation. No uniqueness check at this level."""
        with transaction(self.db):
            reservation = FileStorageReservation(
                created_by=owner,
                ready=False,
                status=ReservationStatus.PENDING,
            )
            self.db.add(reservation)
            self.db.flush()

        logger.info("Created reservation %s for %s", reservation.id, owner)
        return reservation

    def read(self, reservation_id: str) -> FileStorageReservation:
        """
        Get a reservation, always reloaded from the database.

        Raises:
            NotFound: If the reservation does not exist
        """
        reservation = self.db.get(FileStorageReservation, reservation_id, populate_existing=True)
        if reservation is None:
            raise NotFound(f"Reservation {reservation_id} not found")
        return reservation

    def list(
        self,
        file_id: Optional[str] = None,
        ready: Optional[bool] = None,
        created_by: Optional[str] = None,
        older: Optional[datetime] = None,
    ) -> List[FileStorageReservation]:
        """
        List reservations.

        Args:
            file_id: Only reservations pointing at this file
            ready: Only ready (True) or not-ready (False) reservations
            created_by: Only reservations created by this user
            older: Only reservations created before this time

        Returns:
            Reservations, oldest first
        """
        query = self.db.query(FileStorageReservation)

        if file_id:
            query = query.filter(FileStorageReservation.file_id == file_id)
        if ready is not None:
            query = query.filter(FileStorageReservation.ready.is_(ready))
        if created_by:
            query = query.filter(FileStorageReservation.created_by == created_by)
        if older is not None:
            query = query.filter(FileStorageReservation.created_at < older)

        return query.order_by(FileStorageReservation.created_at.asc(), FileStorageReservation.id.asc()).all()

    def fulfill(self, reservation_id: str, file_id: str, owner: str) -> FileStorageReservation:
        """
        Mark a reservation ready with its stored file.

        Repeated calls overwrite file_id and updated_by.

        Raises:
            NotFound: If the reservation does not exist or was released
                while this update was in flight
        """
        with transaction(self.db):
            reservation = self.read(reservation_id)
            reservation.file_id = file_id
            reservation.ready = True
            reservation.status = ReservationStatus.READY
            reservation.error = None
            reservation.updated_by = owner
            try:
                self.db.flush()
            except StaleDataError as e:
                raise NotFound(f"Reservation {reservation_id} was released", cause=e) from e

        logger.info("Reservation %s ready with file %s", reservation_id, file_id)
        return reservation

    def fail(self, reservation_id: str, error: str, owner: str) -> FileStorageReservation:
        """
        Record that the export for a reservation failed.

        Raises:
            NotFound: If the reservation does not exist
        """
        with transaction(self.db):
            reservation = self.read(reservation_id)
            reservation.ready = False
            reservation.status = ReservationStatus.FAILED
            reservation.error = error
            reservation.updated_by = owner
            try:
                self.db.flush()
            except StaleDataError as e:
                raise NotFound(f"Reservation {reservation_id} was released", cause=e) from e

        logger.warning("Reservation %s failed: %s", reservation_id, error)
        return reservation

    def release(self, reservation_id: str) -> None:
        """
        Delete a reservation with its ledger rows, stored file and file metadata.

        All or nothing: if the blob cannot be deleted every database change is
        rolled back.

        A background fulfill that commits between the read and the delete
        bumps the version stamp; the release is then retried from a fresh
        read so the newly stored file goes too.

        Raises:
            NotFound: If the reservation does not exist
            StorageFailure: If the blob store could not delete the artifact
            ReservationConflict: If the reservation kept changing
        """
        for attempt in range(1, RELEASE_ATTEMPTS + 1):
            try:
                self._release(reservation_id)
                return
            except ReservationConflict:
                # Inside an outer unit of work the session must be rolled back first
                if attempt == RELEASE_ATTEMPTS or self.db.info.get("transaction_depth", 0):
                    raise
                logger.info("Reservation %s changed while releasing; retrying", reservation_id)

    def _release(self, reservation_id: str) -> None:
        with transaction(self.db):
            reservation = self.read(reservation_id)
            file_id = reservation.file_id
            file_row = self.storage.get(file_id)

            exports = self.export_jobs_repo.list_for_reservation(reservation_id)
            self.export_jobs_repo.delete([export.id for export in exports])

            self.db.delete(reservation)
            try:
                self.db.flush()
            except StaleDataError as e:
                raise ReservationConflict(
                    f"Reservation {reservation_id} changed while being released", cause=e
                ) from e

            if file_row is not None:
                self.storage.delete(file_row)

        logger.info(
            "Released reservation %s (%d export jobs, file %s)",
            reservation_id,
            len(exports),
            file_id,
        )
