"""
Export jobs service - the submissions export ledger.

Links each (form, form version) export to the reservation holding its
artifact, so repeated or concurrent requests for the same export reuse one
reservation instead of producing several artifacts.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formexport.core.database import transaction
from formexport.core.errors import NotFound
from formexport.models import FileStorageReservation, ReservationStatus, SubmissionsExport
from formexport.ports.repositories import ExportJobsRepo
from formexport.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class ExportJobsService:
    """CRUD for export jobs plus reservation de-duplication."""

    def __init__(self, db: Session, repo: ExportJobsRepo, reservations: ReservationService):
        self.db = db
        self.repo = repo
        self.reservations = reservations

    def list_exports(self, form_id: str, form_version_id: Optional[str] = None) -> List[SubmissionsExport]:
        """List export jobs for a form/version, most recent first."""
        return self.repo.list(form_id, form_version_id)

    def read_export(self, export_id: str) -> SubmissionsExport:
        """
        Get an export job.

        Raises:
            NotFound: If the export job does not exist
        """
        export = self.repo.get(export_id)
        if export is None:
            raise NotFound(f"Submissions export {export_id} not found")
        return export

    def create_export(
        self, form_id: str, form_version_id: str, reservation_id: str, owner: str
    ) -> SubmissionsExport:
        """
        Create an export job.

        Raises:
            IntegrityError: If a job already exists for this form/version
        """
        with transaction(self.db):
            export = self.repo.add(form_id, form_version_id, reservation_id, owner)
        return export

    def update_export(self, export_id: str, owner: str) -> SubmissionsExport:
        """
        Stamp an export job with the user whose export finished writing.

        Raises:
            NotFound: If the export job does not exist
        """
        with transaction(self.db):
            export = self.repo.stamp(export_id, owner)
            if export is None:
                raise NotFound(f"Submissions export {export_id} not found")
        return export

    def delete_export(self, export_id: str) -> None:
        """
        Delete an export job.

        Raises:
            NotFound: If the export job does not exist
        """
        with transaction(self.db):
            if self.repo.delete([export_id]) == 0:
                raise NotFound(f"Submissions export {export_id} not found")

    def get_or_create_export_job(
        self, form_id: str, form_version_id: str, owner: str
    ) -> FileStorageReservation:
        """
        Reservation for a (form, form version) export, reusing an existing job's.

        1. Existing job → its reservation (unless that export failed, in which
           case the job and reservation are released and replaced)
        2. No job → new reservation + new job, in one transaction
        3. Lost an insert race (unique constraint) → roll back our
           reservation and reuse the winner's

        Returns:
            The reservation the caller should poll
        """
        reservation = self._existing_reservation(form_id, form_version_id)
        if reservation is not None:
            return reservation

        try:
            with transaction(self.db):
                reservation = self.reservations.reserve(owner)
                self.repo.add(form_id, form_version_id, reservation.id, owner)
        except IntegrityError:
            logger.info(
                "Concurrent export job for form %s version %s; reusing its reservation",
                form_id,
                form_version_id,
            )
            reservation = self._existing_reservation(form_id, form_version_id)
            if reservation is None:
                raise
            return reservation

        logger.info(
            "Created export job for form %s version %s with reservation %s",
            form_id,
            form_version_id,
            reservation.id,
        )
        return reservation

    def _existing_reservation(self, form_id: str, form_version_id: str) -> Optional[FileStorageReservation]:
        exports = self.repo.list(form_id, form_version_id)
        if not exports:
            return None

        reservation = self.reservations.read(exports[0].reservation_id)
        if reservation.status == ReservationStatus.FAILED:
            logger.info("Replacing failed reservation %s", reservation.id)
            self.reservations.release(reservation.id)
            return None
        return reservation
