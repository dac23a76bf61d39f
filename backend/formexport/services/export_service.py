"""
Export service - orchestrates the submissions export pipeline.

Direct export (synchronous):
1. Parse and validate request parameters (before any I/O)
2. Load form → fetch submissions → read schema fields
3. Reshape records: metadata under "form", submission content at top level
4. Format as JSON, or as CSV for the requested template
5. Return bytes, content type and suggested file name

Export with reservation (deferred):
1. Same validation and fetch, synchronously, so NotFound reaches the caller
2. Get or create the (form, form version) export job and its reservation
3. Hand the reservation back; a background task formats the data, uploads
   it, fulfills the reservation and stamps the ledger row
4. A failed background export is recorded on the reservation; a released
   reservation is never resurrected and its freshly uploaded blob is removed
"""
import json
import logging
import uuid
from dataclasses import dataclass
from threading import Event
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from formexport.adapters.repositories_sql import SQLExportJobsRepo, SQLSubmissionsRepo
from formexport.core.database import transaction
from formexport.core.errors import ExportError, FormatFailure, NotFound, ReservationNotReady
from formexport.export.csv_emitter import CSVEmitter
from formexport.export.naming import export_filename
from formexport.export.records import reshape_record
from formexport.models import Form, FormVersion, FileStorageReservation, ReservationStatus
from formexport.ports.storage import BlobStore
from formexport.ports.tasks import TaskRunner
from formexport.schema.flattener import read_schema_fields
from formexport.schemas.export import CONTENT_TYPES, ExportFormat, ExportRequest
from formexport.services.export_jobs_service import ExportJobsService
from formexport.services.reservation_service import ReservationService
from formexport.services.storage_service import StorageService
from formexport.services.submission_source import CONTENT_COLUMN, SubmissionSource

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """A finished export, ready to be sent as a download."""

    data: bytes
    content_type: str
    filename: str

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "content-disposition": f'attachment; filename="{self.filename}"',
            "content-type": self.content_type,
        }


class ExportService:
    """
    Export service - direct and reservation-backed submission exports.

    Background work never touches this instance's session: each task opens
    its own from session_factory.
    """

    def __init__(
        self,
        db: Session,
        session_factory: Callable[[], Session],
        blob_store: BlobStore,
        task_runner: TaskRunner,
    ):
        """
        Initialize export service.

        Args:
            db: SQLAlchemy database session for request-time work
            session_factory: Creates sessions for background tasks
            blob_store: Blob store artifacts are written to
            task_runner: Runs background export tasks
        """
        self.db = db
        self.session_factory = session_factory
        self.blob_store = blob_store
        self.task_runner = task_runner

        self.source = SubmissionSource(SQLSubmissionsRepo(db))
        self.storage, self.reservations, self.export_jobs = self._build_services(db)

    def _build_services(self, db: Session) -> Tuple[StorageService, ReservationService, ExportJobsService]:
        export_jobs_repo = SQLExportJobsRepo(db)
        storage = StorageService(db, self.blob_store)
        reservations = ReservationService(db, storage, export_jobs_repo)
        export_jobs = ExportJobsService(db, export_jobs_repo, reservations)
        return storage, reservations, export_jobs

    # Direct export

    def export(self, form_id: str, params: Optional[Dict[str, Any]] = None) -> ExportResult:
        """
        Export a form's submissions.

        Args:
            form_id: ID of the form
            params: Raw request parameters (type, format, template, version,
                columns, preference, deleted, drafts)

        Returns:
            ExportResult with bytes, content type and file name

        Raises:
            InvalidRequest: If the parameters are not supported
            NotFound: If the form or requested version does not exist
            FormatFailure: If formatting the export failed
        """
        request = ExportRequest.parse(params)
        form = self.source.get_form(form_id)
        form_version = self.source.get_form_version(form.id, request.version)
        records = self._get_data(form, request)
        schema_fields = self._schema_fields(form_version, request)

        logger.info(
            "Exporting %d submissions of form %s as %s (%s)",
            len(records),
            form.id,
            request.format.value,
            request.template.value,
        )
        return self.format_data(form.name, schema_fields, records, request)

    def read_fields_for_csv_export(self, form_id: str, version: Optional[int] = None) -> Tuple[int, List[str]]:
        """
        Field paths a CSV export of a form version would contain.

        Returns:
            Tuple of (resolved version number, field paths)

        Raises:
            NotFound: If the form or version does not exist
        """
        self.source.get_form(form_id)
        form_version = self.source.get_form_version(form_id, version)
        return form_version.version, read_schema_fields(form_version.schema)

    def _get_data(self, form: Form, request: ExportRequest) -> List[Dict[str, Any]]:
        preference = request.preference
        return self.source.fetch(
            form,
            version=request.version,
            min_date=preference.min_date if preference else None,
            max_date=preference.max_date if preference else None,
            deleted=request.deleted,
            drafts=request.drafts,
        )

    @staticmethod
    def _schema_fields(form_version: FormVersion, request: ExportRequest) -> List[str]:
        if request.format != ExportFormat.CSV:
            return []
        return read_schema_fields(form_version.schema)

    def format_data(
        self,
        form_name: str,
        schema_fields: List[str],
        records: List[Dict[str, Any]],
        request: ExportRequest,
    ) -> ExportResult:
        """
        Format fetched records.

        Raises:
            FormatFailure: If the transform pipeline raised
        """
        filename = export_filename(form_name, request.type.value, request.format.value)
        try:
            formatted = [reshape_record(record, CONTENT_COLUMN) for record in records]

            if request.format == ExportFormat.JSON:
                data = json.dumps(formatted, ensure_ascii=False, default=str).encode("utf-8")
            else:
                emitter = CSVEmitter(schema_fields, columns=request.columns)
                data = emitter.emit(formatted, request.template)
        except Exception as e:
            raise FormatFailure(
                f"Could not make a {request.format.value} export of submissions for this form. {e}",
                cause=e,
            ) from e

        return ExportResult(data=data, content_type=CONTENT_TYPES[request.format], filename=filename)

    # Export with reservation

    def export_with_reservation(
        self, form_id: str, owner: str, params: Optional[Dict[str, Any]] = None
    ) -> FileStorageReservation:
        """
        Start (or join) a background export and return its reservation.

        Poll the reservation until ready, then download it.

        Raises:
            InvalidRequest: If the parameters are not supported
            NotFound: If the form or requested version does not exist
        """
        request = ExportRequest.parse(params)
        form = self.source.get_form(form_id)
        form_version = self.source.get_form_version(form.id, request.version)
        # The ledger is keyed by form version, so the artifact holds only that version
        request = request.model_copy(update={"version": form_version.version})
        records = self._get_data(form, request)
        schema_fields = self._schema_fields(form_version, request)

        reservation = self.export_jobs.get_or_create_export_job(form.id, form_version.id, owner)
        reservation_id = reservation.id

        self.task_runner.submit(
            self.fulfill_reservation,
            reservation_id,
            form.name,
            schema_fields,
            records,
            request,
            owner,
            task_id=reservation_id,
        )
        return self.reservations.read(reservation_id)

    def fulfill_reservation(
        self,
        reservation_id: str,
        form_name: str,
        schema_fields: List[str],
        records: List[Dict[str, Any]],
        request: ExportRequest,
        owner: str,
        cancel_event: Optional[Event] = None,
    ) -> Optional[str]:
        """
        Background task: format, upload, fulfill, stamp the ledger.

        Returns:
            The stored file ID, or None if cancelled or the reservation was
            released first

        Raises:
            ExportError: After recording the failure on the reservation
        """
        cancel_event = cancel_event or Event()
        db = self.session_factory()
        try:
            storage, reservations, export_jobs = self._build_services(db)

            if cancel_event.is_set():
                logger.info("Export for reservation %s cancelled before formatting", reservation_id)
                return None

            try:
                result = self.format_data(form_name, schema_fields, records, request)
                if cancel_event.is_set():
                    logger.info("Export for reservation %s cancelled before upload", reservation_id)
                    return None
                return self._store_and_fulfill(
                    db, storage, reservations, export_jobs, reservation_id, result, owner
                )
            except ExportError as e:
                self._record_failure(reservations, reservation_id, e.detail, owner)
                raise
            except Exception as e:
                self._record_failure(reservations, reservation_id, str(e), owner)
                raise
        finally:
            db.close()

    def _store_and_fulfill(
        self,
        db: Session,
        storage: StorageService,
        reservations: ReservationService,
        export_jobs: ExportJobsService,
        reservation_id: str,
        result: ExportResult,
        owner: str,
    ) -> Optional[str]:
        try:
            reservation = reservations.read(reservation_id)
        except NotFound:
            logger.info("Reservation %s released before upload; nothing to store", reservation_id)
            return None

        minted = reservation.file_id is None
        file_id = reservation.file_id or str(uuid.uuid4())
        stored_path = None
        try:
            with transaction(db):
                row = storage.upload_data(file_id, result.filename, result.data, result.content_type, owner)
                stored_path = row.path
                reservations.fulfill(reservation_id, file_id, owner)
                for export in export_jobs.repo.list_for_reservation(reservation_id):
                    export_jobs.update_export(export.id, owner)
        except NotFound:
            # Released while we were uploading: drop what we just wrote
            logger.warning("Reservation %s released during upload; removing file %s", reservation_id, file_id)
            if stored_path is not None:
                self.blob_store.delete(stored_path)
            return None
        except Exception:
            # The file_storage row rolled back; a new blob would be left unreferenced
            if minted and stored_path is not None:
                logger.warning("Removing unreferenced file %s of reservation %s", file_id, reservation_id)
                self.blob_store.delete(stored_path)
            raise

        logger.info("Export for reservation %s stored as %s", reservation_id, file_id)
        return file_id

    @staticmethod
    def _record_failure(reservations: ReservationService, reservation_id: str, error: str, owner: str) -> None:
        try:
            reservations.fail(reservation_id, error, owner)
        except NotFound:
            logger.info("Reservation %s released; failure not recorded", reservation_id)

    def read_reservation(self, reservation_id: str) -> FileStorageReservation:
        """Get a reservation (NotFound if absent)."""
        return self.reservations.read(reservation_id)

    def list_reservations(
        self,
        file_id: Optional[str] = None,
        ready: Optional[bool] = None,
        created_by: Optional[str] = None,
    ) -> List[FileStorageReservation]:
        return self.reservations.list(file_id=file_id, ready=ready, created_by=created_by)

    def download_reservation(self, reservation_id: str) -> ExportResult:
        """
        Artifact of a ready reservation.

        Raises:
            NotFound: If the reservation does not exist
            ReservationNotReady: If the export is still running or failed
            StorageFailure: If the artifact cannot be read
        """
        reservation = self.reservations.read(reservation_id)
        if reservation.status == ReservationStatus.FAILED:
            raise ReservationNotReady(f"Export for reservation {reservation_id} failed: {reservation.error}")
        if not reservation.ready or not reservation.file_id:
            raise ReservationNotReady(f"Export for reservation {reservation_id} is not ready yet")

        row = self.storage.get(reservation.file_id)
        data = self.storage.read_data(reservation.file_id)
        return ExportResult(data=data, content_type=row.mime_type, filename=row.original_name)

    def release_reservation(self, reservation_id: str) -> None:
        """
        Cancel any running export for a reservation and release it.

        Raises:
            NotFound: If the reservation does not exist
            StorageFailure: If the artifact could not be deleted
        """
        if self.task_runner.cancel(reservation_id):
            logger.info("Cancelled running export for reservation %s", reservation_id)
        try:
            self.reservations.release(reservation_id)
        finally:
            self.task_runner.forget(reservation_id)
