"""
SQLAlchemy implementations of repository interfaces.

Works against SQLite (default, tests) and Postgres with the same ORM API.
Writes are flushed, never committed: callers own the transaction.
"""
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from formexport.ports.repositories import SubmissionsRepo, ExportJobsRepo, SubmissionFilters
from formexport.models import Form, FormVersion, Submission, SubmissionsExport


class SQLSubmissionsRepo(SubmissionsRepo):
    """SQLAlchemy implementation of SubmissionsRepo."""

    def __init__(self, db: Session):
        self.db = db

    def find_form(self, form_id: str) -> Optional[Form]:
        """Get a form by ID."""
        return self.db.query(Form).filter(Form.id == form_id).first()

    def find_form_version(self, form_id: str, version: Optional[int] = None) -> Optional[FormVersion]:
        """Get a form version, or the highest version when version is None."""
        query = self.db.query(FormVersion).filter(FormVersion.form_id == form_id)

        if version is not None:
            query = query.filter(FormVersion.version == version)

        return query.order_by(FormVersion.version.desc()).first()

    def query_submissions(self, form_id: str, filters: SubmissionFilters) -> List[Submission]:
        """Query submissions for a form, oldest first."""
        query = (
            self.db.query(Submission)
            .join(FormVersion, Submission.form_version_id == FormVersion.id)
            .options(joinedload(Submission.form_version))
            .filter(Submission.form_id == form_id)
        )

        if filters.version is not None:
            query = query.filter(FormVersion.version == filters.version)
        if filters.min_date is not None:
            query = query.filter(Submission.created_at >= filters.min_date)
        if filters.max_date is not None:
            query = query.filter(Submission.created_at < filters.max_date)

        query = query.filter(Submission.deleted.is_(bool(filters.deleted)))
        query = query.filter(Submission.draft.is_(bool(filters.drafts)))

        return query.order_by(Submission.created_at.asc(), Submission.id.asc()).all()


class SQLExportJobsRepo(ExportJobsRepo):
    """SQLAlchemy implementation of ExportJobsRepo."""

    def __init__(self, db: Session):
        self.db = db

    def list(self, form_id: str, form_version_id: Optional[str] = None) -> List[SubmissionsExport]:
        """List export jobs, most recent first."""
        query = self.db.query(SubmissionsExport).filter(SubmissionsExport.form_id == form_id)

        if form_version_id:
            query = query.filter(SubmissionsExport.form_version_id == form_version_id)

        return query.order_by(SubmissionsExport.created_at.desc(), SubmissionsExport.id.desc()).all()

    def list_for_reservation(self, reservation_id: str) -> List[SubmissionsExport]:
        """List export jobs linked to a reservation."""
        return (
            self.db.query(SubmissionsExport)
            .filter(SubmissionsExport.reservation_id == reservation_id)
            .order_by(SubmissionsExport.created_at.desc())
            .all()
        )

    def get(self, export_id: str) -> Optional[SubmissionsExport]:
        """Get an export job by ID."""
        return self.db.get(SubmissionsExport, export_id, populate_existing=True)

    def add(
        self,
        form_id: str,
        form_version_id: str,
        reservation_id: str,
        created_by: str,
    ) -> SubmissionsExport:
        """Insert an export job."""
        export = SubmissionsExport(
            form_id=form_id,
            form_version_id=form_version_id,
            reservation_id=reservation_id,
            created_by=created_by,
        )
        self.db.add(export)
        self.db.flush()  # Surfaces the unique constraint violation here
        return export

    def stamp(self, export_id: str, updated_by: str) -> Optional[SubmissionsExport]:
        """Set updated_by on an export job."""
        export = self.get(export_id)
        if export is None:
            return None

        export.updated_by = updated_by
        self.db.flush()
        return export

    def delete(self, export_ids: List[str]) -> int:
        """Delete export jobs by ID."""
        if not export_ids:
            return 0

        count = (
            self.db.query(SubmissionsExport)
            .filter(SubmissionsExport.id.in_(export_ids))
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return count
