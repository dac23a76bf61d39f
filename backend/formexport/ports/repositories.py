"""
Repository interfaces for data access.

The forms/submissions tables belong to the host forms service; the export
pipeline reads them through SubmissionsRepo and keeps its own ledger through
ExportJobsRepo. Implementations live in formexport.adapters.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from formexport.models import Form, FormVersion, Submission, SubmissionsExport


@dataclass(frozen=True)
class SubmissionFilters:
    """Query filters for a submissions export."""

    version: Optional[int] = None
    min_date: Optional[datetime] = None  # Inclusive
    max_date: Optional[datetime] = None  # Exclusive
    deleted: bool = False  # True: only soft-deleted rows, False: only active rows
    drafts: bool = False  # True: only drafts, False: only finalized rows


class SubmissionsRepo(ABC):
    """Read access to forms, form versions and submissions."""

    @abstractmethod
    def find_form(self, form_id: str) -> Optional[Form]:
        """
        Get a form by ID.

        Returns:
            Form, or None if not found
        """
        pass

    @abstractmethod
    def find_form_version(self, form_id: str, version: Optional[int] = None) -> Optional[FormVersion]:
        """
        Get a form version.

        Args:
            form_id: ID of the form
            version: Version number; None selects the highest version

        Returns:
            FormVersion, or None if not found
        """
        pass

    @abstractmethod
    def query_submissions(self, form_id: str, filters: SubmissionFilters) -> List[Submission]:
        """
        Query submissions for a form.

        Returns:
            Submissions ordered by created_at then id, ascending
        """
        pass


class ExportJobsRepo(ABC):
    """Ledger of submissions export jobs."""

    @abstractmethod
    def list(self, form_id: str, form_version_id: Optional[str] = None) -> List[SubmissionsExport]:
        """
        List export jobs for a form (and optionally a form version).

        Returns:
            Export jobs, most recent first
        """
        pass

    @abstractmethod
    def list_for_reservation(self, reservation_id: str) -> List[SubmissionsExport]:
        """List export jobs linked to a reservation."""
        pass

    @abstractmethod
    def get(self, export_id: str) -> Optional[SubmissionsExport]:
        """Get an export job by ID, or None."""
        pass

    @abstractmethod
    def add(
        self,
        form_id: str,
        form_version_id: str,
        reservation_id: str,
        created_by: str,
    ) -> SubmissionsExport:
        """
        Insert an export job (flushed, not committed).

        Raises:
            sqlalchemy.exc.IntegrityError: If a job already exists for the
                (form, form version)
        """
        pass

    @abstractmethod
    def stamp(self, export_id: str, updated_by: str) -> Optional[SubmissionsExport]:
        """Set updated_by on an export job (flushed, not committed)."""
        pass

    @abstractmethod
    def delete(self, export_ids: List[str]) -> int:
        """
        Delete export jobs (flushed, not committed).

        Returns:
            Number of rows deleted
        """
        pass
