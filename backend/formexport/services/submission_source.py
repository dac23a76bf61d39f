"""
Submission source - reads forms, schemas and submission rows for an export.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from formexport.core.errors import NotFound
from formexport.models import Form, FormVersion, Submission
from formexport.ports.repositories import SubmissionFilters, SubmissionsRepo

BASE_COLUMNS = [
    "confirmationId",
    "formName",
    "version",
    "createdAt",
    "fullName",
    "username",
    "email",
]

STATUS_COLUMNS = ["status", "assignee", "assigneeEmail"]

CONTENT_COLUMN = "submission"


class SubmissionSource:
    """Fetches submission records projected for export."""

    def __init__(self, repo: SubmissionsRepo):
        self.repo = repo

    def get_form(self, form_id: str) -> Form:
        """
        Get a form.

        Raises:
            NotFound: If the form does not exist
        """
        form = self.repo.find_form(form_id)
        if form is None:
            raise NotFound(f"Form {form_id} not found")
        return form

    def get_form_version(self, form_id: str, version: Optional[int] = None) -> FormVersion:
        """
        Get a form version, or the latest one when version is None.

        Raises:
            NotFound: If no such version exists
        """
        form_version = self.repo.find_form_version(form_id, version)
        if form_version is None:
            label = f"version {version}" if version is not None else "any version"
            raise NotFound(f"Form {form_id} has no {label}")
        return form_version

    def read_form_schema(self, form_id: str, version: Optional[int] = None) -> Dict[str, Any]:
        """Schema JSON of a form version (latest when version is None)."""
        return self.get_form_version(form_id, version).schema or {}

    @staticmethod
    def columns(form: Form) -> List[str]:
        """Export columns for a form: base, status (if enabled), content."""
        columns = list(BASE_COLUMNS)
        if form.enable_status_updates:
            columns += STATUS_COLUMNS
        return columns + [CONTENT_COLUMN]

    def fetch(
        self,
        form: Form,
        version: Optional[int] = None,
        min_date: Optional[datetime] = None,
        max_date: Optional[datetime] = None,
        deleted: bool = False,
        drafts: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Fetch submission records for a form.

        Args:
            form: Form to export
            version: Optional version number filter
            min_date: Inclusive lower bound on createdAt
            max_date: Exclusive upper bound on createdAt
            deleted: Only soft-deleted rows if True, only active rows otherwise
            drafts: Only drafts if True, only finalized rows otherwise

        Returns:
            Records keyed by export column, oldest first
        """
        filters = SubmissionFilters(
            version=version,
            min_date=min_date,
            max_date=max_date,
            deleted=deleted,
            drafts=drafts,
        )
        columns = self.columns(form)
        return [
            self._project(form, submission, columns)
            for submission in self.repo.query_submissions(form.id, filters)
        ]

    @staticmethod
    def _project(form: Form, submission: Submission, columns: List[str]) -> Dict[str, Any]:
        values = {
            "confirmationId": submission.confirmation_id,
            "formName": form.name,
            "version": submission.form_version.version if submission.form_version else None,
            "createdAt": submission.created_at.isoformat() if submission.created_at else None,
            "fullName": submission.full_name,
            "username": submission.username,
            "email": submission.email,
            "status": submission.status,
            "assignee": submission.assignee,
            "assigneeEmail": submission.assignee_email,
            CONTENT_COLUMN: submission.submission or {},
        }
        return {column: values[column] for column in columns}
