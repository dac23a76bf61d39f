"""
Error taxonomy for the export pipeline.

Services raise these; the API layer turns them into HTTP responses using
status_code and detail.
"""
from typing import Optional


class ExportError(Exception):
    """Base class for export errors."""

    status_code = 500

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(detail)
        self.detail = detail
        self.cause = cause


class NotFound(ExportError):
    """Form, form version, reservation or export job does not exist."""

    status_code = 404


class InvalidRequest(ExportError):
    """Unsupported export type, format or template. Raised before any I/O."""

    status_code = 422


class ReservationNotReady(ExportError):
    """The reserved artifact has not been written (or its export failed)."""

    status_code = 409


class FormatFailure(ExportError):
    """The transform pipeline raised while building the export."""

    status_code = 500


class StorageFailure(ExportError):
    """Blob upload or delete failed."""

    status_code = 502


class ReservationConflict(ExportError):
    """The reservation changed underneath a release and could not be settled."""

    status_code = 409
