from formexport.models.form import Form, FormVersion, Submission
from formexport.models.storage import (
    FileStorage,
    FileStorageReservation,
    ReservationStatus,
    SubmissionsExport,
)

__all__ = [
    "Form",
    "FormVersion",
    "Submission",
    "FileStorage",
    "FileStorageReservation",
    "ReservationStatus",
    "SubmissionsExport",
]
