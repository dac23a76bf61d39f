"""
Ports - interface definitions for external dependencies.

Follows hexagonal architecture pattern (ports & adapters).
Ports define interfaces, adapters provide concrete implementations.
"""
from formexport.ports.repositories import SubmissionsRepo, ExportJobsRepo, SubmissionFilters
from formexport.ports.storage import BlobStore, StoredBlob
from formexport.ports.tasks import TaskRunner, TaskStatus

__all__ = [
    "SubmissionsRepo",
    "ExportJobsRepo",
    "SubmissionFilters",
    "BlobStore",
    "StoredBlob",
    "TaskRunner",
    "TaskStatus",
]
