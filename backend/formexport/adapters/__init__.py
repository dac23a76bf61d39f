"""
Adapters - concrete implementations of ports.

Follows hexagonal architecture pattern (ports & adapters).
Current implementations use SQLAlchemy, the local filesystem and inline or
threaded execution.
"""
from formexport.adapters.repositories_sql import SQLSubmissionsRepo, SQLExportJobsRepo
from formexport.adapters.storage_local import LocalBlobStore
from formexport.adapters.tasks_inline import InlineTaskRunner

__all__ = ["SQLSubmissionsRepo", "SQLExportJobsRepo", "LocalBlobStore", "InlineTaskRunner"]
