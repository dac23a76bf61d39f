"""
Shared task runner and blob store singletons.

Module-level instances shared across all requests, built from settings on
first use. The runner is shut down on application exit.
"""
from typing import Optional
import atexit
from threading import Lock

from formexport.adapters.storage_local import LocalBlobStore
from formexport.adapters.tasks_inline import InlineTaskRunner
from formexport.core.config import settings

# Module-level singleton instances
_task_runner: Optional[InlineTaskRunner] = None
_blob_store: Optional[LocalBlobStore] = None
_lock = Lock()


def get_task_runner() -> InlineTaskRunner:
    """
    Get the shared task runner singleton instance.

    Returns:
        InlineTaskRunner in the mode named by settings.RUNNER
    """
    global _task_runner
    with _lock:
        if _task_runner is None:
            _task_runner = InlineTaskRunner(mode=settings.RUNNER, max_workers=settings.MAX_WORKERS)
            atexit.register(shutdown_task_runner)
    return _task_runner


def shutdown_task_runner():
    """Shut down the task runner, waiting for running exports."""
    global _task_runner
    with _lock:
        if _task_runner is not None:
            _task_runner.shutdown()
            _task_runner = None


def get_blob_store() -> LocalBlobStore:
    """Get the shared blob store rooted at settings.STORAGE_PATH."""
    global _blob_store
    with _lock:
        if _blob_store is None:
            _blob_store = LocalBlobStore(settings.STORAGE_PATH)
    return _blob_store
