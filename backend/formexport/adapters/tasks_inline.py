"""
Inline / thread-pool task runner.

mode="inline" runs the task before submit() returns (tests, small
deployments); mode="thread" hands it to a ThreadPoolExecutor. The mode comes
from settings.RUNNER.
"""
import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from threading import Event, Lock
from typing import Any, Callable, Dict, Optional

from formexport.ports.tasks import TaskRunner, TaskStatus

logger = logging.getLogger(__name__)

FINISHED = (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


@dataclass
class _Task:
    cancel_event: Event
    status: TaskStatus = TaskStatus.PENDING
    result: Any = None
    error: Optional[str] = None
    forgotten: bool = False
    future: Optional[Future] = field(default=None, repr=False)


class InlineTaskRunner(TaskRunner):
    """TaskRunner that executes in the calling thread or in a thread pool."""

    def __init__(self, mode: str = "inline", max_workers: int = 4):
        self.mode = mode
        self.executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="export")
            if mode == "thread"
            else None
        )
        self._tasks: Dict[str, _Task] = {}
        self._lock = Lock()

    def submit(self, func: Callable, *args, task_id: Optional[str] = None, **kwargs) -> str:
        task_id = task_id or str(uuid.uuid4())
        task = _Task(cancel_event=self.new_cancel_event())

        with self._lock:
            self._tasks[task_id] = task

        if self.executor is None:
            self._run(task_id, task, func, args, kwargs)
        else:
            task.future = self.executor.submit(self._run, task_id, task, func, args, kwargs)

        logger.debug("Submitted task %s (%s)", task_id, self.mode)
        return task_id

    def _run(self, task_id: str, task: _Task, func: Callable, args: tuple, kwargs: dict) -> None:
        try:
            self._execute(task_id, task, func, args, kwargs)
        finally:
            self._drop_if_forgotten(task_id, task)

    @staticmethod
    def _execute(task_id: str, task: _Task, func: Callable, args: tuple, kwargs: dict) -> None:
        if task.cancel_event.is_set():
            task.status = TaskStatus.CANCELLED
            return

        task.status = TaskStatus.RUNNING
        try:
            task.result = func(*args, cancel_event=task.cancel_event, **kwargs)
        except Exception as e:
            # Recorded on the task; result() re-raises it for waiters
            logger.exception("Task %s failed", task_id)
            task.error = str(e)
            task.status = TaskStatus.FAILED
            return

        task.status = TaskStatus.CANCELLED if task.cancel_event.is_set() else TaskStatus.COMPLETED

    def status(self, task_id: str) -> TaskStatus:
        return self._get(task_id).status

    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        task = self._get(task_id)
        if task.future is not None:
            task.future.result(timeout=timeout)

        if task.status == TaskStatus.FAILED:
            raise RuntimeError(f"Task {task_id} failed: {task.error}")
        return task.result

    def cancel(self, task_id: str) -> bool:
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None or task.status in FINISHED:
            return False

        task.cancel_event.set()
        if task.future is not None and task.future.cancel():
            # Never started
            task.status = TaskStatus.CANCELLED
        return True

    def forget(self, task_id: str) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            if task.status in FINISHED or (task.future is not None and task.future.cancelled()):
                del self._tasks[task_id]
            else:
                # Still running: dropped when it finishes
                task.forgotten = True

    def _drop_if_forgotten(self, task_id: str, task: _Task) -> None:
        with self._lock:
            # A resubmission may have replaced the record
            if task.forgotten and self._tasks.get(task_id) is task:
                del self._tasks[task_id]

    def shutdown(self):
        """Wait for running tasks and stop the pool."""
        if self.executor:
            self.executor.shutdown(wait=True)

    def _get(self, task_id: str) -> _Task:
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise KeyError(f"Task {task_id} not found")
        return task
