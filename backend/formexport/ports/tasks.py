"""
Background task port.

Exports with reservation hand their format/upload/fulfill work to a
TaskRunner so the reservation can be returned to the caller straight away.
Each task is keyed by the reservation it fulfills and receives a
threading.Event as its cancel_event keyword argument.
"""
from abc import ABC, abstractmethod
from enum import Enum
from threading import Event
from typing import Any, Callable, Optional


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TaskRunner(ABC):
    """Runs export tasks inline or in the background, with cooperative cancellation."""

    @abstractmethod
    def submit(self, func: Callable, *args, task_id: Optional[str] = None, **kwargs) -> str:
        """
        Schedule func(*args, cancel_event=<Event>, **kwargs).

        Resubmitting an existing task_id replaces the earlier record.

        Returns:
            The task ID (task_id, or a new uuid when omitted)
        """

    @abstractmethod
    def status(self, task_id: str) -> TaskStatus:
        """Current status; KeyError for an unknown task."""

    @abstractmethod
    def result(self, task_id: str, timeout: Optional[float] = None) -> Any:
        """
        Wait for a task and return what it returned.

        Raises:
            KeyError: Unknown task
            TimeoutError: Still running after timeout seconds
            RuntimeError: The task raised
        """

    @abstractmethod
    def cancel(self, task_id: str) -> bool:
        """
        Set the task's cancel event.

        Returns:
            False if the task is unknown or already finished
        """

    @abstractmethod
    def forget(self, task_id: str) -> None:
        """Drop the task's record, once it has finished if it is still running."""

    @staticmethod
    def new_cancel_event() -> Event:
        return Event()
