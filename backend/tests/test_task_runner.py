"""
Tests for the inline/threaded task runner.
"""
import threading

import pytest

from formexport.adapters.tasks_inline import InlineTaskRunner
from formexport.ports.tasks import TaskStatus


def _add(a, b, cancel_event=None):
    return a + b


def _boom(cancel_event=None):
    raise ValueError("boom")


def test_inline_runs_immediately():
    runner = InlineTaskRunner(mode="inline")

    task_id = runner.submit(_add, 1, 2)

    assert runner.status(task_id) == TaskStatus.COMPLETED
    assert runner.result(task_id) == 3


def test_explicit_task_id():
    runner = InlineTaskRunner(mode="inline")

    assert runner.submit(_add, 1, 1, task_id="reservation-1") == "reservation-1"


def test_failure_is_recorded():
    runner = InlineTaskRunner(mode="inline")

    task_id = runner.submit(_boom)

    assert runner.status(task_id) == TaskStatus.FAILED
    with pytest.raises(RuntimeError, match="boom"):
        runner.result(task_id)


def test_unknown_task():
    runner = InlineTaskRunner(mode="inline")

    with pytest.raises(KeyError):
        runner.status("missing")
    assert runner.cancel("missing") is False


def test_thread_mode_cancel_sets_event():
    runner = InlineTaskRunner(mode="thread", max_workers=1)
    started = threading.Event()
    seen = {}

    def wait_for_cancel(cancel_event=None):
        started.set()
        seen["cancelled"] = cancel_event.wait(timeout=5)
        return "stopped"

    try:
        task_id = runner.submit(wait_for_cancel)
        assert started.wait(timeout=5)

        assert runner.cancel(task_id) is True
        runner.result(task_id, timeout=5)

        assert seen["cancelled"] is True
        assert runner.status(task_id) == TaskStatus.CANCELLED
    finally:
        runner.shutdown()


def test_cancel_completed_task_is_noop():
    runner = InlineTaskRunner(mode="inline")
    task_id = runner.submit(_add, 2, 2)

    assert runner.cancel(task_id) is False
    assert runner.status(task_id) == TaskStatus.COMPLETED


def test_forget_finished_task():
    runner = InlineTaskRunner(mode="inline")
    task_id = runner.submit(_add, 1, 2)

    runner.forget(task_id)

    with pytest.raises(KeyError):
        runner.status(task_id)
    runner.forget(task_id)


def test_forget_running_task_drops_it_when_done():
    runner = InlineTaskRunner(mode="thread", max_workers=1)
    started = threading.Event()
    release = threading.Event()

    def wait_for_release(cancel_event=None):
        started.set()
        release.wait(timeout=5)
        return "done"

    try:
        task_id = runner.submit(wait_for_release)
        assert started.wait(timeout=5)
        future = runner._get(task_id).future

        runner.forget(task_id)
        assert runner.status(task_id) == TaskStatus.RUNNING

        release.set()
        future.result(timeout=5)

        with pytest.raises(KeyError):
            runner.status(task_id)
    finally:
        runner.shutdown()
