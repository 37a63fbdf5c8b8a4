"""
Task polling for asynchronous providers.

Submission returns a task id; poll_task calls a status check with a fixed
delay until the task completes, reports an error, or the timeout elapses.
"""

import time
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from typing import Any

from genmedia.core.probes import first_value
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import PollTimeoutError, TaskFailedError

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaskHandle:
    """Identifies a submitted asynchronous task and where to query it."""

    task_id: str
    status_url: str


@dataclass(frozen=True)
class TaskStatus:
    """Outcome of one status check."""

    completed: bool
    url: str | None = None
    error: str | None = None

    @classmethod
    def pending(cls) -> "TaskStatus":
        return cls(completed=False)

    @classmethod
    def done(cls, url: str) -> "TaskStatus":
        return cls(completed=True, url=url)

    @classmethod
    def failed(cls, error: str) -> "TaskStatus":
        return cls(completed=False, error=error)


def poll_task(
    check: Callable[[], TaskStatus],
    interval: float,
    timeout: float,
    *,
    task_id: str = "",
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> str:
    """
    Call check() until the task resolves.

    Args:
        check: Status check; exceptions it raises propagate unchanged
        interval: Seconds to wait between checks
        timeout: Seconds after which polling gives up
        task_id: Used in log lines and error messages
        sleep: Delay function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        The URL reported by the completing check

    Raises:
        TaskFailedError: check reported a non-empty error
        PollTimeoutError: timeout elapsed before completion
    """
    start = clock()
    attempt = 0
    while True:
        attempt += 1
        status = check()
        logger.debug(
            "Poll attempt=%s task=%s completed=%s error=%s",
            attempt,
            task_id,
            status.completed,
            status.error,
        )
        if status.completed:
            if not status.url:
                raise TaskFailedError("Task completed without a result URL", task_id=task_id)
            logger.info("Task %s completed after %s checks", task_id or "<unnamed>", attempt)
            return status.url
        if status.error:
            raise TaskFailedError(status.error, task_id=task_id)
        if clock() - start >= timeout:
            raise PollTimeoutError(
                f"Task {task_id or '<unnamed>'} did not complete within {timeout} seconds"
            )
        sleep(interval)


def status_checker(
    fetch: Callable[[], Any],
    *,
    status_paths: Sequence[str],
    url_paths: Sequence[str],
    error_paths: Sequence[str] = ("error", "message"),
    success: Collection[str],
    failure: Collection[str],
    pending: Collection[str],
    fallback_url: str | None = None,
) -> Callable[[], TaskStatus]:
    """
    Build a status check from a provider's status vocabulary.

    ``fetch`` returns the parsed status body. Status, URL and error are
    read from the first path in each list that yields a value. When a
    successful body carries no URL, ``fallback_url`` is reported instead
    (tasks whose result is the status body itself).
    """

    def check() -> TaskStatus:
        body = fetch()
        status = first_value(body, status_paths)
        if status in success:
            url = first_value(body, url_paths) or fallback_url
            if not url:
                return TaskStatus.failed("Task succeeded but returned no result URL")
            return TaskStatus.done(str(url))
        if status in failure:
            reason = first_value(body, error_paths) or "unknown error"
            if isinstance(reason, dict):
                reason = reason.get("message") or reason
            return TaskStatus.failed(f"Task failed: {reason}")
        if status in pending:
            return TaskStatus.pending()
        return TaskStatus.failed(f"Unknown status: {status}")

    return check


__all__ = ["TaskHandle", "TaskStatus", "poll_task", "status_checker"]
