"""Bounded polling of backend tasks."""

import logging
import threading
from typing import Any

from resume_optimizer.models.task import TaskStatus
from resume_optimizer.services.errors import (
    ClientDataError,
    PollCancelled,
    PollTimeout,
    TaskFailed,
    UnexpectedStatus,
)
from resume_optimizer.services.task_client import TaskClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 15
DEFAULT_INTERVAL = 2.0


class Poller:
    """Turns status/result calls into one blocking outcome per task.

    Each call keeps its own attempt counter, so several polls can run side by
    side on different task ids. A poll waits on its cancel event between
    attempts; setting the event ends the poll with ``PollCancelled``.
    """

    def __init__(
        self,
        client: TaskClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
    ):
        """Initialize poller with default patience."""
        if client is None:
            raise ValueError("client is required")
        _check_limits(max_attempts, interval)

        self._client = client
        self._max_attempts = max_attempts
        self._interval = interval

    def poll_status(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
        cancel: threading.Event | None = None,
    ) -> TaskStatus:
        """Query status until it leaves PENDING and return it."""
        if not task_id or not task_id.strip():
            raise ValueError("task_id is required")

        max_attempts = self._max_attempts if max_attempts is None else max_attempts
        interval = self._interval if interval is None else interval
        _check_limits(max_attempts, interval)
        waiter = cancel or threading.Event()

        for attempt in range(1, max_attempts + 1):
            if waiter.is_set():
                raise PollCancelled(task_id)

            status = self._client.query_status(task_id)
            logger.debug(
                f"Poll attempt {attempt}/{max_attempts} for task {task_id}: {status}"
            )
            if status is not TaskStatus.PENDING:
                return status

            # Still pending - wait and poll again
            if attempt < max_attempts and waiter.wait(interval):
                raise PollCancelled(task_id)

        logger.warning(f"Task {task_id} still pending after {max_attempts} attempts")
        raise PollTimeout(task_id, max_attempts)

    def poll_result(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Any:
        """Poll until terminal, then fetch the result of a successful task."""
        status = self.poll_status(task_id, max_attempts, interval, cancel)

        if status is TaskStatus.SUCCESS:
            try:
                return self._client.fetch_result(task_id)
            except ClientDataError as e:
                logger.warning(f"Backend rejected data for task {task_id}: {e.detail}")
                raise

        if status is TaskStatus.FAILURE:
            logger.error(f"Task {task_id} failed to complete")
            raise TaskFailed(task_id)

        logger.error(f"Unexpected task status for task {task_id}: {status}")
        raise UnexpectedStatus(task_id, status)


def _check_limits(max_attempts: int, interval: float) -> None:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if interval < 0:
        raise ValueError("interval must be non-negative")
