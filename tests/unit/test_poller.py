"""Unit tests for Poller."""

import threading
from unittest.mock import MagicMock

import pytest

from resume_optimizer.models.task import TaskStatus
from resume_optimizer.services.errors import (
    ClientDataError,
    PollCancelled,
    PollTimeout,
    StatusQueryError,
    TaskFailed,
    UnexpectedStatus,
)
from resume_optimizer.services.poller import Poller


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def poller(client):
    return Poller(client, max_attempts=5, interval=0)


class TestPollerInit:
    """Tests for Poller initialization."""

    def test_defaults(self, client):
        """Default patience is 15 attempts, 2 seconds apart."""
        poller = Poller(client)
        assert poller._max_attempts == 15
        assert poller._interval == 2.0

    def test_none_client_raises(self):
        """Missing client raises error."""
        with pytest.raises(ValueError, match="client is required"):
            Poller(None)

    def test_zero_attempts_raises(self, client):
        """At least one attempt is required."""
        with pytest.raises(ValueError, match="max_attempts must be at least 1"):
            Poller(client, max_attempts=0)

    def test_negative_interval_raises(self, client):
        """Negative interval raises error."""
        with pytest.raises(ValueError, match="interval must be non-negative"):
            Poller(client, interval=-1)


class TestPollStatus:
    """Tests for poll_status."""

    def test_returns_after_pending(self, poller, client):
        """Pending observations are retried until a terminal status."""
        client.query_status.side_effect = [
            TaskStatus.PENDING,
            TaskStatus.PENDING,
            TaskStatus.SUCCESS,
        ]

        assert poller.poll_status("T1") is TaskStatus.SUCCESS
        assert client.query_status.call_count == 3

    def test_returns_failure_without_looping(self, poller, client):
        """FAILURE is returned as-is on the first observation."""
        client.query_status.return_value = TaskStatus.FAILURE

        assert poller.poll_status("T1") is TaskStatus.FAILURE
        client.query_status.assert_called_once_with("T1")

    def test_timeout_after_max_attempts(self, poller, client):
        """Exactly max_attempts queries, then PollTimeout."""
        client.query_status.return_value = TaskStatus.PENDING

        with pytest.raises(PollTimeout) as exc_info:
            poller.poll_status("T1", max_attempts=3)

        assert client.query_status.call_count == 3
        assert exc_info.value.attempts == 3
        assert str(exc_info.value) == (
            "Processing is taking too long: task T1 still pending after 3 attempts"
        )

    def test_waits_between_attempts_only(self, client):
        """The interval is waited between attempts, not after the last one."""
        client.query_status.return_value = TaskStatus.PENDING
        cancel = MagicMock()
        cancel.is_set.return_value = False
        cancel.wait.return_value = False
        poller = Poller(client, max_attempts=4, interval=2.0)

        with pytest.raises(PollTimeout):
            poller.poll_status("T1", cancel=cancel)

        assert cancel.wait.call_count == 3
        cancel.wait.assert_called_with(2.0)

    def test_cancel_before_first_query(self, poller, client):
        """A set event stops the poll before any query."""
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(PollCancelled):
            poller.poll_status("T1", cancel=cancel)

        client.query_status.assert_not_called()

    def test_cancel_during_wait(self, client):
        """Setting the event during the wait ends the poll."""
        cancel = threading.Event()

        def pending_then_cancel(task_id):
            cancel.set()
            return TaskStatus.PENDING

        client.query_status.side_effect = pending_then_cancel
        poller = Poller(client, max_attempts=15, interval=60.0)

        with pytest.raises(PollCancelled):
            poller.poll_status("T1", cancel=cancel)

        client.query_status.assert_called_once()

    def test_query_error_propagates(self, poller, client):
        """Status query failures are not retried."""
        client.query_status.side_effect = StatusQueryError("down")

        with pytest.raises(StatusQueryError):
            poller.poll_status("T1")

        client.query_status.assert_called_once()

    def test_concurrent_polls_have_own_counters(self, client):
        """Separate polls on one poller keep separate attempt counts."""
        statuses = {
            "A": iter([TaskStatus.PENDING, TaskStatus.SUCCESS]),
            "B": iter([TaskStatus.PENDING, TaskStatus.PENDING, TaskStatus.FAILURE]),
        }
        client.query_status.side_effect = lambda task_id: next(statuses[task_id])
        poller = Poller(client, max_attempts=3, interval=0)

        assert poller.poll_status("A") is TaskStatus.SUCCESS
        assert poller.poll_status("B") is TaskStatus.FAILURE

    def test_empty_task_id_raises(self, poller):
        """Empty task id raises error."""
        with pytest.raises(ValueError, match="task_id is required"):
            poller.poll_status("")


class TestPollResult:
    """Tests for poll_result."""

    def test_fetches_after_success(self, poller, client):
        """Result is fetched only after SUCCESS was observed."""
        calls = []
        client.query_status.side_effect = lambda task_id: calls.append("status") or (
            TaskStatus.SUCCESS if len(calls) > 1 else TaskStatus.PENDING
        )
        client.fetch_result.side_effect = lambda task_id: calls.append("result") or {"ok": 1}

        assert poller.poll_result("M1") == {"ok": 1}
        assert calls == ["status", "status", "result"]

    def test_failure_never_fetches(self, poller, client):
        """FAILURE raises TaskFailed without fetching."""
        client.query_status.return_value = TaskStatus.FAILURE

        with pytest.raises(TaskFailed, match="Task M1 failed to complete"):
            poller.poll_result("M1")

        client.fetch_result.assert_not_called()

    def test_timeout_never_fetches(self, poller, client):
        """Timeout raises PollTimeout without fetching."""
        client.query_status.return_value = TaskStatus.PENDING

        with pytest.raises(PollTimeout):
            poller.poll_result("M1")

        client.fetch_result.assert_not_called()

    def test_unexpected_status(self, poller, client):
        """A status outside SUCCESS/FAILURE is reported as unexpected."""
        client.query_status.return_value = "REVOKED"

        with pytest.raises(UnexpectedStatus, match="REVOKED"):
            poller.poll_result("M1")

        client.fetch_result.assert_not_called()

    def test_client_data_error_propagates(self, poller, client):
        """A 4xx on the result propagates as the tagged data error."""
        client.query_status.return_value = TaskStatus.SUCCESS
        client.fetch_result.side_effect = ClientDataError("B1", 422, "bad data")

        with pytest.raises(ClientDataError) as exc_info:
            poller.poll_result("B1")

        assert exc_info.value.detail == "bad data"
