"""Error taxonomy shared by the backend clients, the poller and the wizard."""

from typing import Any

import httpx


class WizardError(Exception):
    """Base class for every failure a wizard stage can surface."""

    pass


class SubmissionError(WizardError):
    """Raised when the backend rejects a submission or is unreachable."""

    pass


class StatusQueryError(WizardError):
    """Raised when a task status cannot be queried."""

    pass


class ResultFetchError(WizardError):
    """Raised when a task result cannot be fetched."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ClientDataError(ResultFetchError):
    """Raised when the backend rejects the data itself with a 4xx response."""

    def __init__(
        self,
        task_id: str,
        status_code: int,
        detail: str,
        payload: Any = None,
    ):
        self.task_id = task_id
        self.detail = detail
        self.payload = payload
        super().__init__(
            f"Client-side document error for task {task_id}: HTTP {status_code} - {detail}",
            status_code=status_code,
        )


class MalformedResponse(WizardError):
    """Raised when the backend answers without the expected fields."""

    pass


class PollTimeout(WizardError):
    """Raised when a task stays pending for every allowed attempt."""

    def __init__(self, task_id: str, attempts: int):
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(
            f"Processing is taking too long: task {task_id} "
            f"still pending after {attempts} attempts"
        )


class PollCancelled(WizardError):
    """Raised when an in-flight poll is abandoned by its stage."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Polling cancelled for task {task_id}")


class TaskFailed(WizardError):
    """Raised when a task reaches the FAILURE status."""

    def __init__(self, task_id: str, message: str | None = None):
        self.task_id = task_id
        super().__init__(message or f"Task {task_id} failed to complete")


class UnexpectedStatus(WizardError):
    """Raised when a poll ends on a status other than SUCCESS or FAILURE."""

    def __init__(self, task_id: str, status: Any):
        self.task_id = task_id
        self.status = status
        value = getattr(status, "value", status)
        super().__init__(f"Unexpected task status for task {task_id}: {value}")


class ValidationError(WizardError):
    """Raised for local input problems before anything is submitted."""

    pass


class ProfileNotFoundError(WizardError):
    """Raised when the user has no stored profile data."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User not found: {email}")


CLIENT_DATA_MESSAGE = (
    "We couldn't build a document from your resume data ({detail}). "
    "Please check the resume content or keywords and try again."
)


def extract_error_detail(response: httpx.Response) -> str:
    """Return the most specific error text carried by a backend response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or response.reason_phrase or f"HTTP {response.status_code}"
    return _detail_from_payload(data) or f"HTTP {response.status_code}"


def _detail_from_payload(data: Any) -> str:
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, list):
        parts = [_detail_from_payload(item) for item in data]
        return "; ".join(p for p in parts if p)
    if isinstance(data, dict):
        for key in ("detail", "message", "error", "msg"):
            if data.get(key):
                return _detail_from_payload(data[key])
        return ""
    if data is None:
        return ""
    return str(data)


def describe_error(error: WizardError) -> str:
    """Convert a taxonomy value into the message shown at a stage."""
    if isinstance(error, ClientDataError):
        return CLIENT_DATA_MESSAGE.format(detail=error.detail)
    return str(error)
