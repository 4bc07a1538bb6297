"""HTTP client for submitting backend tasks and tracking their lifecycle."""

import logging
from typing import Any

from resume_optimizer.models.task import ResumeFile, TaskStatus
from resume_optimizer.services.backend import BackendClient
from resume_optimizer.services.errors import (
    ClientDataError,
    MalformedResponse,
    ResultFetchError,
    StatusQueryError,
    SubmissionError,
    extract_error_detail,
)

logger = logging.getLogger(__name__)


class TaskClient(BackendClient):
    """Submit work, query task status, fetch task results."""

    def submit_resume(self, resume: ResumeFile) -> str:
        """Call POST /upload_file/ and return the new task id."""
        if resume is None:
            raise ValueError("resume is required")

        logger.info(
            f"Uploading resume {resume.filename} ({len(resume.content)} bytes)"
        )
        files = {"resume": (resume.filename, resume.content, resume.content_type)}
        context = "Failed to upload resume"
        response = self._request("POST", "/upload_file/", SubmissionError, context, files=files)
        task_id = self._task_id(self._json(response, SubmissionError, context), "task_id", context)
        logger.info(f"Resume upload accepted, task_id={task_id}")
        return task_id

    def submit(self, path: str, payload: dict, id_field: str = "task_id") -> str:
        """POST a JSON payload and return the identifier it produced."""
        if not path or not path.strip():
            raise ValueError("path is required")

        context = f"Failed to submit request to {path}"
        response = self._request("POST", path, SubmissionError, context, json=payload)
        return self._task_id(self._json(response, SubmissionError, context), id_field, context)

    def query_status(self, task_id: str) -> TaskStatus:
        """Call GET /check-status for a task."""
        if not task_id or not task_id.strip():
            raise ValueError("task_id is required")

        context = f"Failed to check status for task {task_id}"
        response = self._request(
            "GET", "/check-status", StatusQueryError, context, params={"task_id": task_id}
        )
        data = self._json(response, StatusQueryError, context)
        if isinstance(data, dict):
            data = data.get("status")
        if data is None:
            raise MalformedResponse(f"{context}: missing status data")
        if not isinstance(data, str):
            raise MalformedResponse(f"{context}: unrecognized status {data!r}")

        try:
            status = TaskStatus(data)
        except ValueError as e:
            raise MalformedResponse(f"{context}: unrecognized status {data!r}") from e
        logger.debug(f"Task {task_id} status: {status.value}")
        return status

    def fetch_result(self, task_id: str) -> Any:
        """Call GET /get_result for a task that reported SUCCESS."""
        if not task_id or not task_id.strip():
            raise ValueError("task_id is required")

        context = f"Failed to get result for task {task_id}"
        response = self._send(
            "GET", "/get_result", ResultFetchError, context, params={"task_id": task_id}
        )

        if 400 <= response.status_code < 500:
            detail = extract_error_detail(response)
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise ClientDataError(task_id, response.status_code, detail, payload)
        if response.status_code >= 500:
            raise ResultFetchError(
                f"{context}: HTTP {response.status_code} - {extract_error_detail(response)}",
                status_code=response.status_code,
            )

        data = self._json(response, ResultFetchError, context)
        if not data:
            raise ResultFetchError(f"{context}: missing result data")
        logger.info(f"Received result for task {task_id}")
        return data

    def _task_id(self, data: Any, field: str, context: str) -> str:
        value = data.get(field) if isinstance(data, dict) else None
        if not value or not str(value).strip():
            raise MalformedResponse(f"{context}: Invalid response format: missing {field}")
        return str(value)
