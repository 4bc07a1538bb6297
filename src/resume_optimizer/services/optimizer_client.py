"""HTTP client for the optimizer RPCs: job description, final build, document."""

import logging

from pydantic import ValidationError as PydanticValidationError

from resume_optimizer.models.task import (
    FinalBuildRequest,
    GenerateDocumentRequest,
    GenerateDocumentResponse,
    JobDescriptionRequest,
    JobDescriptionResponse,
)
from resume_optimizer.services.backend import BackendClient
from resume_optimizer.services.errors import MalformedResponse, SubmissionError
from resume_optimizer.services.task_client import TaskClient

logger = logging.getLogger(__name__)


class OptimizerClient(BackendClient):
    """Submit optimizer requests that depend on a previously stored resume."""

    def __init__(self, base_url: str, timeout: float = 15.0, task_client: TaskClient | None = None):
        super().__init__(base_url, timeout)
        self._tasks = task_client or TaskClient(base_url, timeout)

    def submit_job_description(self, request: JobDescriptionRequest) -> JobDescriptionResponse:
        """Call POST /job_desc; the response carries a match-scoring task id."""
        if request is None:
            raise ValueError("request is required")

        logger.info(
            "Submitting job description "
            f"(task_id={request.task_id}, email={request.email}, "
            f"length={len(request.job_description)})"
        )
        context = "Failed to submit job description"
        response = self._request(
            "POST",
            "/job_desc",
            SubmissionError,
            context,
            json=request.model_dump(exclude_none=True),
        )
        data = self._json(response, SubmissionError, context)
        try:
            result = JobDescriptionResponse.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedResponse(
                f"{context}: Invalid response format: missing match_score_task_id"
            ) from e
        logger.info(f"Job description accepted, match_score_task_id={result.match_score_task_id}")
        return result

    def submit_final_build(self, request: FinalBuildRequest) -> str:
        """Call POST /final_builder and return the build task id."""
        if request is None:
            raise ValueError("request is required")

        logger.info(
            f"Submitting final build with {len(request.missing_keywords)} keywords "
            f"(task_id={request.task_id}, email={request.email})"
        )
        task_id = self._tasks.submit("/final_builder", request.model_dump(exclude_none=True))
        logger.info(f"Final build accepted, task_id={task_id}")
        return task_id

    def generate_document(self, request: GenerateDocumentRequest) -> str:
        """Call POST /generate-resume and return the download URL."""
        if request is None:
            raise ValueError("request is required")

        context = "Failed to generate resume PDF"
        response = self._request(
            "POST",
            "/generate-resume",
            SubmissionError,
            context,
            timeout=self._timeout * 2,
            json=request.model_dump(mode="json"),
        )
        data = self._json(response, SubmissionError, context)
        try:
            result = GenerateDocumentResponse.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedResponse(
                f"{context}: Invalid response format: missing download URL"
            ) from e
        logger.info(f"Resume PDF generated: {result.pdf.download_url}")
        return result.pdf.download_url
