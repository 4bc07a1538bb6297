"""HTTP client for the stored user profile (basic details and master data)."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from resume_optimizer.models.task import UserDetails
from resume_optimizer.services.backend import BackendClient
from resume_optimizer.services.errors import (
    MalformedResponse,
    ProfileNotFoundError,
    StatusQueryError,
    SubmissionError,
    extract_error_detail,
)

logger = logging.getLogger(__name__)


class ProfileClient(BackendClient):
    """Read and store a user's profile data, keyed by email."""

    def get_details(self, email: str) -> UserDetails:
        """Call GET /userDetails/details."""
        if not email or not email.strip():
            raise ValueError("email is required")

        context = f"Failed to get user details for {email}"
        response = self._request(
            "GET", "/userDetails/details", StatusQueryError, context, params={"email": email}
        )
        data = self._json(response, StatusQueryError, context)
        try:
            return UserDetails.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedResponse(f"{context}: Invalid response format: missing user details") from e

    def get_master_data(self, email: str) -> dict[str, Any]:
        """Call GET /userDetails/Master-data; a 404 means no stored profile."""
        if not email or not email.strip():
            raise ValueError("email is required")

        context = f"Failed to get master data for {email}"
        response = self._send(
            "GET", "/userDetails/Master-data", StatusQueryError, context, params={"email": email}
        )
        if response.status_code == 404:
            raise ProfileNotFoundError(email)
        if response.status_code >= 400:
            raise StatusQueryError(
                f"{context}: HTTP {response.status_code} - {extract_error_detail(response)}"
            )
        data = self._json(response, StatusQueryError, context)
        if not isinstance(data, dict):
            raise MalformedResponse(f"{context}: Invalid response format")
        return data

    def put_master_education(self, email: str, payload: dict[str, Any]) -> bool:
        """Call PUT /userDetails/Master-Edu with education and certifications."""
        if not email or not email.strip():
            raise ValueError("email is required")

        response = self._request(
            "PUT",
            "/userDetails/Master-Edu",
            SubmissionError,
            "Failed to update education and certification data",
            params={"email": email},
            json=payload,
        )
        return response.status_code == 200

    def put_master_data(self, email: str, payload: dict[str, Any]) -> bool:
        """Call PUT /userDetails/Master-data; returns the backend's status flag."""
        if not email or not email.strip():
            raise ValueError("email is required")

        context = "Failed to update master data"
        response = self._request(
            "PUT",
            "/userDetails/Master-data",
            SubmissionError,
            context,
            params={"email": email},
            json=payload,
        )
        data = self._json(response, SubmissionError, context)
        stored = bool(isinstance(data, dict) and data.get("status"))
        logger.info(f"Master data stored for {email}: {stored}")
        return stored
