"""Shared HTTP transport for the resume backend."""

import logging
from typing import Any

import httpx

from resume_optimizer.services.errors import WizardError, extract_error_detail

logger = logging.getLogger(__name__)


class BackendClient:
    """Base class for clients of the resume backend.

    Transport failures and HTTP error statuses are turned into the error class
    chosen by the caller, with the backend's error text normalized once here.
    """

    def __init__(self, base_url: str, timeout: float = 15.0):
        """Initialize client with base URL and timeout."""
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _send(
        self,
        method: str,
        path: str,
        error_cls: type[WizardError],
        context: str,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and return the raw response.

        The caller decides how to handle HTTP error statuses.
        """
        url = self._url(path)
        try:
            with httpx.Client(timeout=timeout or self._timeout) as client:
                return client.request(method, url, **kwargs)
        except httpx.ConnectError as e:
            raise error_cls(f"{context}: Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise error_cls(f"{context}: Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise error_cls(
                f"{context}: No response received. Please check your network connection."
            ) from e

    def _request(
        self,
        method: str,
        path: str,
        error_cls: type[WizardError],
        context: str,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request; HTTP error statuses raise ``error_cls``."""
        response = self._send(method, path, error_cls, context, timeout, **kwargs)
        if response.status_code >= 400:
            detail = extract_error_detail(response)
            logger.warning(f"{context}: HTTP {response.status_code} - {detail}")
            raise error_cls(f"{context}: HTTP {response.status_code} - {detail}")
        return response

    def _json(
        self,
        response: httpx.Response,
        error_cls: type[WizardError],
        context: str,
    ) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"{context}: Invalid response: {e}") from e
