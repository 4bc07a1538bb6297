"""One-time profile bootstrap for users without stored master data."""

import logging
import threading
from typing import Any

from resume_optimizer.models.profile import ProfileForm, ProfilePrefill
from resume_optimizer.models.state import Session
from resume_optimizer.services.errors import (
    ProfileNotFoundError,
    ValidationError,
    WizardError,
)
from resume_optimizer.services.poller import Poller
from resume_optimizer.services.profile_client import ProfileClient
from resume_optimizer.services.task_client import TaskClient

logger = logging.getLogger(__name__)

CHECK_FAILED_MESSAGE = "Error checking user data. Please try again."
SUBMIT_FAILED_MESSAGE = "An error occurred during submission. Please try again."


class ProfileBootstrap:
    """Checks for stored master data and collects it through a blocking form.

    The form state kept here is independent of the wizard's workflow state.
    ``has_profile`` becomes True after a successful check or submit.
    """

    def __init__(
        self,
        profile_client: ProfileClient,
        task_client: TaskClient,
        poller: Poller,
        session: Session,
    ):
        if profile_client is None:
            raise ValueError("profile_client is required")
        if task_client is None:
            raise ValueError("task_client is required")
        if poller is None:
            raise ValueError("poller is required")
        if session is None:
            raise ValueError("session is required")

        self._profiles = profile_client
        self._tasks = task_client
        self._poller = poller
        self._session = session

        self._lock = threading.Lock()
        self._form_open = False
        self._error: str | None = None
        self._prefill = ProfilePrefill(email=session.email or "")
        self._has_profile = False

    @property
    def form_open(self) -> bool:
        return self._form_open

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def prefill(self) -> ProfilePrefill:
        return self._prefill

    @property
    def has_profile(self) -> bool:
        return self._has_profile

    def check(self) -> bool:
        """Look up stored master data; open the form when there is none.

        Returns True when a stored profile exists.
        """
        with self._lock:
            self._error = None
            if not self._session.is_authenticated:
                self._error = CHECK_FAILED_MESSAGE
                logger.warning("Profile check skipped: no session email")
                return False

            email = self._session.email
            try:
                self._profiles.get_master_data(email)
            except ProfileNotFoundError:
                logger.info(f"No stored profile for {email}, opening profile form")
                self._prefill = self._load_prefill(email)
                self._form_open = True
                return False
            except WizardError as e:
                logger.warning(f"Profile check failed for {email}: {e}")
                self._error = CHECK_FAILED_MESSAGE
                return False

            self._form_open = False
            self._has_profile = True
            return True

    def submit(self, form: ProfileForm) -> bool:
        """Store education, parse the resume and store the resulting master data."""
        if form is None:
            raise ValueError("form is required")

        with self._lock:
            self._error = None
            try:
                self._validate(form)
                self._store(form)
            except ValidationError as e:
                self._error = str(e)
                return False
            except WizardError as e:
                logger.warning(f"Profile submission failed for {form.email}: {e}")
                self._error = SUBMIT_FAILED_MESSAGE
                return False

            self._form_open = False
            self._has_profile = True
            logger.info(f"Profile stored for {form.email}")
            return True

    def _validate(self, form: ProfileForm) -> None:
        if not form.educations:
            raise ValidationError("Please add at least one education entry")
        if form.resume is None:
            raise ValidationError("Please select a resume file")

    def _store(self, form: ProfileForm) -> None:
        self._profiles.put_master_education(form.email, form.education_payload())

        task_id = self._tasks.submit_resume(form.resume)
        result = self._poller.poll_result(task_id)
        if not _has_work_experiences(result):
            raise ValidationError("Failed to process resume")

        if not self._profiles.put_master_data(form.email, result):
            raise ValidationError("Failed to update user data")

    def _load_prefill(self, email: str) -> ProfilePrefill:
        try:
            details = self._profiles.get_details(email)
        except WizardError as e:
            logger.warning(f"Could not prefill profile form for {email}: {e}")
            return ProfilePrefill(email=email)
        return ProfilePrefill(
            name=details.name,
            email=details.email or email,
            phone=details.phone_number,
        )


def _has_work_experiences(result: Any) -> bool:
    return isinstance(result, dict) and bool(result.get("work_experiences"))
