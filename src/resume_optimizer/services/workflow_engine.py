"""Workflow engine for the resume optimizer wizard."""

import logging
import threading
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from resume_optimizer.models.state import (
    FlowVariant,
    ResumeSource,
    Session,
    Stage,
    WizardSnapshot,
    WorkflowState,
)
from resume_optimizer.models.task import (
    BasicDetails,
    FinalBuildRequest,
    GenerateDocumentRequest,
    JobDescriptionRequest,
    MatchScore,
    ResumeFile,
    TaskStatus,
)
from resume_optimizer.services.errors import (
    MalformedResponse,
    PollCancelled,
    TaskFailed,
    ValidationError,
    WizardError,
    describe_error,
)
from resume_optimizer.services.optimizer_client import OptimizerClient
from resume_optimizer.services.poller import Poller
from resume_optimizer.services.profile_client import ProfileClient
from resume_optimizer.services.task_client import TaskClient

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

# Backward moves per flow. The gate is never re-entered on the way back.
PREVIOUS_STAGE: dict[FlowVariant, dict[Stage, Stage]] = {
    FlowVariant.JOB_DESCRIPTION: {
        Stage.KEYWORD_SELECTION: Stage.RESUME_SOURCE,
        Stage.UPGRADE_GATE: Stage.KEYWORD_SELECTION,
        Stage.DOCUMENT: Stage.KEYWORD_SELECTION,
    },
    FlowVariant.DIRECT_KEYWORDS: {
        Stage.UPGRADE_GATE: Stage.RESUME_SOURCE,
        Stage.DOCUMENT: Stage.RESUME_SOURCE,
    },
}

# Fields a new stage-1 submission invalidates.
_RUN_FIELDS: dict[str, Any] = {
    "upload_task_id": None,
    "match_score_task_id": None,
    "build_task_id": None,
    "match_rate": None,
    "expected_rate": None,
    "missing_keywords": [],
    "selected_keywords": [],
    "custom_keywords": [],
    "resume_data": None,
    "upgrade_requested": False,
    "watermarked": False,
    "download_url": None,
}


class StageTransitionError(Exception):
    """Raised when a stage operation is invoked at the wrong position."""

    pass


@dataclass(frozen=True)
class _StageRun:
    token: int
    cancel: threading.Event
    state: WorkflowState


def _fresh_run(**fields: Any) -> dict[str, Any]:
    return {**_RUN_FIELDS, **fields}


def parse_keywords(text: str) -> list[str]:
    """Split comma separated keywords, dropping blanks and repeats."""
    return _ordered_union([part.strip() for part in (text or "").split(",")])


def _ordered_union(*groups: list[str]) -> list[str]:
    seen: list[str] = []
    for group in groups:
        for keyword in group:
            if keyword and keyword not in seen:
                seen.append(keyword)
    return seen


class WorkflowEngine:
    """Sequences wizard stages, submits their tasks and merges the results.

    Stage operations return ``True`` when the stage completed and ``False``
    when it failed; the failure text is then available as ``error`` and the
    stage position is unchanged. Only one stage operation runs at a time.
    ``go_back`` and ``reset`` abandon a running stage: its poll is cancelled
    and anything it returns later is dropped.
    """

    def __init__(
        self,
        task_client: TaskClient,
        optimizer_client: OptimizerClient,
        profile_client: ProfileClient,
        poller: Poller,
        session: Session,
    ):
        if task_client is None:
            raise ValueError("task_client is required")
        if optimizer_client is None:
            raise ValueError("optimizer_client is required")
        if profile_client is None:
            raise ValueError("profile_client is required")
        if poller is None:
            raise ValueError("poller is required")
        if session is None:
            raise ValueError("session is required")

        self._tasks = task_client
        self._optimizer = optimizer_client
        self._profiles = profile_client
        self._poller = poller
        self._session = session

        self._lock = threading.RLock()
        self._state = WorkflowState()
        self._stage = Stage.RESUME_SOURCE
        self._error: str | None = None
        self._loading = False
        self._loading_message: str | None = None
        self._run_token = 0
        self._cancel = threading.Event()

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def flow(self) -> FlowVariant:
        return self._state.flow

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def loading_message(self) -> str | None:
        return self._loading_message

    @property
    def session(self) -> Session:
        return self._session

    def update_session(self, session: Session) -> None:
        """Replace the injected session, e.g. after the profile bootstrap."""
        if session is None:
            raise ValueError("session is required")
        with self._lock:
            self._session = session

    def snapshot(self) -> WizardSnapshot:
        with self._lock:
            return WizardSnapshot(
                stage=self._stage,
                flow=self._state.flow,
                loading=self._loading,
                loading_message=self._loading_message,
                error=self._error,
                is_paid=self._session.is_paid,
                can_go_back=self._stage in PREVIOUS_STAGE[self._state.flow],
                can_switch_flow=self._stage is Stage.RESUME_SOURCE and not self._loading,
                state=self._state,
            )

    # ------------------------------------------------------------------
    # Navigation

    def select_flow(self, flow: FlowVariant) -> bool:
        """Switch flow variant. Only accepted at the first stage."""
        flow = FlowVariant(flow)
        with self._lock:
            if self._stage is not Stage.RESUME_SOURCE or self._loading:
                logger.info(f"Rejected switch to {flow.value} at stage {self._stage.value}")
                return False
            if flow is not self._state.flow:
                self._state = self._state.merge(**_fresh_run(flow=flow))
                self._error = None
                logger.info(f"Flow switched to {flow.value}")
            return True

    def go_back(self) -> bool:
        """Move to the previous stage, abandoning any running stage."""
        with self._lock:
            previous = PREVIOUS_STAGE[self._state.flow].get(self._stage)
            if previous is None:
                return False
            self._abandon_run()
            logger.info(f"Back from stage {self._stage.value} to {previous.value}")
            self._stage = previous
            self._error = None
            return True

    def reset(self) -> None:
        """Start a new run from stage 1 with the default flow."""
        with self._lock:
            self._abandon_run()
            self._state = WorkflowState()
            self._stage = Stage.RESUME_SOURCE
            self._error = None
            logger.info("Wizard reset")

    # ------------------------------------------------------------------
    # Stage 1

    def submit_job_description(
        self,
        job_description: str,
        resume: ResumeFile | None = None,
        use_existing: bool = False,
    ) -> bool:
        """Gather the resume source and submit it with a job description."""
        run = self._begin(
            Stage.RESUME_SOURCE, FlowVariant.JOB_DESCRIPTION, "Processing your request..."
        )
        try:
            if not job_description or not job_description.strip():
                raise ValidationError("Please paste a job description")
            source, upload_task_id = self._resolve_resume(run, resume, use_existing)

            self._progress(run, "Analyzing job description and matching with resume...")
            response = self._optimizer.submit_job_description(
                JobDescriptionRequest(
                    job_description=job_description,
                    **self._reference(source, upload_task_id),
                )
            )
        except WizardError as e:
            return self._fail(run, e)
        except Exception:
            self._release(run)
            raise

        return self._commit(
            run,
            Stage.KEYWORD_SELECTION,
            **_fresh_run(
                resume_source=source,
                upload_task_id=upload_task_id or response.task_id,
                match_score_task_id=response.match_score_task_id,
                job_description=job_description,
            ),
        )

    def submit_direct_keywords(
        self,
        keywords_text: str,
        resume: ResumeFile | None = None,
        use_existing: bool = False,
    ) -> bool:
        """Gather the resume source and submit a final build for given keywords."""
        run = self._begin(
            Stage.RESUME_SOURCE, FlowVariant.DIRECT_KEYWORDS, "Processing your request..."
        )
        try:
            keywords = parse_keywords(keywords_text)
            if not keywords:
                raise ValidationError("Please enter at least one keyword")
            source, upload_task_id = self._resolve_resume(run, resume, use_existing)

            self._progress(run, "Optimizing resume with keywords...")
            build_task_id = self._optimizer.submit_final_build(
                FinalBuildRequest(
                    missing_keywords=keywords,
                    **self._reference(source, upload_task_id),
                )
            )
        except WizardError as e:
            return self._fail(run, e)
        except Exception:
            self._release(run)
            raise

        return self._commit(
            run,
            self._stage_after_build(),
            **_fresh_run(
                resume_source=source,
                upload_task_id=upload_task_id,
                build_task_id=build_task_id,
                direct_keywords=keywords_text,
                selected_keywords=keywords,
            ),
        )

    # ------------------------------------------------------------------
    # Stage 2

    def load_match_score(self) -> bool:
        """Poll the match-scoring task and pre-select every missing keyword."""
        run = self._begin(
            Stage.KEYWORD_SELECTION,
            FlowVariant.JOB_DESCRIPTION,
            "Analyzing resume match score...",
        )
        if run.state.match_score_loaded:
            return self._commit(run, None)

        try:
            if not run.state.match_score_task_id:
                raise ValidationError(
                    "Missing match score task ID. Please go back and try again."
                )
            payload = self._poller.poll_result(
                run.state.match_score_task_id, cancel=run.cancel
            )
            score = _parse_result(MatchScore, payload, "match score")
        except WizardError as e:
            return self._fail(run, e)
        except Exception:
            self._release(run)
            raise

        return self._commit(
            run,
            None,
            match_rate=score.match_rate,
            expected_rate=score.expected_rate,
            missing_keywords=list(score.missing_keywords),
            selected_keywords=list(score.missing_keywords),
            custom_keywords=[],
        )

    def toggle_keyword(self, keyword: str) -> bool:
        """Flip selection of a known keyword. Returns the new selection state."""
        with self._lock:
            self._require_idle(Stage.KEYWORD_SELECTION)
            state = self._state
            if keyword not in state.missing_keywords and keyword not in state.custom_keywords:
                raise ValueError(f"Unknown keyword: {keyword}")

            if keyword in state.selected_keywords:
                selected = [k for k in state.selected_keywords if k != keyword]
            else:
                selected = [*state.selected_keywords, keyword]
            self._state = state.merge(selected_keywords=selected)
            return keyword in selected

    def add_custom_keyword(self, keyword: str) -> bool:
        """Add a free-form keyword, selected. Returns False if nothing was added."""
        with self._lock:
            self._require_idle(Stage.KEYWORD_SELECTION)
            keyword = (keyword or "").strip()
            if not keyword:
                return False

            state = self._state
            selected = _ordered_union(state.selected_keywords, [keyword])
            if keyword in state.missing_keywords or keyword in state.custom_keywords:
                self._state = state.merge(selected_keywords=selected)
                return False

            self._state = state.merge(
                custom_keywords=[*state.custom_keywords, keyword],
                selected_keywords=selected,
            )
            return True

    def submit_keyword_selection(self) -> bool:
        """Submit the final build for the selected and custom keywords."""
        run = self._begin(
            Stage.KEYWORD_SELECTION,
            FlowVariant.JOB_DESCRIPTION,
            "Preparing to optimize your resume...",
        )
        state = run.state
        try:
            if not state.selected_keywords:
                raise ValidationError("Please select at least one keyword to continue.")
            keywords = _ordered_union(state.selected_keywords, state.custom_keywords)
            build_task_id = self._optimizer.submit_final_build(
                FinalBuildRequest(
                    missing_keywords=keywords,
                    **self._reference(state.resume_source, state.upload_task_id),
                )
            )
        except WizardError as e:
            return self._fail(run, e)
        except Exception:
            self._release(run)
            raise

        return self._commit(
            run,
            self._stage_after_build(),
            build_task_id=build_task_id,
            resume_data=None,
            upgrade_requested=False,
            watermarked=False,
            download_url=None,
        )

    # ------------------------------------------------------------------
    # Stage 2.5

    def choose_upgrade(self) -> bool:
        """Leave the gate asking for the premium tier.

        No payment is verified here; the session's tier flag is not changed.
        """
        return self._leave_gate(upgrade_requested=True, watermarked=False)

    def continue_with_watermark(self) -> bool:
        """Leave the gate accepting a watermarked document."""
        return self._leave_gate(upgrade_requested=False, watermarked=True)

    def _leave_gate(self, **fields: Any) -> bool:
        run = self._begin(Stage.UPGRADE_GATE, None, None)
        logger.info(f"Upgrade gate passed: {fields}")
        return self._commit(run, Stage.DOCUMENT, **fields)

    # ------------------------------------------------------------------
    # Stage 3

    def build_document(self) -> bool:
        """Collect the built resume and profile details and generate the PDF."""
        run = self._begin(Stage.DOCUMENT, None, "Retrieving optimized resume data...")
        state = run.state
        if state.download_url:
            return self._commit(run, None)

        try:
            if not state.build_task_id:
                raise ValidationError("Missing task ID for resume optimization")
            if not self._session.is_authenticated:
                raise ValidationError("User email not found. Please log in again.")

            resume_data = state.resume_data
            if resume_data is None:
                resume_data = self._poller.poll_result(state.build_task_id, cancel=run.cancel)
                if not self._merge(run, resume_data=resume_data):
                    return False

            self._progress(run, "Fetching your profile information...")
            details = self._profiles.get_details(self._session.email)

            self._progress(run, "Generating final PDF document...")
            download_url = self._optimizer.generate_document(
                GenerateDocumentRequest(
                    basic_details=BasicDetails.from_user_details(details),
                    resume_data=resume_data,
                )
            )
        except WizardError as e:
            return self._fail(run, e)
        except Exception:
            self._release(run)
            raise

        return self._commit(run, None, download_url=download_url)

    # ------------------------------------------------------------------
    # Internals

    def _resolve_resume(
        self,
        run: _StageRun,
        resume: ResumeFile | None,
        use_existing: bool,
    ) -> tuple[ResumeSource, str | None]:
        """Return the resume source and, for a fresh upload, its task id."""
        if use_existing and resume is not None:
            raise ValidationError("Choose either a new resume file or your existing resume")

        if use_existing:
            if not self._session.is_authenticated:
                raise ValidationError("User email not found. Please log in again.")
            if not self._session.has_existing_resume:
                raise ValidationError("No stored resume found. Please upload a resume file.")
            return ResumeSource.EXISTING, None

        if resume is None:
            raise ValidationError("Please select a resume file or use an existing resume")

        self._progress(run, "Uploading your resume...")
        task_id = self._tasks.submit_resume(resume)

        self._progress(run, "Processing your resume...")
        status = self._poller.poll_status(task_id, cancel=run.cancel)
        if status is not TaskStatus.SUCCESS:
            raise TaskFailed(task_id, "Resume processing failed")
        if run.cancel.is_set():
            raise PollCancelled(task_id)
        return ResumeSource.UPLOAD, task_id

    def _reference(
        self, source: ResumeSource | None, upload_task_id: str | None
    ) -> dict[str, str]:
        """Resume reference for a dependent request: task id XOR email."""
        if source is ResumeSource.UPLOAD and upload_task_id:
            return {"task_id": upload_task_id}
        if source is ResumeSource.EXISTING:
            if not self._session.is_authenticated:
                raise ValidationError("User email not found. Please log in again.")
            return {"email": self._session.email}
        raise ValidationError(
            "Missing required data for optimization. Please go back and try again."
        )

    def _stage_after_build(self) -> Stage:
        return Stage.DOCUMENT if self._session.is_paid else Stage.UPGRADE_GATE

    def _require_idle(self, stage: Stage) -> None:
        if self._stage is not stage:
            raise StageTransitionError(
                f"Operation requires stage {stage.value}, wizard is at stage {self._stage.value}"
            )
        if self._loading:
            raise StageTransitionError("Another stage operation is in progress")

    def _begin(
        self,
        stage: Stage,
        flow: FlowVariant | None,
        message: str | None,
    ) -> _StageRun:
        with self._lock:
            self._require_idle(stage)
            if flow is not None and self._state.flow is not flow:
                raise StageTransitionError(
                    f"Operation requires the {flow.value} flow, wizard is in {self._state.flow.value}"
                )
            self._loading = True
            self._loading_message = message
            self._error = None
            return _StageRun(token=self._run_token, cancel=self._cancel, state=self._state)

    def _progress(self, run: _StageRun, message: str) -> None:
        with self._lock:
            if run.token == self._run_token:
                self._loading_message = message

    def _merge(self, run: _StageRun, **fields: Any) -> bool:
        with self._lock:
            if run.token != self._run_token:
                logger.info(f"Discarding result of an abandoned stage: {sorted(fields)}")
                return False
            self._state = self._state.merge(**fields)
            return True

    def _commit(self, run: _StageRun, next_stage: Stage | None, **fields: Any) -> bool:
        with self._lock:
            if not self._merge(run, **fields):
                return False
            if next_stage is not None:
                logger.info(f"Stage {self._stage.value} complete, advancing to {next_stage.value}")
                self._stage = next_stage
            self._loading = False
            self._loading_message = None
            return True

    def _fail(self, run: _StageRun, error: WizardError) -> bool:
        with self._lock:
            if run.token != self._run_token:
                logger.info(f"Ignoring failure of an abandoned stage: {error}")
                return False
            self._loading = False
            self._loading_message = None
            self._error = describe_error(error)
            logger.warning(f"Stage {self._stage.value} failed: {error}")
            return False

    def _release(self, run: _StageRun) -> None:
        """Leave the loading state after an unexpected exception; the caller re-raises."""
        with self._lock:
            logger.exception(f"Stage {self._stage.value} raised an unexpected error")
            if run.token == self._run_token:
                self._loading = False
                self._loading_message = None
                self._error = UNEXPECTED_ERROR_MESSAGE

    def _abandon_run(self) -> None:
        self._cancel.set()
        self._cancel = threading.Event()
        self._run_token += 1
        self._loading = False
        self._loading_message = None


def _parse_result(model: type[BaseModel], payload: Any, what: str) -> Any:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise MalformedResponse(f"Invalid {what} result: {e.error_count()} invalid field(s)") from e
