"""FastAPI REST API driving one resume optimizer wizard."""

import logging

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resume_optimizer.api.models import (
    ErrorResponse,
    FlowRequest,
    GateRequest,
    HealthResponse,
    KeywordRequest,
    KeywordToggleResponse,
    ProfileStatusResponse,
)
from resume_optimizer.models.profile import Certification, Education, ProfileForm
from resume_optimizer.models.state import WizardSnapshot
from resume_optimizer.models.task import ResumeFile
from resume_optimizer.services.profile_bootstrap import ProfileBootstrap
from resume_optimizer.services.workflow_engine import StageTransitionError, WorkflowEngine

logger = logging.getLogger(__name__)

_EDUCATIONS = TypeAdapter(list[Education])
_CERTIFICATIONS = TypeAdapter(list[Certification])

_MISUSE = {409: {"model": ErrorResponse}}


def _resume_file(upload: UploadFile | None) -> ResumeFile | None:
    if upload is None:
        return None
    try:
        return ResumeFile(
            filename=upload.filename or "",
            content=upload.file.read(),
            content_type=upload.content_type or "application/pdf",
        )
    except PydanticValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid resume file: {e}")


class WizardAPI:
    """REST API for the resume optimizer wizard."""

    def __init__(self, engine: WorkflowEngine, bootstrap: ProfileBootstrap):
        """Initialize API with dependencies."""
        if engine is None:
            raise ValueError("engine is required")
        if bootstrap is None:
            raise ValueError("bootstrap is required")

        self._engine = engine
        self._bootstrap = bootstrap

    def _run(self, operation, *args) -> WizardSnapshot:
        """Run a stage operation; failures are reported in the snapshot."""
        try:
            operation(*args)
        except StageTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return self._engine.snapshot()

    def _profile_status(self) -> ProfileStatusResponse:
        return ProfileStatusResponse(
            has_profile=self._bootstrap.has_profile,
            form_open=self._bootstrap.form_open,
            error=self._bootstrap.error,
            prefill=self._bootstrap.prefill,
        )

    def _profile_stored(self) -> None:
        session = self._engine.session.model_copy(update={"has_existing_resume": True})
        self._engine.update_session(session)

    def create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title="Resume Optimizer Wizard API",
            description="Step-by-step resume optimization against a task backend",
            version="1.0.0",
        )

        @app.get("/health", response_model=HealthResponse)
        def health_check() -> HealthResponse:
            """Health check endpoint."""
            return HealthResponse(status="ok")

        @app.get("/wizard", response_model=WizardSnapshot)
        def get_wizard() -> WizardSnapshot:
            """Get the current wizard snapshot."""
            return self._engine.snapshot()

        @app.post("/wizard/flow", response_model=WizardSnapshot, responses=_MISUSE)
        def select_flow(request: FlowRequest) -> WizardSnapshot:
            """Switch between the job description and direct keyword flows."""
            if not self._engine.select_flow(request.flow):
                raise HTTPException(
                    status_code=409, detail="Flow can only be changed at the first step"
                )
            return self._engine.snapshot()

        @app.post("/wizard/job-description", response_model=WizardSnapshot, responses=_MISUSE)
        def submit_job_description(
            job_description: str = Form(...),
            use_existing: bool = Form(False),
            resume: UploadFile | None = File(None),
        ) -> WizardSnapshot:
            """Submit the resume source together with a job description."""
            return self._run(
                self._engine.submit_job_description,
                job_description,
                _resume_file(resume),
                use_existing,
            )

        @app.post("/wizard/direct-keywords", response_model=WizardSnapshot, responses=_MISUSE)
        def submit_direct_keywords(
            keywords: str = Form(...),
            use_existing: bool = Form(False),
            resume: UploadFile | None = File(None),
        ) -> WizardSnapshot:
            """Submit the resume source together with comma separated keywords."""
            return self._run(
                self._engine.submit_direct_keywords,
                keywords,
                _resume_file(resume),
                use_existing,
            )

        @app.post("/wizard/match-score", response_model=WizardSnapshot, responses=_MISUSE)
        def load_match_score() -> WizardSnapshot:
            """Wait for the match score and list the missing keywords."""
            return self._run(self._engine.load_match_score)

        @app.post(
            "/wizard/keywords/toggle",
            response_model=KeywordToggleResponse,
            responses={**_MISUSE, 404: {"model": ErrorResponse}},
        )
        def toggle_keyword(request: KeywordRequest) -> KeywordToggleResponse:
            """Select or deselect a keyword."""
            try:
                selected = self._engine.toggle_keyword(request.keyword)
            except StageTransitionError as e:
                raise HTTPException(status_code=409, detail=str(e))
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return KeywordToggleResponse(keyword=request.keyword, selected=selected)

        @app.post("/wizard/keywords/custom", response_model=WizardSnapshot, responses=_MISUSE)
        def add_custom_keyword(request: KeywordRequest) -> WizardSnapshot:
            """Add a custom keyword, selected."""
            return self._run(self._engine.add_custom_keyword, request.keyword)

        @app.post("/wizard/build", response_model=WizardSnapshot, responses=_MISUSE)
        def submit_keyword_selection() -> WizardSnapshot:
            """Submit the selected keywords for the final build."""
            return self._run(self._engine.submit_keyword_selection)

        @app.post("/wizard/gate", response_model=WizardSnapshot, responses=_MISUSE)
        def pass_gate(request: GateRequest) -> WizardSnapshot:
            """Choose between the premium tier and a watermarked document."""
            if request.choice == "upgrade":
                return self._run(self._engine.choose_upgrade)
            return self._run(self._engine.continue_with_watermark)

        @app.post("/wizard/document", response_model=WizardSnapshot, responses=_MISUSE)
        def build_document() -> WizardSnapshot:
            """Generate the final document."""
            return self._run(self._engine.build_document)

        @app.post("/wizard/back", response_model=WizardSnapshot, responses=_MISUSE)
        def go_back() -> WizardSnapshot:
            """Return to the previous step."""
            if not self._engine.go_back():
                raise HTTPException(status_code=409, detail="No previous step")
            return self._engine.snapshot()

        @app.post("/wizard/reset", response_model=WizardSnapshot)
        def reset() -> WizardSnapshot:
            """Discard the current run and start over."""
            self._engine.reset()
            return self._engine.snapshot()

        @app.get("/profile", response_model=ProfileStatusResponse)
        def check_profile() -> ProfileStatusResponse:
            """Check for stored profile data, opening the form when missing."""
            if self._bootstrap.check():
                self._profile_stored()
            return self._profile_status()

        @app.post(
            "/profile",
            response_model=ProfileStatusResponse,
            responses={422: {"model": ErrorResponse}},
        )
        def submit_profile(
            name: str = Form(...),
            email: str = Form(...),
            phone: str = Form(...),
            link: str | None = Form(None),
            educations: str = Form("[]"),
            certifications: str = Form("[]"),
            resume: UploadFile | None = File(None),
        ) -> ProfileStatusResponse:
            """Submit the profile form."""
            try:
                form = ProfileForm(
                    name=name,
                    email=email,
                    phone=phone,
                    link=link or None,
                    educations=_EDUCATIONS.validate_json(educations),
                    certifications=_CERTIFICATIONS.validate_json(certifications),
                    resume=_resume_file(resume),
                )
            except PydanticValidationError as e:
                raise HTTPException(status_code=422, detail=f"Invalid profile form: {e}")

            if self._bootstrap.submit(form):
                self._profile_stored()
            return self._profile_status()

        return app
