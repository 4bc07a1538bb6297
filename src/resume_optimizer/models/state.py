"""State models for the optimizer wizard."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class FlowVariant(str, Enum):
    """Wizard flow variant, selectable at the first stage only."""

    JOB_DESCRIPTION = "job-description"
    DIRECT_KEYWORDS = "direct-keywords"


class ResumeSource(str, Enum):
    """Where the resume for the current run comes from."""

    UPLOAD = "upload"
    EXISTING = "existing"


class Stage(str, Enum):
    """Ordered wizard positions. The upgrade gate only exists for unpaid users."""

    RESUME_SOURCE = "1"
    KEYWORD_SELECTION = "2"
    UPGRADE_GATE = "2.5"
    DOCUMENT = "3"


class Session(BaseModel):
    """Authenticated identity injected into the wizard."""

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    is_paid: bool = False
    has_existing_resume: bool = False

    @field_validator("email")
    @classmethod
    def blank_email_as_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_authenticated(self) -> bool:
        return self.email is not None


class WorkflowState(BaseModel):
    """Data accumulated across wizard stages.

    Snapshots are immutable; ``merge`` returns a new snapshot where the given
    fields replace the old values and every other field is carried over.
    """

    model_config = ConfigDict(frozen=True)

    flow: FlowVariant = FlowVariant.JOB_DESCRIPTION
    resume_source: ResumeSource | None = None

    upload_task_id: str | None = None
    match_score_task_id: str | None = None
    build_task_id: str | None = None

    job_description: str = ""
    direct_keywords: str = ""

    match_rate: float | None = None
    expected_rate: float | None = None
    missing_keywords: list[str] = []
    selected_keywords: list[str] = []
    custom_keywords: list[str] = []

    resume_data: Any = None
    upgrade_requested: bool = False
    watermarked: bool = False
    download_url: str | None = None

    def merge(self, **fields: Any) -> "WorkflowState":
        """Return a copy with ``fields`` applied on top of this snapshot."""
        unknown = set(fields) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown state fields: {', '.join(sorted(unknown))}")
        return self.model_validate({**self.model_dump(), **fields})

    @property
    def match_score_loaded(self) -> bool:
        return self.match_rate is not None


class WizardSnapshot(BaseModel):
    """Read-only view of the wizard for callers outside the engine."""

    model_config = ConfigDict(frozen=True)

    stage: Stage
    flow: FlowVariant
    loading: bool
    loading_message: str | None = None
    error: str | None = None
    is_paid: bool
    can_go_back: bool
    can_switch_flow: bool
    state: WorkflowState
