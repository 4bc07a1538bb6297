"""Request and response models for the wizard REST API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from resume_optimizer.models.profile import ProfilePrefill
from resume_optimizer.models.state import FlowVariant


class FlowRequest(BaseModel):
    """Request to switch the flow variant."""

    model_config = ConfigDict(extra="forbid")

    flow: FlowVariant


class KeywordRequest(BaseModel):
    """A single keyword to toggle or add."""

    model_config = ConfigDict(extra="forbid")

    keyword: str

    @field_validator("keyword")
    @classmethod
    def keyword_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("keyword is required")
        return v


class KeywordToggleResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    selected: bool


class GateRequest(BaseModel):
    """Choice made at the upgrade gate."""

    model_config = ConfigDict(extra="forbid")

    choice: Literal["upgrade", "watermark"]


class ProfileStatusResponse(BaseModel):
    """State of the profile bootstrap form."""

    model_config = ConfigDict(frozen=True)

    has_profile: bool
    form_open: bool
    error: str | None = None
    prefill: ProfilePrefill


class ErrorResponse(BaseModel):
    """Error response."""

    model_config = ConfigDict(frozen=True)

    detail: str


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(frozen=True)

    status: str
