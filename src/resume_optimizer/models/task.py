"""Task lifecycle and backend request/response models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class TaskStatus(str, Enum):
    """Lifecycle status of a backend task."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class ResumeFile(BaseModel):
    """A resume document selected for upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str = "application/pdf"

    @field_validator("filename")
    @classmethod
    def filename_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("filename is required")
        return v

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("content must not be empty")
        return v


class ResumeReference(BaseModel):
    """Exactly one of an upload task id or an identity email."""

    model_config = ConfigDict(frozen=True)

    task_id: str | None = None
    email: str | None = None

    @model_validator(mode="after")
    def exactly_one_reference(self) -> "ResumeReference":
        if bool(self.task_id) == bool(self.email):
            raise ValueError("exactly one of task_id or email is required")
        return self


class JobDescriptionRequest(ResumeReference):
    """Body of POST /job_desc."""

    job_description: str

    @field_validator("job_description")
    @classmethod
    def job_description_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("job_description is required")
        return v


class JobDescriptionResponse(BaseModel):
    """Response of POST /job_desc."""

    model_config = ConfigDict(frozen=True)

    match_score_task_id: str
    task_id: str | None = None
    email: str | None = None

    @field_validator("match_score_task_id")
    @classmethod
    def match_score_task_id_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("match_score_task_id is required")
        return v


class FinalBuildRequest(ResumeReference):
    """Body of POST /final_builder."""

    missing_keywords: list[str]

    @field_validator("missing_keywords")
    @classmethod
    def keywords_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("missing_keywords must not be empty")
        return v


class MatchScore(BaseModel):
    """Result payload of a match-scoring task."""

    model_config = ConfigDict(frozen=True)

    match_rate: float
    expected_rate: float
    missing_keywords: list[str] = []

    @field_validator("missing_keywords", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v if v is not None else []


class UserDetails(BaseModel):
    """Stored basic profile fields, as returned by /userDetails/details."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    email: str
    phone_number: str = ""

    @field_validator("name", "phone_number", mode="before")
    @classmethod
    def none_as_blank(cls, v: Any) -> Any:
        return v if v is not None else ""


class BasicDetails(BaseModel):
    """Basic details in the shape the document generator expects."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str

    @classmethod
    def from_user_details(cls, details: UserDetails) -> "BasicDetails":
        return cls(name=details.name, email=details.email, phone=details.phone_number)


class GenerateDocumentRequest(BaseModel):
    """Body of POST /generate-resume."""

    model_config = ConfigDict(frozen=True)

    basic_details: BasicDetails
    resume_data: Any

    @field_validator("resume_data")
    @classmethod
    def resume_data_present(cls, v: Any) -> Any:
        if not v:
            raise ValueError("resume_data is required")
        return v


class GeneratedPdf(BaseModel):
    model_config = ConfigDict(frozen=True)

    download_url: str

    @field_validator("download_url")
    @classmethod
    def download_url_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("download_url is required")
        return v


class GenerateDocumentResponse(BaseModel):
    """Response of POST /generate-resume."""

    model_config = ConfigDict(frozen=True)

    pdf: GeneratedPdf
