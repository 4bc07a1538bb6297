"""Profile models used by the one-time profile bootstrap."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_optimizer.models.task import ResumeFile


class Education(BaseModel):
    """One education entry of the profile form."""

    model_config = ConfigDict(frozen=True)

    institution: str
    location: str
    degree: str
    start_date: str = Field(serialization_alias="startDate")
    end_date: str = Field(default="", serialization_alias="endDate")


class Certification(BaseModel):
    """One certification entry, serialized with the backend's field names."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(serialization_alias="Title")
    description: str = Field(default="", serialization_alias="Desc")


class EducationCertificationData(BaseModel):
    """Body of PUT /userDetails/Master-Edu."""

    model_config = ConfigDict(frozen=True)

    education: list[Education] = Field(serialization_alias="Education")
    certifications: list[Certification] = Field(
        default=[], serialization_alias="Certifications"
    )


class ProfileForm(BaseModel):
    """Data collected by the blocking profile form."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str
    link: str | None = None
    educations: list[Education] = []
    certifications: list[Certification] = []
    resume: ResumeFile | None = None

    @field_validator("name", "email", "phone")
    @classmethod
    def required_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("field is required")
        return v.strip()

    def education_payload(self) -> dict[str, Any]:
        data = EducationCertificationData(
            education=list(self.educations),
            certifications=list(self.certifications),
        )
        return data.model_dump(by_alias=True)


class ProfilePrefill(BaseModel):
    """Values used to prefill the profile form."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    link: str = ""
