"""Models package."""

from resume_optimizer.models.profile import (
    Certification,
    Education,
    EducationCertificationData,
    ProfileForm,
    ProfilePrefill,
)
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
    GenerateDocumentResponse,
    JobDescriptionRequest,
    JobDescriptionResponse,
    MatchScore,
    ResumeFile,
    ResumeReference,
    TaskStatus,
    UserDetails,
)

__all__ = [
    "BasicDetails",
    "Certification",
    "Education",
    "EducationCertificationData",
    "FinalBuildRequest",
    "FlowVariant",
    "GenerateDocumentRequest",
    "GenerateDocumentResponse",
    "JobDescriptionRequest",
    "JobDescriptionResponse",
    "MatchScore",
    "ProfileForm",
    "ProfilePrefill",
    "ResumeFile",
    "ResumeReference",
    "ResumeSource",
    "Session",
    "Stage",
    "TaskStatus",
    "UserDetails",
    "WizardSnapshot",
    "WorkflowState",
]
