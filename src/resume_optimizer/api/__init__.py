# API package

from resume_optimizer.api.app import WizardAPI
from resume_optimizer.api.models import (
    ErrorResponse,
    FlowRequest,
    GateRequest,
    HealthResponse,
    KeywordRequest,
    KeywordToggleResponse,
    ProfileStatusResponse,
)

__all__ = [
    "ErrorResponse",
    "FlowRequest",
    "GateRequest",
    "HealthResponse",
    "KeywordRequest",
    "KeywordToggleResponse",
    "ProfileStatusResponse",
    "WizardAPI",
]
