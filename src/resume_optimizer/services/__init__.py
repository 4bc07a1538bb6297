# Services package

from resume_optimizer.services.backend import BackendClient
from resume_optimizer.services.errors import (
    ClientDataError,
    MalformedResponse,
    PollCancelled,
    PollTimeout,
    ProfileNotFoundError,
    ResultFetchError,
    StatusQueryError,
    SubmissionError,
    TaskFailed,
    UnexpectedStatus,
    ValidationError,
    WizardError,
    describe_error,
    extract_error_detail,
)
from resume_optimizer.services.log_service import WizardLogFileHandler, configure_logging
from resume_optimizer.services.optimizer_client import OptimizerClient
from resume_optimizer.services.poller import Poller
from resume_optimizer.services.profile_bootstrap import ProfileBootstrap
from resume_optimizer.services.profile_client import ProfileClient
from resume_optimizer.services.task_client import TaskClient
from resume_optimizer.services.workflow_engine import (
    StageTransitionError,
    WorkflowEngine,
    parse_keywords,
)

__all__ = [
    "BackendClient",
    "ClientDataError",
    "MalformedResponse",
    "OptimizerClient",
    "PollCancelled",
    "PollTimeout",
    "Poller",
    "ProfileBootstrap",
    "ProfileClient",
    "ProfileNotFoundError",
    "ResultFetchError",
    "StageTransitionError",
    "StatusQueryError",
    "SubmissionError",
    "TaskClient",
    "TaskFailed",
    "UnexpectedStatus",
    "ValidationError",
    "WizardError",
    "WizardLogFileHandler",
    "WorkflowEngine",
    "configure_logging",
    "describe_error",
    "extract_error_detail",
    "parse_keywords",
]
