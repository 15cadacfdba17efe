"""Data models, enums and failure kinds for the relay pipeline."""

from mj_relay.models.errors import (
    ControlNotFound,
    DispatchFailure,
    JobError,
    NavigationFailure,
    PromptExtractionFailure,
    ReplyTimeout,
    ResourceNotFound,
    SessionInitFailure,
    SubmissionFailure,
    TargetReacquisitionFailure,
)
from mj_relay.models.job import (
    Attachment,
    DetectionCriteria,
    DetectionState,
    DispatchResult,
    Job,
    JobResult,
    JobState,
    Message,
    clean_prompt,
)

__all__ = [
    "Attachment",
    "DetectionCriteria",
    "DetectionState",
    "DispatchResult",
    "Job",
    "JobResult",
    "JobState",
    "Message",
    "clean_prompt",
    "JobError",
    "SessionInitFailure",
    "NavigationFailure",
    "PromptExtractionFailure",
    "SubmissionFailure",
    "ReplyTimeout",
    "TargetReacquisitionFailure",
    "ControlNotFound",
    "ResourceNotFound",
    "DispatchFailure",
]
