"""Job failure kinds.

Every JobError is terminal to the job that raised it. ``kind`` is a stable
code for logs; ``context`` carries the values needed to diagnose the failure
(selector, criteria, URL, status).
"""


class JobError(Exception):
    """Base class for all job-terminating failures."""

    kind: str = "JOB_ERROR"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.context: dict[str, object] = context

    def log_fields(self) -> dict[str, object]:
        """Structured fields for ``logger.error(..., extra=...)``."""
        return {"failure_kind": self.kind, **self.context}


class SessionInitFailure(JobError):
    """Browser could not be launched or the token could not be injected."""

    kind = "SESSION_INIT"


class NavigationFailure(JobError):
    """Channel page did not load or the chat UI never became ready."""

    kind = "NAVIGATION"


class PromptExtractionFailure(JobError):
    """No prompt could be read from the latest rendered message."""

    kind = "PROMPT_EXTRACTION"


class SubmissionFailure(JobError):
    """Typing or sending the generation command failed."""

    kind = "SUBMISSION"


class ReplyTimeout(JobError):
    """The worker did not reply before the detection deadline."""

    kind = "REPLY_TIMEOUT"


class TargetReacquisitionFailure(JobError):
    """The matched reply could not be found again after the render wait."""

    kind = "MISSING_TARGET"


class ControlNotFound(JobError):
    """The requested control is not present on the matched message."""

    kind = "CONTROL_NOT_FOUND"


class ResourceNotFound(JobError):
    """No rendered message carries a qualifying image URL."""

    kind = "NO_RESOURCE_FOUND"


class DispatchFailure(JobError):
    """The sink rejected the result or could not be reached."""

    kind = "DISPATCH"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        **context: object,
    ) -> None:
        super().__init__(message, status_code=status_code, body=body, **context)
        self.status_code = status_code
        self.body = body
