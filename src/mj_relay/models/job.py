"""Job, message and detection models."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_BRACKETS = re.compile(r"[\[\]]")
_EXTENSION_PATTERN = re.compile(r"\.(png|jpe?g|webp)$", re.IGNORECASE)


class JobState(str, Enum):
    """Stages of a single job, in pipeline order. FAILED is absorbing."""

    INIT = "init"
    SESSION_READY = "session_ready"
    AWAIT_UI = "await_ui"
    SUBMITTED = "submitted"
    DETECTING_REPLY = "detecting_reply"
    RENDER_WAIT = "render_wait"
    REACQUIRING = "reacquiring"
    ACTION_TRIGGERED = "action_triggered"
    EXTRACTING = "extracting"
    DISPATCHING = "dispatching"
    DONE = "done"
    FAILED = "failed"


class DetectionState(str, Enum):
    """Reply detector states."""

    POLLING = "polling"
    MATCHED = "matched"
    TIMED_OUT = "timed_out"


class Attachment(BaseModel):
    """An image rendered inside a message."""

    locator: str

    @property
    def media_kind_hint(self) -> str | None:
        """Media kind inferred from the path extension ("png", "jpeg", "webp")."""
        path = self.locator.split("?", 1)[0].split("#", 1)[0]
        match = _EXTENSION_PATTERN.search(path)
        if match is None:
            return None
        ext = match.group(1).lower()
        return "jpeg" if ext == "jpg" else ext


class Message(BaseModel):
    """Live view of one rendered chat message. Never persisted."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    raw_text: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
    handle: Any = Field(default=None, exclude=True, repr=False)


class DetectionCriteria(BaseModel):
    """Heuristic identifying the worker's reply to a prompt.

    There is no correlation id on the worker's messages, so any message
    containing both values matches, including one from an unrelated job with
    the same prompt text.
    """

    model_config = ConfigDict(frozen=True)

    prompt_fragment: str
    author_marker: str

    def matches(self, text: str) -> bool:
        """Case-insensitive containment of both the prompt and the author marker."""
        lowered = text.lower()
        return (
            self.prompt_fragment.lower() in lowered
            and self.author_marker.lower() in lowered
        )


def clean_prompt(raw: str, marker: str = "/imagine prompt") -> str:
    """Strip the command marker (first occurrence only), brackets, and outer whitespace."""
    marker_pattern = re.compile(re.escape(marker) + r"\s*", re.IGNORECASE)
    text = marker_pattern.sub("", raw, count=1)
    text = _BRACKETS.sub("", text)
    return text.strip()


@dataclass
class Job:
    """One in-flight execution. Owned by a single JobRunner, discarded at the end.

    ``cleaned_prompt`` is derived once here and never recomputed.
    """

    prompt: str
    marker: str = "/imagine prompt"
    cleaned_prompt: str = field(init=False)
    state: JobState = JobState.INIT
    deadline: float | None = None
    matched_message: Message | None = None
    extracted_locator: str | None = None

    def __post_init__(self) -> None:
        self.cleaned_prompt = clean_prompt(self.prompt, self.marker)

    def criteria(self, author_marker: str) -> DetectionCriteria:
        return DetectionCriteria(
            prompt_fragment=self.cleaned_prompt, author_marker=author_marker
        )


class DispatchResult(BaseModel):
    """Sink response for a delivered result."""

    status_code: int
    body: str = ""


class JobResult(BaseModel):
    """Terminal outcome of a job, for logs and tests. Not returned to HTTP callers."""

    state: JobState
    failure: str | None = None
    prompt: str | None = None
    image_url: str | None = None
    delivered: bool = False
