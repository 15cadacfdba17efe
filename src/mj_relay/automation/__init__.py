"""Completion detection and extraction against the conversation view.

Public API:
    read_latest_prompt(view, wait_seconds) -> str
    submit_command(view, cleaned_prompt, ...) -> None
    ReplyDetector(view, criteria, ...).wait_for_reply(deadline) / .reacquire()
    trigger_action(view, message, label, ...) -> None
    extract_resource(view, ...) -> str
    normalize_locator(url) -> str
"""

from mj_relay.automation.detector import ReplyDetector, find_latest_match
from mj_relay.automation.extractor import (
    extract_resource,
    is_qualifying_locator,
    normalize_locator,
)
from mj_relay.automation.prompt import read_latest_prompt
from mj_relay.automation.submitter import submit_command
from mj_relay.automation.trigger import trigger_action

__all__ = [
    "ReplyDetector",
    "find_latest_match",
    "extract_resource",
    "is_qualifying_locator",
    "normalize_locator",
    "read_latest_prompt",
    "submit_command",
    "trigger_action",
]
