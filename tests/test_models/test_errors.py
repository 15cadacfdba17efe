"""Tests for job failure kinds."""

import pytest

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


@pytest.mark.parametrize(
    ("error_cls", "kind"),
    [
        (SessionInitFailure, "SESSION_INIT"),
        (NavigationFailure, "NAVIGATION"),
        (PromptExtractionFailure, "PROMPT_EXTRACTION"),
        (SubmissionFailure, "SUBMISSION"),
        (ReplyTimeout, "REPLY_TIMEOUT"),
        (TargetReacquisitionFailure, "MISSING_TARGET"),
        (ControlNotFound, "CONTROL_NOT_FOUND"),
        (ResourceNotFound, "NO_RESOURCE_FOUND"),
        (DispatchFailure, "DISPATCH"),
    ],
)
def test_error_kinds(error_cls: type[JobError], kind: str):
    """Every failure kind is a JobError with a stable code."""
    exc = error_cls("boom")
    assert isinstance(exc, JobError)
    assert exc.kind == kind
    assert str(exc) == "boom"


def test_log_fields_include_context():
    exc = ControlNotFound("missing", label="U1", selector='button:has-text("U1")')
    assert exc.log_fields() == {
        "failure_kind": "CONTROL_NOT_FOUND",
        "label": "U1",
        "selector": 'button:has-text("U1")',
    }


def test_dispatch_failure_carries_status_and_body():
    exc = DispatchFailure("rejected", status_code=500, body="server exploded")
    assert exc.status_code == 500
    assert exc.body == "server exploded"
    assert exc.log_fields()["body"] == "server exploded"
