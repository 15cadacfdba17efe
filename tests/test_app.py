"""Tests for the trigger endpoint, app lifespan and server entry point."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from mj_relay.app import app, main
from mj_relay.config import Settings
from mj_relay.models.job import JobResult, JobState


def test_trigger_acknowledges_immediately(client: TestClient):
    """POST /trigger returns the fixed acknowledgement as plain text."""
    with patch("mj_relay.router.run_detached_job", new_callable=AsyncMock):
        response = client.post("/trigger")

    assert response.status_code == 200
    assert response.text == "Midjourney script initiated. Check logs for progress."
    assert response.headers["content-type"].startswith("text/plain")


def test_trigger_schedules_one_job(client: TestClient):
    """Each trigger schedules exactly one detached job with the current settings."""
    with patch("mj_relay.router.run_detached_job", new_callable=AsyncMock) as mock_job:
        client.post("/trigger")

    mock_job.assert_awaited_once()
    (settings,) = mock_job.await_args.args
    assert isinstance(settings, Settings)
    assert settings.discord_channel_id == "222"


def test_trigger_accepts_arbitrary_body(client: TestClient):
    with patch("mj_relay.router.run_detached_job", new_callable=AsyncMock) as mock_job:
        response = client.post("/trigger", json={"anything": "ignored"})

    assert response.status_code == 200
    mock_job.assert_awaited_once()


def test_trigger_response_independent_of_job_outcome(client: TestClient):
    """A job that fails still leaves the caller with a 200."""
    failed = JobResult(state=JobState.FAILED, failure="REPLY_TIMEOUT")

    with patch("mj_relay.runner.JobRunner") as mock_runner_cls:
        mock_runner_cls.return_value.run = AsyncMock(return_value=failed)
        response = client.post("/trigger")

    assert response.status_code == 200
    mock_runner_cls.return_value.run.assert_awaited_once()


def test_trigger_rejects_get(client: TestClient):
    assert client.get("/trigger").status_code == 405


def test_lifespan_loads_settings_and_configures_logging():
    with patch("mj_relay.app.configure_logging") as mock_logging:
        with TestClient(app):
            assert isinstance(app.state.settings, Settings)

    mock_logging.assert_called_once_with("INFO")


def test_main_serves_on_configured_port(monkeypatch):
    monkeypatch.setenv("PORT", "8081")
    with patch("mj_relay.app.uvicorn.run") as mock_run:
        main()

    mock_run.assert_called_once_with(app, host="0.0.0.0", port=8081, log_config=None)
