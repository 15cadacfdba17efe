"""Job orchestration: one linear, single-attempt pipeline per trigger.

INIT -> SESSION_READY -> AWAIT_UI -> SUBMITTED -> DETECTING_REPLY ->
RENDER_WAIT -> REACQUIRING -> ACTION_TRIGGERED -> EXTRACTING ->
DISPATCHING -> DONE, with FAILED reachable from every state. Nothing is
retried. The browser session is scoped to the run and released on every
exit path.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager

from mj_relay.automation import (
    ReplyDetector,
    extract_resource,
    read_latest_prompt,
    submit_command,
    trigger_action,
)
from mj_relay.config import Settings
from mj_relay.discord import ConversationView, open_session
from mj_relay.dispatcher import dispatch_result
from mj_relay.models.errors import DispatchFailure, JobError
from mj_relay.models.job import Job, JobResult, JobState

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], AbstractAsyncContextManager[ConversationView]]


class JobRunner:
    """Runs one job end to end against its own browser session.

    Args:
        settings: Immutable configuration for this job.
        session_factory: Opens the authenticated conversation view.
        sleep: Async sleep for the fixed waits and polling.
        clock: Monotonic time source for the reply deadline.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: SessionFactory = open_session,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.sleep = sleep
        self.clock = clock
        self.state = JobState.INIT
        self.job: Job | None = None

    def _transition(self, state: JobState) -> None:
        self.state = state
        if self.job is not None:
            self.job.state = state
        logger.info("Job state: %s", state.value, extra={"job_state": state.value})

    async def run(self) -> JobResult:
        """Execute the pipeline. Never raises; the outcome is in the returned JobResult."""
        try:
            async with self.session_factory(self.settings) as view:
                self._transition(JobState.SESSION_READY)
                return await self._run_pipeline(view)
        except JobError as exc:
            return self._fail(exc)
        except Exception as exc:
            logger.error(
                "Job crashed in state %s: %s",
                self.state.value,
                exc,
                exc_info=True,
                extra={"job_state": self.state.value},
            )
            self._transition(JobState.FAILED)
            return JobResult(
                state=JobState.FAILED,
                failure="UNEXPECTED",
                prompt=self.job.cleaned_prompt if self.job else None,
            )

    async def _run_pipeline(self, view: ConversationView) -> JobResult:
        settings = self.settings

        self._transition(JobState.AWAIT_UI)
        raw_prompt = await read_latest_prompt(view, settings.messages_wait_timeout_seconds)
        job = self.job = Job(prompt=raw_prompt, marker=settings.command_marker)
        logger.info("Processing prompt: %s", job.cleaned_prompt)

        await submit_command(
            view,
            job.cleaned_prompt,
            command=settings.imagine_command,
            settle_seconds=settings.suggestion_settle_seconds,
            sleep=self.sleep,
        )
        job.deadline = self.clock() + settings.reply_timeout_seconds
        self._transition(JobState.SUBMITTED)

        detector = ReplyDetector(
            view,
            job.criteria(settings.author_marker),
            poll_interval=settings.poll_interval_seconds,
            clock=self.clock,
            sleep=self.sleep,
        )
        self._transition(JobState.DETECTING_REPLY)
        job.matched_message = await detector.wait_for_reply(job.deadline)

        self._transition(JobState.RENDER_WAIT)
        logger.info(
            "Waiting %.0fs for image generation to complete", settings.render_wait_seconds
        )
        await self.sleep(settings.render_wait_seconds)

        self._transition(JobState.REACQUIRING)
        job.matched_message = await detector.reacquire()

        await trigger_action(
            view,
            job.matched_message,
            label=settings.upscale_label,
            settle_seconds=settings.upscale_settle_seconds,
            sleep=self.sleep,
        )
        self._transition(JobState.ACTION_TRIGGERED)

        self._transition(JobState.EXTRACTING)
        job.extracted_locator = await extract_resource(
            view, settings.media_domains, settings.excluded_path_markers
        )

        self._transition(JobState.DISPATCHING)
        delivered = True
        try:
            await dispatch_result(
                settings.make_webhook_url,
                job.extracted_locator,
                job.cleaned_prompt,
                timeout_seconds=settings.sink_timeout_seconds,
            )
        except DispatchFailure as exc:
            # Detection and extraction succeeded; only delivery failed
            delivered = False
            logger.error(
                "Failed to send result to webhook: %s", exc, extra=exc.log_fields()
            )

        self._transition(JobState.DONE)
        return JobResult(
            state=JobState.DONE,
            failure=None if delivered else DispatchFailure.kind,
            prompt=job.cleaned_prompt,
            image_url=job.extracted_locator,
            delivered=delivered,
        )

    def _fail(self, exc: JobError) -> JobResult:
        logger.error(
            "Job failed in state %s: %s",
            self.state.value,
            exc,
            extra={"job_state": self.state.value, **exc.log_fields()},
        )
        self._transition(JobState.FAILED)
        return JobResult(
            state=JobState.FAILED,
            failure=exc.kind,
            prompt=self.job.cleaned_prompt if self.job else None,
        )


async def run_detached_job(settings: Settings) -> None:
    """Entry point for a fire-and-forget job.

    Runs as a background task after the trigger response is sent; the log is
    the only place its outcome appears.
    """
    try:
        result = await JobRunner(settings).run()
    except Exception:
        logger.exception("Error in detached job")
        return

    logger.info(
        "Job finished: %s",
        result.state.value,
        extra={
            "job_state": result.state.value,
            "failure_kind": result.failure,
            "prompt": result.prompt,
            "image_url": result.image_url,
            "delivered": result.delivered,
        },
    )
