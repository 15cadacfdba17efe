"""Polling detection of the worker's reply.

The worker posts no correlation id and there is no push signal, so the only
way to find its reply is to re-scan the rendered messages and match on
content. A scan walks messages newest-first and commits to the first one
that satisfies the criteria.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from mj_relay.discord.view import ConversationView, ConversationViewError
from mj_relay.models.errors import ReplyTimeout, TargetReacquisitionFailure
from mj_relay.models.job import DetectionCriteria, DetectionState, Message

logger = logging.getLogger(__name__)


async def find_latest_match(
    view: ConversationView, criteria: DetectionCriteria
) -> Message | None:
    """Return the most recent rendered message matching ``criteria``, if any."""
    messages = await view.list_messages()
    for message in reversed(messages):
        if criteria.matches(message.raw_text):
            return message
    return None


class ReplyDetector:
    """Detects the worker's reply: POLLING until MATCHED or TIMED_OUT.

    Args:
        view: Rendering surface to scan.
        criteria: Prompt fragment and author marker to match.
        poll_interval: Seconds between scans.
        clock: Monotonic time source; deadlines are instants on this clock.
        sleep: Async sleep used between scans.
    """

    def __init__(
        self,
        view: ConversationView,
        criteria: DetectionCriteria,
        poll_interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.view = view
        self.criteria = criteria
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.state = DetectionState.POLLING
        self.matched: Message | None = None

    async def wait_for_reply(self, deadline: float) -> Message:
        """Poll until a message matches or ``deadline`` passes.

        No scan starts at or after the deadline, so a reply that only
        appears afterwards is never matched.

        Raises:
            ReplyTimeout: the deadline passed without a match.
        """
        self.state = DetectionState.POLLING
        self.matched = None

        while self.clock() < deadline:
            try:
                message = await find_latest_match(self.view, self.criteria)
            except ConversationViewError as exc:
                logger.warning("Scan failed, will retry on next poll: %s", exc)
                message = None

            if message is not None:
                self.matched = message
                self.state = DetectionState.MATCHED
                logger.info("Midjourney initial reply found", extra={"message_id": message.id})
                return message

            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            logger.info("Waiting for Midjourney reply...")
            await self.sleep(min(self.poll_interval, remaining))

        self.state = DetectionState.TIMED_OUT
        raise ReplyTimeout(
            "No Midjourney reply found before the deadline",
            prompt=self.criteria.prompt_fragment,
            author_marker=self.criteria.author_marker,
        )

    async def reacquire(self) -> Message:
        """Re-find the reply with a single scan after the render wait.

        The element captured during polling may have been replaced while the
        image rendered, so the reply is looked up again from scratch and its
        text re-read.

        Raises:
            TargetReacquisitionFailure: no match, or its text lost the prompt.
        """
        try:
            message = await find_latest_match(self.view, self.criteria)
            if message is None:
                raise TargetReacquisitionFailure(
                    "No matching Midjourney reply found after the render wait",
                    prompt=self.criteria.prompt_fragment,
                    author_marker=self.criteria.author_marker,
                )
            text = await self.view.read_text(message)
        except ConversationViewError as exc:
            raise TargetReacquisitionFailure(
                f"Could not re-read the reply: {exc}",
                prompt=self.criteria.prompt_fragment,
            ) from exc

        if self.criteria.prompt_fragment.lower() not in text.lower():
            raise TargetReacquisitionFailure(
                "Reply no longer includes the expected prompt",
                prompt=self.criteria.prompt_fragment,
                message_id=message.id,
            )

        self.matched = message
        self.state = DetectionState.MATCHED
        return message
