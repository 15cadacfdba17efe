"""Typing the generation command into the chat input."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from mj_relay.discord.view import ConversationView, ConversationViewError
from mj_relay.models.errors import SubmissionFailure

logger = logging.getLogger(__name__)


async def submit_command(
    view: ConversationView,
    cleaned_prompt: str,
    command: str = "/imagine",
    settle_seconds: float = 3.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Send ``command`` with ``cleaned_prompt`` as its argument.

    Typing the command opens Discord's suggestion popup; after
    ``settle_seconds`` the first Enter accepts the top suggestion and the
    second sends the message.

    Raises:
        SubmissionFailure: any input step failed. Not retried.
    """
    try:
        await view.focus_input()
        await view.submit_text(command)
        await sleep(settle_seconds)
        await view.press_enter()
        await view.submit_text(" " + cleaned_prompt)
        await view.press_enter()
    except ConversationViewError as exc:
        raise SubmissionFailure(
            f"Failed to type or send prompt: {exc}", command=command, prompt=cleaned_prompt
        ) from exc

    logger.info("Prompt sent to Midjourney", extra={"prompt": cleaned_prompt})
