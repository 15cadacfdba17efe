"""Reading the raw prompt from the channel."""

import logging

from mj_relay.discord.selectors import MESSAGE_MARKUP
from mj_relay.discord.view import ConversationView, ConversationViewError
from mj_relay.models.errors import PromptExtractionFailure

logger = logging.getLogger(__name__)


async def read_latest_prompt(view: ConversationView, wait_seconds: float) -> str:
    """Return the markup text of the most recent message.

    If no message is rendered yet, waits up to ``wait_seconds`` for one.

    Raises:
        PromptExtractionFailure: no messages, or the latest has no readable markup.
    """
    try:
        messages = await view.list_messages()
        if not messages:
            logger.info("No messages rendered yet, waiting up to %.0fs", wait_seconds)
            await view.wait_for_messages(wait_seconds)
            messages = await view.list_messages()
        if not messages:
            raise PromptExtractionFailure("No messages found in channel")

        latest = messages[-1]
        prompt = await view.read_prompt_text(latest)
    except ConversationViewError as exc:
        raise PromptExtractionFailure(
            f"Could not read latest message: {exc}", selector=MESSAGE_MARKUP
        ) from exc

    if not prompt:
        raise PromptExtractionFailure(
            f"Latest message {latest.id} has no prompt text",
            selector=MESSAGE_MARKUP,
            message_id=latest.id,
        )
    return prompt
