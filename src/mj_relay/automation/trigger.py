"""Activating a labelled control on the matched reply."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from mj_relay.discord.selectors import control_button
from mj_relay.discord.view import ConversationView, ConversationViewError
from mj_relay.models.errors import ControlNotFound
from mj_relay.models.job import Message

logger = logging.getLogger(__name__)


async def trigger_action(
    view: ConversationView,
    message: Message,
    label: str = "U1",
    settle_seconds: float = 10.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Click the ``label`` button on ``message`` and wait ``settle_seconds``.

    The wait is the only signal that the action took effect; nothing
    confirms it.

    Raises:
        ControlNotFound: the button is missing (render not ready, or the UI
            changed) or clicking it failed; ``found`` in the context tells which.
    """
    try:
        control = await view.find_control(message, label)
    except ConversationViewError as exc:
        raise ControlNotFound(
            f"{label} button could not be queried: {exc}",
            label=label,
            selector=control_button(label),
            message_id=message.id,
            found=False,
            clicked=False,
        ) from exc
    if control is None:
        raise ControlNotFound(
            f"{label} button not found for the generated image",
            label=label,
            selector=control_button(label),
            message_id=message.id,
            found=False,
            clicked=False,
        )

    try:
        await view.activate(control)
    except ConversationViewError as exc:
        raise ControlNotFound(
            f"{label} button found but the click failed: {exc}",
            label=label,
            selector=control_button(label),
            message_id=message.id,
            found=True,
            clicked=False,
        ) from exc

    logger.info("%s clicked, waiting %.0fs for upscale", label, settle_seconds)
    await sleep(settle_seconds)
