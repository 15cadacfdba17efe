"""Conversation view over the Discord channel page.

ConversationView is the only capability the automation core uses to read and
drive the rendering surface. PlaywrightConversationView implements it on a
live Playwright page; tests substitute an in-memory fake.
"""

import logging
from typing import Any, Protocol

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from mj_relay.discord import selectors
from mj_relay.models.job import Attachment, Message

logger = logging.getLogger(__name__)


class ConversationViewError(Exception):
    """A read or input operation on the rendering surface failed."""


class ConversationView(Protocol):
    async def list_messages(self) -> list[Message]: ...

    async def read_text(self, message: Message) -> str: ...

    async def read_prompt_text(self, message: Message) -> str | None: ...

    async def get_attachments(self, message: Message) -> list[Attachment]: ...

    async def find_control(self, message: Message, label: str) -> Any | None: ...

    async def activate(self, control: Any) -> None: ...

    async def focus_input(self) -> None: ...

    async def submit_text(self, text: str) -> None: ...

    async def press_enter(self) -> None: ...

    async def wait_for_messages(self, timeout_seconds: float) -> None: ...


class PlaywrightConversationView:
    """ConversationView backed by a Playwright page on the channel URL.

    Playwright errors are re-raised as ConversationViewError so callers can
    map them onto their own failure kinds without importing Playwright.
    """

    def __init__(self, page: Page) -> None:
        self.page = page

    async def list_messages(self) -> list[Message]:
        """Rendered messages in document order (oldest first).

        Text or images that cannot be read (element detached mid-scan) are
        treated as empty rather than failing the scan.
        """
        try:
            handles = await self.page.query_selector_all(selectors.MESSAGE_ITEM)
        except PlaywrightError as exc:
            raise ConversationViewError(f"Could not list messages: {exc}") from exc

        messages: list[Message] = []
        for index, handle in enumerate(handles):
            messages.append(
                Message(
                    id=await self._message_id(handle, index),
                    raw_text=await self._inner_text(handle),
                    attachments=await self._scan_attachments(handle),
                    handle=handle,
                )
            )
        return messages

    async def read_text(self, message: Message) -> str:
        try:
            return await message.handle.inner_text()
        except PlaywrightError as exc:
            raise ConversationViewError(
                f"Could not read text of message {message.id}: {exc}"
            ) from exc

    async def read_prompt_text(self, message: Message) -> str | None:
        """Text of the message's markup block, or None if it has none."""
        try:
            markup = await message.handle.query_selector(selectors.MESSAGE_MARKUP)
            if markup is None:
                return None
            return await markup.inner_text()
        except PlaywrightError as exc:
            raise ConversationViewError(
                f"Could not read markup of message {message.id}: {exc}"
            ) from exc

    async def get_attachments(self, message: Message) -> list[Attachment]:
        try:
            sources = await self._image_sources(message.handle)
        except PlaywrightError as exc:
            raise ConversationViewError(
                f"Could not read images of message {message.id}: {exc}"
            ) from exc
        return [Attachment(locator=src) for src in sources if src]

    async def find_control(self, message: Message, label: str) -> ElementHandle | None:
        try:
            return await message.handle.query_selector(selectors.control_button(label))
        except PlaywrightError as exc:
            raise ConversationViewError(
                f"Could not query control {label!r} on message {message.id}: {exc}"
            ) from exc

    async def activate(self, control: ElementHandle) -> None:
        try:
            await control.click()
        except PlaywrightError as exc:
            raise ConversationViewError(f"Could not click control: {exc}") from exc

    async def focus_input(self) -> None:
        try:
            await self.page.click(selectors.CHAT_INPUT)
        except PlaywrightError as exc:
            raise ConversationViewError(f"Could not focus chat input: {exc}") from exc

    async def submit_text(self, text: str) -> None:
        try:
            await self.page.keyboard.type(text)
        except PlaywrightError as exc:
            raise ConversationViewError(f"Could not type text: {exc}") from exc

    async def press_enter(self) -> None:
        try:
            await self.page.keyboard.press("Enter")
        except PlaywrightError as exc:
            raise ConversationViewError(f"Could not press Enter: {exc}") from exc

    async def wait_for_messages(self, timeout_seconds: float) -> None:
        """Wait until at least one message is rendered."""
        try:
            await self.page.wait_for_selector(
                selectors.MESSAGE_ITEM, timeout=timeout_seconds * 1000
            )
        except PlaywrightError as exc:
            raise ConversationViewError(
                f"No messages rendered within {timeout_seconds:.0f}s: {exc}"
            ) from exc

    @staticmethod
    async def _message_id(handle: ElementHandle, index: int) -> str:
        try:
            value = await handle.get_attribute(selectors.MESSAGE_ID_ATTRIBUTE)
        except PlaywrightError:
            value = None
        return value or f"index-{index}"

    @staticmethod
    async def _inner_text(handle: ElementHandle) -> str:
        try:
            return await handle.inner_text()
        except PlaywrightError:
            logger.debug("Message text unreadable, treating as empty")
            return ""

    @staticmethod
    async def _image_sources(handle: ElementHandle) -> list[str | None]:
        images = await handle.query_selector_all(selectors.MESSAGE_IMAGE)
        return [await img.get_attribute("src") for img in images]

    @classmethod
    async def _scan_attachments(cls, handle: ElementHandle) -> list[Attachment]:
        try:
            sources = await cls._image_sources(handle)
        except PlaywrightError:
            logger.debug("Message images unreadable, treating as none")
            return []
        return [Attachment(locator=src) for src in sources if src]
