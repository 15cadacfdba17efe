"""Authenticated Discord browser session.

Launches Chromium, injects the user token into localStorage before any page
script runs, and opens the configured channel. The session is a scoped
resource: the browser is closed on every exit path.

WARNING: automating a user account (self-botting) is against Discord's ToS
and can get the account banned.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from mj_relay.config import Settings
from mj_relay.discord import selectors
from mj_relay.discord.view import PlaywrightConversationView
from mj_relay.models.errors import NavigationFailure, SessionInitFailure

logger = logging.getLogger(__name__)

_PAGE_CONTENT_SNIPPET = 1000


def token_init_script(token: str) -> str:
    """Script storing the token the way the Discord client expects it (JSON-quoted)."""
    return f"window.localStorage.setItem('token', {json.dumps(json.dumps(token))});"


@asynccontextmanager
async def open_session(settings: Settings) -> AsyncIterator[PlaywrightConversationView]:
    """Yield a view on the configured channel, closing the browser afterwards.

    Raises:
        SessionInitFailure: browser launch or token injection failed.
        NavigationFailure: the channel did not load or the chat UI never appeared.
    """
    async with async_playwright() as playwright:
        logger.info("Launching browser", extra={"headless": settings.headless})
        try:
            browser = await playwright.chromium.launch(headless=settings.headless)
        except PlaywrightError as exc:
            raise SessionInitFailure(f"Failed to launch browser: {exc}") from exc

        try:
            try:
                context = await browser.new_context()
                await context.add_init_script(script=token_init_script(settings.discord_token))
                page = await context.new_page()
            except PlaywrightError as exc:
                raise SessionInitFailure(f"Failed to inject token: {exc}") from exc
            logger.info("Discord token injected into local storage")

            await _open_channel(page, settings)
            yield PlaywrightConversationView(page)
        finally:
            # A close failure must not mask the outcome leaving the session
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser close failed: %s", exc)
            logger.info("Browser closed")


async def _open_channel(page: Page, settings: Settings) -> None:
    """Navigate to the channel and wait for the authenticated chat UI."""
    url = settings.channel_url
    logger.info("Navigating to Discord channel: %s", url)
    try:
        await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=settings.navigation_timeout_seconds * 1000,
        )
        # A login redirect shows up here as a different URL
        logger.info("Page loaded, current URL: %s", page.url)

        await page.wait_for_selector(
            selectors.CHAT_READY, timeout=settings.ui_ready_timeout_seconds * 1000
        )
        logger.info("Discord UI ready, page title: %s", await page.title())
    except PlaywrightError as exc:
        snippet = await _content_snippet(page)
        logger.error(
            "Failed to load Discord page or find UI element",
            extra={"url": url, "selector": selectors.CHAT_READY, "page_content": snippet},
        )
        raise NavigationFailure(
            f"Channel page not ready: {exc}", url=url, selector=selectors.CHAT_READY
        ) from exc


async def _content_snippet(page: Page) -> str:
    try:
        return (await page.content())[:_PAGE_CONTENT_SNIPPET]
    except PlaywrightError:
        return ""
