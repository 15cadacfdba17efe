"""Discord web client: browser session and conversation view.

Public API:
    open_session(settings) -> async context manager yielding a ConversationView
"""

from mj_relay.discord.session import open_session
from mj_relay.discord.view import (
    ConversationView,
    ConversationViewError,
    PlaywrightConversationView,
)

__all__ = [
    "open_session",
    "ConversationView",
    "ConversationViewError",
    "PlaywrightConversationView",
]
