"""DOM selectors for the Discord web client.

Update these if Discord changes its UI. Discover via browser DevTools.
"""

MESSAGE_ITEM = '[data-list-item-id^="chat-messages"]'
MESSAGE_ID_ATTRIBUTE = "data-list-item-id"
MESSAGE_MARKUP = '[class*="markup"]'
MESSAGE_IMAGE = "img"

# Present only once the client is authenticated and the channel has loaded
CHAT_READY = '[role="textbox"][aria-label="Message"]'
CHAT_INPUT = '[role="textbox"]'


def control_button(label: str) -> str:
    """Button inside a message whose text contains ``label`` (e.g. "U1")."""
    return f'button:has-text("{label}")'
