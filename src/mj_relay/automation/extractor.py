"""Upscaled image URL selection and normalization.

Selection scans messages newest-first and attachments in order, taking the
first image that is hosted on a media domain, has an image extension, and is
not an avatar or attachment preview. Normalization strips size hints and
asks the CDN for a lossless PNG.
"""

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlsplit, urlunsplit

from mj_relay.config import DEFAULT_EXCLUDED_MARKERS, DEFAULT_MEDIA_DOMAINS
from mj_relay.discord.view import ConversationView, ConversationViewError
from mj_relay.models.errors import ResourceNotFound

logger = logging.getLogger(__name__)

IMAGE_EXTENSION_PATTERN = re.compile(r"\.(png|jpe?g|webp)(\?|$)", re.IGNORECASE)
SIZE_PARAM_PATTERN = re.compile(r"^(width|height)=\d+$")

QUALITY_SUFFIX = "format=png&quality=lossless"
_QUALITY_KEYS = ("format", "quality")


def is_qualifying_locator(
    locator: str,
    media_domains: Iterable[str] = DEFAULT_MEDIA_DOMAINS,
    excluded_markers: Iterable[str] = DEFAULT_EXCLUDED_MARKERS,
) -> bool:
    """Whether ``locator`` looks like a full-size generated image."""
    host = (urlsplit(locator).hostname or "").lower()
    if not any(host == d or host.endswith("." + d) for d in media_domains):
        return False
    if not IMAGE_EXTENSION_PATTERN.search(locator):
        return False
    return not any(marker in locator for marker in excluded_markers)


def normalize_locator(locator: str) -> str:
    """Drop width/height params and request lossless PNG. Idempotent.

    Existing format/quality params are replaced by the suffix, so applying
    this twice never duplicates it. Remaining params keep their original
    encoding.
    """
    parts = urlsplit(locator)
    params = [
        p
        for p in parts.query.split("&")
        if p
        and not SIZE_PARAM_PATTERN.match(p)
        and p.split("=", 1)[0] not in _QUALITY_KEYS
    ]
    params.append(QUALITY_SUFFIX)
    return urlunsplit(parts._replace(query="&".join(params)))


async def extract_resource(
    view: ConversationView,
    media_domains: Iterable[str] = DEFAULT_MEDIA_DOMAINS,
    excluded_markers: Iterable[str] = DEFAULT_EXCLUDED_MARKERS,
) -> str:
    """Find the newest qualifying image and return its normalized URL.

    Raises:
        ResourceNotFound: no rendered message carries a qualifying image.
    """
    media_domains = tuple(media_domains)
    excluded_markers = tuple(excluded_markers)

    try:
        messages = await view.list_messages()
        for message in reversed(messages):
            for attachment in await view.get_attachments(message):
                if is_qualifying_locator(attachment.locator, media_domains, excluded_markers):
                    logger.info(
                        "Upscaled image found",
                        extra={
                            "message_id": message.id,
                            "locator": attachment.locator,
                            "media_kind": attachment.media_kind_hint,
                        },
                    )
                    return normalize_locator(attachment.locator)
    except ConversationViewError as exc:
        raise ResourceNotFound(f"Could not scan images: {exc}") from exc

    raise ResourceNotFound(
        "No upscaled image URL found after upscale",
        media_domains=list(media_domains),
        excluded_markers=list(excluded_markers),
    )
