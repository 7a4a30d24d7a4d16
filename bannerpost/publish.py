from __future__ import annotations

import asyncio

from .constants import LOGGER, MAX_MEDIA_PER_POST, POST_TEXT
from .images import decode_data_uri
from .x_api import FailureKind, MediaUploader, UserClient, XApiError

SCOPE_HINT = (
    "Please ensure you have granted write permissions to the app and try logging "
    "in again. Required scopes: tweet.read, tweet.write, users.read"
)


async def publish_images(
    images: dict[str, str],
    *,
    uploader: MediaUploader,
    user_client: UserClient,
    text: str = POST_TEXT,
) -> dict:
    """Upload every image and post them in a single message.

    Uploads run concurrently and any failure fails the publish. Media that was
    already uploaded is left for X to discard. Only the first
    ``MAX_MEDIA_PER_POST`` media IDs are attached, in input order.
    """
    me = await user_client.me()
    LOGGER.info("Publishing as X user %s (@%s)", me.get("id"), me.get("username"))

    payloads = [decode_data_uri(data_uri) for data_uri in images.values()]
    media_ids = await asyncio.gather(*(uploader.upload_png(data) for data in payloads))
    LOGGER.info("Uploaded %s media items: %s", len(media_ids), ", ".join(media_ids))

    return await user_client.create_post(text, list(media_ids[:MAX_MEDIA_PER_POST]))


def translate_failure(error: XApiError) -> tuple[int, dict]:
    """Map an X failure onto the HTTP status and body returned to the browser."""
    if error.kind is FailureKind.PERMISSION_DENIED:
        return 403, {
            "error": "X authorization failed",
            "details": SCOPE_HINT,
            "code": error.status_code,
        }
    if error.kind is FailureKind.RATE_LIMITED:
        body = {
            "error": "Rate limit exceeded",
            "details": "Please try again later.",
            "code": error.status_code,
        }
        if error.wait_seconds is not None:
            body["retry_after"] = error.wait_seconds
        return 429, body
    if error.kind is FailureKind.UPSTREAM:
        return error.status_code or 500, {
            "error": "Failed to post to X",
            "details": error.message,
            "code": error.status_code,
        }
    return 500, {"error": "Internal server error", "details": error.message}
