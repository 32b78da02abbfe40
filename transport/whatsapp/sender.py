"""
WhatsApp Image Sender

Sends an image, fetched from a URL, to a registered number.
No retries. The number is verified before anything is downloaded or sent.
"""

import logging
from typing import Any, Optional

from session.base import to_identifier
from session.manager import SessionManager

from .checker import ensure_ready
from .errors import InvalidRequestError, NumberNotRegisteredError
from .normalize import MIN_DIGITS, normalize_number
from .schemas import SendImageResponse

logger = logging.getLogger(__name__)


async def send_image(
    session: SessionManager,
    number: Any,
    image_url: Any,
    message: Optional[str] = None,
    min_digits: int = MIN_DIGITS,
) -> SendImageResponse:
    """
    Send an image with an optional caption.

    Flow:
    1. Session must be ready
    2. number and image_url must be present, number must be valid
    3. Number must be registered (404 otherwise, nothing fetched or sent)
    4. Load media from image_url, trusting the server's Content-Type
    5. Send with message as caption

    Args:
        session: Session owning the client
        number: Raw phone number
        image_url: URL of the image
        message: Optional caption
        min_digits: Minimum digit count for a valid number

    Returns:
        SendImageResponse echoing the cleaned number, URL and caption

    Raises:
        ClientNotReadyError: Session not ready
        InvalidRequestError: Missing or malformed field
        NumberNotRegisteredError: Number has no WhatsApp account
    """
    ensure_ready(session)

    if not number:
        raise InvalidRequestError("Phone number is required")

    if not image_url:
        raise InvalidRequestError("imageUrl is required")

    cleaned = normalize_number(number, min_digits)
    identifier = to_identifier(cleaned)
    client = session.client

    if not await client.is_registered_user(identifier):
        logger.info(f"Not sending to unregistered number {cleaned}")
        raise NumberNotRegisteredError()

    caption = str(message) if message else ""
    media = await client.load_media(str(image_url), unsafe_mime=True)
    await client.send_message(identifier, media, caption=caption)

    logger.info(
        f"Image sent to {cleaned}",
        extra={
            "number": cleaned,
            "image_url": image_url,
            "mimetype": media.mimetype,
            "has_caption": bool(caption),
        },
    )

    return SendImageResponse(number=cleaned, image_url=str(image_url), message=caption)
