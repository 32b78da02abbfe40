"""
WhatsApp client abstract interface.

Role: the messaging collaborator the API wraps.

Rules:
- Session handshake, pairing and transport live behind this boundary
- Lifecycle is reported through events, never polled
- Identifiers use the "<digits>@c.us" form
- Gateway code must depend ONLY on this interface
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, List, Literal

from .media import DEFAULT_TIMEOUT_S, MessageMedia

logger = logging.getLogger(__name__)


ClientEvent = Literal["qr", "authenticated", "ready", "auth_failure", "disconnected"]

CLIENT_EVENTS: tuple = ("qr", "authenticated", "ready", "auth_failure", "disconnected")

IDENTIFIER_SUFFIX = "@c.us"


def to_identifier(digits: str) -> str:
    """Build the client identifier for a cleaned phone number."""
    return f"{digits}{IDENTIFIER_SUFFIX}"


def identifier_digits(identifier: str) -> str:
    """Strip the identifier suffix, leaving the phone digits."""
    if identifier.endswith(IDENTIFIER_SUFFIX):
        return identifier[: -len(IDENTIFIER_SUFFIX)]
    return identifier


class WhatsAppClient(ABC):
    """
    Abstract WhatsApp client boundary.

    Subclasses raise lifecycle events through emit(); listeners are
    registered with on().
    """

    def __init__(self, media_timeout: float = DEFAULT_TIMEOUT_S):
        self.media_timeout = media_timeout
        self._handlers: Dict[str, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: ClientEvent, handler: Callable[..., Any]) -> None:
        """Register a handler for a lifecycle event."""
        if event not in CLIENT_EVENTS:
            raise ValueError(f"Unknown client event: {event}")
        self._handlers[event].append(handler)

    def emit(self, event: ClientEvent, *args: Any) -> None:
        """Invoke every handler registered for event, in registration order."""
        logger.debug(f"Client event: {event}")
        for handler in list(self._handlers.get(event, ())):
            handler(*args)

    @abstractmethod
    async def initialize(self) -> None:
        """
        Start the session handshake.

        Must return without waiting for pairing; readiness is reported
        later through the "ready" event.
        """
        raise NotImplementedError

    @abstractmethod
    async def is_registered_user(self, identifier: str) -> bool:
        """
        Check whether an identifier has a WhatsApp account.

        Args:
            identifier: "<digits>@c.us"

        Returns:
            True if the number is registered
        """
        raise NotImplementedError

    @abstractmethod
    async def send_message(
        self,
        identifier: str,
        media: MessageMedia,
        caption: str = "",
    ) -> None:
        """Send a media message with an optional caption."""
        raise NotImplementedError

    @abstractmethod
    async def destroy(self) -> None:
        """Close the session and release browser/socket resources."""
        raise NotImplementedError

    async def load_media(self, url: str, unsafe_mime: bool = False) -> MessageMedia:
        """
        Fetch media from a URL.

        Backends with their own download facility may override this.
        """
        return await MessageMedia.from_url(
            url, unsafe_mime=unsafe_mime, timeout=self.media_timeout
        )
