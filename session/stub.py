"""
Stub WhatsApp client for testing and offline development.

Deterministic, fast, and never touches the network.
"""

from dataclasses import dataclass
from typing import List, Optional, Set

from .base import WhatsAppClient, identifier_digits
from .media import MessageMedia


@dataclass
class SentMessage:
    """A message recorded by the stub client."""

    identifier: str
    media: MessageMedia
    caption: str


class StubWhatsAppClient(WhatsAppClient):
    """
    Deterministic fake client for local runs and CI.

    Becomes ready immediately on initialize. A number counts as
    registered when its last digit is even, unless an explicit set of
    registered numbers is given.
    """

    def __init__(
        self,
        registered: Optional[Set[str]] = None,
        auto_ready: bool = True,
    ):
        super().__init__()
        self.registered = registered
        self.auto_ready = auto_ready
        self.sent: List[SentMessage] = []
        self.destroyed = False

    async def initialize(self) -> None:
        """Emit authenticated and ready right away."""
        if self.auto_ready:
            self.emit("authenticated")
            self.emit("ready")

    async def is_registered_user(self, identifier: str) -> bool:
        digits = identifier_digits(identifier)
        if self.registered is not None:
            return digits in self.registered
        return bool(digits) and int(digits[-1]) % 2 == 0

    async def send_message(
        self,
        identifier: str,
        media: MessageMedia,
        caption: str = "",
    ) -> None:
        self.sent.append(SentMessage(identifier=identifier, media=media, caption=caption))

    async def destroy(self) -> None:
        self.destroyed = True
