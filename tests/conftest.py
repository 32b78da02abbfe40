"""Pytest configuration and fixtures."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from session.base import WhatsAppClient, identifier_digits  # noqa: E402
from session.manager import SessionManager  # noqa: E402
from session.media import MessageMedia  # noqa: E402


class RecordingClient(WhatsAppClient):
    """
    Fake WhatsApp client that records every call.

    Numbers in `registered` are on WhatsApp; lookups for numbers in
    `fail_on` raise.
    """

    def __init__(self, registered=(), fail_on=()):
        super().__init__()
        self.registered = set(registered)
        self.fail_on = set(fail_on)
        self.calls = []
        self.media = MessageMedia(mimetype="image/png", data=b"\x89PNG", filename="cat.png", filesize=4)
        self.media_error = None
        self.destroy_calls = 0
        self.destroy_hangs = False
        self.destroy_error = None

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]

    async def initialize(self):
        self.calls.append(("initialize",))

    async def is_registered_user(self, identifier):
        self.calls.append(("is_registered_user", identifier))
        digits = identifier_digits(identifier)
        if digits in self.fail_on:
            raise RuntimeError(f"lookup failed for {digits}")
        return digits in self.registered

    async def load_media(self, url, unsafe_mime=False):
        self.calls.append(("load_media", url, unsafe_mime))
        if self.media_error is not None:
            raise self.media_error
        return self.media

    async def send_message(self, identifier, media, caption=""):
        self.calls.append(("send_message", identifier, media, caption))

    async def destroy(self):
        self.destroy_calls += 1
        if self.destroy_hangs:
            await asyncio.Event().wait()
        if self.destroy_error is not None:
            raise self.destroy_error


@pytest.fixture
def fake_client():
    """Client with 12345678901 registered."""
    return RecordingClient(registered={"12345678901"})


@pytest.fixture
def session(fake_client):
    """Session manager that has not become ready yet."""
    return SessionManager(fake_client, shutdown_timeout=0.1, qr_renderer=lambda qr: None)


@pytest.fixture
def ready_session(session, fake_client):
    """Session manager in the READY state."""
    fake_client.emit("ready")
    return session
