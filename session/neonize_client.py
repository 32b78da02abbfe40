"""
WhatsApp Web client backed by neonize.

Requires: pip install neonize
Session keys are stored in a SQLite file under AUTH_DIR/session-<CLIENT_ID>/,
so a paired device survives restarts without a new QR scan.
"""

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Optional

from .base import WhatsAppClient, identifier_digits
from .media import DEFAULT_TIMEOUT_S, MessageMedia

try:
    from neonize.aioze.client import NewAClient
    from neonize.events import (
        ConnectedEv,
        ConnectFailureEv,
        DisconnectedEv,
        LoggedOutEv,
        PairStatusEv,
    )
    from neonize.utils import build_jid
    NEONIZE_AVAILABLE = True
except ImportError:
    NEONIZE_AVAILABLE = False

logger = logging.getLogger(__name__)


def session_path(auth_dir: str, client_id: str) -> Path:
    """Directory holding the persisted session for client_id."""
    return Path(auth_dir) / f"session-{client_id}"


class NeonizeWhatsAppClient(WhatsAppClient):
    """
    WhatsApp client using the neonize multi-device library.

    neonize events are mapped onto the client lifecycle events:
    QR → qr, PairStatus → authenticated, Connected → ready,
    ConnectFailure/LoggedOut → auth_failure, Disconnected → disconnected.
    """

    def __init__(
        self,
        client_id: str = "whatsapp-checker",
        auth_dir: str = ".wa_auth",
        media_timeout: float = DEFAULT_TIMEOUT_S,
    ):
        """
        Initialize neonize backend.

        Args:
            client_id: Name of the persisted session
            auth_dir: Root directory for session storage
            media_timeout: Timeout for media downloads in seconds
        """
        if not NEONIZE_AVAILABLE:
            raise ImportError(
                "neonize not installed. Install with: pip install neonize"
            )

        super().__init__(media_timeout=media_timeout)
        self.client_id = client_id
        self.session_dir = session_path(auth_dir, client_id)
        self._client: Optional[Any] = None
        self._connect_task: Optional[asyncio.Task] = None

    def _build_client(self) -> Any:
        self.session_dir.mkdir(parents=True, exist_ok=True)
        client = NewAClient(str(self.session_dir / "session.sqlite3"))

        client.event.qr(self._on_qr)
        client.event(PairStatusEv)(self._on_pair_status)
        client.event(ConnectedEv)(self._on_connected)
        client.event(ConnectFailureEv)(self._on_connect_failure)
        client.event(LoggedOutEv)(self._on_logged_out)
        client.event(DisconnectedEv)(self._on_disconnected)
        return client

    async def _on_qr(self, _client: Any, data: bytes) -> None:
        self.emit("qr", data.decode() if isinstance(data, bytes) else str(data))

    async def _on_pair_status(self, _client: Any, _event: Any) -> None:
        self.emit("authenticated")

    async def _on_connected(self, _client: Any, _event: Any) -> None:
        self.emit("ready")

    async def _on_connect_failure(self, _client: Any, event: Any) -> None:
        self.emit("auth_failure", str(getattr(event, "Reason", event)))

    async def _on_logged_out(self, _client: Any, event: Any) -> None:
        self.emit("auth_failure", str(getattr(event, "Reason", "logged out")))

    async def _on_disconnected(self, _client: Any, _event: Any) -> None:
        self.emit("disconnected", "connection closed")

    async def initialize(self) -> None:
        """Start connecting in the background; pairing completes via events."""
        if self._client is None:
            self._client = self._build_client()
        self._connect_task = asyncio.create_task(self._client.connect())
        self._connect_task.add_done_callback(self._log_connect_result)

    def _log_connect_result(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"neonize connection ended with error: {error}")
            self.emit("disconnected", str(error))

    def _require_client(self) -> Any:
        if self._client is None:
            raise RuntimeError("Client has not been initialized")
        return self._client

    async def is_registered_user(self, identifier: str) -> bool:
        client = self._require_client()
        digits = identifier_digits(identifier)
        responses = await client.is_on_whatsapp("+" + digits)
        return any(bool(getattr(r, "IsIn", False)) for r in responses)

    async def send_message(
        self,
        identifier: str,
        media: MessageMedia,
        caption: str = "",
    ) -> None:
        client = self._require_client()
        jid = build_jid(identifier_digits(identifier))
        await client.send_image(jid, media.data, caption=caption)

    async def destroy(self) -> None:
        """Disconnect and stop the background connection task."""
        if self._client is None:
            return
        result = self._client.disconnect()
        if inspect.isawaitable(result):
            await result
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
