"""
Session lifecycle manager.

Owns the WhatsApp client for the lifetime of the process.

State machine (driven only by client events, never polled):

    uninitialized → initializing → authenticated → ready
    ready → disconnected | auth_failed   (no automatic reconnect)
    disconnected → ready                 (client re-authenticated)

Readiness is a projection of the state: true only in READY.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from .base import WhatsAppClient
from .qr import print_qr

logger = logging.getLogger(__name__)

# Teardown noise (browser/socket cleanup) goes here, at DEBUG only
teardown_logger = logging.getLogger("session.teardown")

DEFAULT_SHUTDOWN_TIMEOUT_S = 3.0


class SessionState(str, Enum):
    """Lifecycle states of the client session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    DISCONNECTED = "disconnected"
    AUTH_FAILED = "auth_failed"


class SessionManager:
    """
    Lifecycle owner for a single WhatsApp client.

    One instance per process, held on the FastAPI app state and handed
    to request handlers.
    """

    def __init__(
        self,
        client: WhatsAppClient,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_S,
        qr_renderer: Callable[[str], None] = print_qr,
    ):
        self.client = client
        self.shutdown_timeout = shutdown_timeout
        self._qr_renderer = qr_renderer
        self._state = SessionState.UNINITIALIZED
        self._shutting_down = False
        self._teardown_task: Optional[asyncio.Task] = None
        self._shutdown_complete: Optional[asyncio.Event] = None

        client.on("qr", self._on_qr)
        client.on("authenticated", self._on_authenticated)
        client.on("ready", self._on_ready)
        client.on("auth_failure", self._on_auth_failure)
        client.on("disconnected", self._on_disconnected)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def ready(self) -> bool:
        """True only while the session is in the READY state."""
        return self._state is SessionState.READY

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def _transition(self, new_state: SessionState) -> None:
        if new_state is not self._state:
            logger.debug(
                f"Session state {self._state.value} → {new_state.value}",
                extra={"from_state": self._state.value, "to_state": new_state.value},
            )
        self._state = new_state

    # ========================================================================
    # CLIENT EVENT HANDLERS
    # ========================================================================

    def _on_qr(self, qr: str) -> None:
        self._qr_renderer(qr)

    def _on_authenticated(self, *_args) -> None:
        logger.info("🔐 WhatsApp authenticated successfully!")
        self._transition(SessionState.AUTHENTICATED)

    def _on_ready(self, *_args) -> None:
        logger.info("✅ WhatsApp client is ready!")
        self._transition(SessionState.READY)

    def _on_auth_failure(self, message: str = "", *_args) -> None:
        logger.error(f"❌ Authentication failed: {message}")
        self._transition(SessionState.AUTH_FAILED)

    def _on_disconnected(self, reason: str = "", *_args) -> None:
        logger.warning(f"⚠️ WhatsApp client disconnected: {reason}")
        self._transition(SessionState.DISCONNECTED)

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def start(self) -> None:
        """
        Initialize the client.

        Returns once the handshake has been started; readiness arrives
        later through the client's "ready" event. Only the first call
        has an effect.
        """
        if self._state is not SessionState.UNINITIALIZED:
            return

        self._transition(SessionState.INITIALIZING)
        logger.info("🔄 Initializing WhatsApp client...")
        try:
            await self.client.initialize()
        except Exception:
            self._transition(SessionState.DISCONNECTED)
            raise

    async def shutdown(self) -> bool:
        """
        Tear down the client, bounded by shutdown_timeout.

        Only the first call tears down. Repeated calls (a second signal,
        lifespan exit after a signal) wait for that first shutdown to
        finish and change nothing. Teardown errors are logged at DEBUG
        and never raised. On timeout the teardown keeps running unattended.

        Returns:
            True if this call performed the shutdown
        """
        if self._shutting_down:
            if self._shutdown_complete is not None:
                await self._shutdown_complete.wait()
            return False
        self._shutting_down = True
        self._shutdown_complete = asyncio.Event()

        logger.info("🛑 Shutting down gracefully...")

        try:
            self._teardown_task = asyncio.ensure_future(self._teardown())
            done, _ = await asyncio.wait({self._teardown_task}, timeout=self.shutdown_timeout)
            if not done:
                logger.warning(
                    f"Client teardown did not finish within {self.shutdown_timeout}s, continuing"
                )

            self._transition(SessionState.DISCONNECTED)
            logger.info("✅ Shutdown complete")
        finally:
            self._shutdown_complete.set()
        return True

    async def _teardown(self) -> None:
        try:
            await self.client.destroy()
        except Exception as e:
            teardown_logger.debug(f"Client teardown error: {e}", exc_info=True)
