"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
The real WhatsApp backend is the default; the stub backend runs
without a phone or network.
"""

import os
from dataclasses import dataclass
from typing import Literal

from session import NeonizeWhatsAppClient, SessionManager, StubWhatsAppClient, WhatsAppClient
from transport.whatsapp.throttle import FixedDelay, NoDelay, ThrottlePolicy, TokenBucket


WhatsAppBackendType = Literal["neonize", "stub"]
ThrottleType = Literal["fixed", "token_bucket", "none"]


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # WhatsApp client
    whatsapp_backend: WhatsAppBackendType
    client_id: str
    auth_dir: str
    media_timeout_s: float

    # Batch pacing
    throttle: ThrottleType
    check_delay_ms: int
    token_rate: float
    token_capacity: int

    # Lifecycle
    shutdown_timeout_ms: int

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Defaults:
        - Client: neonize, session "whatsapp-checker" under .wa_auth
        - Throttle: fixed 500 ms between lookups
        - Shutdown: 3000 ms teardown budget
        """
        return cls(
            # WhatsApp Configuration
            whatsapp_backend=os.getenv("WHATSAPP_BACKEND", "neonize"),  # type: ignore
            client_id=os.getenv("CLIENT_ID", "whatsapp-checker"),
            auth_dir=os.getenv("AUTH_DIR", ".wa_auth"),
            media_timeout_s=float(os.getenv("MEDIA_TIMEOUT_S", "30")),

            # Throttle Configuration
            throttle=os.getenv("THROTTLE", "fixed"),  # type: ignore
            check_delay_ms=int(os.getenv("CHECK_DELAY_MS", "500")),
            token_rate=float(os.getenv("TOKEN_RATE", "2")),
            token_capacity=int(os.getenv("TOKEN_CAPACITY", "5")),

            # Lifecycle Configuration
            shutdown_timeout_ms=int(os.getenv("SHUTDOWN_TIMEOUT_MS", "3000")),
        )

    def create_whatsapp_client(self) -> WhatsAppClient:
        """Create WhatsApp client instance based on configuration."""
        if self.whatsapp_backend == "stub":
            return StubWhatsAppClient()
        elif self.whatsapp_backend == "neonize":
            return NeonizeWhatsAppClient(
                client_id=self.client_id,
                auth_dir=self.auth_dir,
                media_timeout=self.media_timeout_s,
            )
        else:
            raise ValueError(f"Unknown WHATSAPP_BACKEND: {self.whatsapp_backend}")

    def create_throttle(self) -> ThrottlePolicy:
        """Create batch pacing policy based on configuration."""
        if self.throttle == "token_bucket":
            return TokenBucket(rate=self.token_rate, capacity=self.token_capacity)
        elif self.throttle == "none":
            return NoDelay()
        else:
            # Default to the fixed delay
            return FixedDelay(self.check_delay_ms / 1000)

    def create_session_manager(self) -> SessionManager:
        """Create the session manager around a freshly built client."""
        return SessionManager(
            self.create_whatsapp_client(),
            shutdown_timeout=self.shutdown_timeout_ms / 1000,
        )

    def __repr__(self) -> str:
        return (
            f"InfraConfig(whatsapp={self.whatsapp_backend}, "
            f"client_id={self.client_id}, throttle={self.throttle})"
        )


def get_config() -> InfraConfig:
    """Get infrastructure configuration."""
    return InfraConfig.from_env()
