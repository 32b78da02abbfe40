"""
WhatsApp session exports.

Client boundary, backends, media loading and the lifecycle manager.
"""

from .base import CLIENT_EVENTS, ClientEvent, WhatsAppClient, identifier_digits, to_identifier
from .manager import SessionManager, SessionState
from .media import MediaError, MessageMedia
from .neonize_client import NEONIZE_AVAILABLE, NeonizeWhatsAppClient
from .stub import SentMessage, StubWhatsAppClient

__all__ = [
    # Client boundary
    "WhatsAppClient",
    "ClientEvent",
    "CLIENT_EVENTS",
    "to_identifier",
    "identifier_digits",
    # Media
    "MessageMedia",
    "MediaError",
    # Backends
    "StubWhatsAppClient",
    "SentMessage",
    "NeonizeWhatsAppClient",
    "NEONIZE_AVAILABLE",
    # Lifecycle
    "SessionManager",
    "SessionState",
]
