"""
Infrastructure module exports.

Configuration and backend selection for the WhatsApp client.
"""

from .config import InfraConfig, get_config, ThrottleType, WhatsAppBackendType

__all__ = [
    "InfraConfig",
    "get_config",
    "WhatsAppBackendType",
    "ThrottleType",
]
