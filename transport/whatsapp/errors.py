"""
Gateway error taxonomy.

Each error carries the HTTP status it maps to:
- not ready   → 503
- bad input   → 400
- not found   → 404 (send-image only)
Anything else escaping a handler is an internal error (500).
"""

NOT_READY_MESSAGE = "WhatsApp client is not ready. Please scan QR code first."


class GatewayError(Exception):
    """Request failed with a known HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientNotReadyError(GatewayError):
    """WhatsApp session is not authenticated yet (or lost)."""

    status_code = 503

    def __init__(self, message: str = NOT_READY_MESSAGE):
        super().__init__(message)


class InvalidRequestError(GatewayError):
    """Missing or malformed request field."""

    status_code = 400


class NumberNotRegisteredError(GatewayError):
    """Target number has no WhatsApp account."""

    status_code = 404

    def __init__(self, message: str = "Number is not registered on WhatsApp"):
        super().__init__(message)
