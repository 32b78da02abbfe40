"""WhatsApp Gateway Layer - Module Exports"""

from .checker import MAX_BATCH_SIZE, check_number, check_numbers, ensure_ready
from .errors import (
    ClientNotReadyError,
    GatewayError,
    InvalidRequestError,
    NumberNotRegisteredError,
)
from .normalize import (
    MIN_DIGITS,
    NormalizationError,
    clean_number,
    is_valid_number,
    normalize_number,
)
from .router import router
from .schemas import (
    CheckNumberResponse,
    CheckNumbersResponse,
    CheckResult,
    ErrorResponse,
    HealthResponse,
    SendImageResponse,
    StatusResponse,
)
from .sender import send_image
from .throttle import FixedDelay, NoDelay, ThrottlePolicy, TokenBucket

__all__ = [
    # Schemas
    "CheckResult",
    "CheckNumberResponse",
    "CheckNumbersResponse",
    "SendImageResponse",
    "HealthResponse",
    "StatusResponse",
    "ErrorResponse",
    # Errors
    "GatewayError",
    "ClientNotReadyError",
    "InvalidRequestError",
    "NumberNotRegisteredError",
    # Normalization
    "clean_number",
    "is_valid_number",
    "normalize_number",
    "NormalizationError",
    "MIN_DIGITS",
    # Operations
    "ensure_ready",
    "check_number",
    "check_numbers",
    "send_image",
    "MAX_BATCH_SIZE",
    # Throttling
    "ThrottlePolicy",
    "FixedDelay",
    "NoDelay",
    "TokenBucket",
    # Router
    "router",
]
