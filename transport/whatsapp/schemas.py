"""
WhatsApp Gateway - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the JSON contract of the HTTP API. Field names are snake_case in
Python and camelCase on the wire.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _WireModel(BaseModel):
    """Base for response models serialized with camelCase aliases."""

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    class Config:
        populate_by_name = True


# ============================================================================
# CHECK RESULTS
# ============================================================================

class CheckResult(_WireModel):
    """
    Outcome for one number of a batch.

    `number` is the cleaned number on success and the original input
    when the item failed validation or the lookup raised.
    """

    number: Any = Field(..., description="Cleaned number, or original input on error")
    is_registered: bool = Field(False, alias="isRegistered")
    error: Optional[str] = Field(None, description="Present only when the item failed")

    def to_wire(self) -> dict:
        # number is echoed even when it is null; error only when set
        exclude = {"error"} if self.error is None else None
        return self.model_dump(by_alias=True, exclude=exclude)

    class Config:
        populate_by_name = True
        frozen = True


# ============================================================================
# SUCCESS RESPONSES (OUTPUT)
# ============================================================================

class HealthResponse(_WireModel):
    """GET /health"""

    status: str = "ok"
    whatsapp_ready: bool = Field(..., alias="whatsappReady")
    timestamp: str = Field(default_factory=utc_timestamp)


class StatusResponse(_WireModel):
    """GET /status"""

    success: bool = True
    is_ready: bool = Field(..., alias="isReady")
    timestamp: str = Field(default_factory=utc_timestamp)


class CheckNumberResponse(_WireModel):
    """POST /check-number"""

    success: bool = True
    number: str
    is_registered: bool = Field(..., alias="isRegistered")
    timestamp: str = Field(default_factory=utc_timestamp)


class CheckNumbersResponse(_WireModel):
    """POST /check-numbers"""

    success: bool = True
    total: int
    results: List[CheckResult]
    timestamp: str = Field(default_factory=utc_timestamp)

    def to_wire(self) -> dict:
        wire = super().to_wire()
        wire["results"] = [result.to_wire() for result in self.results]
        return wire


class SendImageResponse(_WireModel):
    """POST /send-image"""

    success: bool = True
    number: str
    image_url: str = Field(..., alias="imageUrl")
    message: str = ""
    timestamp: str = Field(default_factory=utc_timestamp)


# ============================================================================
# ERROR RESPONSE (OUTPUT)
# ============================================================================

class ErrorResponse(_WireModel):
    """
    Failure body shared by the business endpoints.

    /check-number adds isRegistered=false, /check-numbers adds results=[].
    """

    success: bool = False
    error: str
    is_registered: Optional[bool] = Field(None, alias="isRegistered")
    results: Optional[List[CheckResult]] = None
