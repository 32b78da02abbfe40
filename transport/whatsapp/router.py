"""
WhatsApp Gateway Router

FastAPI router exposing health, status, number checks and image sending.
Handlers only parse JSON, delegate and shape responses; every business
handler converts unexpected exceptions into a 500 body.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from config import Config
from session.manager import SessionManager

from .checker import check_number, check_numbers, ensure_ready
from .errors import GatewayError, InvalidRequestError
from .schemas import ErrorResponse, HealthResponse, StatusResponse
from .sender import send_image
from .throttle import ThrottlePolicy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WhatsApp"])

INTERNAL_ERROR_MESSAGE = "Internal server error"


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_session(request: Request) -> SessionManager:
    """Session manager owned by the application."""
    return request.app.state.session


def get_throttle(request: Request) -> ThrottlePolicy:
    """Batch pacing policy owned by the application."""
    return request.app.state.throttle


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An empty body or a non-object JSON value yields an empty dict, so
    missing fields are reported by the field checks.

    Raises:
        InvalidRequestError: Body is not valid JSON
    """
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidRequestError("Invalid JSON payload")
    return payload if isinstance(payload, dict) else {}


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Build a failure body: {success: false, error, ...extra}."""
    body = ErrorResponse(error=message, **extra)
    return JSONResponse(status_code=status_code, content=body.to_wire())


def handle_failure(exc: Exception, operation: str, **extra: Any) -> JSONResponse:
    """Map an exception from a business handler to its JSON failure."""
    if isinstance(exc, GatewayError):
        logger.debug(f"{operation} rejected: {exc.message}")
        return error_response(exc.status_code, exc.message, **extra)

    logger.error(f"Error {operation}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) or INTERNAL_ERROR_MESSAGE,
        **extra,
    )


# ============================================================================
# HEALTH & STATUS
# ============================================================================

@router.get("/health")
async def health(session: SessionManager = Depends(get_session)) -> JSONResponse:
    """Process health and current WhatsApp readiness. Never fails."""
    return JSONResponse(content=HealthResponse(whatsapp_ready=session.ready).to_wire())


@router.get("/status")
async def client_status(session: SessionManager = Depends(get_session)) -> JSONResponse:
    """WhatsApp readiness only. Never fails."""
    return JSONResponse(content=StatusResponse(is_ready=session.ready).to_wire())


# ============================================================================
# NUMBER CHECKS
# ============================================================================

@router.post("/check-number")
async def check_number_endpoint(
    request: Request,
    session: SessionManager = Depends(get_session),
) -> JSONResponse:
    """
    Check if a single number is registered on WhatsApp.

    Body: {"number": "+1 (234) 567-8901"}

    Returns:
        200 {success, number, isRegistered, timestamp}
        503 not ready, 400 bad input, 500 client error
    """
    try:
        ensure_ready(session)

        payload = await read_json_body(request)
        result = await check_number(
            session,
            payload.get("number"),
            min_digits=Config.MIN_DIGITS,
        )
        return JSONResponse(content=result.to_wire())

    except Exception as e:
        return handle_failure(e, "checking number", is_registered=False)


@router.post("/check-numbers")
async def check_numbers_endpoint(
    request: Request,
    session: SessionManager = Depends(get_session),
    throttle: ThrottlePolicy = Depends(get_throttle),
) -> JSONResponse:
    """
    Check up to MAX_BATCH_SIZE numbers, one at a time.

    Body: {"numbers": ["12345678901", "..."]}

    Returns:
        200 {success, total, results[], timestamp}
        503 not ready, 400 bad input, 500 unexpected error
    """
    try:
        ensure_ready(session)

        payload = await read_json_body(request)
        result = await check_numbers(
            session,
            payload.get("numbers"),
            throttle=throttle,
            max_batch_size=Config.MAX_BATCH_SIZE,
            min_digits=Config.MIN_DIGITS,
        )
        return JSONResponse(content=result.to_wire())

    except Exception as e:
        return handle_failure(e, "checking numbers", results=[])


# ============================================================================
# IMAGE SENDING
# ============================================================================

@router.post("/send-image")
async def send_image_endpoint(
    request: Request,
    session: SessionManager = Depends(get_session),
) -> JSONResponse:
    """
    Send an image (by URL) with an optional caption.

    Body: {"number": "...", "imageUrl": "https://...", "message": "optional"}

    Returns:
        200 {success, number, imageUrl, message, timestamp}
        503 not ready, 400 bad input, 404 not registered, 500 send error
    """
    try:
        ensure_ready(session)

        payload = await read_json_body(request)
        result = await send_image(
            session,
            payload.get("number"),
            payload.get("imageUrl"),
            payload.get("message"),
            min_digits=Config.MIN_DIGITS,
        )
        return JSONResponse(content=result.to_wire())

    except Exception as e:
        return handle_failure(e, "sending image")
