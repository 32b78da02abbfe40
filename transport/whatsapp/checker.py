"""
WhatsApp Registration Checks

Single and batch lookups against the session's client.

Batch rules:
- Items are processed sequentially, in input order
- An invalid item is reported with its original input and skipped
- Every client call is followed by the throttle policy's wait
- An exception on one item becomes that item's error; the batch goes on
"""

import logging
from typing import Any, List, Optional

from config import Config
from session.base import to_identifier
from session.manager import SessionManager

from .errors import ClientNotReadyError, InvalidRequestError
from .normalize import (
    INVALID_NUMBER_MESSAGE,
    MIN_DIGITS,
    NormalizationError,
    clean_number,
    is_valid_number,
    normalize_number,
)
from .schemas import CheckNumberResponse, CheckNumbersResponse, CheckResult
from .throttle import FixedDelay, ThrottlePolicy

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = Config.MAX_BATCH_SIZE


def ensure_ready(session: SessionManager) -> None:
    """Raise ClientNotReadyError unless the session is ready right now."""
    if not session.ready:
        raise ClientNotReadyError()


async def check_number(
    session: SessionManager,
    number: Any,
    min_digits: int = MIN_DIGITS,
) -> CheckNumberResponse:
    """
    Check whether one number is on WhatsApp.

    Args:
        session: Session owning the client
        number: Raw phone number from the request
        min_digits: Minimum digit count for a valid number

    Returns:
        CheckNumberResponse with the cleaned number

    Raises:
        ClientNotReadyError: Session not ready
        InvalidRequestError: Missing or malformed number
    """
    ensure_ready(session)

    if not number:
        raise InvalidRequestError("Phone number is required")

    cleaned = normalize_number(number, min_digits)
    is_registered = await session.client.is_registered_user(to_identifier(cleaned))

    logger.info(
        f"Checked number {cleaned}",
        extra={"number": cleaned, "is_registered": is_registered},
    )

    return CheckNumberResponse(number=cleaned, is_registered=is_registered)


async def check_numbers(
    session: SessionManager,
    numbers: Any,
    throttle: Optional[ThrottlePolicy] = None,
    max_batch_size: int = MAX_BATCH_SIZE,
    min_digits: int = MIN_DIGITS,
) -> CheckNumbersResponse:
    """
    Check a batch of numbers one after another.

    The whole batch is rejected before any lookup if it is empty, not a
    list, or larger than max_batch_size.

    Args:
        session: Session owning the client
        numbers: Raw list from the request
        throttle: Wait policy applied after every client call
            (defaults to a fixed 500 ms delay)
        max_batch_size: Largest accepted batch
        min_digits: Minimum digit count for a valid number

    Returns:
        CheckNumbersResponse with one result per input, in input order

    Raises:
        ClientNotReadyError: Session not ready
        InvalidRequestError: Missing, empty, non-list or oversized batch
    """
    ensure_ready(session)

    if not numbers or not isinstance(numbers, list):
        raise InvalidRequestError("An array of phone numbers is required")

    if len(numbers) > max_batch_size:
        raise InvalidRequestError(
            f"Maximum {max_batch_size} numbers allowed per request"
        )

    if throttle is None:
        throttle = FixedDelay()

    results: List[CheckResult] = []

    for number in numbers:
        try:
            cleaned = clean_number(number)

            if not is_valid_number(cleaned, min_digits):
                results.append(
                    CheckResult(number=number, is_registered=False, error=INVALID_NUMBER_MESSAGE)
                )
                continue

            is_registered = await session.client.is_registered_user(to_identifier(cleaned))
            results.append(CheckResult(number=cleaned, is_registered=is_registered))

            await throttle.wait()

        except NormalizationError as e:
            results.append(CheckResult(number=number, is_registered=False, error=e.message))

        except Exception as e:
            logger.warning(
                f"Lookup failed for {number!r}: {e}",
                extra={"number": number, "error": str(e)},
            )
            results.append(CheckResult(number=number, is_registered=False, error=str(e)))

    logger.info(
        f"Checked batch of {len(numbers)} numbers",
        extra={
            "total": len(numbers),
            "registered": sum(1 for r in results if r.is_registered),
            "errors": sum(1 for r in results if r.error),
        },
    )

    return CheckNumbersResponse(total=len(numbers), results=results)
