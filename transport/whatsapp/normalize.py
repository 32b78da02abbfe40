"""
Phone Number Normalization

PURE CONVERSION - NO CLIENT CALLS

Free-form input → digits only. The "<digits>@c.us" identifier is built
from the result by session.base.to_identifier.
- Every character other than ASCII 0-9 is dropped, digit order is preserved
- A number is valid when at least MIN_DIGITS digits remain
- No country or format validation beyond that
"""

import re
from typing import Any

from config import Config

from .errors import InvalidRequestError

MIN_DIGITS = Config.MIN_DIGITS

INVALID_NUMBER_MESSAGE = "Invalid phone number format"

_NON_DIGITS = re.compile(r"[^0-9]")


class NormalizationError(InvalidRequestError):
    """Phone number could not be normalized."""
    pass


def clean_number(number: Any) -> str:
    """
    Strip every non-digit character.

    Idempotent: clean_number(clean_number(x)) == clean_number(x).

    Raises:
        NormalizationError: number is not a string
    """
    if not isinstance(number, str):
        raise NormalizationError("Phone number must be a string")
    return _NON_DIGITS.sub("", number)


def is_valid_number(cleaned: str, min_digits: int = MIN_DIGITS) -> bool:
    """True if a cleaned number has enough digits."""
    return len(cleaned) >= min_digits


def normalize_number(number: Any, min_digits: int = MIN_DIGITS) -> str:
    """
    Clean and validate a phone number.

    Args:
        number: Raw user input, e.g. "+1 (234) 567-8901"
        min_digits: Minimum digit count

    Returns:
        The cleaned digits, e.g. "12345678901"

    Raises:
        NormalizationError: Not a string or too few digits
    """
    cleaned = clean_number(number)
    if not is_valid_number(cleaned, min_digits):
        raise NormalizationError(INVALID_NUMBER_MESSAGE)
    return cleaned

