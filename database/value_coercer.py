"""
Value Coercer - maps raw PyMySQL cell values to JSON-safe values.

Every endpoint passes its rows through ``coerce_row`` so the response
never carries bytes, NaN, out-of-range integers or datetime objects.
Coercion never raises: unrepresentable values degrade to a string or None.
"""

import logging
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Union

logger = logging.getLogger(__name__)

JSONSafe = Union[None, str, int, float, List[int]]

# Signed 64-bit range; unsigned BIGINT values above it are sent as strings
MIN_SIGNED_BIGINT = -(2 ** 63)
MAX_SIGNED_BIGINT = 2 ** 63 - 1


def _format_timedelta(value: timedelta) -> str:
    """Render a MySQL TIME value (returned as timedelta) as [-]HH:MM:SS[.ffffff]."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    seconds, micros = divmod(total_us, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def _coerce_bytes(value: bytes) -> JSONSafe:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return list(value)


def _coerce_int(value: int) -> JSONSafe:
    if MIN_SIGNED_BIGINT <= value <= MAX_SIGNED_BIGINT:
        return value
    return str(value)


def _coerce_float(value: float) -> JSONSafe:
    if math.isfinite(value):
        return value
    return str(value)


def coerce_value(value: Any) -> JSONSafe:
    """
    Convert one database cell into a JSON-safe value.

    Args:
        value: Raw value as returned by the driver

    Returns:
        None, str, int, float, or a list of byte values
    """
    try:
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray, memoryview)):
            return _coerce_bytes(bytes(value))
        if isinstance(value, str):
            return value
        # bool is an int subclass; send it as 0/1 like MySQL does
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return _coerce_int(value)
        if isinstance(value, float):
            return _coerce_float(value)
        if isinstance(value, Decimal):
            return str(value)
        # datetime before date: datetime is a date subclass
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, time):
            return value.isoformat()
        if isinstance(value, timedelta):
            return _format_timedelta(value)
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Could not coerce {type(value).__name__} value: {e}")
        return None

    logger.debug(f"Unrecognized value type {type(value).__name__}, returning null")
    return None


def coerce_row(keys: Iterable[str], values: Iterable[Any]) -> Dict[str, JSONSafe]:
    """Build an ordered column -> JSON-safe value mapping for one row."""
    return {str(key): coerce_value(value) for key, value in zip(keys, values)}


def stringify_value(value: Any) -> str:
    """
    Render a schema metadata cell as text.

    Used for SHOW COLUMNS output, where every attribute is a string and
    NULL becomes the empty string.
    """
    coerced = coerce_value(value)
    if coerced is None:
        return ""
    if isinstance(coerced, list):
        return bytes(coerced).decode("utf-8", errors="replace")
    return str(coerced)
