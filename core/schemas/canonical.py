"""
Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization of tree documents.

A published tree document must be byte-identical every time it is
regenerated from the same recipient set, so everything written to disk
or remote storage goes through dumps_canonical().

Integers are rendered as-is here; the tree schemas already carry
indices and amounts as decimal strings, so no floating-point value
ever reaches the JSON encoder.
"""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime_canonical(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 with Z suffix for UTC.

    Returns:
        ISO-8601 formatted string with Z suffix (e.g., "2026-01-27T21:35:00Z").
    """
    utc_dt = ensure_utc(dt)
    if utc_dt.microsecond == 0:
        return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        CanonicalizationException: If the value cannot be canonicalized.
            Floats are rejected outright: token amounts must never pass
            through a floating-point representation.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        raise CanonicalizationException(
            message=f"Floating-point value encountered at '{path}'",
            details={"path": path, "value": str(value), "finite": math.isfinite(value)},
        )

    if isinstance(value, str):
        return value

    if isinstance(value, datetime):
        return format_datetime_canonical(value)

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, BaseModel):
        dumped = value.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
        )
        return canonicalize_value(dumped, path)

    if isinstance(value, dict):
        return {
            k: canonicalize_value(v, f"{path}.{k}" if path else k)
            for k, v in value.items()
            if v is not None
        }

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]")
            for i, item in enumerate(value)
        ]

    if isinstance(value, bytes):
        return "0x" + value.hex()

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to canonical JSON string.

    Produces:
        - Sorted keys
        - No extra whitespace
        - None fields excluded
        - Datetimes as ISO-8601 with Z suffix
        - Bytes as 0x-prefixed hex

    Raises:
        CanonicalizationException: If serialization fails.

    Example:
        >>> dumps_canonical({"b": "2", "a": "1"})
        '{"a":"1","b":"2"}'
    """
    try:
        canonicalized = canonicalize_value(obj)
        return json.dumps(
            canonicalized,
            sort_keys=True,
            separators=CANONICAL_JSON_SEPARATORS,
            ensure_ascii=False,
        )
    except CanonicalizationException:
        raise
    except Exception as e:
        raise CanonicalizationException(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def loads_canonical(json_str: str | bytes) -> Any:
    """
    Parse a JSON document.

    Floats are refused at parse time so a payload carrying amounts as
    JSON numbers with a fractional part or exponent fails loudly.
    """
    def _reject_float(raw: str) -> Any:
        raise CanonicalizationException(
            message=f"Floating-point number not allowed in tree data: {raw}",
            details={"value": raw},
        )

    try:
        return json.loads(json_str, parse_float=_reject_float)
    except json.JSONDecodeError as e:
        raise CanonicalizationException(
            message=f"Invalid JSON: {e.msg}",
            details={"line": e.lineno, "column": e.colno},
        ) from e
    except UnicodeDecodeError as e:
        raise CanonicalizationException(
            message=f"Invalid JSON: not UTF-8 text ({e.reason})",
            details={"position": e.start},
        ) from e
