"""
Bucket backend failures into conflict / transient / permanent categories.

Errors reaching the classifier come in several shapes:

* :class:`~league_bot.clients.backend.BackendError` (``status_code``/``code``).
* Normalised mappings such as ``{"message": ..., "statusCode": 409}``.
* Objects carrying a nested ``response`` with ``status`` or ``status_code``.
* Raw network exceptions (timeouts, refused or reset connections).

None of the helpers raise; unrecognised shapes fall through to transient so
callers lean towards retrying.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any

import aiohttp

NETWORK_ERROR_CODES = frozenset(
    {"ECONNABORTED", "ETIMEDOUT", "ECONNRESET", "ENOTFOUND", "ECONNREFUSED"}
)

_SCHEMA_ERROR_CODES = frozenset({"P2021", "PRISMA_P2021"})


class ErrorClassification(enum.Enum):
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


def _field(obj: Any, *names: str) -> Any:
    """Read the first present attribute or mapping key among ``names``."""

    for name in names:
        if isinstance(obj, dict):
            if obj.get(name) is not None:
                return obj[name]
        else:
            value = getattr(obj, name, None)
            if value is not None:
                return value
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def resolve_status(error: Any) -> int | None:
    """Return the HTTP-like status carried by ``error``, if any."""

    try:
        status = _as_int(_field(error, "status_code", "statusCode"))
        if status is not None:
            return status
        # aiohttp.ClientResponseError exposes ``status`` directly
        if isinstance(error, aiohttp.ClientResponseError):
            return _as_int(error.status)
        response = _field(error, "response")
        if response is not None:
            return _as_int(_field(response, "status", "status_code"))
    except Exception:
        return None
    return None


def resolve_code(error: Any) -> str | None:
    """Return a network-style error code for ``error``, if any."""

    try:
        code = _field(error, "code")
        if code is not None and not isinstance(code, int):
            return str(code)
        if isinstance(error, asyncio.TimeoutError):
            return "ETIMEDOUT"
        if isinstance(error, ConnectionRefusedError):
            return "ECONNREFUSED"
        if isinstance(error, ConnectionResetError):
            return "ECONNRESET"
        if isinstance(error, (aiohttp.ClientConnectionError, ConnectionError)):
            return "ECONNABORTED"
    except Exception:
        return None
    return None


_NORMALISED_FIELDS = ("status_code", "statusCode", "code", "details")


def is_normalised(error: Any) -> bool:
    """True for the client's ``{message, statusCode?, code?, details?}`` error shape."""

    try:
        if isinstance(error, dict):
            return "message" in error and any(key in error for key in _NORMALISED_FIELDS)
        if not hasattr(error, "message"):
            return False
        return any(hasattr(error, name) for name in _NORMALISED_FIELDS)
    except Exception:
        return False


def is_conflict(error: Any) -> bool:
    return resolve_status(error) == 409


def is_transient(error: Any) -> bool:
    status = resolve_status(error)
    if status is not None:
        return 500 <= status <= 599 or status == 429
    if is_normalised(error):
        return True
    code = resolve_code(error)
    if code is None:
        # No structured information at all: assume the network dropped us.
        return True
    return code in NETWORK_ERROR_CODES


def is_permanent(error: Any) -> bool:
    if is_conflict(error):
        return False
    status = resolve_status(error)
    if status is None:
        return False
    return 400 <= status <= 499 and status not in (409, 429)


def classify(error: Any) -> ErrorClassification:
    """Return exactly one :class:`ErrorClassification` for ``error``."""

    if is_conflict(error):
        return ErrorClassification.CONFLICT
    if is_transient(error):
        return ErrorClassification.TRANSIENT
    if is_permanent(error):
        return ErrorClassification.PERMANENT
    return ErrorClassification.UNKNOWN


def is_database_schema_error(error: Any) -> bool:
    """True when the backend reports a missing table (Prisma ``P2021``)."""

    try:
        code = _field(error, "code")
        if code in _SCHEMA_ERROR_CODES:
            return True
        details = _field(error, "details")
        if isinstance(details, dict) and details.get("prismaCode") == "P2021":
            return True
        message = str(_field(error, "message") or "")
        return "P2021" in message or ("table" in message and "does not exist" in message)
    except Exception:
        return False


def database_schema_error_message(error: Any) -> str:
    """Human-readable explanation for a schema error, or the raw message."""

    if not is_database_schema_error(error):
        return str(_field(error, "message") or "Unknown error")

    details = _field(error, "details")
    meta = details.get("meta", {}) if isinstance(details, dict) else {}
    table = meta.get("table") or meta.get("modelName") or "unknown table"
    return (
        f"Database schema error: The table '{table}' does not exist. "
        "The backend database migrations need to be run; "
        "please contact the API administrator."
    )


__all__ = [
    "ErrorClassification",
    "NETWORK_ERROR_CODES",
    "classify",
    "database_schema_error_message",
    "is_conflict",
    "is_database_schema_error",
    "is_normalised",
    "is_permanent",
    "is_transient",
    "resolve_code",
    "resolve_status",
]
