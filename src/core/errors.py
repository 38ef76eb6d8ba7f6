"""
Error taxonomy and classification.

Service-raised errors derive from :class:`GatewayError` and carry their own
gRPC status. Anything else (ccxt exceptions, stray values) is classified by
name through :func:`classify_error`, which never raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

import grpc

from src.core.models import ErrorOutcome

UNKNOWN_ERROR_MESSAGE = "Unknown error"

# Order matters: the first rule whose pattern occurs in the name wins.
_NAME_RULES: tuple[tuple[tuple[str, ...], grpc.StatusCode], ...] = (
    (("Authentication",), grpc.StatusCode.UNAUTHENTICATED),
    (("Permission",), grpc.StatusCode.PERMISSION_DENIED),
    (("Invalid",), grpc.StatusCode.INVALID_ARGUMENT),
    (("NotSupported", "NotImplemented"), grpc.StatusCode.UNIMPLEMENTED),
    (("OrderNotFound",), grpc.StatusCode.NOT_FOUND),
    (("InsufficientFunds",), grpc.StatusCode.FAILED_PRECONDITION),
    (("DDoS", "Network", "RequestTimeout"), grpc.StatusCode.UNAVAILABLE),
)


# ---------------------------------------------------------------------------
# Service errors
# ---------------------------------------------------------------------------

class GatewayError(Exception):
    """Base for errors raised by the service itself."""

    code: grpc.StatusCode = grpc.StatusCode.UNKNOWN


class ConfigError(GatewayError):
    """Startup configuration could not be loaded."""


class InvalidArguments(GatewayError):
    code = grpc.StatusCode.INVALID_ARGUMENT


class UnsupportedExchange(GatewayError):
    """The requested exchange id is not in the registry."""

    code = grpc.StatusCode.INVALID_ARGUMENT

    def __init__(self, exchange_id: str) -> None:
        super().__init__(f"Unsupported exchange: {exchange_id}")
        self.exchange_id = exchange_id


class CapabilityNotSupported(GatewayError):
    code = grpc.StatusCode.UNIMPLEMENTED

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} not supported by this exchange")
        self.operation = operation


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def _narrow(err: object) -> tuple[Optional[str], Optional[str]]:
    """Pull a name and a message out of an arbitrary error value."""
    if isinstance(err, BaseException):
        name = getattr(err, "name", None)
        if not isinstance(name, str):
            name = type(err).__name__
        try:
            message = str(err)
        except Exception:
            message = None
        return name, message

    if isinstance(err, Mapping):
        name, message = err.get("name"), err.get("message")
    else:
        name, message = getattr(err, "name", None), getattr(err, "message", None)

    return (
        name if isinstance(name, str) else None,
        message if isinstance(message, str) else None,
    )


def _match_name(name: str) -> Optional[grpc.StatusCode]:
    for patterns, code in _NAME_RULES:
        if any(p in name for p in patterns):
            return code
    return None


def classify_error(err: object) -> ErrorOutcome:
    """
    Map a thrown value to a gRPC status code and message.

    ``GatewayError`` instances keep their own code. For everything else the
    name table is applied to the error's name: a string ``name`` field when
    present, otherwise an exception's own class name. Parent classes are not
    consulted. Unmatched errors are ``UNKNOWN``.
    """
    try:
        name, message = _narrow(err)
    except Exception:
        name, message = None, None
    message = message or UNKNOWN_ERROR_MESSAGE

    if isinstance(err, GatewayError):
        return ErrorOutcome(code=err.code, message=message)

    code = _match_name(name) if name else None
    if code is None:
        code = grpc.StatusCode.UNKNOWN
    return ErrorOutcome(code=code, message=message)
