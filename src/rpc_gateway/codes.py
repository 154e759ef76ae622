from __future__ import annotations

import logging
from enum import IntEnum


logger = logging.getLogger("rpc_gateway.codes")


class StatusCode(IntEnum):
    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


# Canonical status tokens. These are a wire contract: "CANCELLED" keeps the
# double L and UNIMPLEMENTED is reported as "NOT_IMPLEMENTED".
OK = "OK"
CANCELLED = "CANCELLED"
UNKNOWN = "UNKNOWN"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
NOT_FOUND = "NOT_FOUND"
ALREADY_EXISTS = "ALREADY_EXISTS"
PERMISSION_DENIED = "PERMISSION_DENIED"
RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
FAILED_PRECONDITION = "FAILED_PRECONDITION"
ABORTED = "ABORTED"
OUT_OF_RANGE = "OUT_OF_RANGE"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
INTERNAL = "INTERNAL"
UNAVAILABLE = "UNAVAILABLE"
DATA_LOSS = "DATA_LOSS"
UNAUTHENTICATED = "UNAUTHENTICATED"


_STATUS_TOKENS: dict[StatusCode, str] = {
    StatusCode.OK: OK,
    StatusCode.CANCELLED: CANCELLED,
    StatusCode.UNKNOWN: UNKNOWN,
    StatusCode.INVALID_ARGUMENT: INVALID_ARGUMENT,
    StatusCode.DEADLINE_EXCEEDED: DEADLINE_EXCEEDED,
    StatusCode.NOT_FOUND: NOT_FOUND,
    StatusCode.ALREADY_EXISTS: ALREADY_EXISTS,
    StatusCode.PERMISSION_DENIED: PERMISSION_DENIED,
    StatusCode.UNAUTHENTICATED: UNAUTHENTICATED,
    StatusCode.RESOURCE_EXHAUSTED: RESOURCE_EXHAUSTED,
    StatusCode.FAILED_PRECONDITION: FAILED_PRECONDITION,
    StatusCode.ABORTED: ABORTED,
    StatusCode.OUT_OF_RANGE: OUT_OF_RANGE,
    StatusCode.UNIMPLEMENTED: NOT_IMPLEMENTED,
    StatusCode.INTERNAL: INTERNAL,
    StatusCode.UNAVAILABLE: UNAVAILABLE,
    StatusCode.DATA_LOSS: DATA_LOSS,
}

_HTTP_STATUSES: dict[StatusCode, int] = {
    StatusCode.OK: 200,
    StatusCode.CANCELLED: 408,
    StatusCode.UNKNOWN: 500,
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.DEADLINE_EXCEEDED: 408,
    StatusCode.NOT_FOUND: 404,
    StatusCode.ALREADY_EXISTS: 409,
    StatusCode.PERMISSION_DENIED: 403,
    StatusCode.UNAUTHENTICATED: 401,
    StatusCode.RESOURCE_EXHAUSTED: 403,
    StatusCode.FAILED_PRECONDITION: 412,
    StatusCode.ABORTED: 409,
    StatusCode.OUT_OF_RANGE: 400,
    StatusCode.UNIMPLEMENTED: 501,
    StatusCode.INTERNAL: 500,
    StatusCode.UNAVAILABLE: 503,
    StatusCode.DATA_LOSS: 500,
}


def _known(code: int) -> StatusCode | None:
    try:
        return StatusCode(code)
    except ValueError:
        return None


def status_token(code: int) -> str:
    """Canonical uppercase token for ``code``; ``INTERNAL`` for unknown codes."""
    known = _known(code)
    if known is None:
        logger.warning("Unknown gRPC error code: %r", code)
        return INTERNAL
    return _STATUS_TOKENS[known]


def http_status(code: int) -> int:
    """HTTP status conventionally associated with ``code``; 500 for unknown codes."""
    known = _known(code)
    if known is None:
        logger.warning("Unknown gRPC error code: %r", code)
        return 500
    return _HTTP_STATUSES[known]
