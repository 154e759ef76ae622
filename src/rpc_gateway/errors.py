from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.requests import HTTPConnection

from rpc_gateway.codes import status_token
from rpc_gateway.marshaler import Marshaler
from rpc_gateway.metadata import (
    ServerMetadata,
    default_outgoing_header_matcher,
    forward_response_server_metadata,
    forward_response_trailer,
    forward_response_trailer_header,
    server_metadata_from_request,
)
from rpc_gateway.schemas import ErrorBody, ErrorInfo
from rpc_gateway.status import from_error
from rpc_gateway.writer import ResponseWriter

if TYPE_CHECKING:
    from rpc_gateway.config import GatewayConfig


logger = logging.getLogger("rpc_gateway.errors")

MARSHAL_FALLBACK = b'{"error": "failed to marshal error message"}'


def _write(writer: ResponseWriter, data: bytes) -> None:
    try:
        writer.write(data)
    except Exception as exc:
        logger.error("Failed to write response: %s", exc)


def default_http_error(
    config: "GatewayConfig | None",
    request: HTTPConnection,
    marshaler: Marshaler,
    writer: ResponseWriter,
    err: BaseException,
) -> None:
    """Render ``err`` as a structured error envelope.

    The HTTP status line is always 200: the gateway call itself succeeded and
    the RPC failure is reported through ``error.code`` and ``error.status`` in
    the body. Only a failure to serialize the envelope answers 500, with a
    fixed body.
    """
    del writer.headers["Trailer"]
    writer.headers["Content-Type"] = marshaler.content_type

    status, _ = from_error(err)

    try:
        body = ErrorBody(
            error=ErrorInfo(
                code=status.code,
                message=status.message,
                status=status_token(status.code),
                details=status.details,
            )
        )
        buf = marshaler.marshal(body)
    except Exception as exc:
        logger.error("Failed to marshal error message %r: %s", status, exc)
        writer.write_header(500)
        _write(writer, MARSHAL_FALLBACK)
        return

    md = server_metadata_from_request(request)
    if md is None:
        logger.warning("Failed to extract ServerMetadata from request")
        md = ServerMetadata()

    matcher = config.outgoing_header_matcher if config is not None else default_outgoing_header_matcher
    forward_response_server_metadata(writer, md, matcher)
    forward_response_trailer_header(writer, md)
    writer.write_header(200)
    _write(writer, buf)
    forward_response_trailer(writer, md)


def default_other_error_handler(request: HTTPConnection, writer: ResponseWriter, msg: str, code: int) -> None:
    """Write ``msg`` verbatim as plain text with status ``code``."""
    writer.headers["Content-Type"] = "text/plain; charset=utf-8"
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(code)
    _write(writer, f"{msg}\n".encode("utf-8"))
