from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from starlette.requests import HTTPConnection

from rpc_gateway.errors import default_http_error, default_other_error_handler
from rpc_gateway.marshaler import JSONMarshaler, Marshaler
from rpc_gateway.metadata import HeaderMatcher, default_outgoing_header_matcher
from rpc_gateway.writer import ResponseWriter


ErrorRenderer = Callable[
    [Optional["GatewayConfig"], HTTPConnection, Marshaler, ResponseWriter, BaseException], None
]
OtherErrorHandler = Callable[[HTTPConnection, ResponseWriter, str, int], None]


@dataclass(frozen=True)
class GatewayConfig:
    """Error-rendering strategies for one gateway.

    Build it (or ``dataclasses.replace`` the defaults) before the app starts
    serving. It is shared read-only by all requests; swapping it on a live app
    is not synchronized and is the caller's responsibility to avoid.
    """

    error_renderer: ErrorRenderer = default_http_error
    other_error_handler: OtherErrorHandler = default_other_error_handler
    marshaler: Marshaler = field(default_factory=JSONMarshaler)
    outgoing_header_matcher: HeaderMatcher = default_outgoing_header_matcher
