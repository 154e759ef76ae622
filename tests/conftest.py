from typing import Callable

import pytest
from starlette.requests import Request

from rpc_gateway.config import GatewayConfig
from rpc_gateway.writer import ResponseWriter


def _make_request(path: str = "/v1/things") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": [],
            "query_string": b"",
        }
    )


@pytest.fixture
def make_request() -> Callable[..., Request]:
    return _make_request


@pytest.fixture
def writer() -> ResponseWriter:
    return ResponseWriter()


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig()
