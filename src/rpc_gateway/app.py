from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from rpc_gateway.codes import StatusCode
from rpc_gateway.config import GatewayConfig
from rpc_gateway.status import StatusError
from rpc_gateway.writer import ResponseWriter


logger = logging.getLogger("rpc_gateway")


def render_rpc_error(config: GatewayConfig, request: Request, err: BaseException) -> ResponseWriter:
    writer = ResponseWriter()
    config.error_renderer(config, request, config.marshaler, writer, err)
    return writer


def render_other_error(
    config: GatewayConfig, request: Request, msg: str, code: int, headers: dict[str, str] | None = None
) -> ResponseWriter:
    writer = ResponseWriter()
    for key, value in (headers or {}).items():
        writer.headers[key] = value
    config.other_error_handler(request, writer, msg, code)
    return writer


class UnhandledErrorMiddleware:
    """Renders exceptions no handler claimed as RPC errors (UNKNOWN unless they carry a status)."""

    def __init__(self, app: ASGIApp, *, config: GatewayConfig) -> None:
        self.app = app
        self.config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def _send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, _send)
        except Exception as exc:
            request = Request(scope)
            logger.exception("Unhandled error in %s %s", request.method, request.url.path)
            if started:
                raise
            writer = render_rpc_error(self.config, request, exc)
            await writer(scope, receive, send)


class AccessLogMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = None

        async def _send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info("%s %s -> %s (%.1fms)", scope["method"], scope["path"], status_code, duration_ms)


def install_error_handlers(app: FastAPI, config: GatewayConfig) -> None:
    """Route every failure of ``app`` through ``config``'s error strategies."""
    app.state.gateway_config = config

    @app.exception_handler(StatusError)
    async def status_error_handler(request: Request, exc: StatusError):
        return render_rpc_error(config, request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # The request could not be decoded into an RPC message.
        return render_rpc_error(config, request, StatusError.of(StatusCode.INVALID_ARGUMENT, str(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return render_other_error(config, request, str(exc.detail), exc.status_code, exc.headers)

    app.add_middleware(UnhandledErrorMiddleware, config=config)


def create_app(config: GatewayConfig | None = None) -> FastAPI:
    app = FastAPI(
        title="RPC Gateway",
        version="0.1.0",
        description=(
            "# RPC Gateway\n\n"
            "REST front for RPC backends.\n\n"
            "## Errors\n"
            "A failed RPC answers **200** with a JSON envelope; inspect `error.status`:\n\n"
            "```json\n"
            "{ \"error\": { \"code\": 5, \"message\": \"missing\", \"status\": \"NOT_FOUND\" } }\n"
            "```\n\n"
            "Response metadata is forwarded as `Grpc-Metadata-*` headers and `Grpc-Trailer-*` trailers.\n"
            "Routing failures (unknown path, disallowed method) answer plain text with the raw HTTP status.\n"
        ),
    )
    install_error_handlers(app, config or GatewayConfig())
    # Added last so it wraps the error middleware and sees every final status.
    app.add_middleware(AccessLogMiddleware)

    @app.get("/healthz", summary="Liveness check", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app
