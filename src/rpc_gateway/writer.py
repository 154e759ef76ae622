from __future__ import annotations

import logging

from starlette.datastructures import MutableHeaders
from starlette.types import Receive, Scope, Send


logger = logging.getLogger("rpc_gateway.writer")

TRAILERS_EXTENSION = "http.response.trailers"


class ResponseAlreadyWritten(Exception):
    pass


class ResponseWriter:
    """Buffered, write-once HTTP response sink.

    Handlers mutate ``headers`` and ``trailers``, call ``write_header`` once
    and ``write`` the body. The writer is then sent as an ASGI response.
    Trailers go out through the ``http.response.trailers`` extension when the
    server supports it.
    """

    def __init__(self) -> None:
        self.headers = MutableHeaders()
        self.trailers = MutableHeaders()
        self._status_code: int | None = None
        self._body = bytearray()
        self._sent = False

    @property
    def status_code(self) -> int:
        return self._status_code if self._status_code is not None else 200

    @property
    def wrote_header(self) -> bool:
        return self._status_code is not None

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def write_header(self, status_code: int) -> None:
        if self._status_code is not None:
            logger.warning(
                "superfluous write_header(%d); status already %d", status_code, self._status_code
            )
            return
        self._status_code = int(status_code)

    def write(self, data: bytes) -> int:
        if self._sent:
            raise ResponseAlreadyWritten("response already sent")
        if self._status_code is None:
            self.write_header(200)
        self._body.extend(data)
        return len(data)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._sent:
            raise ResponseAlreadyWritten("response already sent")
        self._sent = True

        send_trailers = bool(len(self.trailers)) and TRAILERS_EXTENSION in scope.get("extensions", {})
        if len(self.trailers) and not send_trailers:
            logger.debug("server does not support trailers; dropping %s", list(self.trailers.keys()))

        headers = MutableHeaders(raw=list(self.headers.raw))
        if not send_trailers and "content-length" not in headers:
            headers["content-length"] = str(len(self._body))

        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": headers.raw,
                "trailers": send_trailers,
            }
        )
        await send({"type": "http.response.body", "body": bytes(self._body), "more_body": False})
        if send_trailers:
            await send({"type": "http.response.trailers", "headers": self.trailers.raw, "more_trailers": False})
