import logging

import pytest

from rpc_gateway.writer import ResponseAlreadyWritten, ResponseWriter


async def _collect(writer: ResponseWriter, scope: dict) -> list[dict]:
    messages: list[dict] = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        messages.append(message)

    await writer(scope, receive, send)
    return messages


def test_write_implies_200_and_second_write_header_is_ignored(caplog: pytest.LogCaptureFixture):
    writer = ResponseWriter()
    writer.write(b"a")
    with caplog.at_level(logging.WARNING, logger="rpc_gateway.writer"):
        writer.write_header(500)
    writer.write(b"b")

    assert writer.status_code == 200
    assert writer.body == b"ab"
    assert "superfluous write_header" in caplog.text


@pytest.mark.asyncio
async def test_sends_trailers_when_server_supports_them():
    writer = ResponseWriter()
    writer.headers["Content-Type"] = "application/json"
    writer.headers.append("Trailer", "Grpc-Trailer-x-sum")
    writer.write_header(200)
    writer.write(b"{}")
    writer.trailers["Grpc-Trailer-x-sum"] = "abc"

    messages = await _collect(writer, {"type": "http", "extensions": {"http.response.trailers": {}}})

    assert [m["type"] for m in messages] == [
        "http.response.start",
        "http.response.body",
        "http.response.trailers",
    ]
    start = messages[0]
    assert start["status"] == 200
    assert start["trailers"] is True
    assert (b"content-length", b"2") not in start["headers"]
    assert messages[2]["headers"] == [(b"grpc-trailer-x-sum", b"abc")]


@pytest.mark.asyncio
async def test_drops_trailers_without_server_support():
    writer = ResponseWriter()
    writer.write_header(404)
    writer.write(b"gone")
    writer.trailers["Grpc-Trailer-x-sum"] = "abc"

    messages = await _collect(writer, {"type": "http"})

    assert [m["type"] for m in messages] == ["http.response.start", "http.response.body"]
    assert messages[0]["status"] == 404
    assert messages[0]["trailers"] is False
    assert (b"content-length", b"4") in messages[0]["headers"]
    assert messages[1]["body"] == b"gone"


@pytest.mark.asyncio
async def test_writer_is_sent_once():
    writer = ResponseWriter()
    writer.write(b"x")
    await _collect(writer, {"type": "http"})

    with pytest.raises(ResponseAlreadyWritten):
        writer.write(b"y")
    with pytest.raises(ResponseAlreadyWritten):
        await _collect(writer, {"type": "http"})
