from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from starlette.requests import HTTPConnection

from rpc_gateway.writer import ResponseWriter


METADATA_HEADER_PREFIX = "Grpc-Metadata-"
METADATA_TRAILER_PREFIX = "Grpc-Trailer-"

# Maps an RPC metadata key to the HTTP header name it is forwarded as, or None to drop it.
HeaderMatcher = Callable[[str], Optional[str]]


def default_outgoing_header_matcher(key: str) -> str | None:
    return f"{METADATA_HEADER_PREFIX}{key}"


@dataclass
class MD:
    """Ordered multi-valued metadata; keys are normalized to lowercase."""

    entries: list[tuple[str, str]] = field(default_factory=list)

    def add(self, key: str, value: str) -> None:
        self.entries.append((key.lower(), value))

    def keys(self) -> list[str]:
        seen: dict[str, None] = {}
        for k, _ in self.entries:
            seen.setdefault(k, None)
        return list(seen)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.entries)


@dataclass
class ServerMetadata:
    """Response metadata gathered while an RPC call ran.

    Lives for a single request, attached to ``request.state``.
    """

    header_md: MD = field(default_factory=MD)
    trailer_md: MD = field(default_factory=MD)

    @staticmethod
    def for_request(conn: HTTPConnection) -> "ServerMetadata":
        md = server_metadata_from_request(conn)
        if md is None:
            md = ServerMetadata()
            conn.state.server_metadata = md
        return md


def server_metadata_from_request(conn: HTTPConnection) -> ServerMetadata | None:
    md = getattr(conn.state, "server_metadata", None)
    if isinstance(md, ServerMetadata):
        return md
    return None


def set_header(conn: HTTPConnection, key: str, value: str) -> None:
    ServerMetadata.for_request(conn).header_md.add(key, value)


def set_trailer(conn: HTTPConnection, key: str, value: str) -> None:
    ServerMetadata.for_request(conn).trailer_md.add(key, value)


def forward_response_server_metadata(
    writer: ResponseWriter, md: ServerMetadata, matcher: HeaderMatcher = default_outgoing_header_matcher
) -> None:
    for key, value in md.header_md:
        name = matcher(key)
        if name:
            writer.headers.append(name, value)


def forward_response_trailer_header(writer: ResponseWriter, md: ServerMetadata) -> None:
    for key in md.trailer_md.keys():
        writer.headers.append("Trailer", f"{METADATA_TRAILER_PREFIX}{key}")


def forward_response_trailer(writer: ResponseWriter, md: ServerMetadata) -> None:
    for key, value in md.trailer_md:
        writer.trailers.append(f"{METADATA_TRAILER_PREFIX}{key}", value)
