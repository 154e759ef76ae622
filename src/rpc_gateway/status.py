from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol, runtime_checkable

from rpc_gateway.codes import StatusCode
from rpc_gateway.schemas import AnyDetail


@dataclass(frozen=True)
class Status:
    """Structured failure descriptor of an RPC call."""

    code: int
    message: str = ""
    details: tuple[AnyDetail, ...] = field(default_factory=tuple)

    @staticmethod
    def new(code: int, message: str = "", details: Iterable[AnyDetail] = ()) -> "Status":
        return Status(code=int(code), message=message, details=tuple(details))


@runtime_checkable
class HasStatus(Protocol):
    def as_status(self) -> tuple[Status, bool]: ...


class StatusError(Exception):
    """An exception carrying an RPC ``Status``; raised by RPC handlers."""

    def __init__(self, status: Status) -> None:
        super().__init__(f"rpc error: code = {status.code} desc = {status.message}")
        self.status = status

    @classmethod
    def of(cls, code: int, message: str = "", *details: AnyDetail) -> "StatusError":
        return cls(Status.new(code, message, details))

    def as_status(self) -> tuple[Status, bool]:
        return self.status, True


def from_error(err: BaseException | None) -> tuple[Status, bool]:
    """Extract the RPC status carried by ``err``.

    ``None`` yields an OK status. An error without the ``as_status`` capability
    yields an UNKNOWN status with the error text as message and ``False``.
    """
    if err is None:
        return Status.new(StatusCode.OK), True
    if isinstance(err, HasStatus):
        status, ok = err.as_status()
        if ok:
            return status, True
    return Status.new(StatusCode.UNKNOWN, str(err)), False
