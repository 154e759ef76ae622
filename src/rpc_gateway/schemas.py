from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer


_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

TYPE_URL_PREFIX = "type.googleapis.com/"

M = TypeVar("M", bound=BaseModel)


class AnyDetail(BaseModel):
    """A self-describing detail record: an ``@type`` tag plus its payload fields.

    This is the JSON form of ``google.protobuf.Any``. The payload is kept as
    extra fields so any record survives a generic decode and can later be
    unpacked into a concrete model.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    type_url: str = Field(..., alias="@type", min_length=1)

    @classmethod
    def pack(cls, message: BaseModel, *, type_url: str | None = None) -> "AnyDetail":
        if type_url is None:
            type_url = TYPE_URL_PREFIX + type(message).__name__
        return cls.model_validate({"@type": type_url, **message.model_dump(mode="json")})

    @property
    def payload(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def unpack(self, model_cls: type[M]) -> M:
        return model_cls.model_validate(self.payload)


class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: int = Field(..., ge=_INT32_MIN, le=_INT32_MAX)
    message: str = ""
    status: str
    details: tuple[AnyDetail, ...] = ()

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        # `message` and `details` are omitted on the wire when empty.
        data = handler(self)
        if not self.message:
            data.pop("message", None)
        if not self.details:
            data.pop("details", None)
        return data


class ErrorBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: ErrorInfo
