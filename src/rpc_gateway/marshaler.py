from __future__ import annotations

import json
from typing import Any, Protocol

from pydantic import BaseModel


class MarshalError(Exception):
    pass


class Marshaler(Protocol):
    @property
    def content_type(self) -> str: ...

    def marshal(self, value: Any) -> bytes: ...


class JSONMarshaler:
    """Serializes pydantic models and plain JSON values to UTF-8 JSON."""

    def __init__(self, *, indent: int | None = None, content_type: str = "application/json") -> None:
        self._indent = indent
        self._content_type = content_type

    @property
    def content_type(self) -> str:
        return self._content_type

    def marshal(self, value: Any) -> bytes:
        try:
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json", by_alias=True)
            separators = (",", ":") if self._indent is None else None
            text = json.dumps(value, indent=self._indent, separators=separators, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise MarshalError(str(exc)) from exc
        return text.encode("utf-8")
