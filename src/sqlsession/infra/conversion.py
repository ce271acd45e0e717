"""Conversão de valores de atributos (JSON via pydantic-core) e LOBs."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import from_json, to_json

from sqlsession.domain.protocols import LobHandler, ValueConverter
from sqlsession.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class JsonValueConverter(ValueConverter):
    """Serializa atributos como JSON UTF-8.

    Modelos pydantic, dataclasses, datetimes e coleções são suportados na
    ida; na volta os valores chegam como tipos JSON, a menos que
    `target_type` seja informado (validado via TypeAdapter).
    """

    def __init__(self, *, fallback_to_str: bool = False) -> None:
        self._fallback = str if fallback_to_str else None

    def serialize(self, value: Any) -> bytes:
        return to_json(value, fallback=self._fallback)

    def deserialize(self, data: bytes, target_type: Any = Any) -> Any:
        if target_type is Any:
            return from_json(data)
        return TypeAdapter(target_type).validate_json(data)


class DefaultLobHandler(LobHandler):
    """Bytes puros na ida; normaliza memoryview/bytearray/str na volta.

    Drivers diferentes devolvem BLOB/BYTEA em tipos diferentes
    (sqlite3: bytes, psycopg: memoryview).
    """

    def to_storable(self, data: bytes) -> Any:
        return bytes(data)

    def from_storable(self, raw: Any) -> bytes | None:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw
        if isinstance(raw, (bytearray, memoryview)):
            return bytes(raw)
        if isinstance(raw, str):
            logger.debug("Attribute LOB returned as text; encoding as UTF-8")
            return raw.encode("utf-8")
        raise TypeError(f"Unsupported LOB value type: {type(raw).__name__}")
