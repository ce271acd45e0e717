"""Protocolos de conversão de valores de atributos e de large objects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ValueConverter(ABC):
    """Serializa valores de atributos para bytes e o inverso."""

    @abstractmethod
    def serialize(self, value: Any) -> bytes: ...

    @abstractmethod
    def deserialize(self, data: bytes, target_type: Any = Any) -> Any: ...


class LobHandler(ABC):
    """Adapta bytes serializados ao tipo aceito pela coluna binária do driver."""

    @abstractmethod
    def to_storable(self, data: bytes) -> Any:
        """Bytes serializados -> valor de bind da coluna ATTRIBUTE_BYTES."""
        ...

    @abstractmethod
    def from_storable(self, raw: Any) -> bytes | None:
        """Valor lido da coluna -> bytes (None para coluna nula)."""
        ...
