"""Entidades de sessão: MapSession (dados) e SqlSession (dados + delta).

MapSession guarda apenas estado: id, timestamps, intervalo de inatividade e
atributos. SqlSession acrescenta a identidade de armazenamento (primary_key),
o status new/changed e o rastreamento de alterações de atributos.

Nenhuma das duas conhece o repositório: decisões de SQL ficam no
SqlSessionRepository, que recebe a sessão a cada chamada. Para FlushMode
IMMEDIATE o repositório injeta um `flush_callback`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlsession.domain.attribute_changes import AttributeDiffTracker
from sqlsession.domain.principal import INDEXED_ATTRIBUTES
from sqlsession.domain.save_mode import AttributeAccess, SaveModePolicy
from sqlsession.utils.ids import new_session_id

DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS = 1800


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class LazyAttribute:
    """Valor de atributo desserializado apenas na primeira leitura.

    `loader` recebe o tipo alvo (`Any` devolve tipos JSON).
    """

    loader: Callable[[Any], Any]

    def resolve(self, target_type: Any = Any) -> Any:
        return self.loader(target_type)


def _require_aware(value: datetime, setting: str) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{setting} must be timezone-aware")
    return value.astimezone(UTC)


@dataclass(slots=True)
class MapSession:
    """Estado puro de uma sessão, sem rastreamento de alterações."""

    id: str = field(default_factory=new_session_id)
    creation_time: datetime = field(default_factory=_utc_now)
    last_accessed_time: datetime | None = None
    max_inactive_interval: timedelta = field(
        default_factory=lambda: timedelta(seconds=DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS)
    )
    attributes: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.creation_time = _require_aware(self.creation_time, "creation_time")
        if self.last_accessed_time is None:
            self.last_accessed_time = self.creation_time
        self.last_accessed_time = _require_aware(self.last_accessed_time, "last_accessed_time")

    def get_attribute(self, name: str, target_type: Any = Any) -> Any:
        """Lê um atributo; valores ainda serializados são convertidos para `target_type`.

        A primeira leitura fixa o valor em memória: leituras seguintes devolvem
        o mesmo objeto, independentemente do `target_type`.
        """
        value = self.attributes.get(name)
        if isinstance(value, LazyAttribute):
            value = value.resolve(target_type)
            self.attributes[name] = value
        return value

    def set_attribute(self, name: str, value: Any) -> None:
        if value is None:
            self.remove_attribute(name)
        else:
            self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def has_attribute(self, name: str) -> bool:
        return self.attributes.get(name) is not None

    def get_attribute_names(self) -> set[str]:
        return set(self.attributes)

    def change_session_id(self) -> str:
        self.id = new_session_id()
        return self.id

    @property
    def expiry_time(self) -> datetime | None:
        """Instante de expiração; None quando o intervalo é negativo (nunca expira)."""
        if self.max_inactive_interval < timedelta(0):
            return None
        return self.last_accessed_time + self.max_inactive_interval

    def is_expired(self, now: datetime | None = None) -> bool:
        expiry_time = self.expiry_time
        if expiry_time is None:
            return False
        return (now or _utc_now()) > expiry_time


class SqlSession:
    """Sessão persistida em tabelas SQL, com delta de atributos.

    Estados: NEW -> (save) -> PERSISTED -> (mutação) -> DIRTY -> (save) -> PERSISTED.
    Não é thread-safe.
    """

    def __init__(
        self,
        delegate: MapSession,
        primary_key: str,
        is_new: bool,
        *,
        save_mode_policy: SaveModePolicy | None = None,
        flush_callback: Callable[[SqlSession], None] | None = None,
    ) -> None:
        self._delegate = delegate
        self._primary_key = primary_key
        self._is_new = is_new
        self._changed = False
        self._delta = AttributeDiffTracker()
        self._policy = save_mode_policy or SaveModePolicy()
        self._flush_callback = flush_callback

    def __repr__(self) -> str:
        return f"<SqlSession id={self.id!r} new={self._is_new} changed={self.has_changes()}>"

    @property
    def delegate(self) -> MapSession:
        return self._delegate

    @property
    def id(self) -> str:
        return self._delegate.id

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def changed(self) -> bool:
        """True quando a linha da sessão (não os atributos) precisa de UPDATE."""
        return self._changed

    @property
    def delta(self) -> AttributeDiffTracker:
        return self._delta

    @property
    def creation_time(self) -> datetime:
        return self._delegate.creation_time

    @property
    def last_accessed_time(self) -> datetime:
        return self._delegate.last_accessed_time

    @last_accessed_time.setter
    def last_accessed_time(self, value: datetime) -> None:
        self._delegate.last_accessed_time = _require_aware(value, "last_accessed_time")
        self._changed = True
        self._flush_if_required()

    @property
    def max_inactive_interval(self) -> timedelta:
        return self._delegate.max_inactive_interval

    @max_inactive_interval.setter
    def max_inactive_interval(self, value: timedelta) -> None:
        self._delegate.max_inactive_interval = value
        self._changed = True
        self._flush_if_required()

    @property
    def expiry_time(self) -> datetime | None:
        return self._delegate.expiry_time

    def is_expired(self, now: datetime | None = None) -> bool:
        return self._delegate.is_expired(now)

    def change_session_id(self) -> str:
        """Gera novo id; primary_key permanece, então o save faz UPDATE."""
        new_id = self._delegate.change_session_id()
        self._changed = True
        self._flush_if_required()
        return new_id

    def get_attribute(self, name: str, target_type: Any = Any) -> Any:
        """Lê um atributo (ex.: `get_attribute("cart", Cart)` para leitura tipada)."""
        value = self._delegate.get_attribute(name, target_type)
        self._policy.record(self._delta, AttributeAccess.GET, name, value=value)
        return value

    def get_attribute_names(self) -> set[str]:
        """Retorna uma cópia; remover atributos durante a iteração é seguro."""
        return self._delegate.get_attribute_names()

    def set_attribute(self, name: str, value: Any) -> None:
        """Define (ou, com None, remove) um atributo e registra o delta."""
        exists = self._delegate.has_attribute(name)
        if value is None:
            if not exists and name not in self._delta:
                return
            self._policy.record(self._delta, AttributeAccess.REMOVE, name, exists=exists)
        else:
            self._policy.record(self._delta, AttributeAccess.SET, name, exists=exists)
        self._delegate.set_attribute(name, value)
        if name in INDEXED_ATTRIBUTES:
            self._changed = True
        self._flush_if_required()

    def remove_attribute(self, name: str) -> None:
        self.set_attribute(name, None)

    def has_changes(self) -> bool:
        return self._is_new or self._changed or self._delta.has_changes()

    def clear_change_flags(self) -> None:
        """Zera new/changed e o delta (após save bem-sucedido ou carga)."""
        self._is_new = False
        self._changed = False
        self._delta.clear()

    def _flush_if_required(self) -> None:
        if self._flush_callback is not None:
            self._flush_callback(self)
