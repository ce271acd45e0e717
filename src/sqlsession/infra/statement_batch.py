"""Montagem de statements de atributos: único ou em lote.

Para uma lista de alterações do mesmo tipo:
- 0 itens -> nenhum statement
- 1 item  -> PreparedStatement (sql + params)
- N itens -> BatchStatement (sql + N conjuntos de params), batch_size == N
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlsession.domain.attribute_changes import AttributeChange
from sqlsession.domain.enums import ChangeKind
from sqlsession.domain.protocols import LobHandler, SqlOperations, ValueConverter
from sqlsession.domain.session import LazyAttribute, SqlSession


@dataclass(frozen=True, slots=True)
class PreparedStatement:
    """Statement único com seus parâmetros."""

    sql: str
    params: dict[str, Any]

    def execute(self, operations: SqlOperations) -> int:
        return operations.update(self.sql, self.params)


@dataclass(frozen=True, slots=True)
class BatchStatement:
    """Mesmo template SQL executado para vários conjuntos de parâmetros."""

    sql: str
    params_list: list[dict[str, Any]]

    @property
    def batch_size(self) -> int:
        return len(self.params_list)

    def execute(self, operations: SqlOperations) -> list[int]:
        return operations.batch_update(self.sql, self.params_list)


class StatementBatchBuilder:
    """Constrói bindings de atributos (identidade, nome e valor serializado)."""

    def __init__(self, value_converter: ValueConverter, lob_handler: LobHandler) -> None:
        self.value_converter = value_converter
        self.lob_handler = lob_handler

    def build(
        self,
        session: SqlSession,
        changes: Sequence[AttributeChange],
        sql: str,
    ) -> PreparedStatement | BatchStatement | None:
        if not changes:
            return None
        if len(changes) == 1:
            return PreparedStatement(sql=sql, params=self.bind(session, changes[0]))
        return BatchStatement(
            sql=sql, params_list=[self.bind(session, change) for change in changes]
        )

    def bind(self, session: SqlSession, change: AttributeChange) -> dict[str, Any]:
        params: dict[str, Any] = {
            "session_primary_id": session.primary_key,
            "attribute_name": change.name,
        }
        if change.kind is not ChangeKind.REMOVED:
            # valores ainda não lidos são regravados sem fixar o tipo em memória
            value = session.delegate.attributes.get(change.name)
            if isinstance(value, LazyAttribute):
                value = value.resolve()
            params["attribute_bytes"] = self.lob_handler.to_storable(
                self.value_converter.serialize(value)
            )
        return params
