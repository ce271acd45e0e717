"""Repositório de sessões HTTP sobre tabelas SQL.

Traduz o delta registrado em cada SqlSession no conjunto mínimo de
statements:

- sessão nova: INSERT da linha da sessão + INSERT (único ou em lote) dos
  atributos
- sessão existente: UPDATE da linha quando `changed`; por tipo de alteração
  de atributo (ADDED/UPDATED/REMOVED) um INSERT/UPDATE/DELETE, único ou em
  lote
- sem alterações: nenhum statement

Erros do banco são propagados sem tradução; rollback é responsabilidade do
TransactionOperations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from functools import partial
from typing import Any, TypeVar

from sqlsession.domain.attribute_changes import AttributeChange
from sqlsession.domain.enums import ChangeKind, FlushMode, SaveMode
from sqlsession.domain.principal import PRINCIPAL_NAME_INDEX_NAME, resolve_principal_name
from sqlsession.domain.protocols import (
    FindByIndexNameSessionRepository,
    LobHandler,
    SqlOperations,
    TransactionOperations,
    ValueConverter,
)
from sqlsession.domain.save_mode import SaveModePolicy
from sqlsession.domain.session import LazyAttribute, MapSession, SqlSession
from sqlsession.infra import queries
from sqlsession.infra.conversion import DefaultLobHandler, JsonValueConverter
from sqlsession.infra.statement_batch import StatementBatchBuilder
from sqlsession.observability.logging import get_logger, mask_session_id
from sqlsession.utils.ids import new_primary_key

logger: logging.Logger = get_logger(__name__)

T = TypeVar("T")

_DEFAULT_TEMPLATES: dict[str, str] = {
    "create_session_query": queries.CREATE_SESSION_QUERY,
    "create_session_attribute_query": queries.CREATE_SESSION_ATTRIBUTE_QUERY,
    "get_session_query": queries.GET_SESSION_QUERY,
    "update_session_query": queries.UPDATE_SESSION_QUERY,
    "update_session_attribute_query": queries.UPDATE_SESSION_ATTRIBUTE_QUERY,
    "delete_session_attribute_query": queries.DELETE_SESSION_ATTRIBUTE_QUERY,
    "delete_session_query": queries.DELETE_SESSION_QUERY,
    "list_sessions_by_principal_name_query": queries.LIST_SESSIONS_BY_PRINCIPAL_NAME_QUERY,
    "delete_sessions_by_expiry_time_query": queries.DELETE_SESSIONS_BY_EXPIRY_TIME_QUERY,
}


def _require_text(value: str | None, setting: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{setting} must not be empty")
    return value


def _require(value: T | None, setting: str) -> T:
    if value is None:
        raise ValueError(f"{setting} must not be None")
    return value


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _to_millis(value: datetime) -> int:
    return (value - _EPOCH) // timedelta(milliseconds=1)


def _from_millis(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=int(value))


class SqlSessionRepository(FindByIndexNameSessionRepository):
    """Repositório de sessões com delta de atributos e flush imediato opcional.

    Sem estado mutável entre chamadas além da configuração; seguro para uso
    concorrente desde que cada SqlSession fique em um único contexto.
    """

    def __init__(
        self,
        sql_operations: SqlOperations | None,
        transaction_operations: TransactionOperations | None,
    ) -> None:
        self._operations = _require(sql_operations, "sql_operations")
        self._transactions = _require(transaction_operations, "transaction_operations")
        self._table_name = queries.DEFAULT_TABLE_NAME
        self._templates = dict(_DEFAULT_TEMPLATES)
        self._queries: dict[str, str] = {}
        self._render_queries()
        self._default_max_inactive_interval: timedelta | None = None
        self._flush_mode = FlushMode.ON_SAVE
        self._save_mode_policy = SaveModePolicy()
        self._statements = StatementBatchBuilder(JsonValueConverter(), DefaultLobHandler())

    # ------------------------------------------------------------------
    # Configuração
    # ------------------------------------------------------------------

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def flush_mode(self) -> FlushMode:
        return self._flush_mode

    @property
    def save_mode(self) -> SaveMode:
        return self._save_mode_policy.save_mode

    def query(self, name: str) -> str:
        """Retorna o SQL renderizado de um template (ex.: "get_session_query")."""
        return self._queries[name]

    def set_table_name(self, table_name: str | None) -> None:
        self._table_name = _require_text(table_name, "table_name").strip()
        self._render_queries()

    def set_create_session_query(self, query: str | None) -> None:
        self._set_template("create_session_query", query)

    def set_create_session_attribute_query(self, query: str | None) -> None:
        self._set_template("create_session_attribute_query", query)

    def set_get_session_query(self, query: str | None) -> None:
        self._set_template("get_session_query", query)

    def set_update_session_query(self, query: str | None) -> None:
        self._set_template("update_session_query", query)

    def set_update_session_attribute_query(self, query: str | None) -> None:
        self._set_template("update_session_attribute_query", query)

    def set_delete_session_attribute_query(self, query: str | None) -> None:
        self._set_template("delete_session_attribute_query", query)

    def set_delete_session_query(self, query: str | None) -> None:
        self._set_template("delete_session_query", query)

    def set_list_sessions_by_principal_name_query(self, query: str | None) -> None:
        self._set_template("list_sessions_by_principal_name_query", query)

    def set_delete_sessions_by_expiry_time_query(self, query: str | None) -> None:
        self._set_template("delete_sessions_by_expiry_time_query", query)

    def set_lob_handler(self, lob_handler: LobHandler | None) -> None:
        self._statements.lob_handler = _require(lob_handler, "lob_handler")

    def set_value_converter(self, value_converter: ValueConverter | None) -> None:
        self._statements.value_converter = _require(value_converter, "value_converter")

    def set_flush_mode(self, flush_mode: FlushMode | None) -> None:
        self._flush_mode = _require(flush_mode, "flush_mode")

    def set_save_mode(self, save_mode: SaveMode | None) -> None:
        self._save_mode_policy.save_mode = _require(save_mode, "save_mode")

    def set_default_max_inactive_interval(self, seconds: int | None) -> None:
        """Intervalo padrão para sessões novas; None volta ao padrão de MapSession."""
        self._default_max_inactive_interval = (
            None if seconds is None else timedelta(seconds=seconds)
        )

    def _set_template(self, name: str, query: str | None) -> None:
        self._templates[name] = _require_text(query, name)
        self._queries[name] = queries.render_query(self._templates[name], self._table_name)

    def _render_queries(self) -> None:
        self._queries = {
            name: queries.render_query(template, self._table_name)
            for name, template in self._templates.items()
        }

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------

    def wrap_session(self, delegate: MapSession, primary_key: str, is_new: bool = False) -> SqlSession:
        """Cria uma SqlSession ligada à política de save e ao flush deste repositório."""
        return SqlSession(
            delegate,
            primary_key,
            is_new,
            save_mode_policy=self._save_mode_policy,
            flush_callback=self._flush_if_immediate,
        )

    def create_session(self) -> SqlSession:
        delegate = MapSession()
        if self._default_max_inactive_interval is not None:
            delegate.max_inactive_interval = self._default_max_inactive_interval
        session = self.wrap_session(delegate, new_primary_key(), is_new=True)
        if self._flush_mode is FlushMode.IMMEDIATE:
            self.save(session)
        return session

    def save(self, session: SqlSession) -> None:
        if session.is_new:
            self._in_transaction(partial(self._insert_session, session))
        else:
            self._save_mode_policy.prepare_for_save(session.delta, session.delegate.attributes)
            if not session.has_changes():
                return
            self._in_transaction(partial(self._update_session, session))
        session.clear_change_flags()

    def find_by_id(self, session_id: str) -> SqlSession | None:
        sessions = self._in_transaction(
            lambda: self._operations.query(
                self._queries["get_session_query"],
                {"session_id": session_id},
                self._extract_sessions,
            )
        )
        if not sessions:
            logger.debug(
                "Session not found (SQL)", extra={"session_id": mask_session_id(session_id)}
            )
            return None

        session = sessions[0]
        if session.is_expired():
            logger.debug(
                "Session expired (SQL)", extra={"session_id": mask_session_id(session.id)}
            )
            self.delete_by_id(session.id)
            return None

        session.clear_change_flags()
        return session

    def delete_by_id(self, session_id: str) -> None:
        deleted = self._in_transaction(
            lambda: self._operations.update(
                self._queries["delete_session_query"], {"session_id": session_id}
            )
        )
        logger.debug(
            "Session deleted (SQL)",
            extra={"session_id": mask_session_id(session_id), "rows": deleted},
        )

    def find_by_index_name_and_index_value(
        self, index_name: str, index_value: str
    ) -> dict[str, SqlSession]:
        if index_name != PRINCIPAL_NAME_INDEX_NAME:
            return {}

        sessions = self._in_transaction(
            lambda: self._operations.query(
                self._queries["list_sessions_by_principal_name_query"],
                {"principal_name": index_value},
                self._extract_sessions,
            )
        )
        return {session.id: session for session in sessions}

    def clean_up_expired_sessions(self) -> int:
        """Remove, com um único DELETE, todas as sessões já expiradas."""
        now = datetime.now(tz=UTC)
        deleted = self._in_transaction(
            lambda: self._operations.update(
                self._queries["delete_sessions_by_expiry_time_query"],
                {"expiry_time": _to_millis(now)},
            )
        )
        logger.debug("Cleaned up expired sessions (SQL)", extra={"deleted": deleted})
        return deleted

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def _flush_if_immediate(self, session: SqlSession) -> None:
        if self._flush_mode is FlushMode.IMMEDIATE:
            self.save(session)

    def _in_transaction(self, callback: Callable[[], T]) -> T:
        return self._transactions.execute(callback)

    def _insert_session(self, session: SqlSession) -> None:
        params = self._session_params(session)
        params["creation_time"] = _to_millis(session.creation_time)
        self._operations.update(self._queries["create_session_query"], params)

        added = [
            AttributeChange(name=name, kind=ChangeKind.ADDED)
            for name in session.delegate.attributes
        ]
        self._execute_attribute_changes(session, added, "create_session_attribute_query")
        logger.debug(
            "Session created (SQL)",
            extra={"session_id": mask_session_id(session.id), "attributes": len(added)},
        )

    def _update_session(self, session: SqlSession) -> None:
        if session.changed:
            self._operations.update(
                self._queries["update_session_query"], self._session_params(session)
            )

        delta = session.delta
        self._execute_attribute_changes(
            session, delta.changes(ChangeKind.ADDED), "create_session_attribute_query"
        )
        self._execute_attribute_changes(
            session, delta.changes(ChangeKind.UPDATED), "update_session_attribute_query"
        )
        self._execute_attribute_changes(
            session, delta.changes(ChangeKind.REMOVED), "delete_session_attribute_query"
        )
        logger.debug(
            "Session updated (SQL)",
            extra={
                "session_id": mask_session_id(session.id),
                "session_row": session.changed,
                "attributes": len(delta),
            },
        )

    def _execute_attribute_changes(
        self, session: SqlSession, changes: Sequence[AttributeChange], query_name: str
    ) -> None:
        statement = self._statements.build(session, changes, self._queries[query_name])
        if statement is not None:
            statement.execute(self._operations)

    def _session_params(self, session: SqlSession) -> dict[str, Any]:
        expiry_time = session.expiry_time
        return {
            "primary_id": session.primary_key,
            "session_id": session.id,
            "last_access_time": _to_millis(session.last_accessed_time),
            "max_inactive_interval": int(session.max_inactive_interval.total_seconds()),
            "expiry_time": None if expiry_time is None else _to_millis(expiry_time),
            "principal_name": resolve_principal_name(session.delegate),
        }

    # ------------------------------------------------------------------
    # Hidratação
    # ------------------------------------------------------------------

    def _extract_sessions(self, rows: Sequence[Mapping[str, Any]]) -> list[SqlSession]:
        """Agrupa linhas (sessão LEFT JOIN atributos) em sessões.

        Nomes de coluna são comparados sem diferenciar maiúsculas (PostgreSQL
        devolve identificadores em minúsculas).
        """
        sessions: dict[str, SqlSession] = {}
        for raw_row in rows:
            row = {str(key).upper(): value for key, value in raw_row.items()}
            session_id = row["SESSION_ID"]
            session = sessions.get(session_id)
            if session is None:
                delegate = MapSession(
                    id=session_id,
                    creation_time=_from_millis(row["CREATION_TIME"]),
                    last_accessed_time=_from_millis(row["LAST_ACCESS_TIME"]),
                    max_inactive_interval=timedelta(seconds=int(row["MAX_INACTIVE_INTERVAL"])),
                )
                session = self.wrap_session(delegate, row["PRIMARY_ID"], is_new=False)
                sessions[session_id] = session

            attribute_name = row.get("ATTRIBUTE_NAME")
            if attribute_name is not None:
                session.delegate.attributes[attribute_name] = LazyAttribute(
                    partial(self._deserialize, row.get("ATTRIBUTE_BYTES"))
                )
        return list(sessions.values())

    def _deserialize(self, raw: Any, target_type: Any = Any) -> Any:
        data = self._statements.lob_handler.from_storable(raw)
        if data is None:
            return None
        return self._statements.value_converter.deserialize(data, target_type)
