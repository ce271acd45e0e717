"""Implementação de SqlOperations/TransactionOperations sobre SQLAlchemy Core.

A conexão da transação corrente fica em um ContextVar: statements emitidos
dentro de `SqlAlchemyTransactionOperations.execute` compartilham a mesma
conexão e o mesmo commit/rollback. Fora de uma transação cada statement roda
em seu próprio `engine.begin()`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from sqlsession.domain.protocols import Params, RowMapper, SqlOperations, TransactionOperations
from sqlsession.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

T = TypeVar("T")

_bound_connection: ContextVar[tuple[Engine, Connection] | None] = ContextVar(
    "sqlsession_bound_connection", default=None
)


def _current_connection(engine: Engine) -> Connection | None:
    bound = _bound_connection.get()
    if bound is not None and bound[0] is engine:
        return bound[1]
    return None


class SqlAlchemyOperations(SqlOperations):
    """Executa SQL textual com parâmetros nomeados (`:nome`)."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        connection = _current_connection(self._engine)
        if connection is not None:
            yield connection
            return
        with self._engine.begin() as connection:
            yield connection

    def update(self, sql: str, params: Params) -> int:
        with self._connection() as connection:
            result = connection.execute(text(sql), dict(params))
            return result.rowcount

    def batch_update(self, sql: str, params_list: Sequence[Params]) -> list[int]:
        """Executa o template para cada item na mesma conexão.

        Cada item é executado separadamente para reportar linhas afetadas por
        item (executemany não expõe esse detalhe em todos os drivers).
        """
        if not params_list:
            return []
        statement = text(sql)
        with self._connection() as connection:
            return [connection.execute(statement, dict(params)).rowcount for params in params_list]

    def query(self, sql: str, params: Params, row_mapper: RowMapper[T]) -> list[T]:
        with self._connection() as connection:
            rows = connection.execute(text(sql), dict(params)).mappings().all()
            return row_mapper(rows)


class SqlAlchemyTransactionOperations(TransactionOperations):
    """Executa o callback em `engine.begin()`; transações aninhadas reutilizam a externa."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def execute(self, callback: Callable[[], T]) -> T:
        if _current_connection(self._engine) is not None:
            return callback()

        with self._engine.begin() as connection:
            token = _bound_connection.set((self._engine, connection))
            try:
                return callback()
            except Exception:
                logger.debug("Transaction rolled back (SQL)")
                raise
            finally:
                _bound_connection.reset(token)


class NoTransactionOperations(TransactionOperations):
    """Executa o callback sem transação (cada statement faz seu próprio commit)."""

    def execute(self, callback: Callable[[], T]) -> T:
        return callback()
