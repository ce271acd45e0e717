"""Testes para infra/sqlalchemy_operations.py sobre SQLite em memória."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from sqlsession.infra.sqlalchemy_operations import (
    NoTransactionOperations,
    SqlAlchemyOperations,
    SqlAlchemyTransactionOperations,
)

INSERT = "INSERT INTO ITEMS(ID, NAME) VALUES (:id, :name)"
SELECT = "SELECT ID, NAME FROM ITEMS ORDER BY ID"


@pytest.fixture()
def items_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)"))
    yield engine
    engine.dispose()


def upper_keys(rows) -> list[dict]:
    """SQLite devolve os nomes de coluna como declarados na tabela."""
    return [{str(key).upper(): value for key, value in row.items()} for row in rows]


def names(operations: SqlAlchemyOperations) -> list[str]:
    return operations.query(SELECT, {}, lambda rows: [row["NAME"] for row in upper_keys(rows)])


class TestSqlAlchemyOperations:
    """Testes de update, batch_update e query."""

    def test_update_returns_rowcount(self, items_engine) -> None:
        operations = SqlAlchemyOperations(items_engine)

        assert operations.update(INSERT, {"id": 1, "name": "a"}) == 1
        assert operations.update("DELETE FROM ITEMS WHERE ID = :id", {"id": 99}) == 0

    def test_batch_update_returns_rowcount_per_item(self, items_engine) -> None:
        operations = SqlAlchemyOperations(items_engine)

        counts = operations.batch_update(
            INSERT, [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
        )

        assert counts == [1, 1]
        assert names(operations) == ["a", "b"]

    def test_batch_update_empty(self, items_engine) -> None:
        assert SqlAlchemyOperations(items_engine).batch_update(INSERT, []) == []

    def test_query_passes_rows_to_mapper(self, items_engine) -> None:
        operations = SqlAlchemyOperations(items_engine)
        operations.update(INSERT, {"id": 1, "name": "a"})

        rows = operations.query(SELECT, {}, upper_keys)

        assert rows == [{"ID": 1, "NAME": "a"}]


class TestSqlAlchemyTransactionOperations:
    """Testes de escopo transacional."""

    def test_commit(self, items_engine) -> None:
        operations = SqlAlchemyOperations(items_engine)
        transactions = SqlAlchemyTransactionOperations(items_engine)

        result = transactions.execute(
            lambda: operations.update(INSERT, {"id": 1, "name": "a"})
        )

        assert result == 1
        assert names(operations) == ["a"]

    def test_rollback_on_error(self, items_engine) -> None:
        """Falha no meio da transação deve desfazer statements anteriores."""
        operations = SqlAlchemyOperations(items_engine)
        transactions = SqlAlchemyTransactionOperations(items_engine)

        def work() -> None:
            operations.update(INSERT, {"id": 1, "name": "a"})
            operations.update(INSERT, {"id": 1, "name": "duplicate"})

        with pytest.raises(IntegrityError):
            transactions.execute(work)

        assert names(operations) == []

    def test_nested_transaction_joins_outer(self, items_engine) -> None:
        operations = SqlAlchemyOperations(items_engine)
        transactions = SqlAlchemyTransactionOperations(items_engine)

        def inner() -> None:
            operations.update(INSERT, {"id": 2, "name": "b"})

        def outer() -> None:
            operations.update(INSERT, {"id": 1, "name": "a"})
            transactions.execute(inner)
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError, match="abort"):
            transactions.execute(outer)

        assert names(operations) == []


def test_no_transaction_operations_runs_callback() -> None:
    assert NoTransactionOperations().execute(lambda: 42) == 42
