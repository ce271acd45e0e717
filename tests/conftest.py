from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from sqlsession.config.settings import get_settings
from sqlsession.domain.protocols import SqlOperations
from sqlsession.infra.schema import create_schema, enable_sqlite_foreign_keys
from sqlsession.infra.session_repository import SqlSessionRepository
from sqlsession.infra.sqlalchemy_operations import (
    NoTransactionOperations,
    SqlAlchemyOperations,
    SqlAlchemyTransactionOperations,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def sql_operations() -> MagicMock:
    return MagicMock(spec=SqlOperations)


@pytest.fixture()
def repository(sql_operations: MagicMock) -> SqlSessionRepository:
    return SqlSessionRepository(sql_operations, NoTransactionOperations())


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def sqlite_repository(engine) -> SqlSessionRepository:
    return SqlSessionRepository(
        SqlAlchemyOperations(engine),
        SqlAlchemyTransactionOperations(engine),
    )
