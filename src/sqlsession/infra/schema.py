"""Schema lógico das tabelas de sessão (SQLAlchemy Core).

Para produção use migrações; `create_schema` é conveniência para
desenvolvimento e testes.
"""

from __future__ import annotations

import logging

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKeyConstraint,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    event,
)
from sqlalchemy.engine import Engine

from sqlsession.infra.queries import DEFAULT_TABLE_NAME
from sqlsession.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def build_metadata(table_name: str = DEFAULT_TABLE_NAME) -> MetaData:
    """Define `<tabela>` e `<tabela>_ATTRIBUTES`.

    Nomes são declarados em minúsculas (sem aspas no DDL) para casar com os
    identificadores não citados dos templates SQL em qualquer dialeto.

    Tempos em epoch millis; MAX_INACTIVE_INTERVAL em segundos. EXPIRY_TIME é
    nulo para sessões que nunca expiram.
    """
    name = table_name.lower()
    metadata = MetaData()
    Table(
        name,
        metadata,
        Column("primary_id", String(36), nullable=False),
        Column("session_id", String(36), nullable=False, unique=True),
        Column("creation_time", BigInteger, nullable=False),
        Column("last_access_time", BigInteger, nullable=False),
        Column("max_inactive_interval", Integer, nullable=False),
        Column("expiry_time", BigInteger, nullable=True),
        Column("principal_name", String(100), nullable=True),
        PrimaryKeyConstraint("primary_id", name=f"{name}_pk"),
        Index(f"{name}_ix2", "expiry_time"),
        Index(f"{name}_ix3", "principal_name"),
    )
    Table(
        f"{name}_attributes",
        metadata,
        Column("session_primary_id", String(36), nullable=False),
        Column("attribute_name", String(200), nullable=False),
        Column("attribute_bytes", LargeBinary, nullable=False),
        PrimaryKeyConstraint(
            "session_primary_id", "attribute_name", name=f"{name}_attributes_pk"
        ),
        ForeignKeyConstraint(
            ["session_primary_id"],
            [f"{name}.primary_id"],
            ondelete="CASCADE",
            name=f"{name}_attributes_fk",
        ),
    )
    return metadata


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite só aplica ON DELETE CASCADE com PRAGMA foreign_keys ligado."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record) -> None:  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


def create_schema(engine: Engine, table_name: str = DEFAULT_TABLE_NAME) -> MetaData:
    metadata = build_metadata(table_name)
    metadata.create_all(engine)
    logger.info("Session tables created/verified", extra={"table_name": table_name})
    return metadata
