"""Re-exports dos Protocolos de domínio para uso por infra."""

from __future__ import annotations

from sqlsession.domain.protocols.conversion import LobHandler, ValueConverter
from sqlsession.domain.protocols.session_repository import FindByIndexNameSessionRepository
from sqlsession.domain.protocols.sql_operations import (
    Params,
    RowMapper,
    SqlOperations,
    TransactionOperations,
)

__all__ = [
    "FindByIndexNameSessionRepository",
    "LobHandler",
    "Params",
    "RowMapper",
    "SqlOperations",
    "TransactionOperations",
    "ValueConverter",
]
