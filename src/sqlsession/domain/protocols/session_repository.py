"""Protocolo de repositório de sessões com busca por índice."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sqlsession.domain.principal import PRINCIPAL_NAME_INDEX_NAME

if TYPE_CHECKING:
    from sqlsession.domain.session import SqlSession


class FindByIndexNameSessionRepository(ABC):
    """Contrato mínimo síncrono para repositórios de sessão."""

    @abstractmethod
    def create_session(self) -> SqlSession: ...

    @abstractmethod
    def save(self, session: SqlSession) -> None: ...

    @abstractmethod
    def find_by_id(self, session_id: str) -> SqlSession | None: ...

    @abstractmethod
    def delete_by_id(self, session_id: str) -> None: ...

    @abstractmethod
    def find_by_index_name_and_index_value(
        self, index_name: str, index_value: str
    ) -> dict[str, SqlSession]: ...

    def find_by_principal_name(self, principal_name: str) -> dict[str, SqlSession]:
        """Atalho para o índice de principal."""
        return self.find_by_index_name_and_index_value(PRINCIPAL_NAME_INDEX_NAME, principal_name)
