"""Protocolos de execução SQL e escopo transacional.

O repositório de sessões depende apenas destes contratos; a implementação
concreta (SQLAlchemy) vive em infra. Em testes, um MagicMock substitui
SqlOperations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

T = TypeVar("T")

Params = Mapping[str, Any]
RowMapper = Callable[[Sequence[Mapping[str, Any]]], list[T]]


class SqlOperations(ABC):
    """Capacidade de execução SQL parametrizada.

    Erros do banco devem ser propagados sem tradução.
    """

    @abstractmethod
    def update(self, sql: str, params: Params) -> int:
        """Executa INSERT/UPDATE/DELETE e retorna linhas afetadas."""
        ...

    @abstractmethod
    def batch_update(self, sql: str, params_list: Sequence[Params]) -> list[int]:
        """Executa o mesmo statement para cada item; retorna linhas afetadas por item."""
        ...

    @abstractmethod
    def query(self, sql: str, params: Params, row_mapper: RowMapper[T]) -> list[T]:
        """Executa SELECT e entrega todas as linhas ao row_mapper."""
        ...


class TransactionOperations(ABC):
    """Executa um callback dentro de uma transação.

    Commit em sucesso, rollback em falha; a exceção do callback é propagada.
    """

    @abstractmethod
    def execute(self, callback: Callable[[], T]) -> T: ...
