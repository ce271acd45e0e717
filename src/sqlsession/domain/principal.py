"""Resolução do nome do principal (índice secundário de sessões)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlsession.domain.session import MapSession

PRINCIPAL_NAME_INDEX_NAME = "sqlsession.PRINCIPAL_NAME_INDEX_NAME"
"""Nome do índice (e do atributo) com o nome do principal autenticado."""

SECURITY_CONTEXT = "SPRING_SECURITY_CONTEXT"
"""Atributo com o contexto de segurança (authentication.name)."""

INDEXED_ATTRIBUTES = frozenset({PRINCIPAL_NAME_INDEX_NAME, SECURITY_CONTEXT})


def _lookup(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def resolve_principal_name(session: MapSession) -> str | None:
    """Extrai o nome do principal dos atributos da sessão.

    Ordem: atributo PRINCIPAL_NAME_INDEX_NAME; depois
    SECURITY_CONTEXT.authentication.name (objeto ou dict).
    """
    principal = session.get_attribute(PRINCIPAL_NAME_INDEX_NAME)
    if principal is not None:
        return str(principal)

    authentication = _lookup(session.get_attribute(SECURITY_CONTEXT), "authentication")
    name = _lookup(authentication, "name")
    return str(name) if name is not None else None
